"""
============================================================================
Statement Executor - Exécution concurrente du catalogue
============================================================================
Une instance de requête = un thread, borné par ORA_SQL_SECONDS.
Les lignes sont converties et envoyées au sink au fil de l'eau.
Un échec (requête, lecture, timeout) n'affecte pas les autres requêtes.
============================================================================
"""

import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Optional

from ora_metrics.config.constants import DEFAULT_MEASUREMENT, FUNC_TAG
from ora_metrics.core.catalog.loader import StatementCatalog
from ora_metrics.core.errors import (
    StatementError,
    StatementQueryError,
    StatementScanError,
    StatementTimeoutError,
)
from ora_metrics.core.identity import ConnectionIdentity
from ora_metrics.core.rows import convert_row
from ora_metrics.core.sink import Accumulator
from ora_metrics.utils.logging import get_logger
from ora_metrics.utils.parallel_utils import run_tasks_with_deadline

logger = get_logger(__name__)


@dataclass
class StatementOutcome:
    """Résultat d'une instance de requête"""

    name: str
    statement: str
    rows: int = 0
    duration_sec: float = 0.0
    error: Optional[StatementError] = None
    abandoned: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)
    _emit_lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def timed_out(self) -> bool:
        return isinstance(self.error, StatementTimeoutError)

    def abandon(self) -> None:
        """Délai dépassé : plus aucune ligne ne doit partir vers le sink"""
        with self._emit_lock:
            self.abandoned.set()

    def emit(self, sink: Accumulator, measurement: str, fields, tags) -> bool:
        """
        Envoyer une ligne au sink et la compter, sauf si la requête est abandonnée

        Returns:
            False si la requête a été abandonnée (la ligne n'est pas envoyée)
        """
        with self._emit_lock:
            if self.abandoned.is_set():
                return False
            sink.add_fields(measurement, fields, tags)
            self.rows += 1
            return True


def count_statements(catalog: StatementCatalog) -> int:
    """Nombre total d'instances de requêtes du catalogue"""
    return sum(len(bodies) for bodies in catalog.values())


class StatementExecutor:
    """
    Exécute le catalogue sur une connexion partagée (lecture seule).

    La connexion est empruntée pour la durée d'une collecte : l'exécuteur ne
    l'ouvre ni ne la ferme.
    """

    def __init__(
        self,
        conn: Any,
        identity: ConnectionIdentity,
        sink: Accumulator,
        timeout: float,
        measurement: str = DEFAULT_MEASUREMENT,
    ):
        self.conn = conn
        self.identity = identity
        self.sink = sink
        self.timeout = timeout
        self.measurement = measurement

    def execute(self, catalog: StatementCatalog) -> list[StatementOutcome]:
        """
        Lancer toutes les instances de requêtes et attendre leur fin ou timeout

        Returns:
            Un StatementOutcome par instance (succès ou erreur)
        """
        outcomes = [
            StatementOutcome(name=name, statement=statement)
            for name, statements in catalog.items()
            for statement in statements
        ]

        if not outcomes:
            logger.info("No statement to execute", host=self.identity.host)
            return outcomes

        tasks = [
            partial(self.run_statement, outcome.name, outcome.statement, outcome)
            for outcome in outcomes
        ]
        results = run_tasks_with_deadline(
            tasks,
            timeout=self.timeout,
            description="Executing ora statements",
        )

        for outcome, result in zip(outcomes, results):
            outcome.duration_sec = result.duration_sec

            if result.timed_out:
                outcome.abandon()
                outcome.error = StatementTimeoutError(
                    outcome.name,
                    self.identity.host,
                    self.identity.instance,
                    self.timeout,
                )
            elif result.error is not None:
                outcome.error = StatementError(
                    outcome.name,
                    self.identity.host,
                    self.identity.instance,
                    result.error,
                )
            else:
                outcome.error = result.value

            if outcome.error is not None:
                logger.warning(
                    "Statement failed",
                    func=outcome.name,
                    rows=outcome.rows,
                    error=str(outcome.error),
                )

        logger.info(
            "Statements executed",
            host=self.identity.host,
            instance=self.identity.instance,
            total=len(outcomes),
            failed=sum(1 for o in outcomes if not o.success),
            rows=sum(o.rows for o in outcomes),
        )
        return outcomes

    def run_statement(
        self,
        name: str,
        statement: str,
        outcome: Optional[StatementOutcome] = None,
    ) -> Optional[StatementError]:
        """
        Exécuter une requête et envoyer chaque ligne au sink

        Args:
            name: Nom de la requête (tag func)
            statement: Requête SQL
            outcome: Compteur de lignes mis à jour au fil de l'eau ;
                l'envoi s'arrête dès que la requête est abandonnée

        Returns:
            None si succès, sinon l'erreur (les lignes déjà envoyées restent)
        """
        host, instance = self.identity.host, self.identity.instance
        if outcome is None:
            outcome = StatementOutcome(name=name, statement=statement)

        try:
            cursor = self.conn.cursor()
        except Exception as e:
            return StatementQueryError(name, host, instance, e)

        try:
            try:
                cursor.execute(statement)
            except Exception as e:
                return StatementQueryError(name, host, instance, e)

            if cursor.description is None:
                logger.debug("Statement returned no result set", func=name)
                return None

            columns = [desc[0] for desc in cursor.description]

            try:
                for values in cursor:
                    row = dict(zip(columns, values))
                    tags, fields = convert_row(row, self.identity)
                    tags[FUNC_TAG] = name
                    if not outcome.emit(self.sink, self.measurement, fields, tags):
                        logger.debug("Statement abandoned, fetch stopped", func=name, rows=outcome.rows)
                        return None
            except Exception as e:
                return StatementScanError(name, host, instance, e)

            return None
        finally:
            self._close_cursor(cursor, name)

    @staticmethod
    def _close_cursor(cursor: Any, name: str) -> None:
        try:
            cursor.close()
        except Exception as e:
            # Connexion déjà fermée après un timeout
            logger.debug("Cursor close failed", func=name, error=str(e))
