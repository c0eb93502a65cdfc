"""
============================================================================
Ora Collector - Point d'entrée de la collecte
============================================================================
Une invocation :
    IDLE → LOADING_CATALOG → CONNECTING → EXECUTING → CLOSED → IDLE

Verrou exclusif tenu pendant toute l'invocation : deux collectes ne se
chevauchent jamais. Catalogue et connexion sont recréés à chaque appel.
============================================================================
"""

import threading
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Callable, ContextManager, Iterable, Optional

from ora_metrics.config.constants import DEFAULT_MEASUREMENT, CollectorState
from ora_metrics.config.settings import Settings, get_settings
from ora_metrics.core.catalog.loader import load_statement_catalog
from ora_metrics.core.errors import (
    CatalogFileError,
    ConnectionUrlError,
    GatherError,
    combine_errors,
)
from ora_metrics.core.executor import StatementExecutor, StatementOutcome, count_statements
from ora_metrics.core.identity import ConnectionIdentity, parse_connection_url
from ora_metrics.core.sink import Accumulator
from ora_metrics.db.connection import cancel_pending, open_connection
from ora_metrics.utils.logging import bind_collection_context, get_logger

logger = get_logger(__name__)

ConnectionFactory = Callable[[ConnectionIdentity], ContextManager[Any]]

SAMPLE_CONFIG = """\
## URL de connexion Oracle
## Le collecteur en extrait les tags orahost, oraport, oraservice, orainstance.
## Format : user/password@host:port/service/instance
ORA_URL=perfstat/perfstat@localhost:1521/orcl/orcl1
## Fichiers SQL (séparés par des virgules)
## Format du contenu : nom::requête;;
## Un nom commençant par # désactive la requête.
ORA_FILES=sql/default.sql
## Durée maximale (secondes) de chaque requête
ORA_SQL_SECONDS=10
## Optionnel : valeur du tag orainstance à la place de celle de l'URL
# ORA_INSTANCE_TAG=orcl1
"""


@dataclass
class GatherReport:
    """Bilan d'une collecte"""

    outcomes: list[StatementOutcome] = field(default_factory=list)
    file_errors: list[CatalogFileError] = field(default_factory=list)
    error: Optional[GatherError] = None

    @property
    def rows(self) -> int:
        return sum(o.rows for o in self.outcomes)

    @property
    def failed(self) -> list[StatementOutcome]:
        return [o for o in self.outcomes if not o.success]


class OraCollector:
    """Collecteur de métriques Oracle appelé périodiquement par l'hôte"""

    def __init__(
        self,
        url: str,
        files: Iterable[Path | str],
        sql_seconds: float = 10,
        measurement: str = DEFAULT_MEASUREMENT,
        instance_tag: Optional[str] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        call_timeout_ms: int = 0,
    ):
        self.url = url
        self.files = [Path(f) for f in files]
        self.sql_seconds = float(sql_seconds)
        self.measurement = measurement
        self.instance_tag = instance_tag
        self.connection_factory = connection_factory or partial(
            open_connection, call_timeout_ms=call_timeout_ms
        )

        self.state = CollectorState.IDLE
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> "OraCollector":
        settings = settings or get_settings()
        return cls(
            url=settings.ora_url,
            files=settings.ora_files,
            sql_seconds=settings.sql_timeout,
            measurement=settings.measurement,
            instance_tag=settings.instance_tag,
            connection_factory=connection_factory,
            call_timeout_ms=settings.call_timeout_ms,
        )

    @staticmethod
    def description() -> str:
        return "Read metrics from one Oracle Database."

    @staticmethod
    def sample_config() -> str:
        return SAMPLE_CONFIG

    # =========================================================================
    # Collecte
    # =========================================================================

    def gather(self, sink: Accumulator) -> Optional[GatherError]:
        """
        Exécuter une collecte complète

        Returns:
            None si tout a réussi, sinon une GatherError listant chaque échec.
            Les lignes déjà envoyées au sink ne sont jamais retirées.
        """
        return self.collect(sink).error

    def gather_or_raise(self, sink: Accumulator) -> None:
        error = self.gather(sink)
        if error is not None:
            raise error

    def collect(self, sink: Accumulator) -> GatherReport:
        """Comme gather, mais retourne le bilan détaillé de la collecte"""
        with self._lock:
            try:
                return self._collect(sink)
            finally:
                self.state = CollectorState.IDLE

    def _collect(self, sink: Accumulator) -> GatherReport:
        report = GatherReport()

        # 1. Catalogue
        self.state = CollectorState.LOADING_CATALOG
        loaded = load_statement_catalog(self.files)
        report.file_errors = loaded.errors

        # 2. Identité + connexion
        self.state = CollectorState.CONNECTING
        identity = self.derive_identity()
        tag_identity = identity
        if self.instance_tag:
            tag_identity = identity.with_instance(self.instance_tag)

        expected = count_statements(loaded.catalog)
        logger.info(
            "Starting ora gather",
            host=tag_identity.host,
            instance=tag_identity.instance,
            statements=expected,
        )

        with bind_collection_context(tag_identity, self.measurement), \
                self.connection_factory(identity) as conn:
            # 3. Exécution
            self.state = CollectorState.EXECUTING
            executor = StatementExecutor(
                conn,
                tag_identity,
                sink,
                timeout=self.sql_seconds,
                measurement=self.measurement,
            )
            report.outcomes = executor.execute(loaded.catalog)

            if any(o.timed_out for o in report.outcomes):
                cancel_pending(conn)

        self.state = CollectorState.CLOSED

        # 4. Agrégation
        errors: list[Exception] = list(report.file_errors)
        errors.extend(o.error for o in report.outcomes if o.error is not None)
        report.error = combine_errors(errors)

        logger.info(
            "Ora gather completed",
            host=tag_identity.host,
            statements=len(report.outcomes),
            rows=report.rows,
            errors=len(errors),
        )
        return report

    def derive_identity(self) -> ConnectionIdentity:
        """
        Parser l'URL configurée

        ⚠️ Une URL invalide arrête le processus (SystemExit) : aucune requête
        ne peut être taguée sans identité.
        """
        try:
            return parse_connection_url(self.url)
        except ConnectionUrlError as e:
            logger.critical("Invalid ORA_URL, exiting", error=str(e))
            raise SystemExit(1) from e
