"""
Fixtures pytest communes
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest


# =============================================================================
# Fausse connexion DB-API (interface minimale utilisée par l'exécuteur)
# =============================================================================

@dataclass
class FakeResult:
    """Résultat simulé pour une requête"""

    columns: list[str] = field(default_factory=list)
    rows: list[tuple] = field(default_factory=list)
    execute_error: Optional[Exception] = None
    fetch_error_after: Optional[int] = None  # lève après N lignes
    delay: float = 0.0
    row_delay: float = 0.0  # pause avant chaque ligne (fetch lent)


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self.description = None
        self._result: Optional[FakeResult] = None
        self.closed = False

    def execute(self, statement: str) -> None:
        result = self.conn.results.get(statement)
        if result is None:
            raise RuntimeError(f"ORA-00942: table or view does not exist ({statement})")
        if result.delay:
            self.conn.cancelled.wait(result.delay)
            if self.conn.cancelled.is_set():
                raise RuntimeError("ORA-01013: user requested cancel of current operation")
        if result.execute_error is not None:
            raise result.execute_error
        self._result = result
        if result.columns:
            self.description = [(c, None, None, None, None, None, None) for c in result.columns]

    def __iter__(self):
        for i, row in enumerate(self._result.rows):
            if self._result.fetch_error_after is not None and i >= self._result.fetch_error_after:
                raise RuntimeError("ORA-01555: snapshot too old")
            if self._result.row_delay:
                self.conn.cancelled.wait(self._result.row_delay)
            yield row

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, results: dict[str, FakeResult]):
        self.results = results
        self.cursors: list[FakeCursor] = []
        self.closed = False
        self.cancelled = threading.Event()
        self.cancel_calls = 0
        self._lock = threading.Lock()

    def cursor(self) -> FakeCursor:
        cursor = FakeCursor(self)
        with self._lock:
            self.cursors.append(cursor)
        return cursor

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled.set()

    def close(self) -> None:
        self.closed = True


class RecordingSink:
    """Sink qui enregistre chaque appel add_fields"""

    def __init__(self):
        self.calls: list[tuple[str, dict, dict]] = []
        self._lock = threading.Lock()

    def add_fields(self, measurement: str, fields: dict, tags: dict) -> None:
        with self._lock:
            self.calls.append((measurement, dict(fields), dict(tags)))

    def by_func(self, name: str) -> list[tuple[str, dict, dict]]:
        return [c for c in self.calls if c[2].get("func") == name]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_connection():
    """Fabrique de FakeConnection + factory compatible OraCollector"""
    created: list[FakeConnection] = []

    def _make(results: dict[str, FakeResult]):
        conn = FakeConnection(results)
        created.append(conn)

        @contextmanager
        def factory(identity: Any):
            factory.identities.append(identity)
            try:
                yield conn
            finally:
                conn.close()

        factory.identities = []
        return conn, factory

    yield _make

    # Libérer les threads abandonnés
    for conn in created:
        conn.cancelled.set()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def identity():
    from ora_metrics.core.identity import parse_connection_url

    return parse_connection_url("scott/tiger@10.0.0.5:1521/orcl/orcl1")


@pytest.fixture
def sql_file(tmp_path):
    """Ecrire un fichier SQL dans tmp_path"""
    counter = {"n": 0}

    def _write(content: str, name: Optional[str] = None):
        counter["n"] += 1
        path = tmp_path / (name or f"statements_{counter['n']}.sql")
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_settings(tmp_path):
    """Mock des settings"""
    from unittest.mock import MagicMock

    settings = MagicMock()
    settings.ora_url = "scott/tiger@10.0.0.5:1521/orcl/orcl1"
    settings.ora_files = [tmp_path / "default.sql"]
    settings.sql_seconds = 5
    settings.sql_timeout = 5.0
    settings.instance_tag = None
    settings.call_timeout_ms = 0
    settings.measurement = "ora"
    return settings
