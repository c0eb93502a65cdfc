"""
============================================================================
Errors - Hiérarchie d'exceptions du collecteur
============================================================================
Chaque unité de travail (fichier SQL, requête) produit sa propre erreur.
GatherError regroupe toutes les erreurs d'une collecte.
============================================================================
"""

from pathlib import Path
from typing import Iterable, Optional


class OraMetricsError(Exception):
    """Erreur de base du collecteur"""


class ConnectionUrlError(OraMetricsError):
    """URL de connexion mal formée (fatal au démarrage)"""

    def __init__(self, url: str, segment: str, reason: str):
        self.url = url
        self.segment = segment
        self.reason = reason
        super().__init__(f"url={mask_url(url)} config error: {reason}")


def mask_url(url: str) -> str:
    """Masquer le mot de passe : scott/tiger@host → scott/***@host"""
    if "@" not in url:
        return url
    credentials, address = url.rsplit("@", 1)
    if "/" not in credentials:
        return url
    user = credentials.split("/", 1)[0]
    return f"{user}/***@{address}"


class OracleConnectionError(OraMetricsError):
    """Echec d'ouverture de la connexion Oracle"""

    def __init__(self, dsn: str, cause: Exception):
        self.dsn = dsn
        self.cause = cause
        super().__init__(f"ora connect dsn={dsn} error, {cause}")


class CatalogFileError(OraMetricsError):
    """Fichier SQL illisible"""

    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"ora read file={self.path} error, {cause}")


class StatementError(OraMetricsError):
    """Echec d'une instance de requête, avec le contexte host/instance/tag"""

    kind = "error"

    def __init__(
        self,
        name: str,
        host: str,
        instance: str,
        cause: Optional[Exception] = None,
    ):
        self.name = name
        self.host = host
        self.instance = instance
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        message = f"ora gather host={self.host} instance={self.instance} tag={self.name} {self.kind}"
        if self.cause is not None:
            message += f", {self.cause}"
        return message


class StatementQueryError(StatementError):
    kind = "query error"


class StatementScanError(StatementError):
    kind = "scan error"


class StatementTimeoutError(StatementError):
    kind = "timeout"

    def __init__(self, name: str, host: str, instance: str, seconds: float):
        self.seconds = seconds
        super().__init__(name, host, instance)

    def _format(self) -> str:
        return f"{super()._format()} after {self.seconds:g}s"


class GatherError(OraMetricsError):
    """Erreur combinée d'une collecte : une entrée par échec"""

    def __init__(self, errors: Iterable[Exception]):
        self.errors = list(errors)
        lines = [str(e) for e in self.errors]
        super().__init__(
            f"{len(self.errors)} error(s) during ora gather:\n" + "\n".join(lines)
        )

    def statement_errors(self) -> list[StatementError]:
        return [e for e in self.errors if isinstance(e, StatementError)]

    def file_errors(self) -> list[CatalogFileError]:
        return [e for e in self.errors if isinstance(e, CatalogFileError)]


def combine_errors(errors: Iterable[Optional[Exception]]) -> Optional[GatherError]:
    """Retourne None si aucune erreur, sinon une GatherError"""
    failures = [e for e in errors if e is not None]
    if not failures:
        return None
    return GatherError(failures)
