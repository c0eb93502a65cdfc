"""
============================================================================
Catalog Loader - Construction du catalogue de requêtes nommées
============================================================================
Catalogue reconstruit à chaque collecte : nom → [requête, ...]
Les noms commençant par # sont désactivés.
============================================================================
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from ora_metrics.config.constants import COMMENT_PREFIX
from ora_metrics.core.catalog.parser import parse_statements
from ora_metrics.core.errors import CatalogFileError
from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)

StatementCatalog = dict[str, list[str]]


@dataclass
class CatalogLoadResult:
    """Catalogue construit + erreurs de lecture par fichier"""

    catalog: StatementCatalog = field(default_factory=dict)
    errors: list[CatalogFileError] = field(default_factory=list)

    @property
    def statement_count(self) -> int:
        """Nombre total d'instances de requêtes"""
        return sum(len(bodies) for bodies in self.catalog.values())


def load_statement_catalog(paths: Iterable[Path | str]) -> CatalogLoadResult:
    """
    Lire les fichiers SQL et construire le catalogue

    Args:
        paths: Fichiers de définition, dans l'ordre

    Returns:
        CatalogLoadResult. Un fichier illisible n'arrête pas le chargement :
        son erreur est collectée et les autres fichiers sont traités.
    """
    result = CatalogLoadResult()

    for path in paths:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read SQL file", file=str(path), error=str(e))
            result.errors.append(CatalogFileError(path, e))
            continue

        statements = parse_statements(text)
        for name, body in statements:
            result.catalog.setdefault(name, []).append(body)

        logger.debug("SQL file loaded", file=str(path), statements=len(statements))

    # Entrées commentées
    for name in list(result.catalog):
        if name.startswith(COMMENT_PREFIX):
            del result.catalog[name]

    logger.info(
        "Statement catalog built",
        names=len(result.catalog),
        statements=result.statement_count,
        file_errors=len(result.errors),
    )
    return result
