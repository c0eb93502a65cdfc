"""
============================================================================
Catalog Parser - Lecture du format nom::requête;;
============================================================================
"""

from ora_metrics.config.constants import NAME_SEPARATOR, RECORD_SEPARATOR
from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)


def parse_statements(text: str) -> list[tuple[str, str]]:
    """
    Découper le contenu d'un fichier SQL en couples (nom, requête)

    Args:
        text: Contenu du fichier

    Returns:
        Liste ordonnée des couples (nom, requête), espaces retirés.
        Les enregistrements vides ou mal formés sont ignorés.

    Example:
        "sessions::select count(*) value from v$session;;"
        → [("sessions", "select count(*) value from v$session")]
    """
    statements = []

    for record in text.split(RECORD_SEPARATOR):
        if record.strip() == "":
            continue

        parts = record.split(NAME_SEPARATOR)
        if len(parts) != 2:
            logger.info("SQL record format error", record=record.strip())
            continue

        name = parts[0].strip()
        body = parts[1].strip()
        if not name or not body:
            continue

        statements.append((name, body))

    return statements
