"""
============================================================================
Constants - Constantes du projet
============================================================================
"""

from enum import Enum


class CollectorState(str, Enum):
    """Etats d'une collecte (une invocation de gather)"""

    IDLE = "IDLE"
    LOADING_CATALOG = "LOADING_CATALOG"
    CONNECTING = "CONNECTING"
    EXECUTING = "EXECUTING"
    CLOSED = "CLOSED"


class ColumnKind(str, Enum):
    """Classification d'une valeur de colonne Oracle"""

    TEXT = "text"
    BYTES = "bytes"
    INTEGER = "integer"
    FLOAT = "float"
    DECIMAL = "decimal"
    BOOLEAN = "boolean"
    UNKNOWN = "unknown"


# Format des fichiers SQL : nom::requête;;
RECORD_SEPARATOR = ";;"
NAME_SEPARATOR = "::"
COMMENT_PREFIX = "#"

# Mesure par défaut et tag du nom de requête
DEFAULT_MEASUREMENT = "ora"
FUNC_TAG = "func"

# Valeur substituée aux chaînes vides
EMPTY_TEXT_TAG = "NULL"

# Tags d'identité issus de l'URL de connexion
IDENTITY_TAGS = {
    "host": "orahost",
    "port": "oraport",
    "service": "oraservice",
    "instance": "orainstance",
}
