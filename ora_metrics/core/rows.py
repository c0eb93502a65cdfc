"""
============================================================================
Row Converter - Ligne Oracle → tags (texte) + fields (numériques)
============================================================================
Mapping type Python (valeur renvoyée par le driver) → tag ou field :
    str        → tag ("NULL" si vide)
    bytes      → tag (décodé UTF-8)
    bool       → tag ("1" / "0")
    int/float  → field
    Decimal    → field (float), ignoré si non convertible
    autre      → ignoré (log info)
============================================================================
"""

import math
from decimal import Decimal
from typing import Any, Mapping, Optional

from ora_metrics.config.constants import EMPTY_TEXT_TAG, ColumnKind
from ora_metrics.core.identity import ConnectionIdentity
from ora_metrics.utils.logging import get_logger

logger = get_logger(__name__)

Tags = dict[str, str]
Fields = dict[str, int | float]


def classify_value(value: Any) -> ColumnKind:
    """
    Déterminer la catégorie d'une valeur de colonne

    ⚠️ bool est une sous-classe de int : tester bool AVANT int.
    """
    if isinstance(value, str):
        return ColumnKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ColumnKind.BYTES
    if isinstance(value, bool):
        return ColumnKind.BOOLEAN
    if isinstance(value, int):
        return ColumnKind.INTEGER
    if isinstance(value, float):
        return ColumnKind.FLOAT
    if isinstance(value, Decimal):
        return ColumnKind.DECIMAL
    return ColumnKind.UNKNOWN


def decimal_to_float(value: Decimal) -> Optional[float]:
    """Conversion NUMBER haute précision → float, None si impossible"""
    try:
        number = float(str(value))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def convert_row(
    row: Mapping[str, Any],
    identity: Optional[ConnectionIdentity] = None,
) -> tuple[Tags, Fields]:
    """
    Convertir une ligne en (tags, fields)

    Args:
        row: nom de colonne → valeur brute du driver
        identity: identité de connexion (tags orahost, oraport, ...)

    Returns:
        (tags, fields) avec noms de colonnes en minuscules.
        Le tag func est ajouté par l'appelant.

    Example:
        {"VALUE": 42, "NAME": "", "FLAG": True}
        → tags={"name": "NULL", "flag": "1"}, fields={"value": 42}
    """
    tags: Tags = {}
    fields: Fields = {}

    for column, value in row.items():
        if value is None:
            continue

        key = column.lower()
        kind = classify_value(value)

        if kind is ColumnKind.TEXT:
            tags[key] = value if value != "" else EMPTY_TEXT_TAG

        elif kind is ColumnKind.BYTES:
            tags[key] = bytes(value).decode("utf-8", errors="replace")

        elif kind is ColumnKind.BOOLEAN:
            tags[key] = "1" if value else "0"

        elif kind in (ColumnKind.INTEGER, ColumnKind.FLOAT):
            fields[key] = value

        elif kind is ColumnKind.DECIMAL:
            number = decimal_to_float(value)
            if number is not None:
                fields[key] = number

        else:
            logger.info(
                "Unsupported column type, column dropped",
                column=key,
                type=type(value).__name__,
            )

    if identity is not None:
        tags.update(identity.tags())

    return tags, fields
