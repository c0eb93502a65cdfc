"""
Tests unitaires - Conversion ligne → tags / fields
"""

from datetime import datetime
from decimal import Decimal

import pytest
from ora_metrics.config.constants import ColumnKind
from ora_metrics.core.rows import classify_value, convert_row, decimal_to_float


@pytest.mark.unit
def test_convert_mixed_row(identity):
    """Test ligne {VALUE: 42, NAME: "", FLAG: True}"""
    tags, fields = convert_row({"VALUE": 42, "NAME": "", "FLAG": True}, identity)

    assert fields == {"value": 42}
    assert tags == {
        "name": "NULL",
        "flag": "1",
        "orahost": "10.0.0.5",
        "oraport": "1521",
        "oraservice": "orcl",
        "orainstance": "orcl1",
    }


@pytest.mark.unit
def test_convert_without_identity():
    tags, fields = convert_row({"STATUS": "ACTIVE", "CNT": 3})

    assert tags == {"status": "ACTIVE"}
    assert fields == {"cnt": 3}


@pytest.mark.unit
def test_convert_skips_null_columns():
    tags, fields = convert_row({"A": None, "B": 1.5})

    assert "a" not in tags and "a" not in fields
    assert fields == {"b": 1.5}


@pytest.mark.unit
def test_convert_preserves_numeric_types():
    _, fields = convert_row({"I": 7, "F": 0.25})

    assert fields["i"] == 7 and isinstance(fields["i"], int)
    assert fields["f"] == 0.25 and isinstance(fields["f"], float)


@pytest.mark.unit
def test_convert_bytes_to_tag():
    tags, fields = convert_row({"RAW_ID": b"abc", "BUF": bytearray(b"xyz")})

    assert tags == {"raw_id": "abc", "buf": "xyz"}
    assert fields == {}


@pytest.mark.unit
def test_convert_false_boolean():
    tags, fields = convert_row({"ENABLED": False})

    assert tags == {"enabled": "0"}
    assert fields == {}


@pytest.mark.unit
def test_convert_decimal_to_float():
    _, fields = convert_row({"PCT": Decimal("12.3456789012345678901234567890")})

    assert isinstance(fields["pct"], float)
    assert fields["pct"] == pytest.approx(12.3456789012345678)


@pytest.mark.unit
@pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("sNaN"), Decimal("Infinity")])
def test_convert_unparsable_decimal_dropped(value):
    """Edge case: Decimal non convertible → colonne ignorée sans erreur"""
    tags, fields = convert_row({"X": value})

    assert tags == {}
    assert fields == {}


@pytest.mark.unit
def test_convert_unsupported_type_dropped():
    """Test type non supporté (date) ignoré"""
    tags, fields = convert_row({"LAST_ANALYZED": datetime(2024, 1, 1), "N": 1})

    assert tags == {}
    assert fields == {"n": 1}


@pytest.mark.unit
def test_identity_tags_added_even_for_empty_row(identity):
    tags, fields = convert_row({"A": None}, identity)

    assert fields == {}
    assert tags["orahost"] == "10.0.0.5"


@pytest.mark.unit
def test_identity_tag_overrides_same_column(identity):
    """Les tags d'identité sont appliqués après les colonnes"""
    tags, _ = convert_row({"ORAHOST": "other"}, identity)

    assert tags["orahost"] == "10.0.0.5"


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, kind",
    [
        ("x", ColumnKind.TEXT),
        (b"x", ColumnKind.BYTES),
        (True, ColumnKind.BOOLEAN),
        (1, ColumnKind.INTEGER),
        (1.0, ColumnKind.FLOAT),
        (Decimal("1.5"), ColumnKind.DECIMAL),
        (object(), ColumnKind.UNKNOWN),
    ],
)
def test_classify_value(value, kind):
    assert classify_value(value) is kind


@pytest.mark.unit
def test_decimal_to_float():
    assert decimal_to_float(Decimal("3.5")) == 3.5
    assert decimal_to_float(Decimal("-Infinity")) is None
