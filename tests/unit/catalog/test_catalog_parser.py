"""
Tests unitaires - Format nom::requête;;
"""

import pytest
from ora_metrics.core.catalog.parser import parse_statements


@pytest.mark.unit
def test_parse_single_statement():
    """Test enregistrement simple"""
    result = parse_statements("sessions::select count(*) value from v$session;;")

    assert result == [("sessions", "select count(*) value from v$session")]


@pytest.mark.unit
def test_parse_trims_name_and_body():
    """Test suppression des espaces autour du nom et de la requête"""
    text = "  waits  ::\n   select * from v$system_wait_class  \n;;"

    assert parse_statements(text) == [("waits", "select * from v$system_wait_class")]


@pytest.mark.unit
def test_parse_keeps_order_and_duplicates():
    """Test plusieurs requêtes sous le même nom"""
    text = "a::select 1 from dual;;b::select 2 from dual;;a::select 3 from dual;;"

    assert parse_statements(text) == [
        ("a", "select 1 from dual"),
        ("b", "select 2 from dual"),
        ("a", "select 3 from dual"),
    ]


@pytest.mark.unit
def test_parse_skips_empty_records():
    """Test enregistrements vides ou blancs ignorés"""
    text = ";;\n\n;;  ;;a::select 1 from dual;;\n"

    assert parse_statements(text) == [("a", "select 1 from dual")]


@pytest.mark.unit
def test_parse_skips_malformed_records():
    """Test enregistrement sans séparateur, ou avec deux séparateurs"""
    text = "no separator here;;a::b::c;;ok::select 1 from dual;;"

    assert parse_statements(text) == [("ok", "select 1 from dual")]


@pytest.mark.unit
def test_parse_skips_empty_name_or_body():
    """Edge case: nom ou requête vide après trim"""
    text = "  ::select 1 from dual;;name::   ;;"

    assert parse_statements(text) == []


@pytest.mark.unit
def test_parse_keeps_commented_names():
    """Le filtrage des # se fait au niveau du catalogue, pas du parser"""
    text = "#disabled::select 1 from dual;;"

    assert parse_statements(text) == [("#disabled", "select 1 from dual")]
