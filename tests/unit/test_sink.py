"""
Tests unitaires - Accumulateurs et line protocol
"""

import io

import pytest
from ora_metrics.core.sink import LineProtocolAccumulator, MemoryAccumulator, render_line


@pytest.mark.unit
def test_memory_accumulator_copies_rows():
    sink = MemoryAccumulator()
    tags = {"func": "sessions", "status": "ACTIVE"}

    sink.add_fields("ora", {"value": 3}, tags)
    tags["status"] = "changed"

    assert len(sink) == 1
    assert sink.rows[0].tags["status"] == "ACTIVE"
    assert sink.rows[0].measurement == "ora"


@pytest.mark.unit
def test_memory_accumulator_rows_by_func():
    sink = MemoryAccumulator()
    sink.add_fields("ora", {"v": 1}, {"func": "a"})
    sink.add_fields("ora", {"v": 2}, {"func": "a"})
    sink.add_fields("ora", {"v": 3}, {"func": "b"})

    assert sink.rows_by_func() == {"a": 2, "b": 1}


@pytest.mark.unit
def test_render_line_sorted_and_typed():
    line = render_line(
        "ora",
        {"value": 42, "ratio": 0.5},
        {"func": "sessions", "orahost": "10.0.0.5"},
        1700000000000000000,
    )

    assert line == "ora,func=sessions,orahost=10.0.0.5 ratio=0.5,value=42i 1700000000000000000"


@pytest.mark.unit
def test_render_line_escapes_special_characters():
    line = render_line("ora", {"total waits": 1}, {"wait_class": "User I/O, Commit=1"})

    assert line == "ora,wait_class=User\\ I/O\\,\\ Commit\\=1 total\\ waits=1i"


@pytest.mark.unit
def test_render_line_without_fields_is_empty():
    """Edge case: ligne sans field (invalide en line protocol)"""
    assert render_line("ora", {}, {"func": "sessions"}) == ""


@pytest.mark.unit
def test_render_line_skips_empty_tag_values():
    assert render_line("ora", {"v": 1}, {"a": "", "b": "x"}) == "ora,b=x v=1i"


@pytest.mark.unit
def test_line_protocol_accumulator_writes_lines():
    stream = io.StringIO()
    sink = LineProtocolAccumulator(stream)

    sink.add_fields("ora", {"value": 1}, {"func": "a"})
    sink.add_fields("ora", {}, {"func": "tags_only"})

    lines = stream.getvalue().splitlines()
    assert sink.count == 1
    assert len(lines) == 1
    assert lines[0].startswith("ora,func=a value=1i ")
