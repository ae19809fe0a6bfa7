"""
Tests for the RiskSession working set.
"""

import pytest

from maxspan.core.errors import MalformedDocument, SchemaMismatch
from maxspan.models.positions import Position
from maxspan.session import RiskSession
from tests.fixtures.bhav_fixtures import bhav_html


@pytest.fixture
def loaded(sample_span_xml, sample_bhav_html):
    session = RiskSession()
    session.load(sample_span_xml, sample_bhav_html)
    return session


def test_load_builds_book(loaded):
    assert len(loaded.book) == 3
    assert loaded.last_load.joined.matched == 3
    assert loaded.book.months() == ["JAN-2025"]


def test_load_summary_lines(loaded):
    lines = loaded.last_load.lines()
    assert lines[0].startswith("SPAN contracts with ra: 3")
    assert lines[2] == "Contracts matched to Bhav: 3/3"


def test_positions_and_calculation(loaded):
    loaded.add_position(Position(symbol="XYZ", month_key="JAN-2025", lots=2))
    loaded.add_position(Position(symbol="XYZ", month_key="JAN-2025", lots=-3))

    result = loaded.calculate()

    assert result.series == [-10.0, 20.0, -5.0]
    assert result.worst_value == 20.0
    assert [r.close for r in loaded.position_rows()] == [100.25, 100.25]


def test_remove_position(loaded):
    loaded.set_positions([
        Position(symbol="XYZ", month_key="JAN-2025", lots=1),
        Position(symbol="XYZ", month_key="FEB-2025", lots=1),
    ])

    removed = loaded.remove_position(0)

    assert removed.month_key == "JAN-2025"
    assert [p.month_key for p in loaded.positions] == ["FEB-2025"]


def test_spreads(loaded):
    loaded.set_positions([Position(symbol="XYZ", month_key="JAN-2025", lots=1)])
    assert [g.label for g in loaded.spreads()] == ["XYZ FUT"]


def test_reload_replaces_working_set(loaded, bod_span_xml, sample_bhav_html):
    loaded.add_position(Position(symbol="XYZ", month_key="JAN-2025", lots=1))

    loaded.load(bod_span_xml, sample_bhav_html)

    assert len(loaded.book) == 1
    assert loaded.positions == []


@pytest.mark.parametrize("bad", ["span", "bhav"])
def test_failed_load_clears_working_set(loaded, sample_span_xml, sample_bhav_html, bad):
    loaded.add_position(Position(symbol="XYZ", month_key="JAN-2025", lots=1))

    if bad == "span":
        with pytest.raises(MalformedDocument):
            loaded.load("<spanFile>", sample_bhav_html)
    else:
        with pytest.raises(SchemaMismatch):
            loaded.load(sample_span_xml, bhav_html([("x",)], headers=("Close",)))

    assert len(loaded.book) == 0
    assert loaded.positions == []
    assert loaded.last_load is None


def test_calculate_on_empty_book_logs_error(log_messages):
    result = RiskSession().calculate()

    assert result.series == []
    assert any(m.startswith("ERROR No ra arrays") for m in log_messages)
