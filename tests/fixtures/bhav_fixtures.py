"""
Bhav document fixtures.

The exchange serves Bhav copies as an HTML table saved with an .xls suffix.
"""

from typing import Iterable, Sequence

import pytest

DEFAULT_HEADERS = (
    "Instrument Name",
    "Symbol",
    "Expiry Date",
    "Option Type",
    "Strike Price",
    "Close",
    "Open Interest(Lots)",
)


def bhav_html(rows: Iterable[Sequence[object]], headers: Sequence[str] = DEFAULT_HEADERS) -> str:
    header = "".join(f"<th>{h}</th>" for h in headers)
    body = "".join("<tr>" + "".join(f"<td>{c}</td>" for c in row) + "</tr>" for row in rows)
    return f"<html><body><table><tr>{header}</tr>{body}</table></body></html>"


@pytest.fixture
def sample_bhav_html():
    """
    Settlement rows matching sample_span_xml plus two unusable rows.

    Returns:
        str: Bhav HTML where
            - XYZ JAN-2025 future closes 100.25 with OI 1,200
            - XYZ JAN-2025 100 CE closes 7.50 with OI 300
            - one row has no symbol, one has an unparseable expiry
    """
    return bhav_html([
        ("FUTIDX", "XYZ", "30-Jan-2025", "-", "0", "100.25", "1,200"),
        ("OPTIDX", "XYZ", "30-Jan-2025", "CE", "100.00", "7.50", "300"),
        ("FUTIDX", "", "30-Jan-2025", "-", "0", "55", "10"),
        ("FUTSTK", "ABC", "someday", "-", "0", "55", "10"),
    ])
