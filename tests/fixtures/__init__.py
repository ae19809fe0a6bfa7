"""Test fixtures for MAXSPAN.

This package provides reusable test fixtures for:
- SPAN XML documents (portfolios, futures, options, scenario arrays)
- Bhav HTML-table documents

Fixtures are auto-discovered by pytest through conftest.py.
"""

from tests.fixtures.span_fixtures import (
    bod_span_xml,
    sample_span_xml,
)
from tests.fixtures.bhav_fixtures import (
    sample_bhav_html,
)

__all__ = [
    # SPAN fixtures
    "sample_span_xml",
    "bod_span_xml",
    # Bhav fixtures
    "sample_bhav_html",
]
