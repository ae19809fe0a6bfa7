"""
Document parsers.

- span_parser: SPAN XML -> Contract records
- bhav_parser: Bhav HTML table -> Settlement records
"""

from maxspan.parsers.bhav_parser import BhavParseResult, parse_bhav_document
from maxspan.parsers.span_parser import SpanParseResult, parse_span_document

__all__ = [
    "BhavParseResult",
    "parse_bhav_document",
    "SpanParseResult",
    "parse_span_document",
]
