"""
Core records, keys and errors.
"""

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType, OptionRight
from maxspan.core.errors import MalformedDocument, MaxSpanError, MissingDocument, SchemaMismatch
from maxspan.core.keys import contract_key, format_key, normalize_symbol, parse_number
from maxspan.core.models import Contract, ParseStats, Settlement

__all__ = [
    # Enums
    "UNKNOWN_MONTH",
    "InstrumentType",
    "OptionRight",
    # Errors
    "MaxSpanError",
    "MalformedDocument",
    "SchemaMismatch",
    "MissingDocument",
    # Keys
    "contract_key",
    "format_key",
    "normalize_symbol",
    "parse_number",
    # Records
    "Contract",
    "Settlement",
    "ParseStats",
]
