"""
Composite Keys and Field Normalisation

Builds the canonical join key shared by SPAN contracts, Bhav settlement rows
and user positions, plus the small normalisers every parser relies on
(symbols, month labels, tolerant numbers).

Key shape:
    (symbol, month_key, instrument type label, strike formatted to 2 decimals)

Futures always key on strike "0.00" whatever strike the source carries.
"""

import re
from typing import Optional

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType

MONTHS = ("JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC")

ContractKey = tuple[str, str, str, str]
ContractRightKey = tuple[str, str, str, str, str]

_WHITESPACE = re.compile(r"\s+")
_YEAR = re.compile(r"20\d{2}")
_EXPIRY_CODE = re.compile(r"^\d{8}$")


def normalize_symbol(raw: Optional[str]) -> str:
    """Uppercase a ticker and drop every whitespace character."""
    return _WHITESPACE.sub("", str(raw or "")).upper()


def parse_number(raw: object) -> Optional[float]:
    """
    Parse a numeric cell or text node.

    Thousands separators and surrounding whitespace are tolerated.
    Empty, non-numeric and non-finite input gives None.
    """
    if raw is None:
        return None
    text = str(raw).replace(",", "").strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def month_key_from_expiry_code(code: Optional[str]) -> Optional[str]:
    """
    Derive MMM-YYYY from an 8-digit YYYYMMDD expiry code.

    Returns None when the code is not exactly 8 digits or the month is
    outside 01..12.
    """
    text = str(code or "").strip()
    if not _EXPIRY_CODE.match(text):
        return None
    month = int(text[4:6])
    if not 1 <= month <= 12:
        return None
    return f"{MONTHS[month - 1]}-{text[:4]}"


def month_key_from_settlement_expiry(expiry: Optional[str]) -> Optional[str]:
    """
    Derive MMM-YYYY from a free-form settlement expiry (e.g. "30-Jan-2025").

    The first month abbreviation (in calendar order) contained in the text
    and the first 20YY year are used.
    """
    text = _WHITESPACE.sub("", str(expiry or "")).upper()
    month = next((m for m in MONTHS if m in text), None)
    year = _YEAR.search(text)
    if month is None or year is None:
        return None
    return f"{month}-{year.group(0)}"


def month_sort_key(month_key: str) -> tuple[int, int, str]:
    """Chronological ordering for month labels, unknown labels last."""
    try:
        label, year = month_key.split("-", 1)
        return (int(year), MONTHS.index(label) + 1, month_key)
    except ValueError:
        return (9999, 99, month_key)


def strike_label(instrument_type: InstrumentType, strike: Optional[float]) -> str:
    if instrument_type is InstrumentType.OPTION:
        return f"{float(strike or 0):.2f}"
    return "0.00"


def contract_key(
    symbol: str,
    month_key: Optional[str],
    instrument_type: InstrumentType,
    strike: Optional[float],
) -> ContractKey:
    """
    Build the composite join key.

    Distinct (symbol, month, type, strike) tuples map to distinct keys, and
    repeated calls with the same inputs give equal keys.
    """
    return (
        normalize_symbol(symbol),
        month_key or UNKNOWN_MONTH,
        instrument_type.label,
        strike_label(instrument_type, strike),
    )


def contract_right_key(key: ContractKey, option_right: Optional[str]) -> ContractRightKey:
    """Extend a composite key with the call/put flag."""
    return (*key, (option_right or "").upper())


def format_key(key: tuple[str, ...]) -> str:
    """Pipe-joined key for logs and reports (SYMBOL|MMM-YYYY|TYPE|STRIKE)."""
    return "|".join(key)
