"""
Bhav Settlement-File Parser

Decodes an exchange Bhav copy published as an HTML table (the ".xls" files
the exchange serves are HTML markup) into Settlement records.

Columns are located by header label, case-insensitively:
    Symbol, Expiry Date              required
    Option Type, Strike Price,
    Close, Open Interest(Lots),
    Instrument Name                  optional

Rows whose symbol or month cannot be derived are skipped and counted.
Numeric cells tolerate thousands separators; anything non-numeric becomes
None for that field without failing the row.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from bs4 import BeautifulSoup
from loguru import logger

from maxspan.core.enums import InstrumentType
from maxspan.core.errors import MalformedDocument, SchemaMismatch
from maxspan.core.keys import month_key_from_settlement_expiry, normalize_symbol, parse_number
from maxspan.core.models import ParseStats, Settlement

REQUIRED_COLUMNS = ("Symbol", "Expiry Date")
OPTIONAL_COLUMNS = ("Option Type", "Strike Price", "Close", "Open Interest(Lots)", "Instrument Name")

# Option Type cells that mean "not an option"
DEFAULT_PLACEHOLDER_OPTION_TYPES = ("-", "XX")


@dataclass(slots=True)
class BhavParseResult:
    """Settlement rows extracted from one Bhav document plus load counters."""

    settlements: list[Settlement]
    stats: ParseStats = field(default_factory=ParseStats)
    columns: dict[str, int] = field(default_factory=dict)


def _cell_text(cell) -> str:
    return cell.get_text(strip=True)


def _column_index(headers: list[str], name: str) -> int:
    wanted = name.lower()
    for i, header in enumerate(headers):
        if header.lower() == wanted:
            return i
    return -1


def parse_bhav_document(
    document: Union[str, bytes],
    *,
    placeholder_option_types: Iterable[str] = DEFAULT_PLACEHOLDER_OPTION_TYPES,
) -> BhavParseResult:
    """
    Parse a Bhav HTML-table document.

    Args:
        document: HTML text or bytes
        placeholder_option_types: Option Type values treated as empty

    Returns:
        BhavParseResult with one Settlement per usable data row

    Raises:
        MalformedDocument: If no <table> is present
        SchemaMismatch: If the Symbol or Expiry Date column is missing
    """
    soup = BeautifulSoup(document, "html.parser")
    table = soup.find("table")
    if table is None:
        raise MalformedDocument("no <table> found (expected HTML-table .xls)", source="Bhav")

    rows = table.find_all("tr")
    if not rows:
        raise SchemaMismatch("table has no header row", source="Bhav", missing=list(REQUIRED_COLUMNS))

    headers = [_cell_text(c) for c in rows[0].find_all(["th", "td"])]
    columns = {name: _column_index(headers, name) for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}

    missing = [name for name in REQUIRED_COLUMNS if columns[name] < 0]
    if missing:
        raise SchemaMismatch(
            f"missing {'/'.join(missing)} column(s)", source="Bhav", missing=missing
        )

    placeholders = {p.strip().upper() for p in placeholder_option_types}
    stats = ParseStats()
    settlements: list[Settlement] = []

    for row in rows[1:]:
        cells = [_cell_text(c) for c in row.find_all("td")]
        if not cells:
            continue
        stats.seen += 1
        settlement = _parse_row(cells, columns, placeholders, stats)
        if settlement is not None:
            settlements.append(settlement)
            stats.parsed += 1

    if len(rows) == 1:
        logger.warning("Bhav: table has a header row but no data rows")
    logger.info(f"Bhav rows parsed: {len(settlements)} ({stats.summary()})")

    return BhavParseResult(settlements=settlements, stats=stats, columns=columns)


def _get(cells: list[str], index: int) -> Optional[str]:
    if index < 0 or index >= len(cells):
        return None
    return cells[index]


def _parse_row(
    cells: list[str], columns: dict[str, int], placeholders: set[str], stats: ParseStats
) -> Optional[Settlement]:
    symbol = normalize_symbol(_get(cells, columns["Symbol"]))
    expiry_raw = _get(cells, columns["Expiry Date"]) or ""
    month_key = month_key_from_settlement_expiry(expiry_raw)

    if not symbol:
        stats.skip("no_symbol")
        return None
    if not month_key:
        stats.skip("no_month")
        logger.debug(f"Bhav: unparseable expiry {expiry_raw!r} for {symbol}")
        return None

    option_type = (_get(cells, columns["Option Type"]) or "").strip()
    is_option = bool(option_type) and option_type.upper() not in placeholders
    strike = parse_number(_get(cells, columns["Strike Price"]))

    return Settlement(
        symbol=symbol,
        month_key=month_key,
        instrument_type=InstrumentType.OPTION if is_option else InstrumentType.FUTURE,
        strike=strike if strike is not None else 0.0,
        close=parse_number(_get(cells, columns["Close"])),
        open_interest=parse_number(_get(cells, columns["Open Interest(Lots)"])),
        instrument_name=_get(cells, columns["Instrument Name"]) or "",
        expiry_raw=expiry_raw,
        option_type=option_type,
    )
