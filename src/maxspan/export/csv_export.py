"""
CSV Row Projections

Builds polars DataFrames for the contract table and the position list, writes
them as CSV, and reads a positions CSV back into validated Position models.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

import polars as pl
from loguru import logger
from pydantic import ValidationError

from maxspan.core.enums import InstrumentType
from maxspan.core.models import Contract
from maxspan.engine.scenarios import PortfolioResult
from maxspan.models.positions import Position

CONTRACT_SCHEMA = {
    "symbol": pl.String,
    "month": pl.String,
    "type": pl.String,
    "strike": pl.String,
    "close": pl.Float64,
    "oi": pl.Float64,
    "scan": pl.Float64,
    "worst_abs_ra": pl.String,
}

POSITION_SCHEMA = {
    "symbol": pl.String,
    "month": pl.String,
    "type": pl.String,
    "strike": pl.Float64,
    "lots": pl.Int64,
}

CONTRIBUTOR_SCHEMA = {
    "key": pl.String,
    "lots": pl.Int64,
    "abs_impact": pl.Float64,
}


@dataclass(slots=True)
class PositionsImport:
    """Positions read from CSV plus the rows that failed validation."""

    positions: list[Position] = field(default_factory=list)
    errors: list[tuple[int, str]] = field(default_factory=list)


def contracts_frame(contracts: Iterable[Contract]) -> pl.DataFrame:
    """Contract table rows: strike only for options, worst value to 2 decimals."""
    rows = [
        {
            "symbol": c.symbol,
            "month": c.month_key,
            "type": c.instrument_type.label,
            "strike": f"{c.strike:.2f}" if c.instrument_type is InstrumentType.OPTION else "",
            "close": c.settlement_price,
            "oi": c.open_interest,
            "scan": c.price_scan,
            "worst_abs_ra": f"{c.worst_absolute_value:.2f}",
        }
        for c in contracts
    ]
    return pl.DataFrame(rows, schema=CONTRACT_SCHEMA)


def positions_frame(positions: Iterable[Position]) -> pl.DataFrame:
    rows = [
        {
            "symbol": p.symbol,
            "month": p.month_key,
            "type": p.instrument_type.label,
            "strike": p.strike,
            "lots": p.lots,
        }
        for p in positions
    ]
    return pl.DataFrame(rows, schema=POSITION_SCHEMA)


def contributors_frame(result: PortfolioResult, limit: int | None = None) -> pl.DataFrame:
    """Ranked contributors (largest worst-case impact first)."""
    contributors = result.contributors if limit is None else result.contributors[:limit]
    rows = [
        {"key": c.label, "lots": c.position.lots, "abs_impact": c.worst_abs}
        for c in contributors
    ]
    return pl.DataFrame(rows, schema=CONTRIBUTOR_SCHEMA)


def write_csv(frame: pl.DataFrame, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.write_csv(path)
    logger.info(f"Wrote {frame.height} rows to {path}")
    return path


def read_positions_csv(path: Union[str, Path]) -> PositionsImport:
    """
    Read a positions CSV (symbol, month, type, strike, lots[, right]).

    Rows failing validation are reported with their 1-based data row number
    and skipped.
    """
    frame = pl.read_csv(path, infer_schema_length=0)
    result = PositionsImport()

    missing = {"symbol", "month", "type", "lots"} - set(frame.columns)
    if missing:
        raise ValueError(f"Positions CSV {path} is missing columns: {sorted(missing)}")

    for n, row in enumerate(frame.iter_rows(named=True), start=1):
        try:
            result.positions.append(
                Position(
                    symbol=row["symbol"],
                    month_key=row["month"],
                    instrument_type=row["type"],
                    strike=row.get("strike") or 0,
                    lots=row["lots"],
                    option_right=row.get("right"),
                )
            )
        except ValidationError as e:
            message = "; ".join(err["msg"] for err in e.errors())
            result.errors.append((n, message))
            logger.warning(f"Positions CSV row {n} rejected: {message}")

    logger.info(f"Read {len(result.positions)} positions from {path} ({len(result.errors)} rejected)")
    return result
