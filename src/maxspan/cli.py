#!/usr/bin/env python3
"""
MAXSPAN command line

Commands:
    contracts   Load SPAN + Bhav, print/filter the contract table, export CSV
    portfolio   Load SPAN + Bhav and aggregate a positions CSV across scenarios
    merge       Compare BOD and current SPAN snapshots and write the result

Usage:
    maxspan contracts --span nsccl.20250808.s.zip --bhav fo_bhav.xls --out contracts.csv
    maxspan portfolio --span nsccl.zip --bhav bhav.xls --positions positions.csv --spreads
    maxspan merge --earlier bod.spn --later i02.spn --mode merge-max --out merged.spn

Exit codes:
- 0: Success
- 1: Input/config error (missing file, malformed document, bad config)
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from maxspan.config.loader import load_config
from maxspan.config.span_config import SpanConfig
from maxspan.core.enums import InstrumentType
from maxspan.core.errors import MaxSpanError
from maxspan.engine.snapshot_merge import MergeMode, merge_snapshots
from maxspan.export.csv_export import (
    contracts_frame,
    contributors_frame,
    positions_frame,
    read_positions_csv,
    write_csv,
)
from maxspan.session import RiskSession
from maxspan.sources import read_bhav, read_span
from maxspan.utils.log_setup import configure_logging


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="maxspan",
        description="SPAN + Bhav contract table, portfolio scenarios and snapshot merge",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to YAML config")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")

    sub = parser.add_subparsers(dest="command", required=True)

    contracts = sub.add_parser("contracts", help="Build the joined contract table")
    contracts.add_argument("--span", required=True, help="SPAN .spn/.xml/.zip file")
    contracts.add_argument("--bhav", required=True, help="Bhav HTML-table .xls file")
    contracts.add_argument("--search", default="", help="Free-text filter")
    contracts.add_argument("--month", default=None, help="Month filter, e.g. JAN-2025")
    contracts.add_argument("--type", dest="instrument_type", choices=["FUT", "OPT"], default=None)
    contracts.add_argument("--out", default=None, help="Write filtered contracts CSV here")

    portfolio = sub.add_parser("portfolio", help="Aggregate positions across SPAN scenarios")
    portfolio.add_argument("--span", required=True)
    portfolio.add_argument("--bhav", required=True)
    portfolio.add_argument("--positions", required=True, help="CSV: symbol,month,type,strike,lots[,right]")
    portfolio.add_argument("--spreads", action="store_true", help="Also print spread groups")
    portfolio.add_argument("--out", default=None, help="Write ranked contributors CSV here")
    portfolio.add_argument("--positions-out", default=None, help="Write the validated positions CSV here")

    merge = sub.add_parser("merge", help="Merge BOD and current SPAN snapshots")
    merge.add_argument("--earlier", default=None, help="BOD SPAN file")
    merge.add_argument("--later", default=None, help="Current (intraday) SPAN file")
    merge.add_argument("--mode", choices=[m.value for m in MergeMode], default=None)
    merge.add_argument("--out", required=True, help="Output SPAN file")

    return parser.parse_args(argv)


def run_contracts(args: argparse.Namespace, config: SpanConfig) -> int:
    session = RiskSession(config=config)
    session.load(read_span(args.span), read_bhav(args.bhav))

    instrument_type = InstrumentType.parse(args.instrument_type) if args.instrument_type else None
    rows = session.book.filter(args.search, args.month, instrument_type)
    frame = contracts_frame(rows)

    logger.info(f"Months: {', '.join(session.book.months()) or '-'}")
    logger.info(f"{len(rows)} of {len(session.book)} contracts after filters")
    print(frame)

    if args.out:
        write_csv(frame, args.out)
    return 0


def run_portfolio(args: argparse.Namespace, config: SpanConfig) -> int:
    session = RiskSession(config=config)
    session.load(read_span(args.span), read_bhav(args.bhav))

    imported = read_positions_csv(args.positions)
    session.set_positions(imported.positions)
    if args.positions_out:
        write_csv(positions_frame(session.positions), args.positions_out)

    result = session.calculate()

    idx = result.worst_scenario_index
    worst = f"{result.worst_value:.2f}" + (f" (scenario #{idx + 1})" if idx is not None else "")
    print(f"Portfolio worst: {worst}")

    for i, value in enumerate(result.series[: config.report.scenario_preview]):
        print(f"S{i + 1}: {value:.2f}")

    top = config.report.top_contributors
    for c in result.contributors[:top]:
        print(f"{c.label} | lots={c.position.lots} | abs-impact={c.worst_abs:.2f}")

    for p in result.unmatched:
        print(f"Not found in SPAN: {p.symbol} {p.month_key} {p.instrument_type.label} {p.strike:.2f}")

    if args.spreads:
        for group in session.spreads():
            print("\n".join(group.describe()))
            print()

    if args.out:
        write_csv(contributors_frame(result, top), args.out)
    return 0


def run_merge(args: argparse.Namespace, config: SpanConfig) -> int:
    mode = MergeMode(args.mode or config.merge.default_mode)
    earlier = read_span(args.earlier) if args.earlier else None
    later = read_span(args.later) if args.later else None

    result = merge_snapshots(mode, earlier, later, decimals=config.merge.decimals)

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.document)
    logger.success(f"Wrote {mode.value} SPAN to {out} ({result.counters.summary()})")
    return 0


COMMANDS = {
    "contracts": run_contracts,
    "portfolio": run_portfolio,
    "merge": run_merge,
}


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    configure_logging(config.logging, verbose=args.verbose)

    try:
        return COMMANDS[args.command](args, config)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except MaxSpanError as e:
        logger.error(f"Error: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
