"""
Risk Session

Holds the working set for one user session: the joined contract book from
the last successful SPAN + Bhav load and the positions being edited.

A load replaces the working set wholesale. If any step fails the previous
working set is cleared and the error is re-raised, so callers never see a
half-built book.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from loguru import logger

from maxspan.config.span_config import SpanConfig
from maxspan.core.errors import MaxSpanError
from maxspan.engine.book import ContractBook, PositionRow
from maxspan.engine.join import JoinResult, join
from maxspan.engine.scenarios import PortfolioResult, aggregate_portfolio
from maxspan.engine.spreads import SpreadGroup, group_spreads
from maxspan.models.positions import Position
from maxspan.parsers.bhav_parser import BhavParseResult, parse_bhav_document
from maxspan.parsers.span_parser import SpanParseResult, parse_span_document


@dataclass(slots=True)
class LoadSummary:
    """Counters from one SPAN + Bhav load."""

    span: SpanParseResult
    bhav: BhavParseResult
    joined: JoinResult

    def lines(self) -> list[str]:
        return [
            f"SPAN contracts with ra: {len(self.span.contracts)} ({self.span.stats.summary()})",
            f"Bhav rows parsed: {len(self.bhav.settlements)} ({self.bhav.stats.summary()})",
            f"Contracts matched to Bhav: {self.joined.matched}/{len(self.joined.contracts)}",
        ]


@dataclass
class RiskSession:
    """Caller-owned working set: contract book plus transient positions."""

    config: SpanConfig = field(default_factory=SpanConfig)
    book: ContractBook = field(default_factory=ContractBook)
    positions: list[Position] = field(default_factory=list)
    last_load: Optional[LoadSummary] = None

    def clear(self) -> None:
        self.book = ContractBook()
        self.positions = []
        self.last_load = None

    def load(self, span_document: Union[str, bytes], bhav_document: Union[str, bytes]) -> LoadSummary:
        """
        Parse both documents, join them and replace the working set.

        Raises:
            MalformedDocument / SchemaMismatch: The working set is cleared first
        """
        try:
            span = parse_span_document(
                span_document, portfolio_tags=self.config.parsing.portfolio_tags
            )
            bhav = parse_bhav_document(
                bhav_document,
                placeholder_option_types=self.config.parsing.placeholder_option_types,
            )
        except MaxSpanError as e:
            logger.error(f"Load failed: {e}")
            self.clear()
            raise

        joined = join(span.contracts, bhav.settlements)
        summary = LoadSummary(span=span, bhav=bhav, joined=joined)

        self.book = ContractBook(joined.contracts)
        self.positions = []
        self.last_load = summary
        logger.success(f"Loaded {len(self.book)} contracts")
        return summary

    def add_position(self, position: Position) -> None:
        self.positions.append(position)

    def set_positions(self, positions: Iterable[Position]) -> None:
        self.positions = list(positions)

    def remove_position(self, index: int) -> Position:
        return self.positions.pop(index)

    def position_rows(self) -> list[PositionRow]:
        return self.book.position_rows(self.positions)

    def calculate(self) -> PortfolioResult:
        if not any(c.scenario_values for c in self.book):
            logger.error("No ra arrays found in SPAN")
        return aggregate_portfolio(self.positions, self.book.by_key)

    def spreads(self) -> list[SpreadGroup]:
        return group_spreads(self.positions, self.book)
