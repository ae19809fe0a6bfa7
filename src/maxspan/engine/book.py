"""
Contract Book

Read-only query surface over one load's joined contracts: composite-key
lookup, month/symbol lists for pickers, free-text filtering and the
per-position row figures (close, open interest, approximate impact).
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from maxspan.core.enums import InstrumentType
from maxspan.core.keys import month_sort_key
from maxspan.core.models import Contract
from maxspan.engine.join import ContractIndex, index_contracts
from maxspan.models.positions import Position


@dataclass(slots=True, frozen=True)
class PositionRow:
    """Figures shown next to a position before the portfolio is aggregated."""

    position: Position
    contract: Optional[Contract]

    @property
    def close(self) -> Optional[float]:
        return self.contract.settlement_price if self.contract else None

    @property
    def open_interest(self) -> Optional[float]:
        return self.contract.open_interest if self.contract else None

    @property
    def approx_impact(self) -> Optional[float]:
        """worst_absolute_value * |lots|; None when unmatched or inert."""
        if self.contract is None or self.position.is_inert or not self.contract.scenario_values:
            return None
        return self.contract.worst_absolute_value * abs(self.position.lots)


class ContractBook:
    """Joined contracts for one load, indexed by composite key."""

    def __init__(self, contracts: Iterable[Contract] = ()):
        self.contracts: list[Contract] = list(contracts)
        self.by_key: ContractIndex = index_contracts(self.contracts)

    def __len__(self) -> int:
        return len(self.contracts)

    def __iter__(self):
        return iter(self.contracts)

    def get(self, key: tuple) -> Optional[Contract]:
        return self.by_key.get(key)

    def find(self, position: Position) -> Optional[Contract]:
        return self.by_key.get(position.lookup_key)

    def months(self) -> list[str]:
        """Distinct month labels, chronological, unknown last."""
        return sorted({c.month_key for c in self.contracts if c.month_key}, key=month_sort_key)

    def symbols(self) -> list[str]:
        return sorted({c.symbol for c in self.contracts if c.symbol})

    def filter(
        self,
        search: str = "",
        month: Optional[str] = None,
        instrument_type: Optional[InstrumentType] = None,
    ) -> list[Contract]:
        """
        Contracts matching a month, a type and a case-insensitive search over
        symbol, month, type, strike (options), close and open interest.
        """
        query = (search or "").strip().lower()
        out = []
        for c in self.contracts:
            if month and c.month_key != month:
                continue
            if instrument_type is not None and c.instrument_type is not instrument_type:
                continue
            if query and query not in _haystack(c):
                continue
            out.append(c)
        return out

    def position_rows(self, positions: Iterable[Position]) -> list[PositionRow]:
        return [PositionRow(position=p, contract=self.find(p)) for p in positions]


def _haystack(c: Contract) -> str:
    parts = [
        c.symbol,
        c.month_key,
        c.instrument_type.label,
        _num_text(c.strike) if c.instrument_type is InstrumentType.OPTION else "",
        _num_text(c.settlement_price) if c.settlement_price is not None else "",
        _num_text(c.open_interest) if c.open_interest is not None else "",
    ]
    return " ".join(parts).lower()


def _num_text(value: float) -> str:
    # 100.0 -> "100", 100.25 -> "100.25"
    return f"{value:g}" if value == int(value) else repr(value)
