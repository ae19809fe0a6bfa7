"""
Contract and Settlement Models

Internal records built by the parsers and joined by the join engine.

Key patterns:
- dataclass(slots=True, frozen=True): records are rebuilt on every load and
  never mutated; enrichment produces a new record via dataclasses.replace
- Derived figures (worst absolute value, composite keys) are properties so
  they always follow the current scenario array
"""

from dataclasses import dataclass, field
from typing import Optional

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType
from maxspan.core.keys import ContractKey, ContractRightKey, contract_key, contract_right_key


@dataclass(slots=True, frozen=True)
class Contract:
    """
    Tradable instrument-month(-strike-type) from a SPAN risk file.

    Attributes:
        symbol: Normalised underlying code (uppercase, no whitespace)
        month_key: MMM-YYYY label, or UNK when the expiry code is unusable
        instrument_type: FUTURE or OPTION
        strike: Strike price (0 for futures)
        scenario_values: Ordered risk-array values, one per stress scenario
        option_right: "C"/"P" for options, "" for futures
        expiry_code: Raw YYYYMMDD expiry code from the file
        price_scan: Price scan range from scanRate/priceScan, if present
        settlement_price: Bhav close, None until joined
        open_interest: Bhav open interest (lots), None until joined
    """

    symbol: str
    month_key: str
    instrument_type: InstrumentType
    strike: float
    scenario_values: tuple[float, ...]
    option_right: str = ""
    expiry_code: str = ""
    price_scan: Optional[float] = None
    settlement_price: Optional[float] = None
    open_interest: Optional[float] = None

    @property
    def worst_absolute_value(self) -> float:
        """Largest magnitude across the scenario array (0 when empty)."""
        return max((abs(v) for v in self.scenario_values), default=0.0)

    @property
    def key(self) -> ContractKey:
        return contract_key(self.symbol, self.month_key, self.instrument_type, self.strike)

    @property
    def right_key(self) -> ContractRightKey:
        """Composite key including the call/put flag (dedup identity)."""
        return contract_right_key(self.key, self.option_right)

    @property
    def is_matched(self) -> bool:
        """True once a settlement row has been joined onto this contract."""
        return self.settlement_price is not None or self.open_interest is not None

    def __repr__(self) -> str:
        return (
            f"Contract({self.symbol} {self.month_key} {self.instrument_type.label}"
            f" {self.strike:.2f}{self.option_right}, "
            f"scenarios={len(self.scenario_values)}, worst={self.worst_absolute_value:.2f})"
        )


@dataclass(slots=True, frozen=True)
class Settlement:
    """
    One Bhav row: closing price and open interest for a contract.

    Attributes:
        symbol: Normalised symbol
        month_key: MMM-YYYY label derived from the expiry text
        instrument_type: OPTION when the option type column is filled
        strike: Strike price (0 when absent)
        close: Closing/settlement price, None when not numeric
        open_interest: Open interest in lots, None when not numeric
        instrument_name: Raw "Instrument Name" cell
        expiry_raw: Raw "Expiry Date" cell
        option_type: Raw "Option Type" cell
    """

    symbol: str
    month_key: str
    instrument_type: InstrumentType
    strike: float = 0.0
    close: Optional[float] = None
    open_interest: Optional[float] = None
    instrument_name: str = ""
    expiry_raw: str = ""
    option_type: str = ""

    @property
    def key(self) -> ContractKey:
        return contract_key(self.symbol, self.month_key, self.instrument_type, self.strike)


@dataclass(slots=True)
class ParseStats:
    """Per-load counters shared by both parsers."""

    seen: int = 0
    parsed: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    def summary(self) -> str:
        reasons = ", ".join(f"{k}={v}" for k, v in sorted(self.skipped.items())) or "none"
        return f"seen={self.seen}, parsed={self.parsed}, skipped={self.skipped_total} ({reasons})"


__all__ = ["Contract", "Settlement", "ParseStats", "InstrumentType", "UNKNOWN_MONTH"]
