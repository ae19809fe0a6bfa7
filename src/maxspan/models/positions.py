"""
Pydantic Models for User Positions

Positions come from outside the process (typed in by a user or read from a
positions CSV), so they are validated with Pydantic instead of dataclasses.

Key patterns:
- Normalising validators: symbol uppercased, FUT/FUTURE/OPT/OPTION accepted
- Frozen models: a position is replaced, never edited in place
- Composite key derived the same way as for contracts and settlements
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType, OptionRight
from maxspan.core.keys import (
    ContractKey,
    ContractRightKey,
    contract_key,
    contract_right_key,
    normalize_symbol,
    parse_number,
)

_MONTH_KEY = re.compile(r"^[A-Z]{3}-\d{4}$")


class Position(BaseModel):
    """
    A user's intended holding in one contract.

    Attributes:
        symbol: Underlying symbol (normalised to uppercase, no whitespace)
        month_key: MMM-YYYY label (or UNK)
        instrument_type: FUTURE or OPTION
        strike: Strike price (ignored in the key for futures)
        lots: Signed lot count, positive long, negative short, 0 inert
        option_right: Optional call/put flag; when given, lookups match the
            exact call or put contract instead of the first one at the strike
    """

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1, description="Underlying symbol")
    month_key: str = Field(description="MMM-YYYY month label")
    instrument_type: InstrumentType = InstrumentType.FUTURE
    strike: float = Field(default=0.0, ge=0, description="Strike price")
    lots: int = Field(default=0, description="Signed lot count")
    option_right: Optional[OptionRight] = None

    @field_validator("symbol", mode="before")
    @classmethod
    def normalize_symbol_field(cls, v):
        return normalize_symbol(v)

    @field_validator("month_key", mode="before")
    @classmethod
    def validate_month_key(cls, v):
        text = str(v or "").strip().upper()
        if text != UNKNOWN_MONTH and not _MONTH_KEY.match(text):
            raise ValueError(f"month_key must look like JAN-2025, got {v!r}")
        return text

    @field_validator("instrument_type", mode="before")
    @classmethod
    def parse_instrument_type(cls, v):
        return InstrumentType.parse(v)

    @field_validator("strike", mode="before")
    @classmethod
    def parse_strike(cls, v):
        if isinstance(v, (int, float)):
            return v
        value = parse_number(v)
        return 0.0 if value is None else value

    @field_validator("lots", mode="before")
    @classmethod
    def parse_lots(cls, v):
        if isinstance(v, int):
            return v
        value = parse_number(v)
        if value is None:
            return 0
        if value != int(value):
            raise ValueError(f"lots must be a whole number, got {v!r}")
        return int(value)

    @field_validator("option_right", mode="before")
    @classmethod
    def parse_option_right(cls, v):
        text = str(v or "").strip().upper()
        return text or None

    @property
    def key(self) -> ContractKey:
        return contract_key(self.symbol, self.month_key, self.instrument_type, self.strike)

    @property
    def lookup_key(self) -> ContractKey | ContractRightKey:
        """Key used against a contract index; includes call/put when one was given."""
        if self.instrument_type is InstrumentType.OPTION and self.option_right is not None:
            return contract_right_key(self.key, self.option_right.value)
        return self.key

    @property
    def is_inert(self) -> bool:
        return self.lots == 0
