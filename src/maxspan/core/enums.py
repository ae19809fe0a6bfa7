"""Instrument enums and sentinels shared by parsers, models and keys."""

from enum import Enum

# Month label for contracts whose expiry code cannot be parsed.
# It takes part in joins only with itself.
UNKNOWN_MONTH = "UNK"


class InstrumentType(str, Enum):
    """
    Tradable instrument kind.

    Values are the short labels used in exchange files and CSV exports.
    """

    FUTURE = "FUT"
    OPTION = "OPT"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: object) -> "InstrumentType":
        """Accept FUT/FUTURE/OPT/OPTION in any case."""
        if isinstance(raw, cls):
            return raw
        text = str(raw or "").strip().upper()
        if text in ("FUT", "FUTURE", "FUTURES"):
            return cls.FUTURE
        if text in ("OPT", "OPTION", "OPTIONS"):
            return cls.OPTION
        raise ValueError(f"Unknown instrument type: {raw!r}")


class OptionRight(str, Enum):
    """Option call/put flag as written in SPAN files."""

    CALL = "C"
    PUT = "P"
