"""
Unit tests for composite keys and field normalisation.
"""

import pytest

from maxspan.core.enums import UNKNOWN_MONTH, InstrumentType
from maxspan.core.keys import (
    contract_key,
    format_key,
    month_key_from_expiry_code,
    month_key_from_settlement_expiry,
    month_sort_key,
    normalize_symbol,
    parse_number,
)


class TestNormalizeSymbol:
    def test_uppercases_and_strips_whitespace(self):
        assert normalize_symbol(" nifty bank\t") == "NIFTYBANK"

    def test_none_is_empty(self):
        assert normalize_symbol(None) == ""


class TestParseNumber:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1,234.50", 1234.5),
            ("  -20 ", -20.0),
            ("0", 0.0),
            (7, 7.0),
            ("1e3", 1000.0),
        ],
    )
    def test_numeric_text(self, raw, expected):
        assert parse_number(raw) == expected

    @pytest.mark.parametrize("raw", ["", "  ", "-", "abc", None, "nan", "inf"])
    def test_non_numeric_is_none(self, raw):
        assert parse_number(raw) is None


class TestMonthKeys:
    @pytest.mark.parametrize(
        "code,expected",
        [
            ("20250130", "JAN-2025"),
            ("20241226", "DEC-2024"),
            (" 20250828 ", "AUG-2025"),
        ],
    )
    def test_expiry_code(self, code, expected):
        assert month_key_from_expiry_code(code) == expected

    @pytest.mark.parametrize("code", ["", "2025013", "202501301", "20251301", "20250001", "2025-01-30", None])
    def test_bad_expiry_code(self, code):
        assert month_key_from_expiry_code(code) is None

    @pytest.mark.parametrize(
        "expiry,expected",
        [
            ("30-Jan-2025", "JAN-2025"),
            ("27 MAR 2025", "MAR-2025"),
            ("26-dec-2024", "DEC-2024"),
        ],
    )
    def test_settlement_expiry(self, expiry, expected):
        assert month_key_from_settlement_expiry(expiry) == expected

    @pytest.mark.parametrize("expiry", ["", "30-01-2025", "Jan", "2025", None])
    def test_bad_settlement_expiry(self, expiry):
        assert month_key_from_settlement_expiry(expiry) is None

    def test_month_sort_is_chronological_with_unknown_last(self):
        months = ["FEB-2025", UNKNOWN_MONTH, "DEC-2024", "JAN-2025"]
        assert sorted(months, key=month_sort_key) == ["DEC-2024", "JAN-2025", "FEB-2025", UNKNOWN_MONTH]


class TestContractKey:
    def test_future_always_keys_on_zero_strike(self):
        key = contract_key("xyz", "JAN-2025", InstrumentType.FUTURE, 123.45)
        assert key == ("XYZ", "JAN-2025", "FUT", "0.00")

    def test_option_strike_two_decimals(self):
        key = contract_key("XYZ", "JAN-2025", InstrumentType.OPTION, 100)
        assert key == ("XYZ", "JAN-2025", "OPT", "100.00")

    def test_missing_month_is_unknown(self):
        assert contract_key("XYZ", None, InstrumentType.FUTURE, 0)[1] == UNKNOWN_MONTH

    def test_idempotent(self):
        args = ("XYZ", "JAN-2025", InstrumentType.OPTION, 24500.5)
        assert contract_key(*args) == contract_key(*args)

    def test_injective_over_distinct_tuples(self):
        tuples = [
            ("XYZ", "JAN-2025", InstrumentType.FUTURE, 0),
            ("XYZ", "FEB-2025", InstrumentType.FUTURE, 0),
            ("ABC", "JAN-2025", InstrumentType.FUTURE, 0),
            ("XYZ", "JAN-2025", InstrumentType.OPTION, 0),
            ("XYZ", "JAN-2025", InstrumentType.OPTION, 100),
            ("XYZ", "JAN-2025", InstrumentType.OPTION, 100.5),
            ("XYZ", UNKNOWN_MONTH, InstrumentType.FUTURE, 0),
        ]
        keys = {contract_key(*t) for t in tuples}
        assert len(keys) == len(tuples)

    def test_format_key(self):
        assert format_key(("XYZ", "JAN-2025", "FUT", "0.00")) == "XYZ|JAN-2025|FUT|0.00"


class TestInstrumentType:
    @pytest.mark.parametrize("raw", ["FUT", "fut", "FUTURE", InstrumentType.FUTURE])
    def test_parse_future(self, raw):
        assert InstrumentType.parse(raw) is InstrumentType.FUTURE

    @pytest.mark.parametrize("raw", ["OPT", "option", " Opt "])
    def test_parse_option(self, raw):
        assert InstrumentType.parse(raw) is InstrumentType.OPTION

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError):
            InstrumentType.parse("SWAP")
