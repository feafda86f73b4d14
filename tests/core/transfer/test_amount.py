"""
Tests for amount parsing and scaling.
"""

from decimal import Decimal

import pytest

from bridgeport.core.errors import ErrorKind, ValidationError
from bridgeport.core.transfer import amount_to_raw, parse_amount, raw_to_amount


class TestParseAmount:

    @pytest.mark.parametrize("text,expected", [("1", "1"), (" 0.5 ", "0.5"), ("0010.250", "10.250")])
    def test_plain_decimals(self, text, expected):
        assert parse_amount(text) == Decimal(expected)

    @pytest.mark.parametrize("text", ["", "   ", None, "-1", "1e18", "1,000", ".5", "5.", "abc", "0x10"])
    def test_rejects_non_plain_input(self, text):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(text)

        assert exc_info.value.kind == ErrorKind.INVALID_AMOUNT


class TestAmountToRaw:

    def test_scales_by_decimals(self):
        assert amount_to_raw("1.5", 6) == 1_500_000
        assert amount_to_raw("0.01", 18) == 10_000_000_000_000_000

    def test_truncates_excess_precision(self):
        assert amount_to_raw("1.2345678", 6) == 1_234_567

    def test_large_amounts_keep_every_digit(self):
        assert amount_to_raw("123456789012345678901234.5", 18) == 123456789012345678901234500000000000000000

    def test_sub_unit_amount_is_zero_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            amount_to_raw("0.0000000000000000001", 18)

        assert exc_info.value.kind == ErrorKind.ZERO_AMOUNT
        assert exc_info.value.message == "Amount must be > 0"

    def test_zero_is_zero_amount(self):
        with pytest.raises(ValidationError) as exc_info:
            amount_to_raw("0", 6)

        assert exc_info.value.kind == ErrorKind.ZERO_AMOUNT


class TestRawToAmount:

    def test_strips_trailing_zeros(self):
        assert raw_to_amount(1_500_000, 6) == "1.5"
        assert raw_to_amount(10**18, 18) == "1"

    def test_smallest_unit(self):
        assert raw_to_amount(1, 18) == "0.000000000000000001"
