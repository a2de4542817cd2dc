"""Tests for address and amount validation."""
from decimal import Decimal

import pytest

from invoiceflow.utils.validation import format_amount, format_usd, is_valid_address, parse_amount

BASE58 = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"


class TestIsValidAddress:

    def test_known_legacy_address(self):
        assert is_valid_address("1BoatSLRHtKNngkdXEeobR76b53LETtpyT") is True

    def test_p2sh_address(self):
        assert is_valid_address("3J98t1WpEZ73CNmQviecrnyiWrnqRhWNLy") is True

    def test_segwit_address(self):
        assert is_valid_address("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq") is True

    def test_surrounding_whitespace_is_trimmed(self):
        assert is_valid_address("  1BoatSLRHtKNngkdXEeobR76b53LETtpyT \n") is True

    def test_length_13_rejected(self):
        assert is_valid_address("bc1" + "q" * 10) is False

    def test_length_14_segwit_accepted(self):
        assert is_valid_address("bc1" + "q" * 11) is True

    def test_length_91_rejected(self):
        assert is_valid_address("bc1" + "q" * 88) is False

    def test_34_char_base58_accepted(self):
        address = "1" + BASE58[:33]
        assert len(address) == 34
        assert is_valid_address(address) is True

    @pytest.mark.parametrize("bad_char", ["0", "O", "I", "l"])
    def test_34_char_with_excluded_character_rejected(self, bad_char):
        address = "1" + BASE58[:32] + bad_char
        assert len(address) == 34
        assert is_valid_address(address) is False

    def test_legacy_too_short_rejected(self):
        assert is_valid_address("1" + "A" * 24) is False

    def test_legacy_too_long_rejected(self):
        assert is_valid_address("3" + "A" * 35) is False

    def test_segwit_uppercase_rejected(self):
        assert is_valid_address("bc1QAR0SRRR7XFKVY5L643LYDNW9RE59GTZZWF5MDQ") is False

    def test_unknown_prefix_rejected(self):
        assert is_valid_address("tb1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq") is False

    def test_empty_rejected(self):
        assert is_valid_address("   ") is False


class TestParseAmount:

    def test_plain_amount(self):
        assert parse_amount("0.0015") == Decimal("0.0015")

    def test_whole_number(self):
        assert parse_amount("2") == Decimal("2")

    def test_trims_whitespace(self):
        assert parse_amount(" 0.5 ") == Decimal("0.5")

    def test_supply_cap_accepted(self):
        assert parse_amount("21000000") == Decimal("21000000")

    def test_above_supply_cap_rejected(self):
        assert parse_amount("21000000.00000001") is None

    def test_eight_decimals_accepted(self):
        assert parse_amount("0.00000001") == Decimal("0.00000001")

    @pytest.mark.parametrize("text", [
        "0",
        "0.00000000",
        "1.123456789",
        "-1",
        "+1",
        "1e3",
        "1.",
        ".5",
        "1,5",
        "",
        "abc",
        "NaN",
        "Infinity",
        "١٢",
    ])
    def test_rejected(self, text):
        assert parse_amount(text) is None


class TestFormatAmount:

    @pytest.mark.parametrize("value,expected", [
        (Decimal("0.00150000"), "0.0015"),
        (Decimal("1.0"), "1"),
        (Decimal("21000000"), "21000000"),
        (Decimal("0.00000001"), "0.00000001"),
        (Decimal("10"), "10"),
        (Decimal("100.10"), "100.1"),
    ])
    def test_canonical_form(self, value, expected):
        assert format_amount(value) == expected

    @pytest.mark.parametrize("text", ["0.00150000", "1", "21000000", "0.1", "007.50", "3.14159265"])
    def test_canonical_form_is_idempotent(self, text):
        once = format_amount(parse_amount(text))
        assert format_amount(parse_amount(once)) == once


class TestFormatUsd:

    def test_two_decimals(self):
        assert format_usd(Decimal("0.0015") * Decimal("90000")) == "135.00"

    def test_rounds_half_up(self):
        assert format_usd(Decimal("1.005")) == "1.01"
