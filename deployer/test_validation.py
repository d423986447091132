#!/usr/bin/env python3
"""
Tests for parameter cleaning and type checks
"""

import pytest
from web3 import Web3

from deployer.models import ParamType
from deployer.validation import (
    clean_value,
    coerce,
    coerce_address,
    coerce_bytes,
    coerce_integer,
    coerce_many,
    coerce_string,
    is_blank,
    same_address,
)

CHECKSUMMED = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"


class TestAddress:
    """Address normalization"""

    def test_lowercase_is_checksummed(self):
        """Lowercase input is accepted and returned in checksum form"""
        assert coerce_address(CHECKSUMMED.lower()) == CHECKSUMMED

    def test_quotes_and_whitespace_are_stripped(self):
        """Hand-edited values often carry quotes or stray spaces"""
        assert coerce_address(f' "{CHECKSUMMED}" ') == CHECKSUMMED
        assert coerce_address(f"`{CHECKSUMMED}`") == CHECKSUMMED

    def test_bad_checksum_is_rejected(self):
        """Mixed case that does not match the checksum is malformed"""
        broken = "0x5AAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
        with pytest.raises(ValueError, match="checksum"):
            coerce_address(broken)

    def test_wrong_length_is_rejected(self):
        """Short or long hex is not an address"""
        with pytest.raises(ValueError):
            coerce_address("0x1234")
        with pytest.raises(ValueError):
            coerce_address("0x" + "1" * 42)

    def test_non_string_is_rejected(self):
        with pytest.raises(ValueError):
            coerce_address(1234)


class TestScalars:
    """Integer, string and bytes params"""

    def test_integer_forms(self):
        """Decimal and hex strings as well as ints are accepted"""
        assert coerce_integer("86400") == 86400
        assert coerce_integer(" 0x10 ") == 16
        assert coerce_integer(70) == 70

    def test_integer_rejects_garbage(self):
        with pytest.raises(ValueError):
            coerce_integer("seventy")
        with pytest.raises(ValueError):
            coerce_integer(True)

    def test_string_is_trimmed(self):
        assert coerce_string("  Global ") == "Global"
        with pytest.raises(ValueError):
            coerce_string(5)

    def test_bytes32(self):
        """A merkle root arrives as 0x-prefixed hex"""
        root = "0x" + "ab" * 32
        assert coerce_bytes(root) == bytes.fromhex("ab" * 32)

    def test_bytes_rejects_odd_length(self):
        with pytest.raises(ValueError):
            coerce_bytes("0xabc")

    def test_coerce_dispatches_on_type(self):
        assert coerce(ParamType.INTEGER, "5") == 5
        assert coerce(ParamType.ADDRESS, CHECKSUMMED.lower()) == CHECKSUMMED


class TestLists:
    """Comma-separated list params"""

    def test_each_item_is_validated(self):
        values = coerce_many(ParamType.ADDRESS, f"{CHECKSUMMED.lower()}, {'0x' + '1' * 40}")
        assert values == [CHECKSUMMED, "0x" + "1" * 40]

    def test_bad_item_is_named(self):
        """The failing position is part of the reason"""
        with pytest.raises(ValueError, match="item 1"):
            coerce_many(ParamType.ADDRESS, f"{CHECKSUMMED},nope")

    def test_empty_list_is_rejected(self):
        with pytest.raises(ValueError):
            coerce_many(ParamType.ADDRESS, " , ")


class TestHelpers:

    def test_clean_value(self):
        assert clean_value(" 'abc' ") == "abc"

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("   ")
        assert not is_blank("0x")

    def test_same_address_ignores_case(self):
        assert same_address(CHECKSUMMED, CHECKSUMMED.lower())
        assert not same_address(CHECKSUMMED, None)
        assert not same_address(CHECKSUMMED, Web3.to_checksum_address("0x" + "1" * 40))


if __name__ == "__main__":
    pytest.main([__file__])
