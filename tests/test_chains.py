import pytest

from dyor_scan.scan.chains import (
    BNB,
    DEFAULT_DECIMALS,
    SOLANA,
    InvalidAddressError,
    classify_address,
    require_chain,
)

from conftest import BNB_CA, SOL_MINT


class TestClassifyAddress:
    def test_evm_address_is_bnb(self):
        assert classify_address(BNB_CA) == BNB
        assert classify_address("0x" + "AbCdEf0123" * 4) == BNB

    def test_base58_address_is_solana(self):
        assert classify_address(SOL_MINT) == SOLANA

    def test_surrounding_whitespace_is_ignored(self):
        assert classify_address(f"  {SOL_MINT}\n") == SOLANA

    @pytest.mark.parametrize("value", [
        None, 42, "", "   ", "not-an-address",
        "0x" + "ab" * 19,              # too short
        "0x" + "zz" * 20,              # not hex
        "0" * 40,                       # base58 has no zero
        "1" * 31,                       # too short for base58
        "1" * 45,                       # too long for base58
    ])
    def test_unrecognized_values(self, value):
        assert classify_address(value) is None

    def test_default_decimals(self):
        assert DEFAULT_DECIMALS == {BNB: 18, SOLANA: 9}


class TestRequireChain:
    def test_returns_trimmed_address_and_chain(self):
        assert require_chain(f" {BNB_CA} ") == (BNB_CA, BNB)

    def test_empty_input_is_rejected(self):
        with pytest.raises(InvalidAddressError, match="required"):
            require_chain("  ")

    def test_unrecognized_input_is_rejected(self):
        with pytest.raises(InvalidAddressError, match="Invalid address format"):
            require_chain("not-an-address")
