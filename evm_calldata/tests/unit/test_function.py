"""
Unit tests for function signatures, selectors and call data

Run with:
    pytest evm_calldata/tests/unit/test_function.py -v
"""

import pytest

from evm_calldata.abi.function import AbiFunction
from evm_calldata.abi.parser import AbiParser, StateMutability
from evm_calldata.utils.exceptions import AbiParseError, ArgumentCountMismatch

RECIPIENT = "0x" + "00" * 19 + "01"


@pytest.fixture
def abi(token_abi):
    return AbiParser.from_items(token_abi)


class TestSignature:
    """Tests for canonical signatures and selectors"""

    def test_transfer(self, abi):
        transfer = AbiFunction.from_item(abi.function("transfer")[0])
        assert transfer.signature() == "transfer(address,uint256)"
        assert transfer.selector() == "0xa9059cbb"

    def test_balance_of(self, abi):
        balance_of = AbiFunction.from_item(abi.function("balanceOf")[0])
        assert balance_of.selector() == "0x70a08231"
        assert balance_of.is_read_only

    def test_overloads_have_distinct_selectors(self, abi):
        selectors = {
            AbiFunction.from_item(item).signature(): AbiFunction.from_item(item).selector()
            for item in abi.function("mint")
        }
        assert selectors == {
            "mint(uint256)": "0xa0712d68",
            "mint(address,uint256)": "0x40c10f19",
        }

    def test_tuple_signature(self, abi):
        submit = AbiFunction.from_item(abi.function("submitOrders")[0])
        assert submit.signature() == "submitOrders((address,uint256,string)[],bytes32)"
        assert len(submit.selector()) == 10

    def test_signature_uses_canonical_integer_width(self):
        function = AbiFunction.from_item(AbiParser.from_items([{
            "type": "function",
            "name": "set",
            "inputs": [{"name": "v", "type": "uint"}, {"name": "w", "type": "int[]"}],
        }]).functions[0])
        assert function.signature() == "set(uint256,int256[])"

    def test_default_mutability(self):
        function = AbiFunction.from_item(AbiParser.from_items([
            {"type": "function", "name": "poke"}
        ]).functions[0])
        assert function.state_mutability == StateMutability.NONPAYABLE
        assert not function.is_read_only


class TestFromItem:
    """Tests for building functions from ABI items"""

    def test_rejects_non_function(self, abi):
        with pytest.raises(AbiParseError):
            AbiFunction.from_item(abi.constructor)

    def test_rejects_unnamed(self):
        item = AbiParser.from_items([{"type": "function", "inputs": []}]).functions[0]
        with pytest.raises(AbiParseError):
            AbiFunction.from_item(item)


class TestEncodeCall:
    """Tests for full call data"""

    def test_transfer_call(self, abi):
        transfer = AbiFunction.from_item(abi.function("transfer")[0])
        calldata = transfer.encode_call([RECIPIENT, 1000])

        assert calldata == (
            "0xa9059cbb"
            + format(1, "064x")
            + format(1000, "064x")
        )

    def test_encode_parameters_omits_selector(self, abi):
        transfer = AbiFunction.from_item(abi.function("transfer")[0])
        assert transfer.encode_parameters([RECIPIENT, 1000]) == "0x" + format(1, "064x") + format(1000, "064x")

    def test_no_arguments(self):
        function = AbiFunction.from_item(AbiParser.from_items([
            {"type": "function", "name": "totalSupply", "stateMutability": "view"}
        ]).functions[0])
        assert function.encode_call([]) == function.selector()
        assert function.selector() == "0x18160ddd"

    def test_argument_count(self, abi):
        transfer = AbiFunction.from_item(abi.function("transfer")[0])
        with pytest.raises(ArgumentCountMismatch):
            transfer.encode_call([RECIPIENT])
