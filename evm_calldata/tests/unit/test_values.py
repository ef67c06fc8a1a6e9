"""
Unit tests for host value coercion

Run with:
    pytest evm_calldata/tests/unit/test_values.py -v
"""

import pytest

from evm_calldata.abi.types import parse_type
from evm_calldata.abi.values import (
    BoolValue,
    BytesValue,
    CompositeValue,
    IntegerValue,
    TextValue,
    describe,
    to_encodable,
)
from evm_calldata.utils.exceptions import ArgumentCountMismatch, EncodingFailed

ADDRESS = "0x" + "ab" * 20


class TestScalarCoercion:
    """Tests for integers, booleans, addresses and byte strings"""

    @pytest.mark.parametrize("raw,expected", [
        (5, 5),
        ("42", 42),
        (" 7 ", 7),
        ("0x1f", 31),
        ("0X1F", 31),
        ("-12", -12),
        ("-0x10", -16),
    ])
    def test_integer(self, raw, expected):
        assert to_encodable(parse_type("int256"), raw) == IntegerValue(expected)

    @pytest.mark.parametrize("raw", [
        True, 1.5, "12abc", "0xzz", None, b"\x01",
        "1_000", "0x_ff", "\u0663", "+5", "",
    ])
    def test_integer_rejects(self, raw):
        with pytest.raises(EncodingFailed) as exc_info:
            to_encodable(parse_type("uint256"), raw)
        assert exc_info.value.details["type"] == "uint256"

    @pytest.mark.parametrize("raw,expected", [
        (True, True), (False, False), ("true", True), ("FALSE", False),
    ])
    def test_bool(self, raw, expected):
        assert to_encodable(parse_type("bool"), raw) == BoolValue(expected)

    @pytest.mark.parametrize("raw", [1, 0, "yes", None])
    def test_bool_rejects(self, raw):
        with pytest.raises(EncodingFailed):
            to_encodable(parse_type("bool"), raw)

    def test_address_from_hex(self):
        assert to_encodable(parse_type("address"), ADDRESS) == BytesValue(b"\xab" * 20)

    def test_address_from_bytes(self):
        assert to_encodable(parse_type("address"), b"\x01" * 20) == BytesValue(b"\x01" * 20)

    @pytest.mark.parametrize("raw", ["0x1234", "0x" + "zz" * 20, 1234])
    def test_address_rejects(self, raw):
        with pytest.raises(EncodingFailed):
            to_encodable(parse_type("address"), raw)

    def test_bytes_from_hex(self):
        assert to_encodable(parse_type("bytes"), "0xdeadbeef") == BytesValue(b"\xde\xad\xbe\xef")
        assert to_encodable(parse_type("bytes4"), "deadbeef") == BytesValue(b"\xde\xad\xbe\xef")

    def test_bytes_from_bytearray(self):
        assert to_encodable(parse_type("bytes"), bytearray(b"ab")) == BytesValue(b"ab")

    def test_bytes_rejects_malformed_hex(self):
        with pytest.raises(EncodingFailed):
            to_encodable(parse_type("bytes"), "0xabc")

    def test_string(self):
        assert to_encodable(parse_type("string"), "dave") == TextValue("dave")
        with pytest.raises(EncodingFailed):
            to_encodable(parse_type("string"), b"dave")

    def test_string_rejects_lone_surrogate(self):
        with pytest.raises(EncodingFailed) as exc_info:
            to_encodable(parse_type("string"), "\ud800")
        assert exc_info.value.details["type"] == "string"

    def test_encodable_values_pass_through(self):
        """Test already-tagged values are not re-coerced"""
        value = TextValue("not a number")
        assert to_encodable(parse_type("uint256"), value) is value


class TestCompositeCoercion:
    """Tests for arrays and tuples"""

    def test_array(self):
        assert to_encodable(parse_type("uint8[]"), [1, "2"]) == CompositeValue(
            (IntegerValue(1), IntegerValue(2))
        )

    def test_nested_array(self):
        value = to_encodable(parse_type("bool[][]"), [[True], []])
        assert value == CompositeValue((CompositeValue((BoolValue(True),)), CompositeValue(())))

    def test_array_rejects_scalar(self):
        with pytest.raises(EncodingFailed):
            to_encodable(parse_type("uint8[]"), 5)

    def test_tuple_from_sequence(self):
        tuple_type = parse_type("tuple", [
            {"name": "id", "type": "uint256"},
            {"name": "label", "type": "string"},
        ])
        assert to_encodable(tuple_type, (1, "x")) == CompositeValue(
            (IntegerValue(1), TextValue("x"))
        )

    def test_tuple_from_mapping(self):
        """Test mappings are ordered by component declaration, not key order"""
        tuple_type = parse_type("tuple", [
            {"name": "id", "type": "uint256"},
            {"name": "label", "type": "string"},
        ])
        value = to_encodable(tuple_type, {"label": "x", "id": 1})
        assert value == CompositeValue((IntegerValue(1), TextValue("x")))

    def test_tuple_missing_field(self):
        tuple_type = parse_type("tuple", [
            {"name": "id", "type": "uint256"},
            {"name": "label", "type": "string"},
        ])
        with pytest.raises(EncodingFailed) as exc_info:
            to_encodable(tuple_type, {"id": 1})
        assert "label" in str(exc_info.value)

    def test_tuple_wrong_arity(self):
        tuple_type = parse_type("tuple", [{"name": "id", "type": "uint256"}])
        with pytest.raises(ArgumentCountMismatch) as exc_info:
            to_encodable(tuple_type, [1, 2])
        assert exc_info.value.expected == 1
        assert exc_info.value.got == 2

    @pytest.mark.parametrize("names", [("", ""), ("a", ""), ("a", "a")])
    def test_tuple_mapping_needs_unique_names(self, names):
        """Test unnamed or repeated fields only accept positional values"""
        tuple_type = parse_type("tuple", [
            {"name": names[0], "type": "uint256"},
            {"name": names[1], "type": "uint256"},
        ])
        with pytest.raises(EncodingFailed) as exc_info:
            to_encodable(tuple_type, {name: 5 for name in names})
        assert "list of values" in str(exc_info.value)

        assert to_encodable(tuple_type, [5, 6]) == CompositeValue((IntegerValue(5), IntegerValue(6)))


class TestDescribe:
    """Tests for value descriptions in error messages"""

    def test_encodable(self):
        assert describe(IntegerValue(1)) == "IntegerValue"

    def test_truncates_long_values(self):
        text = describe("x" * 200)
        assert text.startswith("str ")
        assert text.endswith("...")
        assert len(text) < 80
