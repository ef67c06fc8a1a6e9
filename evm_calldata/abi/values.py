"""
Encodable value tree

Encoder inputs are a closed set of tagged variants mirroring the shape of a
type descriptor: four scalar kinds and one composite kind for tuples and
arrays. Host values (ints, hex strings, lists, dicts from a form or a JSON-RPC
request) are converted with to_encodable(), guided by the declared type.
"""

import re
from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

from eth_utils import decode_hex, is_hex_address

from .types import (
    AbiType,
    AddressType,
    BoolType,
    BytesType,
    DynamicArrayType,
    FixedArrayType,
    FixedBytesType,
    IntType,
    StringType,
    TupleType,
    UIntType,
)
from ..utils.exceptions import ArgumentCountMismatch, EncodingFailed

INTEGER_TEXT = re.compile(r"-?(0[xX][0-9a-fA-F]+|[0-9]+)")


@dataclass(frozen=True)
class IntegerValue:
    value: int


@dataclass(frozen=True)
class BoolValue:
    value: bool


@dataclass(frozen=True)
class BytesValue:
    value: bytes


@dataclass(frozen=True)
class TextValue:
    value: str


@dataclass(frozen=True)
class CompositeValue:
    items: Tuple["EncodableValue", ...]

    def __len__(self) -> int:
        return len(self.items)


EncodableValue = Union[IntegerValue, BoolValue, BytesValue, TextValue, CompositeValue]

ENCODABLE_TYPES = (IntegerValue, BoolValue, BytesValue, TextValue, CompositeValue)


def describe(value: Any) -> str:
    """Short description of a value for error messages"""
    if isinstance(value, ENCODABLE_TYPES):
        return type(value).__name__
    text = repr(value)
    if len(text) > 64:
        text = text[:61] + "..."
    return f"{type(value).__name__} {text}"


def to_encodable(abi_type: AbiType, raw: Any) -> EncodableValue:
    """
    Convert a host value into an EncodableValue for the given type.

    Values that already are EncodableValues are returned unchanged; the
    encoder validates their shape.

    Raises:
        EncodingFailed: If the host value cannot represent the type
        ArgumentCountMismatch: If a positional tuple value has the wrong arity
    """
    if isinstance(raw, ENCODABLE_TYPES):
        return raw

    if isinstance(abi_type, (UIntType, IntType)):
        return IntegerValue(_coerce_integer(abi_type, raw))

    if isinstance(abi_type, BoolType):
        return BoolValue(_coerce_bool(raw))

    if isinstance(abi_type, AddressType):
        return BytesValue(_coerce_address(raw))

    if isinstance(abi_type, (BytesType, FixedBytesType)):
        return BytesValue(_coerce_bytes(abi_type, raw))

    if isinstance(abi_type, StringType):
        if not isinstance(raw, str):
            raise EncodingFailed(f"Expected text for string, got {describe(raw)}", abi_type="string")
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingFailed(f"String is not valid UTF-8: {e.reason}", abi_type="string", cause=e)
        return TextValue(raw)

    if isinstance(abi_type, (DynamicArrayType, FixedArrayType)):
        if not isinstance(raw, (list, tuple)):
            raise EncodingFailed(
                f"Expected a list for {abi_type.canonical()}, got {describe(raw)}",
                abi_type=abi_type.canonical()
            )
        return CompositeValue(tuple(to_encodable(abi_type.element, item) for item in raw))

    if isinstance(abi_type, TupleType):
        return _coerce_tuple(abi_type, raw)

    raise EncodingFailed(f"Unsupported type {abi_type!r}")


def _coerce_integer(abi_type: AbiType, raw: Any) -> int:
    # bool is an int subclass but never a valid integer argument
    if isinstance(raw, bool):
        raise EncodingFailed(
            f"Expected an integer for {abi_type.canonical()}, got bool",
            abi_type=abi_type.canonical()
        )
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        # ASCII digits only; int() alone also takes "1_000" and non-Latin digits
        if not INTEGER_TEXT.fullmatch(text):
            raise EncodingFailed(
                f"Malformed integer text {raw!r} for {abi_type.canonical()}",
                abi_type=abi_type.canonical()
            )
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        return int(text, 10)
    raise EncodingFailed(
        f"Expected an integer for {abi_type.canonical()}, got {describe(raw)}",
        abi_type=abi_type.canonical()
    )


def _coerce_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise EncodingFailed(f"Expected a boolean, got {describe(raw)}", abi_type="bool")


def _coerce_address(raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw)
    if isinstance(raw, str):
        if not is_hex_address(raw):
            raise EncodingFailed(
                f"Address must be 20 bytes of hex, got {raw!r}",
                abi_type="address"
            )
        return decode_hex(raw)
    raise EncodingFailed(f"Expected an address, got {describe(raw)}", abi_type="address")


def _coerce_bytes(abi_type: AbiType, raw: Any) -> bytes:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw)
    if isinstance(raw, str):
        try:
            return decode_hex(raw)
        except ValueError:
            raise EncodingFailed(
                f"Malformed hex for {abi_type.canonical()}: {raw!r}",
                abi_type=abi_type.canonical()
            )
    raise EncodingFailed(
        f"Expected bytes or hex text for {abi_type.canonical()}, got {describe(raw)}",
        abi_type=abi_type.canonical()
    )


def _coerce_tuple(abi_type: TupleType, raw: Any) -> CompositeValue:
    components = abi_type.components

    if isinstance(raw, Mapping):
        names = [c.name for c in components]
        if not all(names) or len(set(names)) != len(names):
            raise EncodingFailed(
                f"Tuple {abi_type.canonical()} has unnamed or repeated fields; pass a list of values instead",
                abi_type=abi_type.canonical()
            )
        missing = [c.name for c in components if c.name not in raw]
        if missing:
            raise EncodingFailed(
                f"Missing tuple field(s) {', '.join(missing)}",
                abi_type=abi_type.canonical()
            )
        return CompositeValue(tuple(to_encodable(c.type, raw[c.name]) for c in components))

    if isinstance(raw, (list, tuple)):
        if len(raw) != len(components):
            raise ArgumentCountMismatch(
                len(components),
                len(raw),
                message=f"Tuple {abi_type.canonical()} expects {len(components)} values, got {len(raw)}"
            )
        return CompositeValue(tuple(
            to_encodable(component.type, item)
            for component, item in zip(components, raw)
        ))

    raise EncodingFailed(
        f"Expected a list or mapping for {abi_type.canonical()}, got {describe(raw)}",
        abi_type=abi_type.canonical()
    )
