"""
Contract ABI encoder

Turns typed arguments into the EVM calldata layout:

- static values are written in place as one or more 32-byte words
- dynamic values (string, bytes, T[], and composites containing them) get a
  32-byte offset in the head of their frame; their payload goes to the tail
- offsets are relative to the start of the frame that holds them, so a frame
  never needs to know where its parent places it

A "frame" is a tuple's components, an array's elements or a whole parameter
list. All functions here are pure and hold no shared state.
"""

import logging
from functools import lru_cache
from typing import Any, List, Sequence

from .types import (
    AbiType,
    AddressType,
    BoolType,
    BytesType,
    DynamicArrayType,
    FixedArrayType,
    FixedBytesType,
    IntType,
    Parameter,
    StringType,
    TupleType,
    UIntType,
)
from .values import (
    BoolValue,
    BytesValue,
    CompositeValue,
    EncodableValue,
    IntegerValue,
    TextValue,
    describe,
    to_encodable,
)
from ..utils.common import to_hex
from ..utils.exceptions import ArgumentCountMismatch, CalldataError, EncodingFailed

LOG = logging.getLogger(__name__)

WORD_SIZE = 32
UINT256_CEILING = 1 << 256


@lru_cache(maxsize=1024)
def is_dynamic(abi_type: AbiType) -> bool:
    """True when the encoded size of the type depends on the value"""
    if isinstance(abi_type, (StringType, BytesType, DynamicArrayType)):
        return True
    if isinstance(abi_type, FixedArrayType):
        return is_dynamic(abi_type.element)
    if isinstance(abi_type, TupleType):
        return any(is_dynamic(c.type) for c in abi_type.components)
    return False


@lru_cache(maxsize=1024)
def static_size(abi_type: AbiType) -> int:
    """Encoded size in bytes of a static type"""
    if isinstance(abi_type, FixedArrayType):
        return abi_type.size * static_size(abi_type.element)
    if isinstance(abi_type, TupleType):
        return sum(static_size(c.type) for c in abi_type.components)
    return WORD_SIZE


def head_size(types: Sequence[AbiType]) -> int:
    """Size of a frame's head: an offset word per dynamic slot, inline size otherwise"""
    return sum(WORD_SIZE if is_dynamic(t) else static_size(t) for t in types)


def encode_uint256(value: int) -> bytes:
    """Big-endian 32-byte word of a non-negative integer below 2**256"""
    return value.to_bytes(WORD_SIZE, "big")


def _expect(abi_type: AbiType, value: Any, kind: type) -> Any:
    if not isinstance(value, kind):
        raise EncodingFailed(
            f"Expected {kind.__name__} for {abi_type.canonical()}, got {describe(value)}",
            abi_type=abi_type.canonical()
        )
    return value.value


def encode_scalar(abi_type: AbiType, value: EncodableValue) -> bytes:
    """
    Encode a static elementary value into exactly one 32-byte word.

    Numbers, booleans and addresses are right-aligned; bytesN is left-aligned.

    Raises:
        EncodingFailed: If the value's variant or range does not fit the type
    """
    if isinstance(abi_type, UIntType):
        number = _expect(abi_type, value, IntegerValue)
        if number < 0 or number >= 1 << abi_type.bits:
            raise EncodingFailed(
                f"Value {number} out of range for {abi_type.canonical()}",
                abi_type=abi_type.canonical()
            )
        return encode_uint256(number)

    if isinstance(abi_type, IntType):
        number = _expect(abi_type, value, IntegerValue)
        bound = 1 << (abi_type.bits - 1)
        if number < -bound or number >= bound:
            raise EncodingFailed(
                f"Value {number} out of range for {abi_type.canonical()}",
                abi_type=abi_type.canonical()
            )
        # two's complement is always taken over the full word, not the declared width
        return encode_uint256(number % UINT256_CEILING)

    if isinstance(abi_type, BoolType):
        flag = _expect(abi_type, value, BoolValue)
        return encode_uint256(1 if flag else 0)

    if isinstance(abi_type, AddressType):
        data = _expect(abi_type, value, BytesValue)
        if len(data) != 20:
            raise EncodingFailed(
                f"Address must be 20 bytes, got {len(data)}",
                abi_type="address"
            )
        return data.rjust(WORD_SIZE, b"\x00")

    if isinstance(abi_type, FixedBytesType):
        data = _expect(abi_type, value, BytesValue)
        if len(data) != abi_type.size:
            raise EncodingFailed(
                f"{abi_type.canonical()} requires exactly {abi_type.size} bytes, got {len(data)}",
                abi_type=abi_type.canonical()
            )
        return data.ljust(WORD_SIZE, b"\x00")

    raise EncodingFailed(
        f"{abi_type.canonical()} is not an elementary static type",
        abi_type=abi_type.canonical()
    )


def encode_dynamic_payload(data: bytes) -> bytes:
    """Length word, then the bytes, zero-padded to a multiple of 32"""
    padding = (WORD_SIZE - len(data) % WORD_SIZE) % WORD_SIZE
    return encode_uint256(len(data)) + data + b"\x00" * padding


def encode_value(abi_type: AbiType, value: EncodableValue) -> bytes:
    """
    Encode one value of any supported type.

    The result is the value's own encoding; placing it behind an offset is the
    job of the enclosing frame.
    """
    if isinstance(abi_type, StringType):
        text = _expect(abi_type, value, TextValue)
        try:
            data = text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodingFailed(f"String is not valid UTF-8: {e.reason}", abi_type="string", cause=e)
        return encode_dynamic_payload(data)

    if isinstance(abi_type, BytesType):
        return encode_dynamic_payload(_expect(abi_type, value, BytesValue))

    if isinstance(abi_type, DynamicArrayType):
        items = _expect_composite(abi_type, value)
        return encode_uint256(len(items)) + encode_frame([abi_type.element] * len(items), items)

    if isinstance(abi_type, FixedArrayType):
        items = _expect_composite(abi_type, value)
        if len(items) != abi_type.size:
            raise ArgumentCountMismatch(
                abi_type.size,
                len(items),
                message=f"{abi_type.canonical()} expects {abi_type.size} elements, got {len(items)}"
            )
        return encode_frame([abi_type.element] * abi_type.size, items)

    if isinstance(abi_type, TupleType):
        items = _expect_composite(abi_type, value)
        if len(items) != len(abi_type.components):
            raise ArgumentCountMismatch(
                len(abi_type.components),
                len(items),
                message=(
                    f"Tuple {abi_type.canonical()} expects {len(abi_type.components)} "
                    f"values, got {len(items)}"
                )
            )
        return encode_frame([c.type for c in abi_type.components], items)

    return encode_scalar(abi_type, value)


def _expect_composite(abi_type: AbiType, value: EncodableValue) -> Sequence[EncodableValue]:
    if not isinstance(value, CompositeValue):
        raise EncodingFailed(
            f"Expected CompositeValue for {abi_type.canonical()}, got {describe(value)}",
            abi_type=abi_type.canonical()
        )
    return value.items


def encode_frame(types: Sequence[AbiType], values: Sequence[EncodableValue]) -> bytes:
    """
    Encode a frame of slots with the head/tail scheme.

    Static slots are written inline in the head. Each dynamic slot gets a word
    in the head holding the offset of its payload, measured from the start of
    this frame, and the payload is appended to the tail. A frame of only
    static slots is therefore a plain concatenation.
    """
    if len(types) != len(values):
        raise ArgumentCountMismatch(len(types), len(values))

    head: List[bytes] = []
    tail: List[bytes] = []
    tail_cursor = head_size(types)

    for abi_type, value in zip(types, values):
        if is_dynamic(abi_type):
            payload = encode_value(abi_type, value)
            head.append(encode_uint256(tail_cursor))
            tail.append(payload)
            tail_cursor += len(payload)
        else:
            head.append(encode_value(abi_type, value))

    return b"".join(head) + b"".join(tail)


def encode_abi(types: Sequence[AbiType], values: Sequence[Any]) -> bytes:
    """Encode host values against a list of types as one top-level frame"""
    if len(types) != len(values):
        raise ArgumentCountMismatch(len(types), len(values))
    return encode_frame(
        types,
        [to_encodable(abi_type, raw) for abi_type, raw in zip(types, values)]
    )


def encode_parameters(params: Sequence[Parameter], values: Sequence[Any]) -> str:
    """
    Encode arguments for a function or constructor, without selector.

    Args:
        params: Ordered input parameters
        values: Host values or EncodableValues, one per parameter

    Returns:
        Lowercase 0x-prefixed hex of the encoded frame

    Raises:
        ArgumentCountMismatch: If the counts disagree at any frame level
        EncodingFailed: If a value does not fit its declared type
    """
    if len(params) != len(values):
        raise ArgumentCountMismatch(len(params), len(values))

    encodable = []
    for index, (param, raw) in enumerate(zip(params, values)):
        try:
            encodable.append(to_encodable(param.type, raw))
        except CalldataError as e:
            e.details.setdefault("parameter", param.name or f"#{index}")
            raise

    try:
        encoded = encode_frame([p.type for p in params], encodable)
    except CalldataError as e:
        e.details.setdefault("parameters", [p.type.canonical() for p in params])
        raise

    LOG.debug(f"Encoded {len(params)} parameter(s) into {len(encoded)} bytes")
    return to_hex(encoded)
