"""
ABI type descriptors and the type-string parser

A type string from a contract ABI (``uint256``, ``address[]``, ``tuple[3]``...)
is parsed once into an immutable descriptor tree. Tuples carry their named
components in declaration order, which is the order they are encoded in.

Grammar accepted by parse_type():
- ``uintN`` / ``intN`` with N in 8..256, multiple of 8 (bare ``uint``/``int`` mean 256)
- ``address``, ``bool``, ``string``, ``bytes``, ``bytesN`` with N in 1..32
- ``tuple`` (requires components)
- any of the above followed by ``[]`` or ``[N]`` suffixes, applied left to right,
  so ``uint256[2][]`` is a dynamic array of ``uint256[2]``
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..utils.config_manager import DEFAULT_MAX_TYPE_DEPTH
from ..utils.exceptions import ErrorCodes, TypeParseError


_ARRAY_SUFFIX = re.compile(r"\[([0-9]*)\]$")
_INTEGER = re.compile(r"^(u?)int([0-9]*)$")
_FIXED_BYTES = re.compile(r"^bytes([0-9]+)$")


class AbiType:
    """Base class of all type descriptors"""

    is_array = False
    is_tuple = False

    def canonical(self) -> str:
        """Canonical type string as used in function signatures"""
        raise NotImplementedError

    def __str__(self) -> str:
        return self.canonical()


@dataclass(frozen=True)
class UIntType(AbiType):
    bits: int = 256

    def canonical(self) -> str:
        return f"uint{self.bits}"


@dataclass(frozen=True)
class IntType(AbiType):
    bits: int = 256

    def canonical(self) -> str:
        return f"int{self.bits}"


@dataclass(frozen=True)
class AddressType(AbiType):
    def canonical(self) -> str:
        return "address"


@dataclass(frozen=True)
class BoolType(AbiType):
    def canonical(self) -> str:
        return "bool"


@dataclass(frozen=True)
class BytesType(AbiType):
    def canonical(self) -> str:
        return "bytes"


@dataclass(frozen=True)
class FixedBytesType(AbiType):
    size: int

    def canonical(self) -> str:
        return f"bytes{self.size}"


@dataclass(frozen=True)
class StringType(AbiType):
    def canonical(self) -> str:
        return "string"


@dataclass(frozen=True)
class DynamicArrayType(AbiType):
    element: AbiType

    is_array = True

    def canonical(self) -> str:
        return f"{self.element.canonical()}[]"


@dataclass(frozen=True)
class FixedArrayType(AbiType):
    element: AbiType
    size: int

    is_array = True

    def __post_init__(self):
        if self.size <= 0:
            raise TypeParseError(
                f"Fixed array size must be positive, got {self.size}",
                type_str=f"{self.element.canonical()}[{self.size}]"
            )

    def canonical(self) -> str:
        return f"{self.element.canonical()}[{self.size}]"


@dataclass(frozen=True)
class TupleType(AbiType):
    components: Tuple["Parameter", ...]

    is_tuple = True

    def canonical(self) -> str:
        return "(" + ",".join(c.type.canonical() for c in self.components) + ")"

    @property
    def component_names(self) -> List[str]:
        return [c.name for c in self.components]


@dataclass(frozen=True)
class Parameter:
    """A named, typed slot of a function, constructor, event or tuple"""
    name: str
    type: AbiType
    internal_type: Optional[str] = None
    indexed: Optional[bool] = None

    @classmethod
    def from_abi(
        cls,
        data: Dict[str, Any],
        max_depth: int = DEFAULT_MAX_TYPE_DEPTH
    ) -> "Parameter":
        """Build a Parameter from a standard ABI JSON parameter object"""
        return _parameter_from_abi(data, max_depth, 0)


def parse_type(
    type_str: str,
    components: Optional[Sequence[Dict[str, Any]]] = None,
    max_depth: int = DEFAULT_MAX_TYPE_DEPTH
) -> AbiType:
    """
    Parse an ABI type string into a descriptor.

    Args:
        type_str: Type string exactly as it appears in the ABI JSON
        components: ABI component objects, required when the base type is ``tuple``
        max_depth: Maximum combined nesting of array suffixes and tuple levels

    Returns:
        The parsed AbiType

    Raises:
        TypeParseError: If the string is outside the supported grammar
    """
    return _parse(type_str, components, max_depth, 0)


def parse_parameters(
    items: Optional[Sequence[Dict[str, Any]]],
    max_depth: int = DEFAULT_MAX_TYPE_DEPTH
) -> Tuple[Parameter, ...]:
    """Parse a list of ABI parameter objects (``inputs``, ``outputs``, ``components``)"""
    return tuple(_parameter_from_abi(item, max_depth, 0) for item in items or ())


def _parameter_from_abi(data: Dict[str, Any], max_depth: int, depth: int) -> Parameter:
    if not isinstance(data, dict):
        raise TypeParseError(f"ABI parameter must be an object, got {type(data).__name__}")
    if "type" not in data:
        raise TypeParseError(f"ABI parameter {data.get('name', '')!r} has no type")

    return Parameter(
        name=data.get("name") or "",
        type=_parse(data["type"], data.get("components"), max_depth, depth),
        internal_type=data.get("internalType"),
        indexed=data.get("indexed"),
    )


def _check_depth(type_str: str, depth: int, max_depth: int) -> None:
    if depth > max_depth:
        raise TypeParseError(
            f"Type nesting exceeds {max_depth} levels",
            type_str=type_str,
            code=ErrorCodes.TYPE_TOO_DEEP
        )


def _parse(
    type_str: Any,
    components: Optional[Sequence[Dict[str, Any]]],
    max_depth: int,
    depth: int
) -> AbiType:
    if not isinstance(type_str, str) or not type_str:
        raise TypeParseError(f"Invalid ABI type: {type_str!r}")

    match = _ARRAY_SUFFIX.search(type_str)
    if match:
        _check_depth(type_str, depth + 1, max_depth)
        element = _parse(type_str[:match.start()], components, max_depth, depth + 1)
        size_text = match.group(1)
        if size_text == "":
            return DynamicArrayType(element)
        if size_text != str(int(size_text)) or int(size_text) == 0:
            raise TypeParseError(f"Invalid fixed array size in {type_str!r}", type_str=type_str)
        return FixedArrayType(element, int(size_text))

    if "[" in type_str or "]" in type_str:
        raise TypeParseError(f"Malformed array suffix in {type_str!r}", type_str=type_str)

    if type_str == "tuple":
        if components is None:
            raise TypeParseError("tuple type requires components", type_str=type_str)
        _check_depth(type_str, depth + 1, max_depth)
        return TupleType(tuple(
            _parameter_from_abi(component, max_depth, depth + 1)
            for component in components
        ))

    return _parse_elementary(type_str)


def _parse_elementary(type_str: str) -> AbiType:
    if type_str == "address":
        return AddressType()
    if type_str == "bool":
        return BoolType()
    if type_str == "string":
        return StringType()
    if type_str == "bytes":
        return BytesType()

    match = _INTEGER.match(type_str)
    if match:
        unsigned, bits_text = match.groups()
        if bits_text == "":
            bits = 256
        else:
            bits = int(bits_text)
            if bits_text != str(bits) or bits < 8 or bits > 256 or bits % 8:
                raise TypeParseError(f"Invalid integer width in {type_str!r}", type_str=type_str)
        return UIntType(bits) if unsigned else IntType(bits)

    match = _FIXED_BYTES.match(type_str)
    if match:
        size_text = match.group(1)
        size = int(size_text)
        if size_text != str(size) or not 1 <= size <= 32:
            raise TypeParseError(f"Invalid fixed bytes size in {type_str!r}", type_str=type_str)
        return FixedBytesType(size)

    raise TypeParseError(f"Unsupported ABI type: {type_str!r}", type_str=type_str)
