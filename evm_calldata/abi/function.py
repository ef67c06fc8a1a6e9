"""
Function signatures, selectors and call data
"""

from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from eth_utils import keccak

from .encoder import encode_parameters
from .parser import AbiItem, AbiItemType, StateMutability
from .types import Parameter
from ..utils.common import strip_hex_prefix, to_hex
from ..utils.exceptions import AbiParseError


@dataclass(frozen=True)
class AbiFunction:
    """A callable contract function"""
    name: str
    inputs: Tuple[Parameter, ...] = ()
    outputs: Tuple[Parameter, ...] = ()
    state_mutability: StateMutability = StateMutability.NONPAYABLE

    @classmethod
    def from_item(cls, item: AbiItem) -> "AbiFunction":
        """
        Create an AbiFunction from a parsed ABI item.

        Raises:
            AbiParseError: If the item is not a function or lacks a name
        """
        if item.type != AbiItemType.FUNCTION:
            raise AbiParseError(
                f"Invalid ABI item type - expected function, got {item.type.value}"
            )
        if not item.name:
            raise AbiParseError("Missing required field: name")

        return cls(
            name=item.name,
            inputs=item.inputs,
            outputs=item.outputs,
            state_mutability=item.state_mutability or StateMutability.NONPAYABLE,
        )

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in (StateMutability.PURE, StateMutability.VIEW)

    def signature(self) -> str:
        """Canonical signature, e.g. ``transfer(address,uint256)``"""
        return f"{self.name}({','.join(p.type.canonical() for p in self.inputs)})"

    def selector(self) -> str:
        """First 4 bytes of keccak-256 of the signature, as 0x hex"""
        return to_hex(keccak(text=self.signature())[:4])

    def encode_parameters(self, args: Sequence[Any]) -> str:
        """Encoded arguments without the selector"""
        return encode_parameters(self.inputs, args)

    def encode_call(self, args: Sequence[Any]) -> str:
        """Selector followed by the encoded arguments"""
        return self.selector() + strip_hex_prefix(self.encode_parameters(args))
