"""
Contract ABI document parser

Reads the standard ABI JSON (an array of items, or a single item object) and
exposes the functions, events, errors and constructor it declares.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .types import Parameter, parse_parameters
from ..utils.config_manager import DEFAULT_MAX_TYPE_DEPTH
from ..utils.exceptions import AbiParseError

LOG = logging.getLogger(__name__)


class AbiItemType(str, Enum):
    FUNCTION = "function"
    CONSTRUCTOR = "constructor"
    RECEIVE = "receive"
    FALLBACK = "fallback"
    EVENT = "event"
    ERROR = "error"


class StateMutability(str, Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"


@dataclass(frozen=True)
class AbiItem:
    """One entry of a contract ABI"""
    type: AbiItemType
    name: Optional[str] = None
    inputs: Tuple[Parameter, ...] = ()
    outputs: Tuple[Parameter, ...] = ()
    state_mutability: Optional[StateMutability] = None
    anonymous: Optional[bool] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_abi(
        cls,
        data: Dict[str, Any],
        max_depth: int = DEFAULT_MAX_TYPE_DEPTH
    ) -> "AbiItem":
        """
        Build an AbiItem from its JSON object.

        Items without a ``type`` default to ``function``, as solc did for old ABIs.

        Raises:
            AbiParseError: If the item kind or mutability is unknown
            TypeParseError: If a parameter type is unsupported
        """
        if not isinstance(data, dict):
            raise AbiParseError(f"ABI item must be an object, got {type(data).__name__}")

        try:
            item_type = AbiItemType(data.get("type", "function"))
        except ValueError:
            raise AbiParseError(f"Unknown ABI item type: {data.get('type')!r}")

        mutability = data.get("stateMutability")
        if mutability is None and "payable" in data:
            # pre-0.5 ABIs only carry the payable/constant flags
            if data.get("payable"):
                mutability = "payable"
            elif data.get("constant"):
                mutability = "view"
            else:
                mutability = "nonpayable"

        try:
            state_mutability = StateMutability(mutability) if mutability else None
        except ValueError:
            raise AbiParseError(f"Unknown state mutability: {mutability!r}")

        return cls(
            type=item_type,
            name=data.get("name"),
            inputs=parse_parameters(data.get("inputs"), max_depth),
            outputs=parse_parameters(data.get("outputs"), max_depth),
            state_mutability=state_mutability,
            anonymous=data.get("anonymous"),
            raw=data,
        )


class AbiParser:
    """
    Parsed contract ABI.

    Usage:
        abi = AbiParser.from_file("build/Token.abi.json")
        transfer = abi.function("transfer")[0]
    """

    def __init__(self, items: Sequence[AbiItem]):
        self.items: List[AbiItem] = list(items)

    @classmethod
    def from_items(
        cls,
        items: Union[Sequence[Dict[str, Any]], Dict[str, Any]],
        max_depth: int = DEFAULT_MAX_TYPE_DEPTH
    ) -> "AbiParser":
        """Parse already-decoded JSON: a list of items or a single item"""
        if isinstance(items, dict):
            items = [items]
        if not isinstance(items, (list, tuple)):
            raise AbiParseError("Invalid ABI format - must be a JSON array or object")
        return cls([AbiItem.from_abi(item, max_depth) for item in items])

    @classmethod
    def from_json(cls, text: Union[str, bytes], max_depth: int = DEFAULT_MAX_TYPE_DEPTH) -> "AbiParser":
        """Parse an ABI from JSON text"""
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AbiParseError(f"Invalid ABI JSON: {e}", cause=e)
        return cls.from_items(data, max_depth)

    @classmethod
    def from_file(cls, path: Union[str, Path], max_depth: int = DEFAULT_MAX_TYPE_DEPTH) -> "AbiParser":
        """
        Parse an ABI from a file.

        Accepts either a bare ABI array or a build artifact with an ``abi`` key.
        """
        path = Path(path)
        if not path.exists():
            raise AbiParseError(f"ABI file not found: {path}", details={"path": str(path)})

        with open(path, 'r') as f:
            text = f.read()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise AbiParseError(f"Invalid JSON in ABI file {path}: {e}", cause=e)

        if isinstance(data, dict) and isinstance(data.get("abi"), list):
            data = data["abi"]

        LOG.debug(f"Loaded ABI from {path}")
        return cls.from_items(data, max_depth)

    @property
    def functions(self) -> List[AbiItem]:
        return [i for i in self.items if i.type == AbiItemType.FUNCTION]

    @property
    def events(self) -> List[AbiItem]:
        return [i for i in self.items if i.type == AbiItemType.EVENT]

    @property
    def errors(self) -> List[AbiItem]:
        return [i for i in self.items if i.type == AbiItemType.ERROR]

    @property
    def constructor(self) -> Optional[AbiItem]:
        return next((i for i in self.items if i.type == AbiItemType.CONSTRUCTOR), None)

    def function(self, name: str) -> List[AbiItem]:
        """All functions with the given name (overloads included)"""
        return [i for i in self.functions if i.name == name]

    def event(self, name: str) -> List[AbiItem]:
        return [i for i in self.events if i.name == name]

    def to_json(self, pretty: bool = False) -> str:
        """Serialize the ABI back to JSON"""
        raw_items = [item.raw for item in self.items]
        if pretty:
            return json.dumps(raw_items, indent=2, sort_keys=True)
        return json.dumps(raw_items)

    def __repr__(self) -> str:
        return (
            f"AbiParser(functions={len(self.functions)}, events={len(self.events)}, "
            f"errors={len(self.errors)}, constructor={'yes' if self.constructor else 'no'})"
        )
