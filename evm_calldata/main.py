#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from typing import Any, List, Optional, Sequence

from .abi.function import AbiFunction
from .abi.parser import AbiParser
from .core.deployer import assemble_deployment_data, encode_constructor_arguments
from .utils.config_manager import ConfigManager
from .utils.exceptions import CalldataError
from .utils.logging import setup_logging

LOG = logging.getLogger(__name__)


def resolve_function(abi: AbiParser, name: str, args: Optional[Sequence[Any]] = None) -> AbiFunction:
    """Pick a function by name or full signature, using the argument count for overloads"""
    functions = [AbiFunction.from_item(item) for item in abi.functions]

    if "(" in name:
        candidates = [f for f in functions if f.signature() == name.replace(" ", "")]
    else:
        candidates = [f for f in functions if f.name == name]
        if len(candidates) > 1 and args is not None:
            candidates = [f for f in candidates if len(f.inputs) == len(args)]

    if not candidates:
        raise CalldataError(f"Function {name} not found in ABI")
    if len(candidates) > 1:
        overloads = ", ".join(f.signature() for f in candidates)
        raise CalldataError(f"Function {name} is ambiguous: {overloads}")
    return candidates[0]


def _load_args(text: str) -> List[Any]:
    try:
        args = json.loads(text)
    except json.JSONDecodeError as e:
        raise CalldataError(f"--args must be a JSON array: {e}", cause=e)
    if not isinstance(args, list):
        raise CalldataError("--args must be a JSON array")
    return args


def cmd_encode(args: argparse.Namespace, abi: AbiParser) -> str:
    values = _load_args(args.args)

    if args.constructor:
        if args.bytecode:
            return assemble_deployment_data(args.bytecode, abi, values)
        return encode_constructor_arguments(abi, values)

    function = resolve_function(abi, args.function, values)
    LOG.info(f"Encoding {function.signature()}")
    if args.selector:
        return function.encode_call(values)
    return function.encode_parameters(values)


def cmd_signature(args: argparse.Namespace, abi: AbiParser) -> str:
    if args.function:
        functions = [resolve_function(abi, args.function)]
    else:
        functions = [AbiFunction.from_item(item) for item in abi.functions]
    return "\n".join(f"{f.selector()}  {f.signature()}" for f in functions)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ethereum contract ABI encoder")
    parser.add_argument("--config", default=None,
                        help="Path to JSON or YAML configuration file")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")
    parser.add_argument("--log-file", default=None,
                        help="Path to log file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    encode = subparsers.add_parser("encode", help="Encode function or constructor arguments")
    encode.add_argument("--abi", required=True, help="ABI JSON file or build artifact")
    target = encode.add_mutually_exclusive_group(required=True)
    target.add_argument("--function", help="Function name or signature")
    target.add_argument("--constructor", action="store_true",
                        help="Encode constructor arguments")
    encode.add_argument("--args", default="[]", help="Arguments as a JSON array")
    encode.add_argument("--selector", action="store_true",
                        help="Prefix the 4-byte function selector")
    encode.add_argument("--bytecode", default=None,
                        help="Creation bytecode to prepend (constructor only)")

    signature = subparsers.add_parser("signature", help="Print function signatures and selectors")
    signature.add_argument("--abi", required=True, help="ABI JSON file or build artifact")
    signature.add_argument("--function", default=None, help="Function name or signature")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    try:
        settings = ConfigManager().load_config(args.config)
        abi = AbiParser.from_file(args.abi, max_depth=settings.encoder.max_type_depth)

        if args.command == "encode":
            output = cmd_encode(args, abi)
        else:
            output = cmd_signature(args, abi)
    except CalldataError as e:
        LOG.debug(f"Error details: {e.to_dict()}")
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
