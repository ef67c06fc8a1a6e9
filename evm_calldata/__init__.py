"""
evm_calldata - Ethereum contract ABI encoding and deployment assembly.

Quick start::

    from evm_calldata import AbiParser, AbiFunction

    abi = AbiParser.from_file("Token.abi.json")
    transfer = AbiFunction.from_item(abi.function("transfer")[0])
    calldata = transfer.encode_call(["0x000000000000000000000000000000000000dEaD", 10**18])
"""

from .abi import (
    AbiFunction,
    AbiItem,
    AbiParser,
    Parameter,
    encode_abi,
    encode_parameters,
    is_dynamic,
    parse_type,
    to_encodable,
)
from .core.deployer import (
    ContractDeployment,
    DeploymentResult,
    DeploymentState,
    assemble_deployment_data,
    encode_constructor_arguments,
)
from .utils.exceptions import CalldataError

__version__ = "0.1.0"
__all__ = [
    "AbiFunction",
    "AbiItem",
    "AbiParser",
    "CalldataError",
    "ContractDeployment",
    "DeploymentResult",
    "DeploymentState",
    "Parameter",
    "assemble_deployment_data",
    "encode_abi",
    "encode_constructor_arguments",
    "encode_parameters",
    "is_dynamic",
    "parse_type",
    "to_encodable",
    "__version__",
]
