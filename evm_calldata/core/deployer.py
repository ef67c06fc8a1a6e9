"""
Contract deployment assembler

Turns bytecode (or Solidity source) plus constructor arguments into deployment
data, hands it to a transport and follows the result:

    NOT_STARTED -> [COMPILING ->] ENCODING -> BROADCASTING -> CONFIRMED
    (any state) -> FAILED

Any state may move to FAILED. Encoding and compilation failures are
deterministic and are never retried; transport failures are relayed as-is.
One ContractDeployment instance drives exactly one deployment.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..abi.encoder import encode_parameters
from ..abi.parser import AbiItem, AbiParser
from ..utils.common import strip_hex_prefix
from ..utils.config_manager import DeploymentOptions
from ..utils.exceptions import (
    CalldataError,
    CompilationFailed,
    ConstructorNotFound,
    DeploymentFailed,
    MissingBytecode,
    MissingContractAddress,
    TransactionFailed,
)
from .compiler import COMPILER_CACHE, SolidityCompiler, compile_contract
from .transport import DeploymentTransport

LOG = logging.getLogger(__name__)

AbiLike = Union[AbiParser, Sequence[AbiItem], Sequence[Dict[str, Any]]]


class DeploymentState(str, Enum):
    NOT_STARTED = "not_started"
    COMPILING = "compiling"
    ENCODING = "encoding"
    BROADCASTING = "broadcasting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


_TRANSITIONS = {
    DeploymentState.NOT_STARTED: {DeploymentState.COMPILING, DeploymentState.ENCODING},
    DeploymentState.COMPILING: {DeploymentState.ENCODING},
    DeploymentState.ENCODING: {DeploymentState.BROADCASTING},
    DeploymentState.BROADCASTING: {DeploymentState.CONFIRMED},
    DeploymentState.CONFIRMED: set(),
    DeploymentState.FAILED: set(),
}


@dataclass
class DeploymentResult:
    """Result of contract deployment"""
    success: bool
    state: DeploymentState
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    deployment_data: Optional[str] = None
    error: Optional[CalldataError] = None
    history: List[Tuple[DeploymentState, float]] = field(default_factory=list)


def as_abi_parser(abi: AbiLike) -> AbiParser:
    """Accept a parser, parsed items or raw ABI JSON items"""
    if isinstance(abi, AbiParser):
        return abi
    items = list(abi or [])
    if all(isinstance(item, AbiItem) for item in items):
        return AbiParser(items)
    return AbiParser.from_items(items)


def encode_constructor_arguments(abi: AbiLike, args: Sequence[Any]) -> str:
    """
    Encode constructor arguments as 0x hex (``0x`` when there are none).

    Raises:
        ConstructorNotFound: If arguments are given but the ABI has no constructor
        ArgumentCountMismatch: If the argument count differs from the constructor inputs
        EncodingFailed: If an argument does not fit its type
    """
    constructor = as_abi_parser(abi).constructor
    if constructor is None:
        if args:
            raise ConstructorNotFound(
                f"Constructor not found in ABI but {len(args)} argument(s) were supplied"
            )
        return "0x"
    return encode_parameters(constructor.inputs, list(args))


def assemble_deployment_data(bytecode: Optional[str], abi: AbiLike, args: Sequence[Any]) -> str:
    """
    Concatenate creation bytecode and encoded constructor arguments.

    Raises:
        MissingBytecode: If the bytecode is empty
    """
    body = strip_hex_prefix(bytecode or "")
    if not body:
        raise MissingBytecode("Bytecode is empty")
    return "0x" + body + strip_hex_prefix(encode_constructor_arguments(abi, args))


class ContractDeployment:
    """
    State machine for one contract deployment.

    Usage:
        deployment = ContractDeployment.from_bytecode(bytecode, abi, transport)
        result = await deployment.deploy(["Token", "TKN", 10**24])
        if result.success:
            print(result.contract_address)
    """

    def __init__(
        self,
        transport: DeploymentTransport,
        abi: Optional[AbiLike] = None,
        bytecode: Optional[str] = None,
        source: Optional[str] = None,
        contract_name: Optional[str] = None,
        compiler: Optional[SolidityCompiler] = None,
        compiler_loader: Optional[Callable[[str], Awaitable[SolidityCompiler]]] = None,
        options: Optional[DeploymentOptions] = None
    ):
        """
        Initialize a deployment.

        Args:
            transport: Signs, broadcasts and reports receipts
            abi: Contract ABI; taken from compiler output when omitted for source deployments
            bytecode: Creation bytecode; when set, source is ignored
            source: Solidity source to compile
            contract_name: Contract to pick from the compiled source
            compiler: Compiler instance for source deployments
            compiler_loader: Loads a compiler by version through the shared cache
                when no compiler instance is given
            options: Default deployment options
        """
        self.transport = transport
        self.abi = as_abi_parser(abi) if abi is not None else None
        self.bytecode = bytecode
        self.source = source
        self.contract_name = contract_name
        self.compiler = compiler
        self.compiler_loader = compiler_loader
        self.options = options or DeploymentOptions()

        self.deployment_data: Optional[str] = None
        self._state = DeploymentState.NOT_STARTED
        self.history: List[Tuple[DeploymentState, float]] = [(self._state, time.time())]

    @classmethod
    def from_bytecode(
        cls,
        bytecode: str,
        abi: AbiLike,
        transport: DeploymentTransport,
        options: Optional[DeploymentOptions] = None
    ) -> "ContractDeployment":
        return cls(transport, abi=abi, bytecode=bytecode, options=options)

    @classmethod
    def from_source(
        cls,
        source: str,
        contract_name: str,
        transport: DeploymentTransport,
        compiler: Optional[SolidityCompiler] = None,
        compiler_loader: Optional[Callable[[str], Awaitable[SolidityCompiler]]] = None,
        abi: Optional[AbiLike] = None,
        options: Optional[DeploymentOptions] = None
    ) -> "ContractDeployment":
        return cls(
            transport,
            abi=abi,
            source=source,
            contract_name=contract_name,
            compiler=compiler,
            compiler_loader=compiler_loader,
            options=options,
        )

    @property
    def state(self) -> DeploymentState:
        return self._state

    def _transition(self, new_state: DeploymentState) -> None:
        if new_state != DeploymentState.FAILED and new_state not in _TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Invalid deployment transition {self._state.value} -> {new_state.value}"
            )
        LOG.info(f"Deployment {self._state.value} -> {new_state.value}")
        self._state = new_state
        self.history.append((new_state, time.time()))

    async def deploy(
        self,
        constructor_args: Optional[Sequence[Any]] = None,
        options: Optional[DeploymentOptions] = None
    ) -> DeploymentResult:
        """
        Run the deployment to a terminal state.

        Failures are reported through the result, with the error attached.

        Raises:
            RuntimeError: If this instance has already been used
        """
        if self._state != DeploymentState.NOT_STARTED:
            raise RuntimeError("ContractDeployment instances drive a single deployment")

        opts = options or self.options
        args = list(constructor_args or [])
        tx_hash = None

        try:
            bytecode, abi = await self._resolve_bytecode(opts)

            self._transition(DeploymentState.ENCODING)
            self.deployment_data = assemble_deployment_data(bytecode, abi, args)

            self._transition(DeploymentState.BROADCASTING)
            tx_hash = await self._broadcast(opts)
            receipt = await self._await_receipt(tx_hash, opts)

            self._transition(DeploymentState.CONFIRMED)
            LOG.info(f"Contract deployed at {receipt['contractAddress']} (tx {tx_hash})")
            return DeploymentResult(
                success=True,
                state=self._state,
                contract_address=receipt["contractAddress"],
                transaction_hash=tx_hash,
                block_number=receipt.get("blockNumber"),
                gas_used=receipt.get("gasUsed"),
                deployment_data=self.deployment_data,
                history=list(self.history),
            )

        except CalldataError as e:
            LOG.error(f"Deployment failed in {self._state.value}: {e}")
            self._transition(DeploymentState.FAILED)
            return DeploymentResult(
                success=False,
                state=self._state,
                transaction_hash=tx_hash,
                deployment_data=self.deployment_data,
                error=e,
                history=list(self.history),
            )
        except Exception:
            self._transition(DeploymentState.FAILED)
            raise

    async def _resolve_bytecode(self, opts: DeploymentOptions) -> Tuple[str, AbiParser]:
        if self.bytecode is not None:
            if not strip_hex_prefix(self.bytecode):
                raise MissingBytecode("Bytecode is empty")
            return self.bytecode, self.abi or AbiParser([])

        if self.source is None or not self.contract_name:
            raise MissingBytecode(
                "Either bytecode must be provided, or source with contract_name and a compiler"
            )

        if self.compiler is None and not (self.compiler_loader and opts.compiler_version):
            raise MissingBytecode(
                "Source deployment requires a compiler or a compiler_loader with compiler_version"
            )

        self._transition(DeploymentState.COMPILING)
        compiler = await self._get_compiler(opts)
        compiled = await compile_contract(compiler, self.source, self.contract_name)
        abi = self.abi or AbiParser.from_items(compiled.abi)
        return compiled.bytecode, abi

    async def _get_compiler(self, opts: DeploymentOptions) -> SolidityCompiler:
        if self.compiler is not None:
            return self.compiler
        try:
            return await COMPILER_CACHE.get(opts.compiler_version, self.compiler_loader)
        except Exception as e:
            raise CompilationFailed(
                f"Could not load compiler {opts.compiler_version}: {e}",
                contract_name=self.contract_name,
                cause=e
            )

    async def _broadcast(self, opts: DeploymentOptions) -> str:
        try:
            return await self.transport.send_deployment(
                self.deployment_data,
                value=opts.value,
                gas_limit=opts.gas_limit,
                gas_price=opts.gas_price
            )
        except Exception as e:
            raise TransactionFailed(f"Failed to send deployment transaction: {e}", cause=e)

    async def _await_receipt(self, tx_hash: str, opts: DeploymentOptions) -> Mapping[str, Any]:
        try:
            receipt = await self.transport.wait_for_receipt(tx_hash, timeout=opts.receipt_timeout)
        except Exception as e:
            raise TransactionFailed(
                f"Failed to get transaction receipt: {e}",
                tx_hash=tx_hash,
                cause=e
            )

        status = receipt.get("status")
        if status is not None and int(status) != 1:
            raise DeploymentFailed(
                f"Deployment transaction failed with status: {status}",
                tx_hash=tx_hash
            )

        if not receipt.get("contractAddress"):
            raise MissingContractAddress("Contract address not found in receipt", tx_hash=tx_hash)

        return receipt
