"""
Solidity compiler collaborator

Compilation itself is delegated to an external compiler (a solc binary,
soljson, a remote service...). This module defines the contract such a
compiler must satisfy, builds its standard-JSON input, extracts the bytecode
and ABI from its output, and keeps a process-wide cache of compiler instances
keyed by version.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from ..utils.common import strip_hex_prefix
from ..utils.exceptions import CompilationFailed

LOG = logging.getLogger(__name__)

DEFAULT_SOURCE_NAME = "contract.sol"
DEFAULT_OPTIMIZER_RUNS = 200


class SolidityCompiler(Protocol):
    """Anything that compiles solc standard-JSON input into standard-JSON output"""

    async def compile(self, standard_input: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass
class CompiledContract:
    """Bytecode and ABI extracted from compiler output"""
    contract_name: str
    bytecode: str
    abi: List[Dict[str, Any]]


def build_standard_input(
    source: str,
    file_name: str = DEFAULT_SOURCE_NAME,
    optimizer_runs: int = DEFAULT_OPTIMIZER_RUNS
) -> Dict[str, Any]:
    """Standard-JSON input requesting ABI and creation bytecode for every contract"""
    return {
        "language": "Solidity",
        "sources": {file_name: {"content": source}},
        "settings": {
            "optimizer": {"enabled": True, "runs": optimizer_runs},
            "outputSelection": {
                "*": {
                    "*": ["abi", "evm.bytecode.object"]
                }
            },
        },
    }


def extract_compiled_contract(
    output: Dict[str, Any],
    contract_name: str,
    file_name: str = DEFAULT_SOURCE_NAME
) -> CompiledContract:
    """
    Pull one contract's bytecode and ABI out of standard-JSON output.

    Warnings are logged; any entry with severity ``error`` fails the compilation.

    Raises:
        CompilationFailed: On compiler errors, or a missing or empty bytecode
    """
    errors = output.get("errors") or []
    critical = [e for e in errors if e.get("severity") == "error"]
    for warning in errors:
        if warning.get("severity") != "error":
            LOG.warning(f"solc: {warning.get('formattedMessage') or warning.get('message')}")

    if critical:
        messages = "\n".join(
            (e.get("formattedMessage") or e.get("message") or "unknown error").strip()
            for e in critical
        )
        raise CompilationFailed(f"Compilation errors:\n{messages}", contract_name=contract_name)

    contract = (output.get("contracts") or {}).get(file_name, {}).get(contract_name)
    if contract is None:
        raise CompilationFailed(
            f"Contract {contract_name} not found in compilation output",
            contract_name=contract_name
        )

    bytecode = ((contract.get("evm") or {}).get("bytecode") or {}).get("object")
    if bytecode is None:
        raise CompilationFailed(
            "Failed to extract bytecode from compilation output",
            contract_name=contract_name
        )
    if not strip_hex_prefix(bytecode):
        raise CompilationFailed("Compiled bytecode is empty", contract_name=contract_name)

    return CompiledContract(
        contract_name=contract_name,
        bytecode=bytecode,
        abi=contract.get("abi") or [],
    )


async def compile_contract(
    compiler: SolidityCompiler,
    source: str,
    contract_name: str,
    file_name: str = DEFAULT_SOURCE_NAME
) -> CompiledContract:
    """
    Compile source with the given compiler and extract one contract.

    Raises:
        CompilationFailed: If the compiler raises or reports errors
    """
    try:
        output = await compiler.compile(build_standard_input(source, file_name))
    except CompilationFailed:
        raise
    except Exception as e:
        raise CompilationFailed(f"Compilation failed: {e}", contract_name=contract_name, cause=e)

    return extract_compiled_contract(output, contract_name, file_name)


class CompilerCache:
    """
    Process-wide cache of compiler instances keyed by version.

    Each version is loaded on first use; concurrent requests for the same
    version share one load.
    """

    def __init__(self):
        self._compilers: Dict[str, Any] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get(
        self,
        version: str,
        loader: Callable[[str], Awaitable[SolidityCompiler]]
    ) -> SolidityCompiler:
        """Return the cached compiler for a version, loading it if needed"""
        if version in self._compilers:
            return self._compilers[version]

        lock = self._locks.setdefault(version, asyncio.Lock())
        async with lock:
            if version not in self._compilers:
                LOG.info(f"Loading Solidity compiler {version}")
                self._compilers[version] = await loader(version)
            return self._compilers[version]

    def clear(self, version: Optional[str] = None) -> None:
        """Drop one cached version, or all of them"""
        if version is None:
            self._compilers.clear()
            self._locks.clear()
        else:
            self._compilers.pop(version, None)
            self._locks.pop(version, None)

    def __contains__(self, version: str) -> bool:
        return version in self._compilers

    @property
    def versions(self) -> List[str]:
        return sorted(self._compilers)


COMPILER_CACHE = CompilerCache()
