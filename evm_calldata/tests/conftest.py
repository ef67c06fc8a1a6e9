"""
Pytest fixtures shared by the evm_calldata unit tests.
"""

import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest

from evm_calldata.core.compiler import COMPILER_CACHE
from .helpers import CONTRACT_ADDRESS, SAMPLE_BYTECODE, TX_HASH


@pytest.fixture
def token_abi() -> List[Dict[str, Any]]:
    """ERC20-like ABI with a two-argument constructor and an overloaded function"""
    return [
        {
            "type": "constructor",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "name", "type": "string", "internalType": "string"},
                {"name": "supply", "type": "uint256", "internalType": "uint256"},
            ],
        },
        {
            "type": "function",
            "name": "transfer",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [{"name": "", "type": "bool"}],
        },
        {
            "type": "function",
            "name": "balanceOf",
            "stateMutability": "view",
            "inputs": [{"name": "owner", "type": "address"}],
            "outputs": [{"name": "", "type": "uint256"}],
        },
        {
            "type": "function",
            "name": "mint",
            "stateMutability": "nonpayable",
            "inputs": [{"name": "amount", "type": "uint256"}],
            "outputs": [],
        },
        {
            "type": "function",
            "name": "mint",
            "stateMutability": "nonpayable",
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
            "outputs": [],
        },
        {
            "type": "function",
            "name": "submitOrders",
            "stateMutability": "nonpayable",
            "inputs": [
                {
                    "name": "orders",
                    "type": "tuple[]",
                    "internalType": "struct Book.Order[]",
                    "components": [
                        {"name": "maker", "type": "address"},
                        {"name": "amount", "type": "uint256"},
                        {"name": "memo", "type": "string"},
                    ],
                },
                {"name": "salt", "type": "bytes32"},
            ],
            "outputs": [],
        },
        {
            "type": "event",
            "name": "Transfer",
            "anonymous": False,
            "inputs": [
                {"name": "from", "type": "address", "indexed": True},
                {"name": "to", "type": "address", "indexed": True},
                {"name": "value", "type": "uint256", "indexed": False},
            ],
        },
        {
            "type": "error",
            "name": "InsufficientBalance",
            "inputs": [{"name": "needed", "type": "uint256"}],
        },
    ]


@pytest.fixture
def abi_file(tmp_path: Path, token_abi) -> Path:
    """Token ABI written as a bare JSON array"""
    path = tmp_path / "Token.abi.json"
    path.write_text(json.dumps(token_abi))
    return path


@pytest.fixture
def mock_transport() -> AsyncMock:
    """Transport that accepts the deployment and returns a successful receipt"""
    transport = AsyncMock()
    transport.send_deployment.return_value = TX_HASH
    transport.wait_for_receipt.return_value = {
        "status": 1,
        "contractAddress": CONTRACT_ADDRESS,
        "blockNumber": 7,
        "gasUsed": 123456,
    }
    return transport


@pytest.fixture
def compiler_output() -> Dict[str, Any]:
    """Minimal solc standard-JSON output for contract.sol:Counter"""
    return {
        "errors": [
            {
                "severity": "warning",
                "message": "SPDX license identifier not provided",
                "formattedMessage": "Warning: SPDX license identifier not provided",
            }
        ],
        "contracts": {
            "contract.sol": {
                "Counter": {
                    "abi": [
                        {
                            "type": "constructor",
                            "stateMutability": "nonpayable",
                            "inputs": [{"name": "start", "type": "uint256"}],
                        }
                    ],
                    "evm": {"bytecode": {"object": SAMPLE_BYTECODE[2:]}},
                }
            }
        },
    }


@pytest.fixture(autouse=True)
def clear_compiler_cache():
    """Keep the process-wide compiler cache isolated between tests"""
    COMPILER_CACHE.clear()
    yield
    COMPILER_CACHE.clear()
