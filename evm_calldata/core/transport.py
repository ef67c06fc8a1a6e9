"""
Deployment transport collaborator

The deployment assembler hands finished deployment data to a transport that
signs, broadcasts and waits for the receipt. The transport owns retries and
timeouts; the assembler only awaits it.

Design Notes:
- DeploymentTransport is a structural protocol so tests and other stacks can
  plug in their own signer/RPC pair
- Web3DeploymentTransport signs locally with an eth-account LocalAccount
- Synchronous web3 calls run in a thread pool to avoid blocking the event loop
"""

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, TypeVar

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.types import TxParams, Wei

from ..utils.async_retry import AsyncRetry

LOG = logging.getLogger(__name__)

T = TypeVar('T')

# Shared thread pool for Web3 sync calls
_web3_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="web3_sync_")


async def run_sync(func: Callable[..., T], *args, **kwargs) -> T:
    """Run a synchronous function in the shared thread pool"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_web3_executor, functools.partial(func, *args, **kwargs))


class DeploymentTransport(Protocol):
    """Signs and broadcasts deployment transactions"""

    async def send_deployment(
        self,
        data: str,
        value: int = 0,
        gas_limit: Optional[int] = None,
        gas_price: Optional[int] = None
    ) -> str:
        """Broadcast a contract-creation transaction and return its hash"""
        ...

    async def wait_for_receipt(self, tx_hash: str, timeout: float = 120.0) -> Mapping[str, Any]:
        """Wait until the transaction is mined and return its receipt"""
        ...


class Web3DeploymentTransport:
    """
    DeploymentTransport backed by web3.py and a local eth-account signer.
    """

    def __init__(
        self,
        web3: Web3,
        account: LocalAccount,
        retry_config: Optional[AsyncRetry] = None,
        poll_interval: float = 1.0,
        gas_padding: float = 1.2
    ):
        """
        Initialize the transport.

        Args:
            web3: Web3 instance connected to the target chain
            account: Account that signs and pays for deployments
            retry_config: Retry policy for RPC calls
            poll_interval: Seconds between receipt polls
            gas_padding: Multiplier applied to gas estimates
        """
        self.web3 = web3
        self.account = account
        self.retry = retry_config or AsyncRetry(
            max_retries=3,
            base_delay=1.0,
            max_delay=30.0
        )
        self.poll_interval = poll_interval
        self.gas_padding = gas_padding

    @property
    def address(self) -> str:
        return self.account.address

    async def _build_transaction(
        self,
        data: str,
        value: int,
        gas_limit: Optional[int],
        gas_price: Optional[int]
    ) -> TxParams:
        tx: TxParams = {
            'from': self.account.address,
            'data': data,
            'value': Wei(value),
        }

        tx['chainId'] = await self.retry.execute(run_sync, lambda: self.web3.eth.chain_id)
        tx['nonce'] = await self.retry.execute(
            run_sync,
            self.web3.eth.get_transaction_count,
            self.account.address,
            'pending'
        )

        if gas_price is not None:
            tx['gasPrice'] = Wei(gas_price)
        else:
            tx['gasPrice'] = await self.retry.execute(run_sync, lambda: self.web3.eth.gas_price)

        if gas_limit is not None:
            tx['gas'] = gas_limit
        else:
            estimate = await self.retry.execute(
                run_sync,
                self.web3.eth.estimate_gas,
                {'from': tx['from'], 'data': data, 'value': tx['value']}
            )
            tx['gas'] = max(int(estimate * self.gas_padding), 21000)
            LOG.debug(f"Gas estimate: {estimate} -> {tx['gas']} (with padding)")

        return tx

    async def send_deployment(
        self,
        data: str,
        value: int = 0,
        gas_limit: Optional[int] = None,
        gas_price: Optional[int] = None
    ) -> str:
        tx = await self._build_transaction(data, value, gas_limit, gas_price)

        signed_tx = self.account.sign_transaction(tx)
        # eth-account renamed rawTransaction to raw_transaction in 0.13
        raw_tx = getattr(signed_tx, 'raw_transaction', None) or getattr(signed_tx, 'rawTransaction')

        tx_hash = await run_sync(self.web3.eth.send_raw_transaction, raw_tx)
        tx_hash_hex = Web3.to_hex(tx_hash)
        LOG.info(f"Deployment transaction sent: {tx_hash_hex}")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str, timeout: float = 120.0) -> Dict[str, Any]:
        receipt = await self.retry.execute(
            run_sync,
            self.web3.eth.wait_for_transaction_receipt,
            tx_hash,
            timeout=timeout,
            poll_latency=self.poll_interval
        )
        return dict(receipt)
