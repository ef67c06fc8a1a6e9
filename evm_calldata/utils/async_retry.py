"""
Retry policy for transport RPC calls

Broadcasting a deployment and polling for its receipt talk to a node over the
network; dropped connections and slow blocks are expected and worth retrying
with exponential backoff. Encoding and deployment assembly never go through
here: their failures are deterministic.
"""

import asyncio
import functools
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type, TypeVar

T = TypeVar('T')
LOG = logging.getLogger(__name__)

TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (ConnectionError, TimeoutError, OSError)


@dataclass
class RetryState:
    """Bookkeeping for one retried call"""
    attempts: int = 0
    total_delay: float = 0.0
    last_error: Optional[BaseException] = None
    started: float = field(default_factory=time.monotonic)

    def summary(self) -> Dict[str, Any]:
        return {
            "attempts": self.attempts,
            "total_delay": self.total_delay,
            "duration": time.monotonic() - self.started,
            "last_error": str(self.last_error) if self.last_error else None,
        }


class AsyncRetry:
    """
    Exponential backoff for coroutine calls.

    Usage:
        retry = AsyncRetry(max_retries=3, base_delay=0.5)
        receipt = await retry.execute(run_sync, web3.eth.get_transaction_receipt, tx_hash)

        @retry
        async def fetch_nonce(address): ...
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
        retry_on: Optional[Tuple[Type[BaseException], ...]] = None,
        stop_on: Optional[Tuple[Type[BaseException], ...]] = None
    ):
        """
        Args:
            max_retries: Total number of attempts, the first call included
            base_delay: Seconds to wait after the first failure
            max_delay: Upper bound for any single wait
            exponential_base: Growth factor between consecutive waits
            jitter: Spread each wait by up to 25% either way
            retry_on: Errors worth another attempt
            stop_on: Errors that end retrying even if listed in retry_on
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retry_on = retry_on or TRANSIENT_ERRORS
        self.stop_on = stop_on or ()

    def backoff(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)"""
        delay = self.base_delay * self.exponential_base ** (attempt - 1)
        if self.jitter:
            delay *= random.uniform(0.75, 1.25)
        return min(delay, self.max_delay)

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on) and not isinstance(error, self.stop_on)

    async def execute(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        """
        Await ``func(*args, **kwargs)``, retrying transient failures.

        Raises:
            The last error once attempts run out, or the first non-retryable one
        """
        state = RetryState()
        name = getattr(func, "__name__", repr(func))

        while True:
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                if not self.is_retryable(e):
                    raise

                state.attempts += 1
                state.last_error = e
                if state.attempts >= self.max_retries:
                    LOG.error(f"{name} gave up after {state.attempts} attempts: {type(e).__name__}: {e}")
                    raise

                delay = self.backoff(state.attempts)
                state.total_delay += delay
                LOG.warning(
                    f"{name} attempt {state.attempts}/{self.max_retries} failed "
                    f"({type(e).__name__}: {e}), retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)
            else:
                if state.attempts:
                    LOG.info(f"{name} succeeded after {state.attempts} retries: {state.summary()}")
                return result

    def __call__(self, func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            return await self.execute(func, *args, **kwargs)

        return wrapper
