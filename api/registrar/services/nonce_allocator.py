"""Nonce allocation for transactions sent from the signer account.

Every registration that reaches the registry writes from the same signer
account, so concurrent requests race on the account nonce. Callers use::

    async with allocator.reserve() as nonce:
        await writer.register(account_address, identity, nonce)

The body of the ``async with`` is the submission. Strategies:

- ``SequentialNonceAllocator`` (default): one ledger query, then a local
  counter; allocate-and-submit is a critical section under an asyncio lock
  scoped to the signer account. A failed submission drops the cached counter
  so the next reservation re-reads the ledger.
- ``TimestampNonceAllocator``: microsecond epoch, no lock. Starknet accepts only
  a nonce equal to the account's current nonce, so a timestamp nonce is
  rejected by the ledger on every submission and the caller sees a registry
  failure. Kept for ledgers with non-sequential nonces. Repeated values within
  one microsecond are counted and logged as collisions.
- ``LedgerAssignedNonceAllocator``: yields ``None`` and lets the signer account
  fetch its own nonce. No application-level ordering.

None of them retries on conflict.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Protocol

from registrar.services.starknet_rpc import StarknetRpcClient

logger = logging.getLogger(__name__)


class NonceAllocator(Protocol):
    def reserve(self) -> AsyncContextManager[int | None]:
        ...


class SequentialNonceAllocator:
    def __init__(self, rpc: StarknetRpcClient, signer_address: int, block_id: str = "pending"):
        self._rpc = rpc
        self._signer_address = signer_address
        self._block_id = block_id
        self._lock = asyncio.Lock()
        self._next_nonce_value: int | None = None

    @asynccontextmanager
    async def reserve(self) -> AsyncIterator[int]:
        async with self._lock:
            nonce = await self._next_nonce()
            try:
                yield nonce
            except BaseException:
                # The nonce may or may not have been consumed; resync from the ledger.
                self._next_nonce_value = None
                raise
            self._next_nonce_value = nonce + 1

    async def _next_nonce(self) -> int:
        if self._next_nonce_value is None:
            self._next_nonce_value = await self._rpc.get_nonce(self._signer_address, self._block_id)
            logger.info(
                "signer_nonce_synced signer=%s nonce=%s",
                hex(self._signer_address),
                self._next_nonce_value,
            )
        return self._next_nonce_value


class TimestampNonceAllocator:
    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self._last_issued: int | None = None
        self.collisions = 0

    def next_nonce(self) -> int:
        nonce = self._clock() // 1_000
        if self._last_issued is not None and nonce <= self._last_issued:
            self.collisions += 1
            logger.warning(
                "timestamp_nonce_collision nonce=%s last_issued=%s collisions=%s",
                nonce,
                self._last_issued,
                self.collisions,
            )
        else:
            self._last_issued = nonce
        return nonce

    @asynccontextmanager
    async def reserve(self) -> AsyncIterator[int]:
        yield self.next_nonce()


class LedgerAssignedNonceAllocator:
    @asynccontextmanager
    async def reserve(self) -> AsyncIterator[None]:
        yield None
