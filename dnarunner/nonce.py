import asyncio
import collections
import logging
from contextlib import asynccontextmanager

log = logging.getLogger()


class NonceTracker:
    """Hands out nonces per address for transactions submitted before earlier ones finalize.

    While an address has no reservation in flight, the next reservation starts from the node's
    `system_accountNextIndex`; while some are in flight, it continues from the local counter, because
    the node's answer would be stale. Once every reservation of an address is released the local
    counter is forgotten."""

    def __init__(self, chain):
        self.chain = chain
        self._locks = collections.defaultdict(asyncio.Lock)
        self._next = {}
        self._in_flight = collections.Counter()

    async def current_nonce(self, address):
        """Query the node for the next valid nonce of `address`."""
        return await asyncio.to_thread(self.chain.account_nonce, address)

    async def reserve(self, address, count=1):
        """Reserve `count` consecutive nonces for `address`. Returns them as a list."""
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        async with self._locks[address]:
            if self._in_flight[address] == 0:
                self._next[address] = await self.current_nonce(address)
            base = self._next[address]
            self._next[address] = base + count
            self._in_flight[address] += count
        log.debug(f"Reserved nonces {base}..{base + count - 1} for {address}")
        return list(range(base, base + count))

    def release(self, address, count=1):
        """Mark `count` reservations of `address` as finished (finalized or failed)."""
        self._in_flight[address] -= count
        if self._in_flight[address] <= 0:
            del self._in_flight[address]
            self._next.pop(address, None)

    def in_flight(self, address):
        return self._in_flight[address]

    @asynccontextmanager
    async def reserved(self, address, count=1):
        nonces = await self.reserve(address, count)
        try:
            yield nonces
        finally:
            self.release(address, count)
