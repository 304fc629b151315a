"""
Sequence Manager
Serializes signed transactions per account so sequence numbers never race
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Optional
from loguru import logger


class SequenceManager:
    """
    Hands out one lock per signing address

    A signed transaction holds its account's lock from broadcast until
    the chain confirms or rejects it. Different accounts never block
    each other.
    """

    def __init__(self):
        """Initialize Sequence Manager"""
        self._locks: Dict[str, asyncio.Lock] = {}
        self._in_flight: Dict[str, str] = {}

    def lock_for(self, address: str) -> asyncio.Lock:
        """
        Get the lock guarding an account

        Args:
            address: Signing account address

        Returns:
            asyncio.Lock for that address
        """
        if address not in self._locks:
            self._locks[address] = asyncio.Lock()
        return self._locks[address]

    @asynccontextmanager
    async def reserve(self, address: str, operation: str):
        """
        Hold an account for one signed operation

        Args:
            address: Signing account address
            operation: Operation name, for logging
        """
        lock = self.lock_for(address)

        if lock.locked():
            logger.debug(
                f"{operation} waiting for {address} "
                f"({self._in_flight.get(address)} in flight)"
            )

        async with lock:
            self._in_flight[address] = operation
            try:
                yield
            finally:
                self._in_flight.pop(address, None)

    def in_flight(self, address: str) -> Optional[str]:
        """Operation currently holding an account, if any"""
        return self._in_flight.get(address)

    def pending_count(self) -> int:
        """Number of accounts with a transaction in flight"""
        return len(self._in_flight)
