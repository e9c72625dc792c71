"""Per-bill mutual exclusion"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class BillLocks:
    """
    Registry of asyncio locks keyed by bill index.

    Operations touching the same bill are serialized; operations on
    different bills never wait on each other. A separate append lock
    serializes allocation of new ledger indexes.

    A bill's lock lives only while some task holds or waits for it.
    """

    _locks: Dict[int, asyncio.Lock] = {}
    _users: Dict[int, int] = {}
    _append_lock: asyncio.Lock = asyncio.Lock()

    @classmethod
    @asynccontextmanager
    async def hold(cls, bill_index: int) -> AsyncIterator[None]:
        """
        Hold the lock of one bill for the duration of the block.

        Args:
            bill_index: Ledger index of the bill
        """
        lock = cls._locks.setdefault(bill_index, asyncio.Lock())
        cls._users[bill_index] = cls._users.get(bill_index, 0) + 1
        try:
            async with lock:
                yield
        finally:
            cls._users[bill_index] -= 1
            if not cls._users[bill_index]:
                del cls._users[bill_index]
                del cls._locks[bill_index]

    @classmethod
    @asynccontextmanager
    async def appending(cls) -> AsyncIterator[None]:
        """Hold the ledger append lock"""
        async with cls._append_lock:
            yield

    @classmethod
    def reset(cls) -> None:
        """Drop all locks (used when the event loop is replaced)"""
        cls._locks = {}
        cls._users = {}
        cls._append_lock = asyncio.Lock()
