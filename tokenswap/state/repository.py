"""
Pool record storage.

The storage slot of a pool is owned by the host, not by the swap program. The
processor only sees it through ``PoolRepository`` so tests and simulations can
substitute an in-memory store.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol

from .accounts import Address, require_address
from .pool import POOL_LEN, SwapPool


class PoolRepository(Protocol):
    def load(self, key: Address) -> Optional[SwapPool]:
        """Return the record at ``key`` (possibly uninitialized) or None for an empty slot."""
        ...

    def store(self, key: Address, pool: SwapPool) -> None:
        ...


class InMemoryPoolRepository:
    """
    Dict-backed repository holding packed 274-byte records.

    Records are stored packed so a load always exercises the binary layout,
    exactly like reading an account's data.
    """

    def __init__(self) -> None:
        self._slots: Dict[Address, bytes] = {}

    def allocate(self, key: Address) -> None:
        """Create a zero-filled (uninitialized) slot at ``key``."""
        key = require_address("key", key)
        if key in self._slots:
            raise ValueError("slot already allocated")
        self._slots[key] = bytes(POOL_LEN)

    def load(self, key: Address) -> Optional[SwapPool]:
        data = self._slots.get(bytes(key))
        if data is None:
            return None
        return SwapPool.unpack_unchecked(data)

    def store(self, key: Address, pool: SwapPool) -> None:
        self._slots[require_address("key", key)] = pool.pack()

    def load_raw(self, key: Address) -> Optional[bytes]:
        return self._slots.get(bytes(key))

    def store_raw(self, key: Address, data: bytes) -> None:
        self._slots[require_address("key", key)] = bytes(data)

    def snapshot(self) -> Dict[Address, bytes]:
        return dict(self._slots)

    def restore(self, snapshot: Dict[Address, bytes]) -> None:
        self._slots = dict(snapshot)
