"""
Cart store — the session's cart behind an explicit interface.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from bazaar.cart._types import CartSnapshot


class CartStore(Protocol):
    """
    Per-session cart storage.

    The checkout reads the snapshot once and clears it only after the order
    is committed.
    """

    async def get(self) -> CartSnapshot:
        ...

    async def set(self, snapshot: CartSnapshot) -> None:
        ...

    async def clear(self) -> None:
        ...


class MemoryCartStore:
    """
    In-memory cart.

    Note: For tests and single-process demos.
    """

    def __init__(self, snapshot: CartSnapshot | None = None) -> None:
        self._snapshot = snapshot if snapshot is not None else CartSnapshot()
        self._lock = asyncio.Lock()

    async def get(self) -> CartSnapshot:
        async with self._lock:
            return self._snapshot

    async def set(self, snapshot: CartSnapshot) -> None:
        async with self._lock:
            self._snapshot = snapshot

    async def clear(self) -> None:
        async with self._lock:
            self._snapshot = CartSnapshot()


__all__ = ("CartStore", "MemoryCartStore")
