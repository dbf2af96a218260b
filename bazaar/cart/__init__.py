"""
Cart — snapshot types and the session cart store.

    from bazaar import cart

    store = cart.MemoryCartStore(cart.CartSnapshot(lines=(...)))
"""

from bazaar.cart._types import SelectedOptions, CartLine, CartSnapshot
from bazaar.cart._store import CartStore, MemoryCartStore

__all__ = (
    "SelectedOptions",
    "CartLine",
    "CartSnapshot",
    "CartStore",
    "MemoryCartStore",
)
