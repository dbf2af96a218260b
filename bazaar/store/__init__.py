"""
Store — persistence behind checkout.

    from bazaar import store

    memory = store.MemoryStore()

    session_factory, engine = await store.create_database(url)
    sql = store.SQLAlchemyStore(session_factory)
"""

from bazaar.store._protocol import StoreErrorKind, StoreError, CheckoutStore
from bazaar.store._memory import MemoryStore
from bazaar.store._tables import create_database
from bazaar.store._sqlalchemy import SQLAlchemyStore, PromoConflict

__all__ = (
    "StoreErrorKind",
    "StoreError",
    "CheckoutStore",
    "MemoryStore",
    "create_database",
    "SQLAlchemyStore",
    "PromoConflict",
)
