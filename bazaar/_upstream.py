"""
Upstream calls — store access under a deadline.

Every call to the backing store goes through call(): it bounds the call by
the configured timeout and folds store failures into CheckoutError.
"""

from __future__ import annotations

import asyncio
from typing import TypeVar
from collections.abc import Awaitable, Callable

import structlog
from combinators import lift as L
from kungfu import Result, Ok, Error

from bazaar.errors import CheckoutError, Errors, StoreError, StoreErrorKind

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def call(
    what: str,
    fn: Callable[[], Awaitable[Result[T, StoreError]]],
    *,
    timeout: float,
    on_conflict: Callable[[StoreError], CheckoutError] | None = None,
    on_raised: Callable[[Exception], CheckoutError] | None = None,
) -> Result[T, CheckoutError]:
    """
    Run one store call.

    Timeouts and UNAVAILABLE store errors become UPSTREAM_UNAVAILABLE.
    CONFLICT goes through on_conflict when given. Other store errors are
    returned as ORDER_PLACEMENT_FAILED. A store that raises instead of
    returning an error goes through on_raised when given, and is treated
    as unreachable otherwise.
    """
    outcome = await L.catching_async(
        lambda: asyncio.wait_for(fn(), timeout),
        on_error=lambda e: _raised(what, e, on_raised),
    )

    match outcome:
        case Error(err):
            return Error(err)
        case Ok(Ok(value)):
            return Ok(value)
        case Ok(Error(store_error)) if (
            store_error.kind is StoreErrorKind.CONFLICT and on_conflict is not None
        ):
            return Error(on_conflict(store_error))
        case Ok(Error(store_error)):
            return Error(from_store_error(what, store_error))


def from_store_error(what: str, error: StoreError) -> CheckoutError:
    if error.kind is StoreErrorKind.UNAVAILABLE:
        logger.warning("upstream_unavailable", call=what, error=error.message)
        return Errors.upstream_unavailable(what, cause=error)
    return Errors.order_placement_failed(cause=error)


def _raised(
    what: str,
    e: Exception,
    on_raised: Callable[[Exception], CheckoutError] | None,
) -> CheckoutError:
    if isinstance(e, TimeoutError):
        logger.warning("upstream_timeout", call=what)
        return Errors.upstream_unavailable(what, cause=e)
    logger.error("upstream_call_failed", call=what, error=str(e))
    if on_raised is not None:
        return on_raised(e)
    return Errors.upstream_unavailable(what, cause=e)


__all__ = ("call", "from_store_error")
