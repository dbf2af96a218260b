"""
ShippingRateResolver — area id → flat fee and lead time.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from kungfu import Result, Ok, Error

from bazaar import _upstream
from bazaar.config import CheckoutConfig
from bazaar.errors import CheckoutError, Errors
from bazaar.shipping._types import ShippingQuote, ShippingRate

if TYPE_CHECKING:
    from bazaar.store import CheckoutStore

logger = structlog.get_logger(__name__)


class ShippingRateResolver:
    """Pure reads against the shipping_rates reference table."""

    def __init__(self, store: CheckoutStore, config: CheckoutConfig) -> None:
        self._store = store
        self._config = config

    async def resolve(self, area_id: str) -> Result[ShippingQuote, CheckoutError]:
        """Unknown or inactive area ⇒ INVALID_SHIPPING_AREA."""
        if not area_id:
            return Error(Errors.invalid_shipping_area(area_id))

        found = await _upstream.call(
            "Shipping rates",
            lambda: self._store.get_shipping_rate(area_id),
            timeout=self._config.timeout_seconds,
        )
        match found:
            case Error(err):
                return Error(err)
            case Ok(rate):
                if rate is None or not rate.is_active:
                    logger.info("shipping_area_rejected", area_id=area_id)
                    return Error(Errors.invalid_shipping_area(area_id))
                return Ok(ShippingQuote.of(rate))

    async def list_active(self) -> Result[list[ShippingRate], CheckoutError]:
        """Active areas for the selector, by name."""
        found = await _upstream.call(
            "Shipping rates",
            self._store.list_shipping_rates,
            timeout=self._config.timeout_seconds,
        )
        match found:
            case Error(err):
                return Error(err)
            case Ok(rates):
                active = [r for r in rates if r.is_active]
                return Ok(sorted(active, key=lambda r: r.area_name))


__all__ = ("ShippingRateResolver",)
