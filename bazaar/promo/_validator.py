"""
PromoCodeValidator — live lookup + rules.

    validator = PromoCodeValidator(store, config)
    match await validator.check("save10", subtotal, cart.product_ids, user_id):
        case Ok(applied):
            applied.discount
        case Error(err):
            err.kind  # PROMO_*

Validation never consumes a use; used_count only moves when an order
commits.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING
from collections.abc import Callable, Mapping

import structlog
from kungfu import Result, Ok, Error

from bazaar import _upstream
from bazaar._types import ProductId, UserId
from bazaar.config import CheckoutConfig
from bazaar.errors import CheckoutError, Errors
from bazaar.promo._rules import evaluate
from bazaar.promo._types import AppliedPromo, AppliesTo, PromoCode, normalize_code

if TYPE_CHECKING:
    from bazaar.store import CheckoutStore

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PromoCodeValidator:
    def __init__(
        self,
        store: CheckoutStore,
        config: CheckoutConfig,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._config = config
        self._clock = clock

    async def validate(
        self,
        code: str,
        subtotal: Decimal,
        cart_product_ids: frozenset[ProductId],
        user_id: UserId,
        user_prior_usage_count: int,
        *,
        prices: Mapping[ProductId, Decimal] | None = None,
    ) -> Result[AppliedPromo, CheckoutError]:
        """
        Accept or reject code for this cart.

        prices are live effective prices by product id. When omitted they
        are loaded from the catalog for SPECIFIC promos.
        """
        match await self.lookup(code):
            case Error(err):
                return Error(err)
            case Ok(promo):
                return await self._apply(
                    promo, subtotal, cart_product_ids, user_id, user_prior_usage_count, prices
                )

    async def check(
        self,
        code: str,
        subtotal: Decimal,
        cart_product_ids: frozenset[ProductId],
        user_id: UserId,
        *,
        prices: Mapping[ProductId, Decimal] | None = None,
    ) -> Result[AppliedPromo, CheckoutError]:
        """validate(), with the user's prior usage read from the usage ledger."""
        match await self.lookup(code):
            case Error(err):
                return Error(err)
            case Ok(promo):
                usage = await self._prior_usage(promo, user_id)

        match usage:
            case Error(err):
                return Error(err)
            case Ok(prior):
                return await self._apply(
                    promo, subtotal, cart_product_ids, user_id, prior, prices
                )

    async def _prior_usage(
        self, promo: PromoCode, user_id: UserId
    ) -> Result[int, CheckoutError]:
        return await _upstream.call(
            "Promo usage",
            lambda: self._store.count_promo_usage(promo.id, user_id),
            timeout=self._config.timeout_seconds,
        )

    async def lookup(self, code: str) -> Result[PromoCode, CheckoutError]:
        """Live (active, unexpired) promo by normalized code."""
        normalized = normalize_code(code)
        if not normalized:
            return Error(Errors.promo_not_found(code))

        found = await _upstream.call(
            "Promo codes",
            lambda: self._store.get_promo(normalized),
            timeout=self._config.timeout_seconds,
        )
        match found:
            case Error(err):
                return Error(err)
            case Ok(promo) if promo is None or not promo.is_live(self._clock()):
                logger.info("promo_not_found", promo_code=normalized)
                return Error(Errors.promo_not_found(normalized))
            case Ok(promo):
                return Ok(promo)

    async def _apply(
        self,
        promo: PromoCode,
        subtotal: Decimal,
        cart_product_ids: frozenset[ProductId],
        user_id: UserId,
        prior_usage: int,
        prices: Mapping[ProductId, Decimal] | None,
    ) -> Result[AppliedPromo, CheckoutError]:
        match await self._eligible_prices(promo, cart_product_ids, prices or {}):
            case Error(err):
                return Error(err)
            case Ok(loaded):
                prices = loaded

        result = evaluate(
            promo,
            subtotal=subtotal,
            cart_product_ids=cart_product_ids,
            prior_usage=prior_usage,
            prices=prices,
            now=self._clock(),
        )
        match result:
            case Ok(applied):
                logger.info(
                    "promo_accepted",
                    promo_code=promo.code,
                    user_id=user_id.value,
                    discount=str(applied.discount),
                )
            case Error(err):
                logger.info(
                    "promo_rejected",
                    promo_code=promo.code,
                    user_id=user_id.value,
                    kind=err.kind.value,
                )
        return result

    async def _eligible_prices(
        self,
        promo: PromoCode,
        cart_product_ids: frozenset[ProductId],
        known: Mapping[ProductId, Decimal],
    ) -> Result[dict[ProductId, Decimal], CheckoutError]:
        """Fill in catalog prices for eligible products the caller did not price."""
        if promo.applies_to is not AppliesTo.SPECIFIC:
            return Ok(dict(known))

        eligible = cart_product_ids & (promo.product_ids or frozenset())
        missing = frozenset(pid for pid in eligible if pid not in known)
        if not missing:
            return Ok(dict(known))

        found = await _upstream.call(
            "Products",
            lambda: self._store.get_products(missing),
            timeout=self._config.timeout_seconds,
        )
        match found:
            case Error(err):
                return Error(err)
            case Ok(products):
                if len(products) != len(missing):
                    return Error(Errors.invalid_cart("A product in your cart is no longer available"))
                return Ok({**known, **{pid: p.effective_price for pid, p in products.items()}})


__all__ = ("PromoCodeValidator", "utcnow")
