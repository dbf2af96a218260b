"""
Promo code types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from bazaar._types import ProductId


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class AppliesTo(Enum):
    ALL = "all"
    SPECIFIC = "specific"


def normalize_code(code: str) -> str:
    """Codes are case-insensitive and stored uppercase."""
    return code.strip().upper()


@dataclass(frozen=True, slots=True)
class PromoCode:
    """
    A discount voucher.

    max_uses / usage_per_user of None mean unbounded.
    product_ids is only meaningful when applies_to is SPECIFIC.
    """

    id: str
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    min_order_amount: Decimal = Decimal("0.00")
    max_uses: int | None = None
    used_count: int = 0
    usage_per_user: int | None = None
    applies_to: AppliesTo = AppliesTo.ALL
    product_ids: frozenset[ProductId] | None = None
    is_active: bool = True
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return _utc(self.expires_at) <= _utc(now)

    def is_live(self, now: datetime) -> bool:
        """Active and not expired. An expired code is inactive whatever is_active says."""
        return self.is_active and not self.is_expired(now)

    @property
    def is_exhausted(self) -> bool:
        return self.max_uses is not None and self.used_count >= self.max_uses


@dataclass(frozen=True, slots=True)
class AppliedPromo:
    """An accepted promo and the discount it grants on this cart."""

    promo: PromoCode
    discount: Decimal

    @property
    def code(self) -> str:
        return self.promo.code


def _utc(moment: datetime) -> datetime:
    # naive timestamps are taken as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


__all__ = (
    "DiscountType",
    "AppliesTo",
    "normalize_code",
    "PromoCode",
    "AppliedPromo",
)