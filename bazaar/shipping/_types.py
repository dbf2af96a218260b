"""
Shipping types.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class ShippingRate:
    """A delivery area with its flat fee. Reference data, read-only."""

    id: str
    area_name: str
    rate: Decimal
    estimated_days: int | None = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class ShippingQuote:
    """Resolved shipping for one checkout."""

    rate_id: str
    area_name: str
    fee: Decimal
    estimated_days: int | None = None

    @classmethod
    def of(cls, rate: ShippingRate) -> ShippingQuote:
        return cls(rate.id, rate.area_name, rate.rate, rate.estimated_days)


__all__ = ("ShippingRate", "ShippingQuote")
