"""
Shipping — delivery areas and their flat fees.

    resolver = ShippingRateResolver(store, config)
    quote = await resolver.resolve("dhaka")
"""

from bazaar.shipping._types import ShippingRate, ShippingQuote
from bazaar.shipping._resolver import ShippingRateResolver

__all__ = ("ShippingRate", "ShippingQuote", "ShippingRateResolver")
