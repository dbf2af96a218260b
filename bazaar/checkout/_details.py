"""
Checkout form rules.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from bazaar.errors import CheckoutError, Errors
from bazaar.orders import PaymentInfo, ShippingAddress

_ADDRESS_FIELDS = ("full_name", "phone", "address", "city")
_PAYMENT_FIELDS = ("sender_number", "transaction_id")


def validate_details(
    address: ShippingAddress, payment: PaymentInfo
) -> Result[None, CheckoutError]:
    """
    Required fields present.

    Mobile-banking payments also need the sender number and transaction id.
    """
    missing = [name for name in _ADDRESS_FIELDS if _blank(getattr(address, name))]
    if payment.method.is_mobile_banking:
        missing += [name for name in _PAYMENT_FIELDS if _blank(getattr(payment, name))]

    if missing:
        return Error(Errors.invalid_details(tuple(missing)))
    return Ok(None)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


__all__ = ("validate_details",)
