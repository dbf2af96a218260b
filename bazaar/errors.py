"""
Checkout errors — one discriminated error type for the whole engine.

Every operation returns Result[T, CheckoutError]. The kind tells the caller
what the user has to do next; the message is human-readable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


# ═══════════════════════════════════════════════════════════════════════════════
# Error Kinds
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutErrorKind(Enum):
    """Kinds of checkout errors."""

    INVALID_SHIPPING_AREA = "invalid_shipping_area"  # re-select area
    PROMO_NOT_FOUND = "promo_not_found"
    PROMO_EXHAUSTED = "promo_exhausted"
    PROMO_USER_LIMIT_REACHED = "promo_user_limit_reached"
    PROMO_NOT_APPLICABLE = "promo_not_applicable"
    PROMO_MINIMUM_NOT_MET = "promo_minimum_not_met"
    INVALID_CART = "invalid_cart"  # empty cart or product gone
    INVALID_DETAILS = "invalid_details"  # address / payment form fields
    NOT_AUTHENTICATED = "not_authenticated"  # fatal, redirect to sign-in
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"  # transient
    ORDER_PLACEMENT_FAILED = "order_placement_failed"

    @property
    def is_fatal(self) -> bool:
        return self is CheckoutErrorKind.NOT_AUTHENTICATED


# ═══════════════════════════════════════════════════════════════════════════════
# Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutError:
    """
    Checkout error.

    cause holds the underlying exception or store error, if any.
    fields names the offending form fields for INVALID_DETAILS.
    """

    kind: CheckoutErrorKind
    message: str
    cause: object | None = None
    fields: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class Errors:
    """Constructors for every checkout error kind."""

    @staticmethod
    def invalid_shipping_area(area_id: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INVALID_SHIPPING_AREA,
            f"Shipping area {area_id!r} is not available",
        )

    @staticmethod
    def promo_not_found(code: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.PROMO_NOT_FOUND,
            f"Promo code {code!r} is not valid",
        )

    @staticmethod
    def promo_exhausted(code: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.PROMO_EXHAUSTED,
            f"Promo code {code!r} has reached its usage limit",
        )

    @staticmethod
    def promo_user_limit_reached(code: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.PROMO_USER_LIMIT_REACHED,
            f"You have already used promo code {code!r} the maximum number of times",
        )

    @staticmethod
    def promo_not_applicable(code: str) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.PROMO_NOT_APPLICABLE,
            f"Promo code {code!r} does not apply to any product in your cart",
        )

    @staticmethod
    def promo_minimum_not_met(code: str, minimum: object) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.PROMO_MINIMUM_NOT_MET,
            f"Promo code {code!r} requires an order of at least {minimum}",
        )

    @staticmethod
    def invalid_cart(message: str) -> CheckoutError:
        return CheckoutError(CheckoutErrorKind.INVALID_CART, message)

    @staticmethod
    def invalid_details(fields: tuple[str, ...]) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.INVALID_DETAILS,
            "Please fill in all required fields: " + ", ".join(fields),
            fields=fields,
        )

    @staticmethod
    def not_authenticated() -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.NOT_AUTHENTICATED,
            "Sign in to place an order",
        )

    @staticmethod
    def upstream_unavailable(what: str, cause: object | None = None) -> CheckoutError:
        return CheckoutError(
            CheckoutErrorKind.UPSTREAM_UNAVAILABLE,
            f"{what} is temporarily unavailable, please try again",
            cause=cause,
        )

    @staticmethod
    def order_placement_failed(cause: object | None = None) -> CheckoutError:
        detail = f": {cause}" if cause is not None else ""
        return CheckoutError(
            CheckoutErrorKind.ORDER_PLACEMENT_FAILED,
            f"Could not place the order{detail}",
            cause=cause,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


class StoreErrorKind(Enum):
    UNAVAILABLE = auto()  # backend unreachable
    CONFLICT = auto()  # conditional promo increment lost
    FAILED = auto()  # write failed, transaction rolled back


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    kind: StoreErrorKind
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutErrorKind",
    "CheckoutError",
    "Errors",
    "StoreErrorKind",
    "StoreError",
)
