"""
HTTP schemas — pydantic models at the edge, domain types inside.

Requests convert with to_domain(), responses with from_domain().
"""

from decimal import Decimal

from pydantic import BaseModel

from bazaar.checkout import OrderConfirmation, PlaceOrderRequest, Quote
from bazaar.errors import CheckoutError
from bazaar.orders import PaymentInfo, PaymentMethod, ShippingAddress
from bazaar.shipping import ShippingRate


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class QuoteIn(BaseModel):
    shipping_rate_id: str
    promo_code: str | None = None


class AddressIn(BaseModel):
    # blanks are reported by the checkout as INVALID_DETAILS
    full_name: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(
            full_name=self.full_name,
            phone=self.phone,
            address=self.address,
            city=self.city,
        )


class PaymentIn(BaseModel):
    method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY
    sender_number: str | None = None
    transaction_id: str | None = None

    def to_domain(self) -> PaymentInfo:
        return PaymentInfo(
            method=self.method,
            sender_number=self.sender_number,
            transaction_id=self.transaction_id,
        )


class PlaceOrderIn(BaseModel):
    shipping_rate_id: str
    promo_code: str | None = None
    payment: PaymentIn = PaymentIn()
    address: AddressIn
    notes: str | None = None

    def to_domain(self) -> PlaceOrderRequest:
        return PlaceOrderRequest(
            shipping_rate_id=self.shipping_rate_id,
            payment=self.payment.to_domain(),
            address=self.address.to_domain(),
            promo_code=self.promo_code,
            notes=self.notes,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingRateOut(BaseModel):
    id: str
    area_name: str
    rate: Decimal
    estimated_days: int | None = None

    @classmethod
    def from_domain(cls, rate: ShippingRate) -> "ShippingRateOut":
        return cls(
            id=rate.id,
            area_name=rate.area_name,
            rate=rate.rate,
            estimated_days=rate.estimated_days,
        )


class LineOut(BaseModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    total: Decimal


class QuoteOut(BaseModel):
    lines: list[LineOut]
    area_name: str
    estimated_days: int | None
    subtotal: Decimal
    shipping_fee: Decimal
    discount: Decimal
    total: Decimal
    promo_code: str | None = None

    @classmethod
    def from_domain(cls, quote: Quote) -> "QuoteOut":
        breakdown = quote.breakdown
        return cls(
            lines=[
                LineOut(
                    product_id=line.product_id.value,
                    name=line.name,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    total=line.total,
                )
                for line in quote.lines
            ],
            area_name=quote.shipping.area_name,
            estimated_days=quote.shipping.estimated_days,
            subtotal=breakdown.subtotal,
            shipping_fee=breakdown.shipping_fee,
            discount=breakdown.discount,
            total=breakdown.total,
            promo_code=quote.promo.code if quote.promo is not None else None,
        )


class OrderItemOut(BaseModel):
    product_id: str
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    order_id: str
    short_id: str
    status: str
    total_amount: Decimal
    shipping_cost: Decimal
    discount_amount: Decimal
    payment_method: str
    promo_code: str | None
    items: list[OrderItemOut]
    message: str
    pay_to: str | None = None

    @classmethod
    def from_domain(cls, confirmation: OrderConfirmation) -> "OrderOut":
        order = confirmation.order
        return cls(
            order_id=order.id.value,
            short_id=confirmation.short_id,
            status=order.status.value,
            total_amount=order.total_amount,
            shipping_cost=order.shipping_cost,
            discount_amount=order.discount_amount,
            payment_method=order.payment_method.value,
            promo_code=order.promo_code,
            items=[
                OrderItemOut(
                    product_id=item.product_id.value,
                    quantity=item.quantity,
                    price=item.price,
                )
                for item in confirmation.items
            ],
            message=confirmation.message,
            pay_to=confirmation.pay_to,
        )


class ErrorOut(BaseModel):
    kind: str
    message: str
    fields: list[str] = []

    @classmethod
    def from_domain(cls, error: CheckoutError) -> "ErrorOut":
        return cls(kind=error.kind.value, message=error.message, fields=list(error.fields))


__all__ = (
    "QuoteIn",
    "AddressIn",
    "PaymentIn",
    "PlaceOrderIn",
    "ShippingRateOut",
    "LineOut",
    "QuoteOut",
    "OrderItemOut",
    "OrderOut",
    "ErrorOut",
)
