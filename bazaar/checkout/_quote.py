"""
Quote — the checkout computation as a graph.

                  InputNode
             ┌────────┴────────┐
       PricedCartNode     ShippingNode
             │                 │
         PromoNode             │
             └────────┬────────┘
                  QuoteNode

The catalog reprice and the shipping lookup run concurrently; the promo
check waits for the live subtotal. Nodes carry Result values so one
failed branch never cancels the others; QuoteNode picks the first error
in a fixed order (shipping, cart, promo).
"""

from dataclasses import dataclass
from decimal import Decimal

from kungfu import Result, Ok, Error

from bazaar import _upstream
from bazaar import graph as G
from bazaar._types import ProductId, UserId
from bazaar.cart import CartSnapshot, SelectedOptions
from bazaar.config import CheckoutConfig
from bazaar.errors import CheckoutError, Errors
from bazaar.pricing import PriceBreakdown, line_total, subtotal
from bazaar.promo import AppliedPromo, PromoCodeValidator
from bazaar.shipping import ShippingQuote, ShippingRateResolver
from bazaar.store import CheckoutStore


# ═══════════════════════════════════════════════════════════════════════════════
# Values
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class QuoteInput:
    """Everything a quote needs, injected into the graph scope."""

    store: CheckoutStore
    config: CheckoutConfig
    resolver: ShippingRateResolver
    validator: PromoCodeValidator
    user_id: UserId
    cart: CartSnapshot
    shipping_rate_id: str
    promo_code: str | None = None


@dataclass(frozen=True, slots=True)
class PricedLine:
    """A cart line at its live catalog price."""

    product_id: ProductId
    name: str
    unit_price: Decimal
    quantity: int
    options: SelectedOptions

    @property
    def total(self) -> Decimal:
        return line_total(self.unit_price, self.quantity)


@dataclass(frozen=True, slots=True)
class PricedCart:
    lines: tuple[PricedLine, ...]

    @property
    def subtotal(self) -> Decimal:
        return subtotal((line.unit_price, line.quantity) for line in self.lines)

    @property
    def product_ids(self) -> frozenset[ProductId]:
        return frozenset(line.product_id for line in self.lines)

    @property
    def prices(self) -> dict[ProductId, Decimal]:
        return {line.product_id: line.unit_price for line in self.lines}


@dataclass(frozen=True, slots=True)
class Quote:
    """A fully priced checkout, ready to be written."""

    lines: tuple[PricedLine, ...]
    shipping: ShippingQuote
    promo: AppliedPromo | None
    breakdown: PriceBreakdown

    @property
    def total(self) -> Decimal:
        return self.breakdown.total

    @property
    def discount(self) -> Decimal:
        return self.breakdown.discount


# ═══════════════════════════════════════════════════════════════════════════════
# Nodes
# ═══════════════════════════════════════════════════════════════════════════════


@G.node
class InputNode:
    """Entry point: wraps the QuoteInput."""

    def __init__(self, data: QuoteInput) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, quote_input: QuoteInput) -> "InputNode":
        return cls(quote_input)


@G.node
class PricedCartNode:
    """Reprice every cart line from the live catalog."""

    def __init__(self, data: Result[PricedCart, CheckoutError]) -> None:
        self.data = data

    @classmethod
    async def __compose__(cls, inp: InputNode) -> "PricedCartNode":
        cart = inp.data.cart
        if cart.is_empty:
            return cls(Error(Errors.invalid_cart("Your cart is empty")))
        if any(line.quantity < 1 for line in cart.lines):
            return cls(Error(Errors.invalid_cart("Quantities must be at least 1")))

        found = await _upstream.call(
            "Products",
            lambda: inp.data.store.get_products(cart.product_ids),
            timeout=inp.data.config.timeout_seconds,
        )
        match found:
            case Error(err):
                return cls(Error(err))
            case Ok(products):
                pass

        lines: list[PricedLine] = []
        for line in cart.lines:
            product = products.get(line.product_id)
            if product is None or not product.is_active:
                return cls(Error(Errors.invalid_cart(
                    f"{line.name} is no longer available"
                )))
            lines.append(PricedLine(
                product_id=line.product_id,
                name=product.name,
                unit_price=product.effective_price,
                quantity=line.quantity,
                options=line.options,
            ))
        return cls(Ok(PricedCart(tuple(lines))))


@G.node
class ShippingNode:
    """Resolve the selected delivery area."""

    def __init__(self, data: Result[ShippingQuote, CheckoutError]) -> None:
        self.data = data

    @classmethod
    async def __compose__(cls, inp: InputNode) -> "ShippingNode":
        return cls(await inp.data.resolver.resolve(inp.data.shipping_rate_id))


@G.node
class PromoNode:
    """Check the promo against the live subtotal. Ok(None) when there is nothing to apply."""

    def __init__(self, data: Result[AppliedPromo | None, CheckoutError]) -> None:
        self.data = data

    @classmethod
    async def __compose__(cls, inp: InputNode, cart: PricedCartNode) -> "PromoNode":
        code = inp.data.promo_code
        if code is None or not code.strip():
            return cls(Ok(None))

        match cart.data:
            case Error(_):
                # nothing to price the promo against; QuoteNode reports the cart
                return cls(Ok(None))
            case Ok(priced):
                applied = await inp.data.validator.check(
                    code,
                    priced.subtotal,
                    priced.product_ids,
                    inp.data.user_id,
                    prices=priced.prices,
                )
                return cls(applied)


@G.node
class QuoteNode:
    """Combine the branches into one priced quote."""

    def __init__(self, data: Result[Quote, CheckoutError]) -> None:
        self.data = data

    @classmethod
    async def __compose__(
        cls,
        shipping: ShippingNode,
        cart: PricedCartNode,
        promo: PromoNode,
    ) -> "QuoteNode":
        match (shipping.data, cart.data, promo.data):
            case (Error(err), _, _) | (_, Error(err), _) | (_, _, Error(err)):
                return cls(Error(err))
            case (Ok(rate), Ok(priced), Ok(applied)):
                discount = applied.discount if applied is not None else Decimal("0")
                return cls(Ok(Quote(
                    lines=priced.lines,
                    shipping=rate,
                    promo=applied,
                    breakdown=PriceBreakdown.of(priced.subtotal, rate.fee, discount),
                )))

    @classmethod
    async def execute(cls, quote_input: QuoteInput) -> Result[Quote, CheckoutError]:
        """Type-safe entry point."""
        return (await G.compose(cls, quote_input)).data


__all__ = (
    "QuoteInput",
    "PricedLine",
    "PricedCart",
    "Quote",
    "InputNode",
    "PricedCartNode",
    "ShippingNode",
    "PromoNode",
    "QuoteNode",
)
