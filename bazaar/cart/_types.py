"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from bazaar._types import ProductId


@dataclass(frozen=True, slots=True)
class SelectedOptions:
    color: str | None = None
    size: str | None = None


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One cart line as the browser holds it.

    unit_price is what the customer saw; checkout reprices from the catalog.
    """

    product_id: ProductId
    name: str
    unit_price: Decimal
    quantity: int
    options: SelectedOptions = field(default_factory=SelectedOptions)


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Ordered, immutable cart contents at checkout time."""

    lines: tuple[CartLine, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def product_ids(self) -> frozenset[ProductId]:
        return frozenset(line.product_id for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


__all__ = ("SelectedOptions", "CartLine", "CartSnapshot")
