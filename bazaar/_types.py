"""
Core types for bazaar.

Re-exports from kungfu + money and identity types shared by every module.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

Money = Decimal
"""Amount in taka, always quantized to poisha (0.01)."""

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value: Decimal | int | float | str) -> Decimal:
    """
    Coerce to Money.

    Floats go through str() so 999.99 stays 999.99.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor(value: Decimal) -> int:
    """Money → integer poisha."""
    return int(money(value) * 100)


def from_minor(value: int) -> Decimal:
    """Integer poisha → Money."""
    return money(Decimal(value) / 100)


# ═══════════════════════════════════════════════════════════════════════════════
# IDs
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class UserId:
    value: str


@dataclass(frozen=True, slots=True)
class ProductId:
    value: str


@dataclass(frozen=True, slots=True)
class OrderId:
    value: str

    @property
    def short(self) -> str:
        """First 8 characters, as shown to customers."""
        return self.value[:8]


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Money
    "Money",
    "CENT",
    "ZERO",
    "money",
    "to_minor",
    "from_minor",
    # IDs
    "UserId",
    "ProductId",
    "OrderId",
)
