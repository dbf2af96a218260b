"""
Notifications — structured checkout outcomes for the UI layer.

The engine emits Outcome(kind, message); wording, toasts and localization
belong to whoever implements Notifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import structlog

from bazaar._types import OrderId

logger = structlog.get_logger(__name__)

ORDER_PLACED = "order_placed"


@dataclass(frozen=True, slots=True)
class Outcome:
    """
    kind is ORDER_PLACED on success, otherwise the CheckoutErrorKind value.
    """

    kind: str
    message: str
    order_id: OrderId | None = None

    @property
    def ok(self) -> bool:
        return self.kind == ORDER_PLACED


class Notifier(Protocol):
    async def notify(self, outcome: Outcome) -> None:
        ...


class LoggingNotifier:
    """Writes outcomes to the log."""

    async def notify(self, outcome: Outcome) -> None:
        if outcome.ok:
            logger.info("checkout_outcome", kind=outcome.kind, message=outcome.message)
        else:
            logger.warning("checkout_outcome", kind=outcome.kind, message=outcome.message)


class CollectingNotifier:
    """Keeps outcomes in memory. For tests."""

    def __init__(self) -> None:
        self.outcomes: list[Outcome] = []

    async def notify(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)

    @property
    def last(self) -> Outcome | None:
        return self.outcomes[-1] if self.outcomes else None


__all__ = (
    "ORDER_PLACED",
    "Outcome",
    "Notifier",
    "LoggingNotifier",
    "CollectingNotifier",
)
