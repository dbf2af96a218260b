"""
Checkout configuration.

    config = (
        CheckoutConfig()
        .with_timeout(seconds=5)
        .with_payment_accounts(PaymentAccounts(bkash="01700000000"))
    )

Note: Immutable — each with_* returns a new config.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from collections.abc import Mapping


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Accounts — typed site settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PaymentAccounts:
    """Receiving numbers for mobile-banking payments."""

    bkash: str | None = None
    rocket: str | None = None
    nagad: str | None = None

    def number_for(self, method: str) -> str | None:
        """Receiving number for a payment method value, None for cash on delivery."""
        return {
            "bkash": self.bkash,
            "rocket": self.rocket,
            "nagad": self.nagad,
        }.get(method)


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Config
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutConfig:
    """
    Engine configuration.

    upstream_timeout bounds every store call (lookups and the order write).
    """

    upstream_timeout: timedelta = timedelta(seconds=10)
    currency_symbol: str = "৳"
    payment_accounts: PaymentAccounts = field(default_factory=PaymentAccounts)

    @property
    def timeout_seconds(self) -> float:
        return self.upstream_timeout.total_seconds()

    def with_timeout(
        self,
        *,
        seconds: float | None = None,
        delta: timedelta | None = None,
    ) -> CheckoutConfig:
        """
        Set the upstream call timeout.

        Example:
            .with_timeout(seconds=5)
        """
        if delta is None:
            delta = timedelta(seconds=10 if seconds is None else seconds)
        return replace(self, upstream_timeout=delta)

    def with_currency(self, symbol: str) -> CheckoutConfig:
        return replace(self, currency_symbol=symbol)

    def with_payment_accounts(self, accounts: PaymentAccounts) -> CheckoutConfig:
        return replace(self, payment_accounts=accounts)

    def format(self, amount: object) -> str:
        """Render an amount for customer-facing messages."""
        return f"{self.currency_symbol}{amount}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CheckoutConfig:
        """
        Read configuration from BAZAAR_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        config = cls()

        timeout = env.get("BAZAAR_UPSTREAM_TIMEOUT")
        if timeout:
            config = config.with_timeout(seconds=float(timeout))

        symbol = env.get("BAZAAR_CURRENCY_SYMBOL")
        if symbol:
            config = config.with_currency(symbol)

        return config.with_payment_accounts(
            PaymentAccounts(
                bkash=env.get("BAZAAR_BKASH_NUMBER"),
                rocket=env.get("BAZAAR_ROCKET_NUMBER"),
                nagad=env.get("BAZAAR_NAGAD_NUMBER"),
            )
        )


def database_url(environ: Mapping[str, str] | None = None) -> str:
    """Database URL from BAZAAR_DATABASE_URL, in-memory SQLite by default."""
    env = os.environ if environ is None else environ
    return env.get("BAZAAR_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


__all__ = (
    "PaymentAccounts",
    "CheckoutConfig",
    "database_url",
)
