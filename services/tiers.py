"""
Subscription tiers offered on the pricing/subscribe pages.

Pure logic (no Flask imports). The tier is read once from the ?tier= query
parameter and stays fixed for the lifetime of the page.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class SubscriptionTier(str, Enum):
    BASIC = "basic"
    PRO = "pro"
    POWER = "power"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def price_key(self) -> str:
        """Config key holding the Stripe price id for this tier (PRICE_BASIC, ...)."""
        return f"PRICE_{self.name}"


DEFAULT_TIER = SubscriptionTier.BASIC


def parse_tier(value: Optional[str]) -> SubscriptionTier:
    """Normalize a raw query value to a tier; anything unknown falls back to Basic."""
    if value is None:
        return DEFAULT_TIER
    raw = str(value).strip().lower()
    try:
        return SubscriptionTier(raw)
    except ValueError:
        return DEFAULT_TIER
