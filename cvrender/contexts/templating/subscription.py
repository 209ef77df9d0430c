"""
Subscription tiers.

Tiers form a total order by rank. Access checks compare ranks, never names,
so "at least this tier" is a single comparison and new tiers only need a rank.
"""

from enum import Enum


class SubscriptionTier(Enum):
    """Subscription level gating template visibility."""

    FREE = (1, "Free")
    BASIC = (2, "Basic")
    PROFESSIONAL = (3, "Professional")

    def __init__(self, rank: int, display_name: str):
        self.rank = rank
        self.display_name = display_name

    def is_at_least(self, other: "SubscriptionTier") -> bool:
        """True if this tier has the same or more capabilities than other."""
        return self.rank >= other.rank

    def __str__(self) -> str:
        return self.name

    @classmethod
    def parse(cls, value) -> "SubscriptionTier":
        """
        Parse a tier from its name (case-insensitive) or return it unchanged.

        Raises:
            ValueError: If value does not name a tier
        """
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        try:
            return cls[name]
        except KeyError:
            valid = [tier.name for tier in cls]
            raise ValueError(f"Unknown subscription tier '{value}'. Valid tiers: {valid}") from None

    @classmethod
    def lowest(cls) -> "SubscriptionTier":
        return min(cls, key=lambda tier: tier.rank)

    @classmethod
    def highest(cls) -> "SubscriptionTier":
        return max(cls, key=lambda tier: tier.rank)
