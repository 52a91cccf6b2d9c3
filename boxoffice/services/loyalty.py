"""Discount policies.

A policy maps a client's loyalty state to a discount percentage and decides
how many points a ticket earns. The purchase service takes any policy.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal

from boxoffice.conf import box_office_settings
from boxoffice.domain import Client, Ticket


class DiscountPolicy(ABC):
    """Interface for loyalty discounts."""

    @abstractmethod
    def discount_percent(self, client: Client) -> Decimal:
        """Return a discount in ``[0, 100)`` for ``client``."""
        ...

    @abstractmethod
    def points_for(self, ticket: Ticket) -> int:
        """Return the loyalty points credited for ``ticket``."""
        ...


class NoDiscountPolicy(DiscountPolicy):
    """Never discounts and never awards points."""

    def discount_percent(self, client: Client) -> Decimal:
        return Decimal(0)

    def points_for(self, ticket: Ticket) -> int:
        return 0


class TieredLoyaltyPolicy(DiscountPolicy):
    """Discount from the highest tier whose point threshold the client meets.

    ``tiers`` is an iterable of ``(minimum_points, percent)`` pairs. Percent
    may not drop as thresholds rise, which keeps the discount monotonic in
    loyalty.
    """

    def __init__(
        self,
        tiers: Iterable[tuple[int, Decimal | int | str]],
        points_per_ticket: int = 1,
    ) -> None:
        ordered = sorted(
            ((int(points), Decimal(str(percent))) for points, percent in tiers),
            key=lambda tier: tier[0],
        )
        previous = Decimal(0)
        for points, percent in ordered:
            if points < 0:
                raise ValueError(f"Tier threshold cannot be negative: {points}")
            if not Decimal(0) <= percent < Decimal(100):
                raise ValueError(f"Tier discount must be in [0, 100): {percent}")
            if percent < previous:
                raise ValueError("Tier discounts must not decrease as points rise")
            previous = percent
        if points_per_ticket < 0:
            raise ValueError("Points per ticket cannot be negative")
        self.tiers: tuple[tuple[int, Decimal], ...] = tuple(ordered)
        self.points_per_ticket = points_per_ticket

    @classmethod
    def from_settings(cls) -> "TieredLoyaltyPolicy":
        return cls(
            tiers=box_office_settings.LOYALTY_TIERS,
            points_per_ticket=box_office_settings.POINTS_PER_TICKET,
        )

    def discount_percent(self, client: Client) -> Decimal:
        percent = Decimal(0)
        for threshold, tier_percent in self.tiers:
            if client.loyalty_points < threshold:
                break
            percent = tier_percent
        return percent

    def points_for(self, ticket: Ticket) -> int:
        return self.points_per_ticket
