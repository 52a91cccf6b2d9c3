from boxoffice.services.loyalty import (
    DiscountPolicy,
    NoDiscountPolicy,
    TieredLoyaltyPolicy,
)
from boxoffice.services.occupancy_service import (
    MovieOccupancy,
    OccupancyService,
    SessionOccupancy,
)
from boxoffice.services.purchase_service import PurchaseService, PurchaseState, Quote
from boxoffice.services.schedule_service import ScheduleService

__all__ = [
    "DiscountPolicy",
    "NoDiscountPolicy",
    "TieredLoyaltyPolicy",
    "PurchaseService",
    "PurchaseState",
    "Quote",
    "ScheduleService",
    "OccupancyService",
    "MovieOccupancy",
    "SessionOccupancy",
]
