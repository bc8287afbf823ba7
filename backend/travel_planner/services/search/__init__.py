"""Search service module.

SerpApi client, cached search adapters and trip-level aggregation.
"""

from .client import SerpApiClient
from .service import PRICE_LEVELS, SearchService
from .trip import (
    TripDates,
    TripSearchRequest,
    TripSearchResults,
    TripSearchService,
    cabin_class_for_budget,
    hotel_budget_for_budget,
    price_level_for_budget,
)

__all__ = [
    "SerpApiClient",
    "SearchService",
    "PRICE_LEVELS",
    "TripDates",
    "TripSearchRequest",
    "TripSearchResults",
    "TripSearchService",
    "cabin_class_for_budget",
    "hotel_budget_for_budget",
    "price_level_for_budget",
]
