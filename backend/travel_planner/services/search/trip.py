"""Trip search: every search a trip plan needs, run concurrently.

A failing category doesn't sink the others. Its list stays empty and the
error is reported next to the results.
"""

import asyncio
import logging
import time
from typing import Optional

from pydantic import BaseModel, Field

from travel_planner.errors import TravelPlannerError
from travel_planner.models import (
    AppError,
    AttractionSearchOptions,
    CabinClass,
    ErrorCode,
    FlightResult,
    FlightSearchOptions,
    HotelSearchOptions,
    PlaceResult,
    RestaurantSearchOptions,
)

from .service import SearchService

logger = logging.getLogger(__name__)

RESTAURANT_LIMIT = 10
ATTRACTION_LIMIT = 15
HOTEL_LIMIT = 8
FLIGHT_LIMIT = 8

_CABIN_BY_BUDGET = {
    "budget": CabinClass.ECONOMY,
    "cheap": CabinClass.ECONOMY,
    "low": CabinClass.ECONOMY,
    "moderate": CabinClass.PREMIUM_ECONOMY,
    "mid": CabinClass.PREMIUM_ECONOMY,
    "medium": CabinClass.PREMIUM_ECONOMY,
    "luxury": CabinClass.BUSINESS,
    "high": CabinClass.BUSINESS,
    "premium": CabinClass.BUSINESS,
    "first": CabinClass.FIRST,
    "first class": CabinClass.FIRST,
}


def _budget_tier(budget: Optional[str]) -> str:
    return (budget or "").strip().lower()


def price_level_for_budget(budget: Optional[str]) -> str:
    tier = _budget_tier(budget)
    if tier == "budget":
        return "$"
    if tier == "luxury":
        return "$$$"
    return "$$"


def hotel_budget_for_budget(budget: Optional[str]) -> int:
    tier = _budget_tier(budget)
    if tier == "budget":
        return 100
    if tier == "luxury":
        return 500
    return 200


def cabin_class_for_budget(budget: Optional[str]) -> CabinClass:
    return _CABIN_BY_BUDGET.get(_budget_tier(budget), CabinClass.ECONOMY)


class TripDates(BaseModel):
    start: str
    end: Optional[str] = None


class TripSearchRequest(BaseModel):
    """What the planner knows about a trip so far."""

    destination: str = Field(..., min_length=1)
    origin: Optional[str] = None
    dates: Optional[TripDates] = None
    budget: Optional[str] = None
    travelers: int = Field(1, ge=1)
    interests: list[str] = Field(default_factory=list)


class TripSearchResults(BaseModel):
    """Search results for a trip, with per-category errors."""

    destination: str
    restaurants: list[PlaceResult] = Field(default_factory=list)
    attractions: list[PlaceResult] = Field(default_factory=list)
    hotels: list[PlaceResult] = Field(default_factory=list)
    flights: list[FlightResult] = Field(default_factory=list)
    errors: dict[str, AppError] = Field(default_factory=dict)
    processing_time_ms: int = 0


class TripSearchService:
    """Runs all searches for a trip plan through :class:`SearchService`."""

    def __init__(self, search: SearchService) -> None:
        self._search = search

    async def _no_flights(self) -> list[FlightResult]:
        return []

    async def search_trip(self, request: TripSearchRequest) -> TripSearchResults:
        """Search restaurants, attractions, hotels and flights for a trip.

        Flights are searched only when both an origin and a start date are
        known.
        """
        started = time.monotonic()
        destination = request.destination
        dates = request.dates
        interests = [i for i in request.interests if i and i.strip()]
        logger.info(f"[TRIP] Searching {request.origin or '?'} -> {destination}")

        searches = {
            "restaurants": self._search.search_restaurants(
                destination,
                RestaurantSearchOptions(
                    cuisine="local" if "food" in [i.lower() for i in interests] else None,
                    price_level=price_level_for_budget(request.budget),
                    limit=RESTAURANT_LIMIT,
                ),
            ),
            "attractions": self._search.search_attractions(
                destination,
                AttractionSearchOptions(interests=interests, limit=ATTRACTION_LIMIT),
            ),
            "hotels": self._search.search_hotels(
                destination,
                HotelSearchOptions(
                    check_in=dates.start if dates else None,
                    check_out=dates.end if dates else None,
                    budget=hotel_budget_for_budget(request.budget),
                    limit=HOTEL_LIMIT,
                ),
            ),
            "flights": (
                self._search.search_flights(
                    request.origin,
                    destination,
                    dates.start,
                    dates.end,
                    FlightSearchOptions(
                        adults=request.travelers,
                        children=0,
                        cabin_class=cabin_class_for_budget(request.budget),
                        limit=FLIGHT_LIMIT,
                    ),
                )
                if request.origin and dates
                else self._no_flights()
            ),
        }

        outcomes = await asyncio.gather(*searches.values(), return_exceptions=True)

        results = TripSearchResults(destination=destination)
        for category, outcome in zip(searches, outcomes):
            if isinstance(outcome, TravelPlannerError):
                logger.warning(f"[TRIP] {category} search failed: {outcome.message}")
                results.errors[category] = outcome.to_app_error()
            elif isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.exception(f"[TRIP] {category} search crashed", exc_info=outcome)
                results.errors[category] = AppError(
                    code=ErrorCode.API_ERROR,
                    message=str(outcome),
                    user_message=f"Could not load {category}.",
                )
            else:
                setattr(results, category, outcome)

        results.processing_time_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"[TRIP] {destination}: {len(results.restaurants)} restaurants, "
            f"{len(results.attractions)} attractions, {len(results.hotels)} hotels, "
            f"{len(results.flights)} flights in {results.processing_time_ms}ms"
        )
        return results
