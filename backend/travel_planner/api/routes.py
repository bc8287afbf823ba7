"""API routes for the travel planner search layer.

Search endpoints:
- Restaurants, attractions, hotels: Google Maps / Google Hotels via SerpApi
- Flights and booking options: Google Flights via SerpApi
- Trip: all of the above for one destination, concurrently

Query parameters are passed to the search service untouched; it validates
them, so a missing destination gets the same 400 as a malformed date.
Results come back in a ``{success, data, count, message}`` envelope.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from travel_planner.dependencies import get_search_service, get_trip_service
from travel_planner.models import (
    AttractionSearchOptions,
    FlightSearchOptions,
    HotelSearchOptions,
    RestaurantSearchOptions,
    SearchHealth,
)
from travel_planner.services.search import (
    SearchService,
    TripSearchRequest,
    TripSearchResults,
    TripSearchService,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class SearchResponse(BaseModel):
    """Envelope for list results."""
    success: bool = True
    data: list[Any]
    count: int
    message: Optional[str] = None


class TripSearchResponse(BaseModel):
    success: bool = True
    data: TripSearchResults
    message: Optional[str] = None


class CacheStatsResponse(BaseModel):
    success: bool = True
    data: list[dict]


class CacheClearResponse(BaseModel):
    success: bool = True
    removed: int
    message: str


def _split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _respond(results: list, what: str) -> SearchResponse:
    return SearchResponse(
        data=results,
        count=len(results),
        message=f"Found {len(results)} {what}",
    )


# ============================================================================
# SEARCH ENDPOINTS
# ============================================================================

@router.get("/search/health", response_model=SearchHealth)
async def search_health(search: SearchService = Depends(get_search_service)) -> SearchHealth:
    """Report whether the search provider is configured."""
    return search.health()


@router.get("/search/restaurants", response_model=SearchResponse)
async def search_restaurants(
    destination: Optional[str] = Query(None, description="City or area to search"),
    cuisine: Optional[str] = Query(None, description="Cuisine type, e.g. 'italian'"),
    price_level: Optional[str] = Query(None, alias="priceLevel", description="$, $$, $$$ or $$$$"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = await search.search_restaurants(
        destination,
        RestaurantSearchOptions(cuisine=cuisine, price_level=price_level, limit=limit),
    )
    return _respond(results, "restaurants")


@router.get("/search/attractions", response_model=SearchResponse)
async def search_attractions(
    destination: Optional[str] = Query(None, description="City or area to search"),
    interests: Optional[str] = Query(None, description="Comma-separated interests"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = await search.search_attractions(
        destination,
        AttractionSearchOptions(interests=_split_csv(interests), limit=limit),
    )
    return _respond(results, "attractions")


@router.get("/search/hotels", response_model=SearchResponse)
async def search_hotels(
    destination: Optional[str] = Query(None, description="City or area to search"),
    check_in: Optional[str] = Query(None, alias="checkIn", description="YYYY-MM-DD"),
    check_out: Optional[str] = Query(None, alias="checkOut", description="YYYY-MM-DD"),
    budget: Optional[int] = Query(None, description="Maximum nightly price in USD"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = await search.search_hotels(
        destination,
        HotelSearchOptions(check_in=check_in, check_out=check_out, budget=budget, limit=limit),
    )
    return _respond(results, "hotels")


@router.get("/search/flights", response_model=SearchResponse)
async def search_flights(
    origin: Optional[str] = Query(None, description="City, airport code or Freebase ID"),
    destination: Optional[str] = Query(None, description="City, airport code or Freebase ID"),
    departure_date: Optional[str] = Query(None, alias="departureDate", description="YYYY-MM-DD"),
    return_date: Optional[str] = Query(None, alias="returnDate", description="YYYY-MM-DD"),
    adults: Optional[int] = Query(None, ge=1),
    children: Optional[int] = Query(None, ge=0),
    cabin_class: Optional[str] = Query(None, alias="cabinClass"),
    limit: Optional[int] = Query(None, description="Maximum number of results"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = await search.search_flights(
        origin,
        destination,
        departure_date,
        return_date,
        FlightSearchOptions(
            adults=adults,
            children=children,
            cabin_class=cabin_class,
            limit=limit,
        ),
    )
    return _respond(results, "flights")


@router.get("/search/flight-booking-options", response_model=SearchResponse)
async def flight_booking_options(
    booking_token: Optional[str] = Query(None, alias="bookingToken"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    results = await search.get_flight_booking_options(booking_token)
    return _respond(results, "booking options")


@router.post("/search/trip", response_model=TripSearchResponse)
async def search_trip(
    request: TripSearchRequest,
    trips: TripSearchService = Depends(get_trip_service),
) -> TripSearchResponse:
    """Search restaurants, attractions, hotels and flights for one trip.

    Categories that fail are listed under ``data.errors``; the rest still
    come back.
    """
    results = await trips.search_trip(request)
    message = None
    if results.errors:
        message = f"Some searches failed: {', '.join(sorted(results.errors))}"
    return TripSearchResponse(data=results, message=message)


# ============================================================================
# CACHE ADMINISTRATION
# ============================================================================

@router.get("/cache/stats", response_model=CacheStatsResponse)
async def cache_stats(search: SearchService = Depends(get_search_service)) -> CacheStatsResponse:
    stats = await search.cache_stats()
    return CacheStatsResponse(
        data=[
            {"domain": s.domain, "keys": s.keys, "hits": s.hits, "misses": s.misses}
            for s in stats
        ]
    )


@router.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(
    pattern: Optional[str] = Query(None, description="Only clear keys containing this text"),
    domain: Optional[str] = Query(None, description="Only clear this cache domain"),
    search: SearchService = Depends(get_search_service),
) -> CacheClearResponse:
    removed = await search.clear_cache(pattern=pattern, domain=domain)
    logger.info(f"[API] Cache clear removed {removed} entries")
    return CacheClearResponse(removed=removed, message=f"Removed {removed} cached entries")
