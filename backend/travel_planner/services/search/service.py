"""Search adapters for restaurants, attractions, hotels and flights.

Each search follows the same steps:
1. Fail fast if the provider isn't configured or the input is invalid.
2. Build the cache key from the request as the caller phrased it.
3. Go through :func:`get_or_set`: on a miss, call SerpApi, normalize the
   results, truncate them to ``limit`` and cache that list.

The limit is part of the key, so the cached list is exactly the answer to
the question that was asked.
"""

import asyncio
import logging
import re
from datetime import date
from typing import Awaitable, Callable, Optional, TypeVar

from pydantic import TypeAdapter

from travel_planner.errors import SearchValidationError, UpstreamError, UpstreamFailure
from travel_planner.models import (
    AttractionSearchOptions,
    BookingOption,
    CabinClass,
    FlightResult,
    FlightSearchOptions,
    HotelSearchOptions,
    PlaceResult,
    RestaurantSearchOptions,
    SearchHealth,
)
from travel_planner.services.cache import (
    CacheService,
    CacheStats,
    InflightRequests,
    build_attraction_key,
    build_booking_options_key,
    build_flight_key,
    build_hotel_key,
    build_restaurant_key,
    get_or_set,
)
from travel_planner.services.locations import LocationCodeNormalizer

from .client import SerpApiClient
from .normalize import (
    booking_option_from_serp,
    convert_all,
    flight_from_serp,
    place_from_hotel,
    place_from_maps,
    result_list,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PRICE_LEVELS = ("$", "$$", "$$$", "$$$$")
_DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_PLACES = TypeAdapter(list[PlaceResult])
_FLIGHTS = TypeAdapter(list[FlightResult])
_BOOKING_OPTIONS = TypeAdapter(list[BookingOption])


# ─── Input validation ───

def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise SearchValidationError(f"{field} is required", field=field)
    return str(value).strip()


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def _validate_date(value: str, field: str) -> date:
    if not _DATE_FORMAT.match(value):
        raise SearchValidationError(f"{field} must be in YYYY-MM-DD format", field=field)
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise SearchValidationError(f"{field} is not a valid date", field=field) from None


def _validate_count(value: Optional[int], field: str, minimum: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise SearchValidationError(f"{field} must be an integer >= {minimum}", field=field)


def _parse_cabin_class(value: Optional[CabinClass | str]) -> Optional[CabinClass]:
    if value is None or value == "":
        return None
    try:
        return CabinClass(str(getattr(value, "value", value)).strip().lower())
    except ValueError:
        allowed = ", ".join(c.value for c in CabinClass)
        raise SearchValidationError(
            f"Invalid cabin class. Must be one of: {allowed}", field="cabin_class"
        ) from None


class SearchService:
    """Cached searches against SerpApi.

    Args:
        client: SerpApi client.
        search_cache: Cache domain for search results.
        general_cache: Cache domain for short-lived API responses
            (flight booking options).
        normalizer: Resolves place names to flight location codes.
        default_limit: Result count used when the caller gives no limit.
        flight_ttl: TTL for flight results; prices change faster than places.
        inflight: Registry that coalesces concurrent misses, if enabled.
        request_timeout: Deadline for a whole fetch. Flight fetches get
            ``resolve_timeout`` on top for code resolution.
        resolve_timeout: Budget for resolving flight location codes before
            falling back to the offline table.
    """

    def __init__(
        self,
        client: SerpApiClient,
        search_cache: CacheService,
        general_cache: CacheService,
        normalizer: LocationCodeNormalizer,
        default_limit: int = 10,
        flight_ttl: int = 300,
        inflight: Optional[InflightRequests] = None,
        request_timeout: float = 10.0,
        resolve_timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._search_cache = search_cache
        self._general_cache = general_cache
        self._normalizer = normalizer
        self._default_limit = default_limit
        self._flight_ttl = flight_ttl
        self._inflight = inflight
        self._request_timeout = request_timeout
        self._resolve_timeout = resolve_timeout

    @property
    def is_configured(self) -> bool:
        return self._client.is_configured

    @property
    def caches(self) -> list[CacheService]:
        return [self._search_cache, self._general_cache]

    def _bounded(
        self,
        fetch: Callable[[], Awaitable[T]],
        context: str,
        timeout: Optional[float] = None,
    ) -> Callable[[], Awaitable[T]]:
        """Wrap a fetch so it fails with a timeout error after ``request_timeout``."""
        deadline = timeout if timeout is not None else self._request_timeout

        async def run() -> T:
            try:
                return await asyncio.wait_for(fetch(), timeout=deadline)
            except asyncio.TimeoutError as e:
                logger.error(f"[SERP] {context} did not finish within {deadline}s")
                raise UpstreamError(
                    f"{context} did not finish within {deadline}s",
                    UpstreamFailure.TIMEOUT,
                ) from e

        return run

    async def _resolve_codes(self, origin: str, destination: str) -> tuple[str, str]:
        try:
            origin_code, destination_code = await asyncio.wait_for(
                asyncio.gather(
                    self._normalizer.resolve(origin),
                    self._normalizer.resolve(destination),
                ),
                timeout=self._resolve_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"[LOCATION] Code lookup for {origin} -> {destination} took over "
                f"{self._resolve_timeout}s, using offline codes"
            )
            return (
                self._normalizer.resolve_offline(origin),
                self._normalizer.resolve_offline(destination),
            )
        return origin_code, destination_code

    def health(self) -> SearchHealth:
        if self.is_configured:
            return SearchHealth(
                configured=True,
                status="available",
                message="SERP API is configured and ready",
            )
        return SearchHealth(
            configured=False,
            status="not_configured",
            message="SERP API key is not configured",
        )

    # ─── Places ───

    async def search_restaurants(
        self, destination: str, options: Optional[RestaurantSearchOptions] = None
    ) -> list[PlaceResult]:
        """Search for restaurants in a destination."""
        self._client.ensure_configured()
        options = options or RestaurantSearchOptions()
        destination = _require_text(destination, "destination")
        cuisine = _optional_text(options.cuisine)
        price_level = _optional_text(options.price_level)
        if price_level is not None and price_level not in PRICE_LEVELS:
            raise SearchValidationError(
                f"price_level must be one of: {', '.join(PRICE_LEVELS)}", field="price_level"
            )
        if cuisine is not None and set(cuisine) == {"$"}:
            raise SearchValidationError("cuisine is not a valid cuisine", field="cuisine")
        _validate_count(options.limit, "limit", 1)
        limit = options.limit or self._default_limit

        key = build_restaurant_key(destination, cuisine, price_level, options.limit)

        async def fetch() -> list[PlaceResult]:
            query = f"restaurants in {destination}"
            if cuisine:
                query += f" {cuisine}"
            if price_level:
                query += f" {price_level}"
            logger.info(f'[SERP] Searching restaurants - "{query}"')
            data = await self._client.search(
                {"engine": "google_maps", "q": query, "type": "search"},
                context="search restaurants",
            )
            results = convert_all(
                result_list(data, "local_results"),
                lambda place: place_from_maps(place, "restaurant"),
                limit,
            )
            logger.info(f"[SERP] Found {len(results)} restaurants")
            return results

        cached = await get_or_set(
            self._search_cache, key, self._bounded(fetch, "search restaurants"), inflight=self._inflight
        )
        return _PLACES.validate_python(cached)

    async def search_attractions(
        self, destination: str, options: Optional[AttractionSearchOptions] = None
    ) -> list[PlaceResult]:
        """Search for attractions and things to do in a destination."""
        self._client.ensure_configured()
        options = options or AttractionSearchOptions()
        destination = _require_text(destination, "destination")
        interests = [i.strip() for i in options.interests or [] if i and i.strip()]
        _validate_count(options.limit, "limit", 1)
        limit = options.limit or self._default_limit

        key = build_attraction_key(destination, interests, options.limit)

        async def fetch() -> list[PlaceResult]:
            query = f"things to do in {destination}"
            if interests:
                query += " " + " ".join(interests)
            logger.info(f'[SERP] Searching attractions - "{query}"')
            data = await self._client.search(
                {"engine": "google_maps", "q": query, "type": "search"},
                context="search attractions",
            )
            results = convert_all(
                result_list(data, "local_results"),
                lambda place: place_from_maps(place, "attraction"),
                limit,
            )
            logger.info(f"[SERP] Found {len(results)} attractions")
            return results

        cached = await get_or_set(
            self._search_cache, key, self._bounded(fetch, "search attractions"), inflight=self._inflight
        )
        return _PLACES.validate_python(cached)

    async def search_hotels(
        self, destination: str, options: Optional[HotelSearchOptions] = None
    ) -> list[PlaceResult]:
        """Search for hotels in a destination."""
        self._client.ensure_configured()
        options = options or HotelSearchOptions()
        destination = _require_text(destination, "destination")
        check_in = _optional_text(options.check_in)
        check_out = _optional_text(options.check_out)
        check_in_date = _validate_date(check_in, "check_in") if check_in else None
        check_out_date = _validate_date(check_out, "check_out") if check_out else None
        if check_in_date and check_out_date and check_out_date <= check_in_date:
            raise SearchValidationError(
                "Check-out date must be after check-in date", field="check_out"
            )
        _validate_count(options.budget, "budget", 0)
        _validate_count(options.limit, "limit", 1)
        limit = options.limit or self._default_limit

        key = build_hotel_key(destination, check_in, check_out, options.budget, options.limit)

        async def fetch() -> list[PlaceResult]:
            logger.info(f'[SERP] Searching hotels in "{destination}"')
            params: dict = {"engine": "google_hotels", "q": destination, "currency": "USD"}
            if check_in:
                params["check_in_date"] = check_in
            if check_out:
                params["check_out_date"] = check_out
            if options.budget:
                params["max_price"] = options.budget
            data = await self._client.search(params, context="search hotels")
            results = convert_all(result_list(data, "properties"), place_from_hotel, limit)
            logger.info(f"[SERP] Found {len(results)} hotels")
            return results

        cached = await get_or_set(
            self._search_cache, key, self._bounded(fetch, "search hotels"), inflight=self._inflight
        )
        return _PLACES.validate_python(cached)

    # ─── Flights ───

    async def search_flights(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
        options: Optional[FlightSearchOptions] = None,
    ) -> list[FlightResult]:
        """Search for flights between two places.

        ``origin`` and ``destination`` may be city names, airport codes or
        Freebase IDs. They are resolved to provider codes only when the
        search actually goes upstream.
        """
        self._client.ensure_configured()
        options = options or FlightSearchOptions()
        origin = _require_text(origin, "origin")
        destination = _require_text(destination, "destination")
        departure_date = _require_text(departure_date, "departure_date")
        departure = _validate_date(departure_date, "departure_date")
        return_date = _optional_text(return_date)
        if return_date:
            if _validate_date(return_date, "return_date") <= departure:
                raise SearchValidationError(
                    "Return date must be after departure date", field="return_date"
                )
        _validate_count(options.adults, "adults", 1)
        _validate_count(options.children, "children", 0)
        _validate_count(options.limit, "limit", 1)
        cabin_class = _parse_cabin_class(options.cabin_class)
        limit = options.limit or self._default_limit

        key = build_flight_key(
            origin,
            destination,
            departure_date,
            return_date,
            adults=options.adults,
            children=options.children,
            cabin_class=cabin_class.value if cabin_class else None,
            limit=options.limit,
        )

        async def fetch() -> list[FlightResult]:
            origin_code, destination_code = await self._resolve_codes(origin, destination)
            logger.info(
                f"[SERP] Searching flights {origin} ({origin_code}) -> "
                f"{destination} ({destination_code}) on {departure_date}"
            )
            params: dict = {
                "engine": "google_flights",
                "departure_id": origin_code,
                "arrival_id": destination_code,
                "outbound_date": departure_date,
                "currency": "USD",
                "adults": options.adults if options.adults is not None else 1,
                "children": options.children if options.children is not None else 0,
                "travel_class": (cabin_class or CabinClass.ECONOMY).travel_class,
            }
            if return_date:
                params["return_date"] = return_date
                params["type"] = 1  # round trip
            else:
                params["type"] = 2  # one way

            data = await self._client.search(params, context="search flights")
            metadata = data.get("search_metadata") if isinstance(data.get("search_metadata"), dict) else {}
            flights = result_list(data, "best_flights", "other_flights")
            results = convert_all(
                list(enumerate(flights)),
                lambda item: flight_from_serp(
                    item[1], item[0], metadata, origin, destination, departure_date
                ),
                limit,
            )
            logger.info(f"[SERP] Found {len(results)} flights")
            return results

        cached = await get_or_set(
            self._search_cache,
            key,
            # Code lookup and the SerpApi call each get their own budget.
            self._bounded(fetch, "search flights", self._request_timeout + self._resolve_timeout),
            ttl_seconds=self._flight_ttl,
            inflight=self._inflight,
        )
        return _FLIGHTS.validate_python(cached)

    async def get_flight_booking_options(self, booking_token: str) -> list[BookingOption]:
        """Get booking options for a flight returned by :meth:`search_flights`."""
        self._client.ensure_configured()
        booking_token = _require_text(booking_token, "booking_token")
        key = build_booking_options_key(booking_token)

        async def fetch() -> list[BookingOption]:
            logger.info(f"[SERP] Fetching booking options for token {booking_token[:50]}...")
            data = await self._client.search(
                {"engine": "google_flights", "booking_token": booking_token},
                context="get booking options",
            )
            options = result_list(data, "booking_options")
            results = convert_all(options, booking_option_from_serp, len(options))
            logger.info(f"[SERP] Found {len(results)} booking options")
            return results

        cached = await get_or_set(
            self._general_cache, key, self._bounded(fetch, "get booking options"), inflight=self._inflight
        )
        return _BOOKING_OPTIONS.validate_python(cached)

    # ─── Cache administration ───

    async def cache_stats(self) -> list[CacheStats]:
        return [await cache.stats() for cache in self.caches]

    async def clear_cache(self, pattern: Optional[str] = None, domain: Optional[str] = None) -> int:
        """Clear cached entries, optionally only keys containing ``pattern``.

        Args:
            pattern: Substring to match. Clears everything if not given.
            domain: Restrict to one cache domain.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for cache in self.caches:
            if domain is not None and cache.domain != domain:
                continue
            if pattern:
                removed += await cache.invalidate(pattern)
            else:
                removed += await cache.clear()
        logger.info(
            f"[CACHE] Cleared {removed} entries"
            + (f" matching '{pattern}'" if pattern else "")
            + (f" in '{domain}'" if domain else "")
        )
        return removed
