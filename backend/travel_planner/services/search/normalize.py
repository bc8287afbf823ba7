"""Convert raw SerpApi payloads into result models.

Listings that can't be turned into a valid result are skipped with a
warning. A payload whose result list has the wrong shape is an upstream
error.
"""

import logging
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote
from uuid import uuid4

from pydantic import ValidationError

from travel_planner.errors import UpstreamError, UpstreamFailure
from travel_planner.models import (
    BookingOption,
    Coordinates,
    FlightEndpoint,
    FlightResult,
    PlaceResult,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")

GOOGLE_FLIGHTS_URL = "https://www.google.com/travel/flights"


def format_duration(minutes: int) -> str:
    """Format a duration in minutes, e.g. ``150`` -> ``"2h 30m"``."""
    minutes = max(0, int(minutes or 0))
    return f"{minutes // 60}h {minutes % 60}m"


def result_list(data: dict[str, Any], *fields: str) -> list[dict[str, Any]]:
    """Concatenate the list fields of a payload, tolerating missing ones."""
    items: list[dict[str, Any]] = []
    for name in fields:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, list):
            raise UpstreamError(
                f"SERP API field '{name}' is not a list",
                UpstreamFailure.MALFORMED,
            )
        items.extend(item for item in value if isinstance(item, dict))
    return items


def convert_all(
    items: list[dict[str, Any]],
    convert: Callable[[dict[str, Any]], R],
    limit: int,
) -> list[R]:
    """Convert up to ``limit`` items, skipping listings that fail validation."""
    results: list[R] = []
    for item in items:
        if len(results) >= limit:
            break
        try:
            results.append(convert(item))
        except (ValidationError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"[SERP] Skipping malformed listing: {type(e).__name__}: {e}")
    return results


def _coordinates(raw: Any) -> Optional[Coordinates]:
    if not isinstance(raw, dict):
        return None
    lat, lng = raw.get("latitude"), raw.get("longitude")
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(lat=lat, lng=lng)
    except ValidationError:
        return None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def place_from_maps(place: dict[str, Any], default_category: str) -> PlaceResult:
    """Google Maps ``local_results`` entry -> :class:`PlaceResult`."""
    return PlaceResult(
        name=_text(place.get("title")) or f"Unknown {default_category.title()}",
        rating=place.get("rating") or None,
        reviews=place.get("reviews") or None,
        price_level=_text(place.get("price")),
        address=_text(place.get("address")),
        category=_text(place.get("type")) or default_category,
        hours=_text(place.get("hours")) or _text(place.get("open_state")),
        image_url=_text(place.get("thumbnail")),
        coordinates=_coordinates(place.get("gps_coordinates")),
        description=_text(place.get("description")),
        phone=_text(place.get("phone")),
        website=_text(place.get("website")),
    )


def place_from_hotel(hotel: dict[str, Any]) -> PlaceResult:
    """Google Hotels ``properties`` entry -> :class:`PlaceResult`."""
    rate = _dict(hotel.get("rate_per_night"))
    price_level = None
    if rate.get("extracted_lowest") is not None:
        price_level = f"${rate['extracted_lowest']}"
    elif rate.get("lowest"):
        price_level = str(rate["lowest"])

    images = _dicts(hotel.get("images"))
    image_url = images[0].get("thumbnail") if images else None

    return PlaceResult(
        name=_text(hotel.get("name")) or "Unknown Hotel",
        rating=hotel.get("overall_rating") or None,
        reviews=hotel.get("reviews") or None,
        price_level=price_level,
        address=_text(hotel.get("address")),
        category="hotel",
        image_url=_text(image_url),
        coordinates=_coordinates(hotel.get("gps_coordinates")),
        description=_text(hotel.get("description")),
        website=_text(hotel.get("link")),
    )


def _booking_url(
    flight: dict[str, Any],
    metadata: dict[str, Any],
    departure_code: str,
    arrival_code: str,
    departure_date: str,
) -> str:
    token = _text(flight.get("booking_token"))
    if token:
        return f"{GOOGLE_FLIGHTS_URL}?hl=en&gl=us&curr=USD&tfs={quote(token, safe='')}"
    if _text(metadata.get("google_flights_url")):
        return metadata["google_flights_url"]
    return (
        f"{GOOGLE_FLIGHTS_URL}/search?q=flights+from+{departure_code}"
        f"+to+{arrival_code}+on+{departure_date}"
    )


def flight_from_serp(
    flight: dict[str, Any],
    index: int,
    metadata: dict[str, Any],
    origin: str,
    destination: str,
    departure_date: str,
) -> FlightResult:
    """Google Flights itinerary -> :class:`FlightResult`.

    ``origin`` and ``destination`` fill in airport fields the payload leaves out.
    """
    legs = _dicts(flight.get("flights"))
    first = legs[0] if legs else {}
    last = legs[-1] if legs else {}
    dep = _dict(first.get("departure_airport"))
    arr = _dict(last.get("arrival_airport"))

    layovers = [l["name"] for l in _dicts(flight.get("layovers")) if _text(l.get("name"))]

    return FlightResult(
        id=f"flight_{index}_{uuid4().hex[:8]}",
        airline=_text(first.get("airline")) or "Unknown Airline",
        flight_number=_text(first.get("flight_number")),
        departure=FlightEndpoint(
            time=dep.get("time") or "",
            airport=dep.get("name") or origin,
            airport_code=dep.get("id") or origin,
        ),
        arrival=FlightEndpoint(
            time=arr.get("time") or "",
            airport=arr.get("name") or destination,
            airport_code=arr.get("id") or destination,
        ),
        duration=format_duration(flight.get("total_duration") or 0),
        price=flight.get("price") or 0,
        currency="USD",
        stops=max(len(legs), 1) - 1,
        layovers=layovers or None,
        carbon_emissions=_dict(flight.get("carbon_emissions")).get("this_flight"),
        booking_url=_booking_url(
            flight,
            metadata,
            dep.get("id") or origin,
            arr.get("id") or destination,
            departure_date,
        ),
        booking_token=_text(flight.get("booking_token")),
    )


def booking_option_from_serp(option: dict[str, Any]) -> BookingOption:
    """Google Flights ``booking_options`` entry -> :class:`BookingOption`."""
    # Separate tickets come back under "together"/"departing"; use the combined offer.
    offer = _dict(option.get("together")) or option
    request = _dict(offer.get("booking_request"))
    return BookingOption(
        provider=_text(offer.get("book_with")) or "Unknown Provider",
        price=offer.get("price") or 0,
        booking_url=request.get("url") or "",
        agency=_text(offer.get("agency")),
        agency_link=_text(offer.get("agency_link")),
    )
