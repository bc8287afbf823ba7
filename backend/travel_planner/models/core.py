"""Core data models for the travel planner search layer.

Search results are frozen Pydantic models: they carry no identity beyond
their content, so cached lists can be shared between requests safely.
Search options are plain dataclasses passed from callers to the adapters.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CabinClass(str, Enum):
    """Flight cabin classes, in the order the flight provider numbers them."""

    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"

    @property
    def travel_class(self) -> int:
        """Numeric ``travel_class`` parameter expected by Google Flights."""
        return list(CabinClass).index(self) + 1


class Coordinates(BaseModel):
    """Geographic coordinates with validation."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class PlaceResult(BaseModel):
    """A restaurant, attraction or hotel returned by a place search.

    Only ``name`` is guaranteed; everything else depends on what the
    upstream listing exposes.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display name of the place")
    rating: Optional[float] = Field(None, description="Average rating (0-5)")
    reviews: Optional[int] = Field(None, ge=0, description="Number of reviews")
    price_level: Optional[str] = Field(None, description="Price indicator, e.g. '$$' or '$120'")
    address: Optional[str] = Field(None, description="Formatted address")
    category: Optional[str] = Field(None, description="Place type, e.g. 'restaurant'")
    hours: Optional[str] = Field(None, description="Opening hours summary")
    image_url: Optional[str] = Field(None, description="Thumbnail URL")
    coordinates: Optional[Coordinates] = Field(None, description="Geographic location")
    description: Optional[str] = Field(None, description="Short description")
    phone: Optional[str] = Field(None, description="Contact phone number")
    website: Optional[str] = Field(None, description="Website or listing URL")


class FlightEndpoint(BaseModel):
    """Departure or arrival side of a flight."""

    model_config = ConfigDict(frozen=True)

    time: str = ""
    airport: str
    airport_code: str


class FlightResult(BaseModel):
    """A priced flight itinerary (first leg departure to last leg arrival)."""

    model_config = ConfigDict(frozen=True)

    id: str
    airline: str
    flight_number: Optional[str] = None
    departure: FlightEndpoint
    arrival: FlightEndpoint
    duration: str = Field(..., description="Total duration, e.g. '7h 25m'")
    price: float = 0
    currency: str = "USD"
    stops: int = Field(0, ge=0)
    layovers: Optional[list[str]] = None
    carbon_emissions: Optional[int] = None
    booking_url: Optional[str] = None
    booking_token: Optional[str] = None


class BookingOption(BaseModel):
    """A place where a specific flight can be booked."""

    model_config = ConfigDict(frozen=True)

    provider: str
    price: float = 0
    booking_url: str = ""
    agency: Optional[str] = None
    agency_link: Optional[str] = None


class SearchHealth(BaseModel):
    """Whether the upstream search provider can be used."""

    configured: bool
    status: str
    message: str


@dataclass
class RestaurantSearchOptions:
    """Filters for a restaurant search."""
    cuisine: Optional[str] = None
    price_level: Optional[str] = None
    limit: Optional[int] = None


@dataclass
class AttractionSearchOptions:
    """Filters for an attraction search."""
    interests: list[str] = field(default_factory=list)
    limit: Optional[int] = None


@dataclass
class HotelSearchOptions:
    """Filters for a hotel search. Dates are ``YYYY-MM-DD``."""
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    budget: Optional[int] = None
    limit: Optional[int] = None


@dataclass
class FlightSearchOptions:
    """Passenger and cabin configuration for a flight search."""
    adults: Optional[int] = None
    children: Optional[int] = None
    cabin_class: Optional[CabinClass | str] = None
    limit: Optional[int] = None
