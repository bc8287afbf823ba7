"""Data models for the travel planner API."""

from .core import (
    AttractionSearchOptions,
    BookingOption,
    CabinClass,
    Coordinates,
    FlightEndpoint,
    FlightResult,
    FlightSearchOptions,
    HotelSearchOptions,
    PlaceResult,
    RestaurantSearchOptions,
    SearchHealth,
)
from .errors import AppError, ErrorCode, RecoveryOption

__all__ = [
    # Results
    "Coordinates",
    "PlaceResult",
    "FlightEndpoint",
    "FlightResult",
    "BookingOption",
    "SearchHealth",
    # Search options
    "CabinClass",
    "RestaurantSearchOptions",
    "AttractionSearchOptions",
    "HotelSearchOptions",
    "FlightSearchOptions",
    # Errors
    "AppError",
    "ErrorCode",
    "RecoveryOption",
]
