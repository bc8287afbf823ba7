"""Cache key builders for search requests.

A key identifies one logical search: the same question asked twice yields
the same key, and changing any filter yields a different one. The order of
the parts is fixed by each builder, not by the caller.

Free-text parts are trimmed, whitespace-collapsed and lower-cased. ``%`` and
``:`` inside a part are percent-escaped (``%`` first), so user text can never
fake a separator or an escape.
Numeric parts are included whenever they are given, including zero.

Example:
    >>> build_restaurant_key(" Paris ", cuisine="ITALIAN", limit=5)
    'restaurants:paris:italian:limit:5'
"""

import re
from typing import Iterable, Optional

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    """Trim, collapse whitespace, lowercase and escape separators."""
    return _WHITESPACE.sub(" ", str(text).strip().lower()).replace("%", "%25").replace(":", "%3a")


def _literal(text: str) -> str:
    """Trim and escape separators, keeping case."""
    return str(text).strip().replace("%", "%25").replace(":", "%3a")


def _join(parts: Iterable[str]) -> str:
    return ":".join(parts)


def _enum_value(value: object) -> str:
    return str(getattr(value, "value", value))


def build_restaurant_key(
    destination: str,
    cuisine: Optional[str] = None,
    price_level: Optional[str] = None,
    limit: Optional[int] = None,
) -> str:
    """``restaurants:<destination>[:<cuisine>][:<price_level>][:limit:<n>]``"""
    parts = ["restaurants", _normalize(destination)]
    if cuisine and cuisine.strip():
        parts.append(_normalize(cuisine))
    if price_level and price_level.strip():
        parts.append(_literal(price_level))
    if limit is not None:
        parts.append(f"limit:{limit}")
    return _join(parts)


def build_attraction_key(
    destination: str,
    interests: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> str:
    """``attractions:<destination>[:<interest-interest>][:limit:<n>]``

    Interests are lower-cased before sorting, so their order and case never
    matter. A hyphen inside one interest is escaped so it can't read as
    two. The caller's list is left untouched.
    """
    parts = ["attractions", _normalize(destination)]
    normalized = sorted(
        _normalize(i).replace("-", "%2d") for i in (interests or []) if i and i.strip()
    )
    if normalized:
        parts.append("-".join(normalized))
    if limit is not None:
        parts.append(f"limit:{limit}")
    return _join(parts)


def build_hotel_key(
    destination: str,
    check_in: Optional[str] = None,
    check_out: Optional[str] = None,
    budget: Optional[int] = None,
    limit: Optional[int] = None,
) -> str:
    """``hotels:<destination>[:checkin:<d>][:checkout:<d>][:budget:<n>][:limit:<n>]``"""
    parts = ["hotels", _normalize(destination)]
    if check_in and check_in.strip():
        parts.append(f"checkin:{_literal(check_in)}")
    if check_out and check_out.strip():
        parts.append(f"checkout:{_literal(check_out)}")
    if budget is not None:
        parts.append(f"budget:{budget}")
    if limit is not None:
        parts.append(f"limit:{limit}")
    return _join(parts)


def build_flight_key(
    origin: str,
    destination: str,
    departure_date: str,
    return_date: Optional[str] = None,
    adults: Optional[int] = None,
    children: Optional[int] = None,
    cabin_class: Optional[str] = None,
    limit: Optional[int] = None,
) -> str:
    """``flights:<origin>:<destination>:<departure>[:<return>][:adults:<n>][:children:<n>][:<cabin>][:limit:<n>]``

    Built from the place names the caller typed, never from resolved airport
    codes, so keys stay stable if code resolution changes.
    """
    parts = [
        "flights",
        _normalize(origin),
        _normalize(destination),
        _literal(departure_date),
    ]
    if return_date and return_date.strip():
        parts.append(_literal(return_date))
    if adults is not None:
        parts.append(f"adults:{adults}")
    if children is not None:
        parts.append(f"children:{children}")
    if cabin_class:
        parts.append(_normalize(_enum_value(cabin_class)))
    if limit is not None:
        parts.append(f"limit:{limit}")
    return _join(parts)


def build_booking_options_key(booking_token: str) -> str:
    """``booking_options:<token>``. Tokens are case-sensitive."""
    return _join(["booking_options", _literal(booking_token)])
