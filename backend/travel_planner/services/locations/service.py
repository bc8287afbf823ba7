"""Location code normalizer for flight search.

Turns free text ("New York", "cdg", "Springfield") into something the flight
provider understands:

1. A 3-letter code is returned upper-cased.
2. A Freebase ID (``/m/...``) is returned as-is.
3. Exact match in the static city table.
4. Partial match in the static city table.
5. Wikidata lookup for the place's Freebase ID.
6. Otherwise the upper-cased input, and the provider gets to try.

Lookup failures never fail the search; they only drop to the next step.
"""

import logging
import re
from typing import Optional

from travel_planner.errors import LocationResolutionError

from .airports import CITY_TO_IATA
from .wikidata import WikidataService

logger = logging.getLogger(__name__)

_IATA_CODE = re.compile(r"^[A-Za-z]{3}$")
_WHITESPACE = re.compile(r"\s+")
FREEBASE_PREFIX = "/m/"
# Shorter table names ("la", "sf") only match exactly.
MIN_PARTIAL_MATCH = 3


def _contains_word(text: str, word: str) -> bool:
    return re.search(rf"\b{re.escape(word)}\b", text) is not None


class LocationCodeNormalizer:
    """Resolves place names to airport codes or Freebase IDs."""

    def __init__(
        self,
        wikidata: Optional[WikidataService] = None,
        table: Optional[dict[str, str]] = None,
    ) -> None:
        self._wikidata = wikidata
        self._table = table if table is not None else CITY_TO_IATA
        # Longest names first so "new york city" wins over "york".
        self._by_length = sorted(self._table.items(), key=lambda item: len(item[0]), reverse=True)

    def lookup_static(self, location: str) -> Optional[str]:
        """Exact, then partial, match against the static table."""
        normalized = _WHITESPACE.sub(" ", location.strip().lower())
        if not normalized:
            return None

        code = self._table.get(normalized)
        if code:
            logger.debug(f"[LOCATION] {location} -> {code} (table)")
            return code

        for city, code in self._by_length:
            if len(city) < MIN_PARTIAL_MATCH:
                continue
            if _contains_word(normalized, city):
                logger.info(f"[LOCATION] {location} -> {code} (partial match: {city})")
                return code

        if len(normalized) >= MIN_PARTIAL_MATCH:
            for city, code in self._by_length:
                if _contains_word(city, normalized):
                    logger.info(f"[LOCATION] {location} -> {code} (partial match: {city})")
                    return code
        return None

    def _known_code(self, trimmed: str) -> Optional[str]:
        if _IATA_CODE.match(trimmed):
            return trimmed.upper()
        if trimmed.startswith(FREEBASE_PREFIX):
            return trimmed
        return self.lookup_static(trimmed)

    def resolve_offline(self, location: str) -> str:
        """Resolve without network lookups: steps 1-4, then the upper-cased input."""
        if not location or not location.strip():
            return ""
        trimmed = location.strip()
        return self._known_code(trimmed) or trimmed.upper()

    async def resolve(self, location: str) -> str:
        """Resolve a place name to a provider location code. Never raises."""
        if not location or not location.strip():
            return ""
        trimmed = location.strip()

        code = self._known_code(trimmed)
        if code:
            return code

        if self._wikidata is not None:
            try:
                freebase_id = await self._wikidata.get_freebase_id(trimmed)
            except LocationResolutionError as e:
                logger.warning(f"[LOCATION] Wikidata lookup failed for '{trimmed}': {e}")
                freebase_id = None
            if freebase_id:
                logger.info(f"[LOCATION] {trimmed} -> {freebase_id} (wikidata)")
                return freebase_id

        logger.warning(f"[LOCATION] No code found for '{trimmed}', passing the name through")
        return trimmed.upper()
