"""Wikidata API client for location identifiers.

Looks up the Freebase ID (property P646, e.g. ``/m/0dl60``) of a place.
Google Flights accepts these IDs for cities that have no airport code in
our table.

Architecture:
- Shared httpx client with connection pooling
- Semaphore-based rate limiting (max 3 concurrent requests)
- One retry on timeouts and connection errors
"""

import asyncio
import logging
from typing import Optional

import httpx

from travel_planner.config import WIKIDATA_API_URL
from travel_planner.errors import LocationResolutionError

logger = logging.getLogger(__name__)

FREEBASE_ID_PROPERTY = "P646"


class WikidataService:
    """Wikidata API client: entity search and claim lookup."""

    HEADERS = {
        "User-Agent": "TravelPlanner/1.0 (https://github.com/travel-planner)",
        "Accept": "application/json",
    }

    def __init__(
        self,
        api_url: str = WIKIDATA_API_URL,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._client = client
        self._semaphore = asyncio.Semaphore(3)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                limits=httpx.Limits(max_connections=8, max_keepalive_connections=4),
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(self, params: dict, max_retries: int = 1) -> dict:
        """GET the Wikidata API, retrying once on transient failures.

        Raises:
            LocationResolutionError: On any failure after the retry.
        """
        client = self._get_client()
        for attempt in range(max_retries + 1):
            try:
                async with self._semaphore:
                    response = await client.get(self._api_url, params=params)
                    response.raise_for_status()
                    data = response.json()
                if not isinstance(data, dict):
                    raise LocationResolutionError("Wikidata returned a non-object response")
                return data
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < max_retries:
                    logger.info(f"[WIKIDATA] Retry {attempt + 1}/{max_retries}: {type(e).__name__}")
                    await asyncio.sleep(0.5)
                    continue
                raise LocationResolutionError(f"Wikidata unreachable: {type(e).__name__}") from e
            except httpx.HTTPStatusError as e:
                raise LocationResolutionError(
                    f"Wikidata returned HTTP {e.response.status_code}"
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                raise LocationResolutionError(f"Wikidata request failed: {e}") from e
        raise LocationResolutionError("Wikidata request failed")

    async def search_entity(self, text: str) -> Optional[str]:
        """Return the ID of the best-matching entity (e.g. ``Q1861``), if any."""
        data = await self._request_with_retry({
            "action": "wbsearchentities",
            "search": text,
            "language": "en",
            "format": "json",
            "limit": 1,
        })
        results = data.get("search") or []
        if not results:
            return None
        entity = results[0]
        logger.info(f"[WIKIDATA] Found entity {entity.get('id')} ({entity.get('label')}) for '{text}'")
        return entity.get("id")

    async def get_property(self, entity_id: str, property_key: str) -> Optional[str]:
        """Return the first string value of ``property_key`` on an entity."""
        data = await self._request_with_retry({
            "action": "wbgetentities",
            "ids": entity_id,
            "props": "claims",
            "format": "json",
        })
        entity = (data.get("entities") or {}).get(entity_id) or {}
        claims = (entity.get("claims") or {}).get(property_key) or []
        for claim in claims:
            value = claim.get("mainsnak", {}).get("datavalue", {}).get("value")
            if isinstance(value, str) and value:
                return value
        return None

    async def get_freebase_id(self, place: str) -> Optional[str]:
        """Two-step lookup: place name → entity → Freebase ID."""
        entity_id = await self.search_entity(place)
        if entity_id is None:
            logger.info(f"[WIKIDATA] No entity for '{place}'")
            return None
        freebase_id = await self.get_property(entity_id, FREEBASE_ID_PROPERTY)
        if freebase_id is None:
            logger.info(f"[WIKIDATA] No Freebase ID on {entity_id}")
        return freebase_id
