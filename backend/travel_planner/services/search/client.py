"""SerpApi HTTP client.

One GET endpoint, many engines (``google_maps``, ``google_hotels``,
``google_flights``). Every call is bounded by a hard timeout, and every
failure is turned into an :class:`~travel_planner.errors.UpstreamError` that
says whether it timed out, was rejected, was unreachable, or sent back
something unusable.
"""

import asyncio
import logging
from typing import Any

import httpx

from travel_planner.config import SERPAPI_BASE_URL
from travel_planner.errors import ConfigurationError, UpstreamError, UpstreamFailure

logger = logging.getLogger(__name__)


class SerpApiClient:
    """Async client for the SerpApi search endpoint."""

    HEADERS = {"Accept": "application/json"}

    def __init__(
        self,
        api_key: str | None,
        base_url: str = SERPAPI_BASE_URL,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key.strip() if api_key else None
        self._base_url = base_url
        self._timeout = timeout
        self._client = client

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self.HEADERS,
                limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "SERP API is not configured. Please set SERPAPI_API_KEY environment variable."
            )

    async def search(self, params: dict[str, Any], context: str = "search") -> dict[str, Any]:
        """Run one search and return the decoded JSON body.

        Args:
            params: Engine parameters (``engine``, ``q``, ...). The API key is
                added here.
            context: Short description used in logs and error messages.

        Raises:
            ConfigurationError: If no API key is configured.
            UpstreamError: On timeout, non-2xx status, transport failure or a
                body that isn't a JSON object.
        """
        self.ensure_configured()
        client = self._get_client()
        try:
            response = await asyncio.wait_for(
                client.get(self._base_url, params={**params, "api_key": self._api_key}),
                timeout=self._timeout,
            )
            response.raise_for_status()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"[SERP] No response [{context}] after {self._timeout}s")
            raise UpstreamError(
                f"SERP API did not respond within {self._timeout}s ({context})",
                UpstreamFailure.TIMEOUT,
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"[SERP] Error [{context}]: HTTP {status}: {e.response.text[:500]}")
            raise UpstreamError(
                f"SERP API returned error: {status}",
                UpstreamFailure.REJECTED,
                upstream_status=status,
            ) from e
        except httpx.RequestError as e:
            logger.error(f"[SERP] Request failed [{context}]: {type(e).__name__}: {e}")
            raise UpstreamError(
                f"SERP API is unreachable ({context})",
                UpstreamFailure.UNREACHABLE,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"SERP API returned invalid JSON ({context})",
                UpstreamFailure.MALFORMED,
            ) from e
        if not isinstance(data, dict):
            raise UpstreamError(
                f"SERP API returned unexpected payload ({context})",
                UpstreamFailure.MALFORMED,
            )
        return data
