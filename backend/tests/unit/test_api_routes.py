"""Unit tests for the HTTP API.

The app is built around a real service container whose SerpApi client
talks to an ``httpx.MockTransport``.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from travel_planner.config import Settings
from travel_planner.dependencies import ServiceContainer
from travel_planner.main import create_app
from travel_planner.services.search import SerpApiClient


def serp_handler(calls: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        engine = request.url.params.get("engine")
        if engine == "google_maps":
            return httpx.Response(
                200,
                json={"local_results": [{"title": f"Spot {i}", "rating": 4.0} for i in range(12)]},
            )
        if engine == "google_hotels":
            return httpx.Response(200, json={"properties": [{"name": "Hotel A"}]})
        if "booking_token" in request.url.params:
            return httpx.Response(200, json={"booking_options": [{"book_with": "Airline", "price": 300}]})
        return httpx.Response(
            200,
            json={
                "best_flights": [
                    {
                        "flights": [
                            {
                                "airline": "Iberia",
                                "departure_airport": {"id": "MAD"},
                                "arrival_airport": {"id": "FCO"},
                            }
                        ],
                        "total_duration": 150,
                        "price": 120,
                    }
                ]
            },
        )

    return handler


def build_client(api_key: str | None = "test-key") -> tuple[TestClient, list[httpx.Request]]:
    calls: list[httpx.Request] = []
    settings = Settings(serpapi_api_key=api_key)
    serp = SerpApiClient(
        api_key=api_key,
        client=httpx.AsyncClient(transport=httpx.MockTransport(serp_handler(calls))),
    )
    services = ServiceContainer.build(settings, serp_client=serp)
    return TestClient(create_app(services=services)), calls


class TestApiRoutes:
    """Tests for the search and cache endpoints."""

    def setup_method(self) -> None:
        self.client, self.calls = build_client()

    def test_health(self) -> None:
        with self.client as client:
            assert client.get("/health").json() == {"status": "healthy"}

    def test_search_health(self) -> None:
        with self.client as client:
            body = client.get("/api/search/health").json()
        assert body == {
            "configured": True,
            "status": "available",
            "message": "SERP API is configured and ready",
        }

    def test_restaurants_envelope(self) -> None:
        with self.client as client:
            response = client.get(
                "/api/search/restaurants",
                params={"destination": "Paris", "cuisine": "italian", "priceLevel": "$$", "limit": 3},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 3
        assert [p["name"] for p in body["data"]] == ["Spot 0", "Spot 1", "Spot 2"]
        assert body["message"] == "Found 3 restaurants"

    def test_repeat_search_is_served_from_cache(self) -> None:
        with self.client as client:
            client.get("/api/search/attractions", params={"destination": "Rome", "interests": "art,food"})
            client.get("/api/search/attractions", params={"destination": "rome", "interests": "Food, art"})
            stats = client.get("/api/cache/stats").json()

        assert len(self.calls) == 1
        search_stats = next(s for s in stats["data"] if s["domain"] == "search")
        assert search_stats["keys"] == 1
        assert search_stats["hits"] == 1

    def test_missing_destination_is_400(self) -> None:
        with self.client as client:
            response = client.get("/api/search/hotels")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_INPUT"
        assert "destination" in body["error"]["message"]
        assert self.calls == []

    def test_unconfigured_provider_is_503(self) -> None:
        client, calls = build_client(api_key=None)
        with client:
            response = client.get("/api/search/restaurants", params={"destination": "Paris"})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "SERVICE_UNAVAILABLE"
        assert calls == []

    def test_flights(self) -> None:
        with self.client as client:
            response = client.get(
                "/api/search/flights",
                params={
                    "origin": "MAD",
                    "destination": "FCO",
                    "departureDate": "2025-09-10",
                    "cabinClass": "business",
                },
            )

        assert response.status_code == 200
        flight = response.json()["data"][0]
        assert flight["airline"] == "Iberia"
        assert flight["duration"] == "2h 30m"
        assert self.calls[0].url.params["travel_class"] == "3"

    def test_invalid_cabin_class_is_400(self) -> None:
        with self.client as client:
            response = client.get(
                "/api/search/flights",
                params={"origin": "MAD", "destination": "FCO", "departureDate": "2025-09-10",
                        "cabinClass": "steerage"},
            )
        assert response.status_code == 400

    def test_flight_booking_options(self) -> None:
        with self.client as client:
            response = client.get("/api/search/flight-booking-options", params={"bookingToken": "abc"})

        assert response.status_code == 200
        assert response.json()["data"][0]["provider"] == "Airline"

    def test_trip_search(self) -> None:
        with self.client as client:
            response = client.post(
                "/api/search/trip",
                json={
                    "destination": "Rome",
                    "origin": "MAD",
                    "dates": {"start": "2025-09-10", "end": "2025-09-14"},
                    "budget": "budget",
                },
            )

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["restaurants"]) == 10
        assert len(data["attractions"]) == 12
        assert [h["name"] for h in data["hotels"]] == ["Hotel A"]
        assert data["flights"][0]["airline"] == "Iberia"
        assert data["errors"] == {}

    def test_trip_search_requires_destination(self) -> None:
        with self.client as client:
            response = client.post("/api/search/trip", json={"destination": ""})
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "query, remaining",
        [
            ({"pattern": "paris"}, 1),
            ({"domain": "search"}, 0),
            ({}, 0),
        ],
    )
    def test_clear_cache(self, query: dict, remaining: int) -> None:
        with self.client as client:
            client.get("/api/search/restaurants", params={"destination": "Paris"})
            client.get("/api/search/restaurants", params={"destination": "Rome"})
            response = client.delete("/api/cache", params=query)
            stats = client.get("/api/cache/stats").json()

        assert response.json()["success"] is True
        search_stats = next(s for s in stats["data"] if s["domain"] == "search")
        assert search_stats["keys"] == remaining
