"""Unit tests for trip-level search aggregation."""

from unittest.mock import AsyncMock

import pytest

from travel_planner.errors import ConfigurationError, UpstreamError, UpstreamFailure
from travel_planner.models import CabinClass, ErrorCode, PlaceResult
from travel_planner.services.search import (
    SearchService,
    TripSearchRequest,
    TripSearchService,
    cabin_class_for_budget,
    hotel_budget_for_budget,
    price_level_for_budget,
)


class TestBudgetMapping:
    """Tests for mapping a trip budget onto search filters."""

    def test_price_level(self) -> None:
        assert price_level_for_budget("budget") == "$"
        assert price_level_for_budget("Luxury") == "$$$"
        assert price_level_for_budget("moderate") == "$$"
        assert price_level_for_budget(None) == "$$"

    def test_hotel_budget(self) -> None:
        assert hotel_budget_for_budget("budget") == 100
        assert hotel_budget_for_budget("luxury") == 500
        assert hotel_budget_for_budget("whatever") == 200

    def test_cabin_class(self) -> None:
        assert cabin_class_for_budget("cheap") == CabinClass.ECONOMY
        assert cabin_class_for_budget("mid") == CabinClass.PREMIUM_ECONOMY
        assert cabin_class_for_budget("premium") == CabinClass.BUSINESS
        assert cabin_class_for_budget("First Class") == CabinClass.FIRST
        assert cabin_class_for_budget(None) == CabinClass.ECONOMY


class TestTripSearchService:
    """Tests for TripSearchService.search_trip."""

    def setup_method(self) -> None:
        self.search = AsyncMock(spec=SearchService)
        self.search.search_restaurants.return_value = [PlaceResult(name="Trattoria")]
        self.search.search_attractions.return_value = [PlaceResult(name="Colosseum")]
        self.search.search_hotels.return_value = [PlaceResult(name="Hotel Roma")]
        self.search.search_flights.return_value = []
        self.trips = TripSearchService(self.search)

    @pytest.mark.asyncio
    async def test_collects_all_categories(self) -> None:
        results = await self.trips.search_trip(
            TripSearchRequest(destination="Rome", interests=["history", "Food"], budget="luxury")
        )

        assert [p.name for p in results.restaurants] == ["Trattoria"]
        assert [p.name for p in results.attractions] == ["Colosseum"]
        assert [p.name for p in results.hotels] == ["Hotel Roma"]
        assert results.errors == {}

        restaurant_options = self.search.search_restaurants.await_args.args[1]
        assert restaurant_options.cuisine == "local"
        assert restaurant_options.price_level == "$$$"
        assert restaurant_options.limit == 10
        hotel_options = self.search.search_hotels.await_args.args[1]
        assert hotel_options.budget == 500
        assert hotel_options.limit == 8

    @pytest.mark.asyncio
    async def test_flights_need_origin_and_dates(self) -> None:
        await self.trips.search_trip(TripSearchRequest(destination="Rome", origin="London"))
        self.search.search_flights.assert_not_called()

        await self.trips.search_trip(
            TripSearchRequest(
                destination="Rome",
                origin="London",
                dates={"start": "2025-05-01", "end": "2025-05-08"},
                travelers=2,
                budget="budget",
            )
        )

        args = self.search.search_flights.await_args.args
        assert args[:4] == ("London", "Rome", "2025-05-01", "2025-05-08")
        assert args[4].adults == 2
        assert args[4].cabin_class == CabinClass.ECONOMY
        assert args[4].limit == 8

    @pytest.mark.asyncio
    async def test_failing_category_does_not_sink_the_rest(self) -> None:
        self.search.search_hotels.side_effect = UpstreamError(
            "SERP API did not respond", UpstreamFailure.TIMEOUT
        )

        results = await self.trips.search_trip(TripSearchRequest(destination="Rome"))

        assert results.hotels == []
        assert [p.name for p in results.restaurants] == ["Trattoria"]
        assert set(results.errors) == {"hotels"}
        assert results.errors["hotels"].code == ErrorCode.UPSTREAM_TIMEOUT

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported_as_api_error(self) -> None:
        self.search.search_attractions.side_effect = RuntimeError("bug")

        results = await self.trips.search_trip(TripSearchRequest(destination="Rome"))

        assert results.errors["attractions"].code == ErrorCode.API_ERROR
        assert len(results.restaurants) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_provider_reports_every_category(self) -> None:
        error = ConfigurationError("SERP API is not configured")
        self.search.search_restaurants.side_effect = error
        self.search.search_attractions.side_effect = error
        self.search.search_hotels.side_effect = error

        results = await self.trips.search_trip(TripSearchRequest(destination="Rome"))

        assert set(results.errors) == {"restaurants", "attractions", "hotels"}
        assert all(e.code == ErrorCode.SERVICE_UNAVAILABLE for e in results.errors.values())
