"""
Tests for the search service pipeline.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from dealer_search.config import settings
from dealer_search.extractor import FilterExtractor
from dealer_search.inventory import DealerInventoryClient, MockInventoryAdapter
from dealer_search.models import SearchFilters
from dealer_search.search import SearchService, create_inventory_adapter


def service_with(adapter, filters: SearchFilters) -> SearchService:
    extractor = Mock(spec=FilterExtractor)
    extractor.extract_filters = AsyncMock(return_value=filters)
    return SearchService(adapter=adapter, extractor=extractor)


@pytest.mark.asyncio
async def test_search_by_filters_drops_unpriced(mock_adapter):
    service = service_with(mock_adapter, SearchFilters())

    cars, total = await service.search_by_filters(SearchFilters(fuel_type="hybrid"))

    assert [car.id for car in cars] == ["rav4-hybrid"]
    assert total == 1


@pytest.mark.asyncio
async def test_search_by_filters_caps_results(listing_factory):
    adapter = MockInventoryAdapter(inventory=[listing_factory(id=f"c{i}") for i in range(60)])
    service = service_with(adapter, SearchFilters())

    cars, total = await service.search_by_filters(SearchFilters())

    assert len(cars) == settings.search_result_cap
    assert total == 60


@pytest.mark.asyncio
async def test_search_by_description_ranks_and_diversifies(listing_factory):
    inventory = [listing_factory(id=f"camry-{i}", model="Camry", asking_price=20000 + i * 1000) for i in range(5)]
    inventory += [listing_factory(id=f"corolla-{i}", model="Corolla", asking_price=21000 + i * 1000) for i in range(2)]
    adapter = MockInventoryAdapter(inventory=inventory)
    filters = SearchFilters(models=["Camry", "Corolla"], price_range={"min": 20000, "max": 30000})
    service = service_with(adapter, filters)

    returned_filters, cars, total = await service.search_by_description("a sedan", max_per_model=3, limit=4)

    assert returned_filters == filters
    assert total == 7
    # round-robin lets both Corollas in ahead of the third Camry
    assert [car.id for car in cars] == ["camry-0", "camry-1", "corolla-0", "corolla-1"]
    service.extractor.extract_filters.assert_awaited_once_with("a sedan")


@pytest.mark.asyncio
async def test_search_by_description_deduplicates(listing_factory):
    listing = listing_factory(id="dup", model="Camry")
    adapter = MockInventoryAdapter(inventory=[listing])
    adapter.fetch_for_models = AsyncMock(return_value=[listing, listing])
    service = service_with(adapter, SearchFilters(model="Camry"))

    _, cars, total = await service.search_by_description("camry")

    assert [car.id for car in cars] == ["dup"]
    assert total == 1


@pytest.mark.asyncio
async def test_search_by_description_with_empty_filters(mock_adapter):
    service = service_with(mock_adapter, SearchFilters())

    filters, cars, total = await service.search_by_description("something")

    assert filters.is_empty()
    assert total == 5
    assert "prius-unpriced" not in [car.id for car in cars]


@pytest.mark.asyncio
async def test_get_car(mock_adapter):
    service = service_with(mock_adapter, SearchFilters())

    car = await service.get_car("rav4-hybrid")

    assert car.name == "2024 Toyota RAV4 XLE Premium"
    assert car.price == 34500
    assert await service.get_car("nope") is None


def test_create_inventory_adapter():
    with patch.object(settings, "inventory_adapter", "mock"):
        assert isinstance(create_inventory_adapter(), MockInventoryAdapter)

    with patch.object(settings, "inventory_adapter", "dealer"):
        assert isinstance(create_inventory_adapter(), DealerInventoryClient)
