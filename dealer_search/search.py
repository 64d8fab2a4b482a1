"""
Search service orchestrating fetch, matching, ranking and diversification.
"""

from typing import Dict, List, Optional, Tuple

from dealer_search.config import settings
from dealer_search.diversify import diversify
from dealer_search.extractor import FilterExtractor
from dealer_search.inventory import BaseInventoryAdapter, DealerInventoryClient, MockInventoryAdapter
from dealer_search.logging_config import get_structured_logger
from dealer_search.matching import MatchCriteria, filter_listings
from dealer_search.models import CarSummary, SearchFilters, VehicleListing
from dealer_search.scoring import rank_listings

logger = get_structured_logger(__name__)


def create_inventory_adapter() -> BaseInventoryAdapter:
    """Build the inventory adapter selected in settings."""
    if settings.inventory_adapter == "mock":
        return MockInventoryAdapter()
    return DealerInventoryClient(timeout=settings.inventory_timeout_seconds)


def present(listings: List[VehicleListing]) -> List[CarSummary]:
    """Summaries of listings that carry a price; unpriced listings are dropped."""
    return [CarSummary.from_listing(listing) for listing in listings if listing.price > 0]


def _unique_by_id(listings: List[VehicleListing]) -> List[VehicleListing]:
    seen: Dict[str, VehicleListing] = {}
    for listing in listings:
        seen.setdefault(listing.id, listing)
    return list(seen.values())


class SearchService:
    """Run filter and description searches against one inventory adapter."""

    def __init__(
        self,
        adapter: Optional[BaseInventoryAdapter] = None,
        extractor: Optional[FilterExtractor] = None
    ):
        self.adapter = adapter or create_inventory_adapter()
        self.extractor = extractor or FilterExtractor()

    async def search_by_filters(self, filters: SearchFilters) -> Tuple[List[CarSummary], int]:
        """
        Search with structured filters.

        Args:
            filters: Search filters from the form

        Returns:
            (cars capped at the result cap, total matches before capping)
        """
        listings = await self.adapter.fetch_inventory(filters)
        matched = filter_listings(listings, MatchCriteria.from_filters(filters))
        cars = present(matched)

        logger.info("filter_search_complete", fetched=len(listings), matched=len(cars))
        return cars[:settings.search_result_cap], len(cars)

    async def search_by_description(
        self,
        description: str,
        max_per_model: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Tuple[SearchFilters, List[CarSummary], int]:
        """
        Search with a free-text description.

        Args:
            description: What the shopper is looking for
            max_per_model: Per-model cap (settings default)
            limit: Number of cars returned (settings default)

        Returns:
            (extracted filters, diversified cars, ranked matches before diversification)
        """
        if max_per_model is None:
            max_per_model = settings.description_max_per_model
        if limit is None:
            limit = settings.description_limit

        filters = await self.extractor.extract_filters(description)

        listings = await self.adapter.fetch_for_models(filters, filters.preferred_models)
        listings = _unique_by_id(listings)

        matched = filter_listings(listings, MatchCriteria.from_filters(filters))
        priced = [listing for listing in matched if listing.price > 0]
        ranked = rank_listings(priced, filters)
        selected = diversify(ranked, max_per_model=max_per_model, limit=limit)

        logger.info(
            "description_search_complete",
            models=filters.preferred_models,
            fetched=len(listings),
            ranked=len(ranked),
            returned=len(selected)
        )
        return filters, [CarSummary.from_listing(candidate.listing) for candidate in selected], len(ranked)

    async def get_car(self, vehicle_id: str) -> Optional[CarSummary]:
        """Look up one car by id; None when it is not in the current inventory."""
        listing = await self.adapter.get_vehicle(vehicle_id)
        if listing is None:
            logger.info("vehicle_not_found", vehicle_id=vehicle_id)
            return None
        return CarSummary.from_listing(listing)
