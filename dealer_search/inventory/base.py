"""
Abstract base class for inventory adapters.
Defines the interface that all inventory sources must implement.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from dealer_search.logging_config import get_structured_logger
from dealer_search.models import SearchFilters, VehicleListing

logger = get_structured_logger(__name__)


class InventoryFetchError(Exception):
    """Raised when an upstream inventory request fails."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        details: Optional[Any] = None,
        dealer: Optional[str] = None,
        condition: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details
        self.dealer = dealer
        self.condition = condition


class BaseInventoryAdapter(ABC):
    """Abstract base class for inventory adapters."""

    def __init__(self, timeout: float = 30.0):
        """
        Initialize the inventory adapter.

        Args:
            timeout: Seconds allowed for one upstream request
        """
        self.timeout = timeout

    @abstractmethod
    async def fetch_inventory(self, filters: Optional[SearchFilters] = None) -> List[VehicleListing]:
        """
        Retrieve canonical listings, using the filters as upstream hints.

        Args:
            filters: Optional search filters

        Returns:
            List of VehicleListing objects

        Raises:
            InventoryFetchError: If any upstream request fails
        """
        pass

    async def fetch_for_models(
        self,
        filters: Optional[SearchFilters],
        models: List[str]
    ) -> List[VehicleListing]:
        """
        Fetch inventory once per candidate model, concurrently.

        Results are concatenated in model order. A single failed fetch fails
        the whole call.

        Args:
            filters: Search filters shared by every fetch
            models: Candidate model names

        Returns:
            Combined list of VehicleListing objects
        """
        base = filters or SearchFilters()
        if not models:
            return await self.fetch_inventory(base)

        batches = await asyncio.gather(*(
            self.fetch_inventory(base.model_copy(update={"model": model, "models": None}))
            for model in models
        ))

        listings = [listing for batch in batches for listing in batch]
        logger.info("multi_model_fetch_complete", models=models, vehicles=len(listings))
        return listings

    async def get_vehicle(self, vehicle_id: str) -> Optional[VehicleListing]:
        """
        Get a listing by identifier from a fresh, unfiltered fetch.

        Args:
            vehicle_id: Listing identifier

        Returns:
            VehicleListing or None if not found
        """
        for listing in await self.fetch_inventory():
            if listing.id == vehicle_id:
                return listing
        return None

    async def health_check(self) -> bool:
        """
        Check if the inventory source answers.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await self.fetch_inventory()
            return True
        except InventoryFetchError as e:
            logger.warning("inventory_health_check_failed", error=e.message, dealer=e.dealer)
            return False
