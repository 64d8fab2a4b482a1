"""Inventory adapters for dealer inventory feeds."""

from dealer_search.inventory.base import BaseInventoryAdapter, InventoryFetchError
from dealer_search.inventory.dealer_client import DealerInventoryClient
from dealer_search.inventory.mock_adapter import MockInventoryAdapter

__all__ = [
    "BaseInventoryAdapter",
    "InventoryFetchError",
    "DealerInventoryClient",
    "MockInventoryAdapter",
]
