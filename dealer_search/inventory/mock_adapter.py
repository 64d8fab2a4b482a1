"""
Mock inventory adapter for demo and testing purposes.
Generates realistic Toyota dealership listings.
"""

import random
from typing import Iterable, List, Optional

from dealer_search.dealers import list_dealers
from dealer_search.inventory.base import BaseInventoryAdapter
from dealer_search.matching import MatchCriteria, apply_inventory_constraints, filter_listings
from dealer_search.models import SearchFilters, VehicleListing


class MockInventoryAdapter(BaseInventoryAdapter):
    """Mock adapter serving an in-memory inventory."""

    def __init__(
        self,
        inventory: Optional[Iterable[VehicleListing]] = None,
        size: int = 60,
        seed: Optional[int] = 7
    ):
        """
        Initialize the mock adapter.

        Args:
            inventory: Listings to serve; generated demo data when omitted
            size: Number of generated listings
            seed: Random seed for the generated data
        """
        super().__init__()
        if inventory is not None:
            self.inventory = list(inventory)
        else:
            self.inventory = self._generate_mock_inventory(size, seed)

    @staticmethod
    def _generate_mock_inventory(size: int, seed: Optional[int]) -> List[VehicleListing]:
        """Generate realistic mock inventory data."""
        rng = random.Random(seed)

        # model -> (body style, city mpg, highway mpg, base price)
        lineup = {
            "Camry": ("Sedan", 28, 39, 28000),
            "Corolla": ("Sedan", 32, 41, 22000),
            "Prius": ("Hatchback", 57, 56, 28500),
            "RAV4": ("SUV", 27, 35, 30000),
            "Highlander": ("SUV", 22, 29, 39000),
            "Tacoma": ("Truck", 20, 23, 33000),
            "Tundra": ("Truck", 18, 24, 42000),
            "Sienna": ("Minivan", 36, 36, 39000),
            "bZ4X": ("SUV", 131, 107, 43000),
        }
        trims = ["LE", "SE", "XLE", "XSE", "Limited", "Platinum"]
        colors = ["Black", "White", "Silver", "Gray", "Blue", "Red"]
        dealers = [dealer.key for dealer in list_dealers()]

        inventory = []
        for i in range(size):
            model = rng.choice(list(lineup))
            body_style, city, highway, base_price = lineup[model]

            if model == "Prius" or (model in ("Camry", "RAV4", "Sienna") and rng.random() < 0.4):
                fuel_type = "hybrid"
            elif model == "bZ4X":
                fuel_type = "electric"
            else:
                fuel_type = "gasoline"

            is_new = rng.random() < 0.5
            year = rng.randint(2024, 2025) if is_new else rng.randint(2016, 2023)
            mileage = rng.randint(0, 40) if is_new else rng.randint(8000, 90000)
            asking_price = base_price + rng.randint(0, 12) * 500
            if not is_new:
                asking_price = max(9000, asking_price - (2025 - year) * 1800 - mileage // 20)
            discount = rng.choice([0, 0, 500, 1000, 1500])

            inventory.append(VehicleListing(
                id=f"mock-{i + 1:03d}",
                year=year,
                make="Toyota",
                model=model,
                trim=rng.choice(trims),
                body_style=body_style,
                exterior_color=rng.choice(colors),
                interior_color=rng.choice(["Black", "Gray", "Beige"]),
                transmission="CVT" if fuel_type != "gasoline" else "Automatic",
                engine="Electric Motor" if fuel_type == "electric" else rng.choice(["2.5L I4", "3.5L V6", "2.4L Turbo I4"]),
                fuel_type=fuel_type,
                city_mpg=city,
                highway_mpg=highway,
                mileage=mileage,
                asking_price=asking_price,
                internet_price=asking_price - discount if discount else None,
                vin="".join(rng.choices("ABCDEFGHJKLMNPRSTUVWXYZ1234567890", k=17)),
                stock_number=f"STK{i + 1001}",
                is_new=is_new,
                seats=8 if model in ("Highlander", "Sienna") else 5,
                dealer=rng.choice(dealers)
            ))

        return inventory

    async def fetch_inventory(self, filters: Optional[SearchFilters] = None) -> List[VehicleListing]:
        """Get inventory narrowed the way the live feed narrows it."""
        if not filters:
            return list(self.inventory)

        matched = filter_listings(self.inventory, MatchCriteria.from_filters(filters))
        return apply_inventory_constraints(matched, filters)
