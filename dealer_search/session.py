"""
Shopping state and side-by-side comparison.
"""

from typing import List, Optional, Sequence

from dealer_search.models import CarSummary, ComparisonResult, SearchFilters


class ShoppingState:
    """
    Explicit per-shopper state: current filters, the selected car and the
    comparison list. Not shared across shoppers.

    The HTTP API is stateless; this is the store a client (browser session,
    CLI or notebook) keeps between calls. Its compare list is what gets posted
    to /api/compare, and its filters to /api/search/cars.
    """

    def __init__(self):
        self.filters = SearchFilters()
        self.selected_car: Optional[CarSummary] = None
        self.compared_cars: List[CarSummary] = []

    def set_filters(self, filters: SearchFilters) -> None:
        self.filters = filters

    def select(self, car: Optional[CarSummary]) -> None:
        self.selected_car = car

    def toggle_compare(self, car: CarSummary) -> bool:
        """
        Add the car to the comparison list, or remove it when already present.

        Returns:
            True if the car is in the list afterwards
        """
        if any(c.id == car.id for c in self.compared_cars):
            self.compared_cars = [c for c in self.compared_cars if c.id != car.id]
            return False
        self.compared_cars = self.compared_cars + [car]
        return True

    def clear_compare(self) -> None:
        self.compared_cars = []


def compare_cars(cars: Sequence[CarSummary]) -> ComparisonResult:
    """Pick the cheapest, most efficient and lowest-mileage cars; first wins ties."""
    if not cars:
        return ComparisonResult(count=0)

    cheapest = min(cars, key=lambda car: car.price)
    best_mpg = max(cars, key=lambda car: car.mpg)
    lowest_mileage = min(cars, key=lambda car: car.mileage)
    prices = [car.price for car in cars]

    return ComparisonResult(
        count=len(cars),
        cheapest_id=cheapest.id,
        best_mpg_id=best_mpg.id,
        lowest_mileage_id=lowest_mileage.id,
        price_spread=max(prices) - min(prices)
    )
