"""
Parametrized tests for comprehensive coverage of variations.
"""

import pytest

from dealer_search.dealers import get_dealer, resolve_dealers
from dealer_search.inventory.dealer_client import build_inventory_parameters, conditions_to_fetch
from dealer_search.matching import MatchCriteria, match_listing
from dealer_search.models import CarSummary, SearchFilters, calculate_eco_rating


@pytest.mark.parametrize("raw,expected", [
    ("gas", "gasoline"),
    ("Gasoline", "gasoline"),
    ("HYBRID", "hybrid"),
    ("electric", "electric"),
    ("", None),
    (None, None),
])
def test_fuel_type_normalization(raw, expected):
    assert SearchFilters(fuel_type=raw).fuel_type == expected


@pytest.mark.parametrize("raw,expected", [
    ("in stock", "In Stock"),
    ("In Transit", "In Transit"),
    ("BUILD PHASE", "Build Phase"),
])
def test_vehicle_status_normalization(raw, expected):
    assert SearchFilters(vehicle_status=raw).vehicle_status == expected


@pytest.mark.parametrize("condition,expected", [
    (None, ["new", "used"]),
    ("both", ["new", "used"]),
    ("new", ["new"]),
    ("used", ["used"]),
])
def test_conditions_to_fetch(condition, expected):
    assert conditions_to_fetch(SearchFilters(condition=condition)) == expected


@pytest.mark.parametrize("fuel_type,expected", [
    ("gasoline", "Gas"),
    ("hybrid", "Hybrid"),
    ("electric", "Electric"),
])
def test_fuel_type_parameter(fuel_type, expected):
    assert build_inventory_parameters(SearchFilters(fuel_type=fuel_type))["fuelType"] == expected


@pytest.mark.parametrize("keys,expected", [
    (None, ["plano", "dallas", "richardson"]),
    ([], ["plano", "dallas", "richardson"]),
    (["dallas"], ["dallas"]),
    (["DALLAS", "dallas", "plano"], ["dallas", "plano"]),
    (["unknown"], ["plano", "dallas", "richardson"]),
])
def test_resolve_dealers(keys, expected):
    assert [dealer.key for dealer in resolve_dealers(keys)] == expected


@pytest.mark.parametrize("key", ["", None, "austin"])
def test_unknown_dealer(key):
    assert get_dealer(key) is None


@pytest.mark.parametrize("fuel_type,city,highway,expected", [
    ("gasoline", 28, 39, 6),
    ("hybrid", 51, 53, 9),
    ("electric", 131, 107, 10),
    ("diesel", 20, 25, 6),
    ("gasoline", 12, 16, 4),
])
def test_eco_rating(fuel_type, city, highway, expected):
    assert calculate_eco_rating(fuel_type, city, highway) == expected


@pytest.mark.parametrize("extra", [
    {},
    {"interior_material": "Leather"},
    {"engine": "V6"},
    {"drive_line": "AWD"},
    {"transmission": "Manual"},
])
def test_unmatched_fields_do_not_change_matching(listing_factory, extra):
    """Fields outside the matcher's constraint set never exclude a listing."""
    listing = listing_factory(model="Camry", asking_price=25000)
    filters = SearchFilters(model="Camry", price_range={"min": 20000, "max": 30000}, **extra)

    assert match_listing(listing, MatchCriteria.from_filters(filters))


@pytest.mark.parametrize("image_url,expected_prefix", [
    ("https://cdn.example.com/camry.jpg", "https://cdn.example.com/"),
    (None, "/placeholder.svg?height=300&width=400&query=Toyota Camry 2024"),
])
def test_car_summary_image(listing_factory, image_url, expected_prefix):
    car = CarSummary.from_listing(listing_factory(image_url=image_url))
    assert car.image_url.startswith(expected_prefix)
