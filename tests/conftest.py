"""
Pytest configuration and fixtures for testing.
"""

import json
import pytest
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, Mock

from dealer_search.inventory.mock_adapter import MockInventoryAdapter
from dealer_search.models import CarSummary, VehicleListing


def make_listing(**overrides) -> VehicleListing:
    """Build a listing with sensible defaults."""
    values = {
        "id": "v-1",
        "year": 2024,
        "make": "Toyota",
        "model": "Camry",
        "trim": "LE",
        "body_style": "Sedan",
        "exterior_color": "Silver",
        "interior_color": "Black",
        "transmission": "Automatic",
        "engine": "2.5L I4",
        "fuel_type": "gasoline",
        "city_mpg": 28,
        "highway_mpg": 39,
        "mileage": 10,
        "asking_price": 28000,
        "internet_price": None,
        "is_new": True,
        "dealer": "plano",
    }
    values.update(overrides)
    return VehicleListing(**values)


@pytest.fixture
def sample_listings() -> List[VehicleListing]:
    """Small mixed inventory."""
    return [
        make_listing(id="camry-new", model="Camry", asking_price=25000, mileage=5, is_new=True),
        make_listing(
            id="camry-used", model="Camry", year=2021, asking_price=29900, mileage=42000,
            is_new=False, exterior_color="Blue", dealer="dallas"
        ),
        make_listing(
            id="corolla-new", model="Corolla", asking_price=22000, mileage=0, is_new=True,
            city_mpg=32, highway_mpg=41, exterior_color="White"
        ),
        make_listing(
            id="rav4-hybrid", model="RAV4", trim="XLE Premium", body_style="SUV", fuel_type="hybrid",
            asking_price=36000, internet_price=34500, city_mpg=41, highway_mpg=38, mileage=12,
            is_new=True, dealer="richardson"
        ),
        make_listing(
            id="tacoma-used", model="Tacoma", trim="SR5", body_style="Truck", year=2019,
            asking_price=27500, mileage=61000, is_new=False, city_mpg=19, highway_mpg=24,
            exterior_color="Red", dealer="dallas"
        ),
        make_listing(
            id="prius-unpriced", model="Prius", fuel_type="hybrid", asking_price=0,
            city_mpg=57, highway_mpg=56
        ),
    ]


@pytest.fixture
def mock_adapter(sample_listings) -> MockInventoryAdapter:
    """Mock inventory adapter serving the sample listings."""
    return MockInventoryAdapter(inventory=sample_listings)


@pytest.fixture
def sample_cars(sample_listings) -> List[CarSummary]:
    """Summaries of the priced sample listings."""
    return [CarSummary.from_listing(listing) for listing in sample_listings if listing.price > 0]


@pytest.fixture
def mock_anthropic_client():
    """Mock Anthropic Claude client for testing."""
    mock = AsyncMock()
    mock.messages.create = AsyncMock(return_value=Mock(
        content=[Mock(text='{"models": ["Camry"]}')],
        usage=Mock(input_tokens=100, output_tokens=50)
    ))
    return mock


class FakeResponse:
    """Stand-in for an aiohttp response used as an async context manager."""

    def __init__(self, status: int = 200, payload: Any = None, body: str = ""):
        self.status = status
        self.payload = payload
        self.body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self) -> str:
        return self.body

    async def json(self, content_type: Optional[str] = "application/json") -> Any:
        if self.payload is None and self.body:
            return json.loads(self.body)
        return self.payload


class FakeSession:
    """
    Stand-in for aiohttp.ClientSession.
    `handler(method, url, kwargs)` returns a FakeResponse or raises.
    """

    def __init__(self, handler: Callable[[str, str, Dict[str, Any]], FakeResponse]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, *args, **kwargs):
        # lets the instance replace the ClientSession class
        return self

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def _request(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.handler(method, url, kwargs)

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._request("POST", url, **kwargs)

    def get(self, url: str, **kwargs) -> FakeResponse:
        return self._request("GET", url, **kwargs)


@pytest.fixture
def listing_factory() -> Callable[..., VehicleListing]:
    """Factory building listings from keyword overrides."""
    return make_listing


@pytest.fixture
def fake_session() -> Callable[..., FakeSession]:
    """Factory building a FakeSession from a request handler."""
    return FakeSession


@pytest.fixture
def fake_response() -> Callable[..., FakeResponse]:
    """Factory building a FakeResponse."""
    return FakeResponse
