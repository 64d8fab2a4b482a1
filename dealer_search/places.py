"""
Nearby dealership lookup through the Google Places Nearby Search API.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp

from dealer_search.config import require_places_key, settings
from dealer_search.logging_config import get_structured_logger
from dealer_search.models import GeoLocation, NearbyDealer

logger = get_structured_logger(__name__)

MAX_DEALERS = 5


class PlacesAPIError(Exception):
    """Raised when the places service answers with an error."""

    def __init__(self, message: str, status: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class PlacesTimeoutError(Exception):
    """Raised when the places service does not answer within the timeout."""
    pass


def normalize_place(result: Dict[str, Any]) -> NearbyDealer:
    """Map one Places result to a NearbyDealer."""
    location = (result.get("geometry") or {}).get("location")
    rating = result.get("rating")

    return NearbyDealer(
        name=result.get("name") or "",
        address=result.get("vicinity") or result.get("formatted_address") or "",
        rating=rating if isinstance(rating, (int, float)) else None,
        place_id=result.get("place_id"),
        location=GeoLocation(**location) if location else None,
        is_open=(result.get("opening_hours") or {}).get("open_now")
    )


class NearbyDealerFinder:
    """Find dealerships of a make around a location."""

    def __init__(self, api_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_url = api_url or settings.places_api_url
        self.timeout = timeout if timeout is not None else settings.places_timeout_seconds

    async def find_dealers(
        self,
        lat: float,
        lng: float,
        make: str,
        radius_meters: int = 10000
    ) -> List[NearbyDealer]:
        """
        Search for "{make} Dealer" within a radius.

        Args:
            lat: Latitude
            lng: Longitude
            make: Vehicle make
            radius_meters: Search radius

        Returns:
            Up to five dealers in the order the service ranks them

        Raises:
            ConfigurationError: If no places API key is configured
            PlacesTimeoutError: If the call exceeds the timeout
            PlacesAPIError: On a non-2xx answer or connection failure
        """
        params = {
            "keyword": f"{make} Dealer",
            "location": f"{lat},{lng}",
            "radius": str(radius_meters),
            "key": require_places_key(),
        }

        data = await self._request(params)
        dealers = [normalize_place(result) for result in (data.get("results") or [])[:MAX_DEALERS]]

        logger.info("nearby_dealers_found", make=make, radius=radius_meters, count=len(dealers))
        return dealers

    async def _request(self, params: Dict[str, str]) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.api_url, params=params) as response:
                    if response.status >= 400:
                        body = await response.text()
                        logger.error("places_request_failed", status=response.status)
                        raise PlacesAPIError("Google Places error", status=response.status, details=body)
                    try:
                        data = await response.json(content_type=None)
                    except ValueError as e:
                        body = await response.text()
                        logger.error("places_response_not_json", status=response.status)
                        raise PlacesAPIError(
                            "Google Places error", status=response.status, details=body[:500]
                        ) from e
                    if not isinstance(data, dict):
                        raise PlacesAPIError("Google Places error", status=response.status, details=str(data)[:500])
                    return data
        except asyncio.TimeoutError as e:
            logger.error("places_request_timeout", timeout=self.timeout)
            raise PlacesTimeoutError("Timeout expired") from e
        except aiohttp.ClientError as e:
            raise PlacesAPIError("Google Places error", details=str(e)) from e
