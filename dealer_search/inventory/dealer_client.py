"""
Live dealer inventory adapter.
Queries the inventory widget service each registered dealer site exposes.
"""

import asyncio
from typing import Any, Dict, List, Literal, Optional

import aiohttp

from dealer_search.dealers import resolve_dealers
from dealer_search.inventory.base import BaseInventoryAdapter, InventoryFetchError
from dealer_search.inventory.normalize import normalize_inventory_response
from dealer_search.logging_config import get_structured_logger
from dealer_search.matching import apply_inventory_constraints
from dealer_search.models import DealerConfig, NumericRange, SearchFilters, VehicleListing

logger = get_structured_logger(__name__)

Condition = Literal["new", "used"]

INVENTORY_PATH = "/api/widget/ws-inv-data/getInventory"
PAGE_SIZE = 50

FUEL_TYPE_PARAMETERS = {
    "gasoline": "Gas",
    "hybrid": "Hybrid",
    "electric": "Electric",
}

DISPLAY_ATTRIBUTES = ",".join([
    "askingPrice", "attributes", "bodyStyle", "cityMpg", "driveLine", "engine",
    "exteriorColor", "fuelType", "highwayMpg", "id", "interiorColor", "internetPrice",
    "make", "mileage", "model", "msrp", "normalExteriorColor", "normalFuelType",
    "normalInteriorColor", "odometer", "primary_image", "status", "stockNumber",
    "transmission", "trim", "trimLevel", "type", "uuid", "vin", "year",
])

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _range(value: NumericRange) -> str:
    return f"{_number(value.min)}-{_number(value.max)}"


def build_inventory_parameters(filters: Optional[SearchFilters]) -> Dict[str, Any]:
    """
    Map search filters to the widget's inventoryParameters.
    Condition and odometer depend on which pages are fetched and are added later.
    """
    params: Dict[str, Any] = {}
    if not filters:
        return params

    if filters.model:
        params["model"] = filters.model
    if filters.trim:
        params["trim"] = filters.trim
    if filters.year:
        params["year"] = str(filters.year)
    if filters.fuel_type:
        params["fuelType"] = FUEL_TYPE_PARAMETERS.get(filters.fuel_type, filters.fuel_type)
    if filters.body_style:
        params["bodyStyle"] = filters.body_style
    if filters.color:
        params["normalExteriorColor"] = filters.color
    if filters.interior_color:
        params["normalInteriorColor"] = filters.interior_color
    if filters.transmission:
        params["normalTransmission"] = filters.transmission
    if filters.options:
        # the widget accepts a single option
        params["gvOption"] = filters.options[0]
    if filters.highway_mpg:
        params["highwayFuelEconomy"] = f"{_number(filters.highway_mpg)}-"
    if filters.city_mpg:
        params["cityFuelEconomy"] = f"{_number(filters.city_mpg)}-"
    if filters.interior_material:
        params["normalInteriorMaterial"] = filters.interior_material
    if filters.engine:
        params["engine"] = filters.engine
    if filters.drive_line:
        params["normalDriveLine"] = filters.drive_line

    if filters.price_ranges:
        params["internetPrice"] = [_range(r) for r in filters.price_ranges]
    elif filters.price_range:
        params["internetPrice"] = [_range(filters.price_range)]

    return params


def conditions_to_fetch(filters: Optional[SearchFilters]) -> List[Condition]:
    if filters and filters.condition in ("new", "used"):
        return [filters.condition]
    return ["new", "used"]


def build_inventory_payload(
    inventory_parameters: Dict[str, Any],
    condition: Condition,
    dealer: DealerConfig
) -> Dict[str, Any]:
    """Build the widget request body for one dealer and condition."""
    is_new = condition == "new"

    return {
        "siteId": dealer.site_id,
        "locale": "en_US",
        "device": "DESKTOP",
        "pageAlias": "INVENTORY_LISTING_DEFAULT_AUTO_NEW" if is_new else "INVENTORY_LISTING_DEFAULT_AUTO_USED",
        "pageId": dealer.page_id(condition),
        "windowId": "inventory-data-bus2",
        "widgetName": "ws-inv-data",
        "inventoryParameters": inventory_parameters,
        "preferences": {
            "pageSize": str(PAGE_SIZE),
            "listing.config.id": "auto-new" if is_new else "auto-used",
            "removeEmptyFacets": "true",
            "removeEmptyConstraints": "true",
            "required.display.attributes": DISPLAY_ATTRIBUTES,
            "showFranchiseVehiclesOnly": "true",
            "showOffSiteInventoryBanner": "true" if is_new else "false",
            "offsetSharedVehicleImageByOne": "true" if dealer.flags.offset_shared_vehicle_image_by_one else "false",
            "removeOdometerOnNew": "true",
            "sorts": "year,normalBodyStyle,normalExteriorColor,odometer,internetPrice",
        },
        "includePricing": True,
    }


class DealerInventoryClient(BaseInventoryAdapter):
    """Inventory adapter for the dealer sites' inventory widget API."""

    def __init__(self, timeout: float = 30.0):
        """
        Initialize the dealer inventory client.

        Args:
            timeout: Seconds allowed for one widget request
        """
        super().__init__(timeout=timeout)

    async def fetch_inventory(self, filters: Optional[SearchFilters] = None) -> List[VehicleListing]:
        """
        Fetch every requested dealer and condition page concurrently.

        Args:
            filters: Optional search filters, mapped to widget parameters

        Returns:
            Normalized listings that pass the client-side constraints

        Raises:
            InventoryFetchError: If any dealer request fails
        """
        parameters = build_inventory_parameters(filters)
        conditions = conditions_to_fetch(filters)

        if len(conditions) == 1:
            parameters["type"] = conditions[0]
            # odometer is only meaningful on the used pages
            if filters and filters.mileage and conditions[0] == "used":
                parameters["odometer"] = _range(filters.mileage)

        requested = list(filters.dealerships or []) if filters else []
        if filters and filters.dealership:
            requested.append(filters.dealership)
        dealers = resolve_dealers(requested)

        logger.info(
            "inventory_fetch_started",
            dealers=[d.key for d in dealers],
            conditions=conditions,
            parameters=parameters
        )

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            batches = await asyncio.gather(*(
                self._fetch_page(session, dealer, condition, parameters)
                for dealer in dealers
                for condition in conditions
            ))

        listings = [listing for batch in batches for listing in batch]
        filtered = apply_inventory_constraints(listings, filters)

        logger.info("inventory_fetch_complete", fetched=len(listings), kept=len(filtered))
        return filtered

    async def _fetch_page(
        self,
        session: aiohttp.ClientSession,
        dealer: DealerConfig,
        condition: Condition,
        parameters: Dict[str, Any]
    ) -> List[VehicleListing]:
        payload = build_inventory_payload(parameters, condition, dealer)
        data = await self._request_inventory(session, dealer, condition, payload)
        listings = normalize_inventory_response(data, dealer)
        logger.debug("inventory_page_fetched", dealer=dealer.key, condition=condition, vehicles=len(listings))
        return listings

    async def _request_inventory(
        self,
        session: aiohttp.ClientSession,
        dealer: DealerConfig,
        condition: Condition,
        payload: Dict[str, Any]
    ) -> Any:
        """
        POST one widget request.

        Returns:
            Decoded JSON body

        Raises:
            InventoryFetchError: On non-2xx status, a body that is not JSON, timeout or connection failure
        """
        url = f"{dealer.domain}{INVENTORY_PATH}"

        try:
            async with session.post(url, json=payload, headers=self._build_headers(dealer, condition)) as response:
                if response.status >= 400:
                    body = await response.text()
                    logger.error(
                        "inventory_request_failed",
                        dealer=dealer.key,
                        condition=condition,
                        status=response.status
                    )
                    raise InventoryFetchError(
                        f"Inventory request to {dealer.key}/{condition} failed with status {response.status}",
                        status=response.status,
                        details=body[:500],
                        dealer=dealer.key,
                        condition=condition
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    body = await response.text()
                    logger.error(
                        "inventory_response_not_json",
                        dealer=dealer.key,
                        condition=condition,
                        status=response.status
                    )
                    raise InventoryFetchError(
                        f"Inventory response from {dealer.key}/{condition} is not JSON",
                        status=response.status,
                        details=body[:500],
                        dealer=dealer.key,
                        condition=condition
                    ) from e
        except asyncio.TimeoutError as e:
            raise InventoryFetchError(
                f"Inventory request to {dealer.key}/{condition} timed out",
                dealer=dealer.key,
                condition=condition
            ) from e
        except aiohttp.ClientError as e:
            raise InventoryFetchError(
                f"Inventory request to {dealer.key}/{condition} failed: {e}",
                details=str(e),
                dealer=dealer.key,
                condition=condition
            ) from e

    @staticmethod
    def _build_headers(dealer: DealerConfig, condition: Condition) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Accept-Language": "en-US,en;q=0.9",
            "Origin": dealer.domain,
            "Referer": dealer.referer(condition),
            "User-Agent": USER_AGENT,
        }
