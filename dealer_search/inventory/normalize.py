"""
Normalization of raw dealer inventory widget responses into VehicleListing records.
"""

import re
import time
from typing import Any, Dict, List, Optional

from dealer_search.logging_config import get_structured_logger
from dealer_search.models import DealerConfig, VehicleListing

logger = get_structured_logger(__name__)

RESULT_KEYS = ("searchResults", "results", "items", "inventory", "vehicles")
MIN_MODEL_YEAR = 2010
NEW_MILEAGE_THRESHOLD = 100

_NUMBER_RE = re.compile(r"(\d[\d,]*)")


def normalize_fuel_type(fuel: Optional[str]) -> str:
    normalized = (fuel or "").lower()
    if "hybrid" in normalized:
        return "hybrid"
    if "electric" in normalized or "ev" in normalized:
        return "electric"
    if "diesel" in normalized:
        return "diesel"
    return "gasoline"


def parse_mileage(value: Any) -> int:
    """Parse odometer values such as 15000, "15,000 miles" or "3 miles"."""
    if value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    match = _NUMBER_RE.search(str(value))
    if not match:
        return 0
    return int(match.group(1).replace(",", ""))


def _to_number(*values: Any) -> float:
    """First value that converts to a positive number, else 0."""
    for value in values:
        try:
            number = float(value)
        except (TypeError, ValueError):
            continue
        if number > 0:
            return number
    return 0


def _named_value(entries: Any, name: str) -> Optional[str]:
    # trackingAttributes / attributes are lists of {"name": ..., "value": ...}
    if not isinstance(entries, list):
        return None
    for entry in entries:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry.get("value")
    return None


def _first_named(entries: Any, *names: str) -> Optional[str]:
    for name in names:
        value = _named_value(entries, name)
        if value:
            return value
    return None


def extract_image_url(result: Dict[str, Any], base_domain: str) -> Optional[str]:
    """
    Find the primary image URL of one raw result.

    Args:
        result: Raw result object
        base_domain: Dealer domain used to absolutize relative URLs

    Returns:
        Absolute image URL or None
    """
    image_url = None

    primary = result.get("primary_image")
    if isinstance(primary, str):
        image_url = primary
    elif isinstance(primary, dict):
        image_url = primary.get("url") or primary.get("src") or primary.get("href")

    images = result.get("images") or []
    if not image_url and images:
        chosen = next(
            (img for img in images if isinstance(img, dict) and (img.get("primary") or img.get("isPrimary"))),
            images[0]
        )
        if isinstance(chosen, str):
            image_url = chosen
        elif isinstance(chosen, dict):
            image_url = (
                chosen.get("uri") or chosen.get("url") or chosen.get("src")
                or chosen.get("href") or chosen.get("imageUrl")
            )

    if image_url and not image_url.startswith("http"):
        image_url = f"{base_domain}{image_url}" if image_url.startswith("/") else f"{base_domain}/{image_url}"

    return image_url


def normalize_vehicle(
    result: Dict[str, Any],
    index: int,
    dealer: DealerConfig,
    fetched_at_ms: Optional[int] = None
) -> VehicleListing:
    """Map one raw widget result to a VehicleListing."""
    tracking = result.get("trackingAttributes") or []
    attributes = result.get("attributes") or []
    tracking_pricing = result.get("trackingPricing") or {}
    pricing = result.get("pricing") or {}

    internet_price = _to_number(
        tracking_pricing.get("internetPrice"),
        pricing.get("internetPrice"),
        result.get("internetPrice")
    )
    asking_price = _to_number(
        tracking_pricing.get("msrp"),
        pricing.get("msrp"),
        pricing.get("askingPrice"),
        result.get("askingPrice")
    ) or internet_price

    mileage = parse_mileage(_named_value(attributes, "odometer"))
    if mileage == 0:
        mileage = int(_to_number(result.get("odometer"), result.get("mileage")))

    city_mpg = _to_number(
        _first_named(tracking, "cityMpg", "mpgCity"),
        _first_named(attributes, "cityMpg", "mpgCity"),
        result.get("cityMpg"),
        result.get("mpgCity")
    )
    highway_mpg = _to_number(
        _first_named(tracking, "highwayMpg", "mpgHighway"),
        _first_named(attributes, "highwayMpg", "mpgHighway"),
        result.get("highwayMpg"),
        result.get("mpgHighway")
    )

    # Vendor ids are preferred; the fallback is only unique within this fetch.
    listing_id = result.get("uuid") or result.get("id")
    if not listing_id:
        stamp = result.get("vin") or result.get("stockNumber") or fetched_at_ms or int(time.time() * 1000)
        listing_id = f"{stamp}-{index}"

    return VehicleListing(
        id=str(listing_id),
        year=int(_to_number(result.get("year"))) or 2024,
        make=result.get("make") or "Toyota",
        model=result.get("model") or "Unknown",
        trim=result.get("trim") or result.get("trimLevel") or "",
        body_style=result.get("bodyStyle") or "Sedan",
        exterior_color=(
            _first_named(tracking, "exteriorColor", "extColor") or result.get("exteriorColor") or "Unknown"
        ),
        interior_color=(
            _first_named(tracking, "interiorColor", "intColor") or result.get("interiorColor") or "Unknown"
        ),
        transmission=_first_named(tracking, "transmission") or result.get("transmission") or "Automatic",
        engine=_first_named(tracking, "engine") or result.get("engine") or "Unknown",
        fuel_type=normalize_fuel_type(
            _first_named(tracking, "fuelType", "normalFuelType") or result.get("fuelType")
        ),
        city_mpg=city_mpg,
        highway_mpg=highway_mpg,
        mileage=mileage,
        asking_price=asking_price,
        internet_price=internet_price or asking_price or None,
        image_url=extract_image_url(result, dealer.domain),
        vin=result.get("vin"),
        stock_number=result.get("stockNumber"),
        is_new=(
            result.get("type") == "new"
            or result.get("condition") == "new"
            or mileage < NEW_MILEAGE_THRESHOLD
        ),
        seats=int(_to_number(result.get("seats"))) or 5,
        dealer=dealer.key
    )


def normalize_inventory_response(data: Any, dealer: DealerConfig) -> List[VehicleListing]:
    """
    Transform one widget response into listings.

    Args:
        data: Decoded JSON response
        dealer: Dealer the response came from

    Returns:
        Valid listings (model year after 2010 with a known model)
    """
    results = None
    if isinstance(data, dict):
        for key in RESULT_KEYS:
            if data.get(key):
                results = data[key]
                break

    if not isinstance(results, list):
        logger.warning(
            "inventory_response_without_results",
            dealer=dealer.key,
            keys=sorted(data.keys()) if isinstance(data, dict) else None
        )
        return []

    fetched_at_ms = int(time.time() * 1000)
    listings = [
        normalize_vehicle(result, index, dealer, fetched_at_ms)
        for index, result in enumerate(results)
        if isinstance(result, dict)
    ]
    return [v for v in listings if v.year > MIN_MODEL_YEAR and v.model != "Unknown"]
