"""
Boolean filtering of canonical vehicle listings.
"""

from typing import Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from dealer_search.logging_config import get_structured_logger
from dealer_search.models import NumericRange, SearchFilters, VehicleListing

logger = get_structured_logger(__name__)


class MatchCriteria(BaseModel):
    """
    Constraint set for the matcher.
    All fields are ANDed; a field left as None imposes nothing.
    """

    model_config = ConfigDict(frozen=True)

    price_ranges: Optional[Tuple[NumericRange, ...]] = None
    year_range: Optional[Tuple[int, int]] = None
    model: Optional[str] = None
    fuel_type: Optional[str] = None
    body_style: Optional[str] = None
    color: Optional[str] = None
    condition: Optional[Literal["new", "used"]] = None

    @classmethod
    def from_filters(cls, filters: SearchFilters) -> "MatchCriteria":
        """Derive matcher criteria from search filters."""
        if filters.price_ranges:
            price_ranges = tuple(filters.price_ranges)
        elif filters.price_range:
            price_ranges = (filters.price_range,)
        else:
            price_ranges = None

        # Several candidate models are fetched separately, so only a single
        # preferred model narrows the match.
        preferred = filters.preferred_models
        model = preferred[0] if len(preferred) == 1 else None

        return cls(
            price_ranges=price_ranges,
            year_range=(filters.year, filters.year) if filters.year else None,
            model=model,
            fuel_type=filters.fuel_type,
            body_style=filters.body_style,
            color=filters.color,
            condition=filters.condition if filters.condition in ("new", "used") else None
        )


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def match_listing(listing: VehicleListing, criteria: MatchCriteria) -> bool:
    """Return True when the listing satisfies every specified constraint."""
    if criteria.price_ranges is not None:
        if not any(price_range.contains(listing.price) for price_range in criteria.price_ranges):
            return False

    if criteria.year_range is not None:
        low, high = criteria.year_range
        if listing.year < low or listing.year > high:
            return False

    if criteria.model and not _contains(listing.model, criteria.model):
        return False

    if criteria.fuel_type and listing.fuel_type.lower() != criteria.fuel_type.lower():
        return False

    if criteria.body_style and not _contains(listing.body_style, criteria.body_style):
        return False

    if criteria.color:
        if not (_contains(listing.exterior_color, criteria.color) or _contains(listing.interior_color, criteria.color)):
            return False

    if criteria.condition == "new" and not listing.is_new_condition:
        return False
    if criteria.condition == "used" and listing.is_new_condition:
        return False

    return True


def filter_listings(listings: Iterable[VehicleListing], criteria: MatchCriteria) -> List[VehicleListing]:
    return [listing for listing in listings if match_listing(listing, criteria)]


def _trim_matches(listing_trim: str, wanted: str) -> bool:
    # "LE" matches "LE" and "LE Premium" but not "XLE"
    vehicle_trim = (listing_trim or "").strip().upper()
    wanted = wanted.strip().upper()
    return vehicle_trim == wanted or vehicle_trim.startswith(wanted + " ")


def apply_inventory_constraints(
    listings: List[VehicleListing],
    filters: Optional[SearchFilters]
) -> List[VehicleListing]:
    """
    Client-side constraints applied after an inventory fetch.
    The upstream feed does not reliably honor dealership, mileage, MPG,
    year or trim parameters.

    Args:
        listings: Normalized listings from one combined fetch
        filters: The filters the fetch was made with

    Returns:
        Listings that satisfy the constraints
    """
    if not filters:
        return listings

    result = listings

    allowed_dealers = set(filters.dealerships or [])
    if filters.dealership:
        allowed_dealers.add(filters.dealership)
    if allowed_dealers:
        allowed = {key.lower() for key in allowed_dealers}
        result = [v for v in result if v.dealer is None or v.dealer.lower() in allowed]

    if filters.mileage:
        result = [v for v in result if filters.mileage.contains(v.mileage)]

    if filters.overall_mpg:
        result = [v for v in result if v.average_mpg >= filters.overall_mpg]

    if filters.year:
        result = [v for v in result if v.year == filters.year]

    if filters.trim:
        result = [v for v in result if _trim_matches(v.trim, filters.trim)]

    if filters.vehicle_status:
        # The feed exposes no status field to check against.
        logger.info("vehicle_status_not_enforced", vehicle_status=filters.vehicle_status)

    removed = len(listings) - len(result)
    if removed:
        logger.debug("inventory_constraints_applied", kept=len(result), removed=removed)

    return result
