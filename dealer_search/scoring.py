"""
Desirability scoring and ranking of candidate vehicles.

A vehicle's score is the sum of independent, additive rule bonuses computed
against the user's search filters. Rules never multiply or normalize, and the
total is not capped. Ranking orders by score descending, then price ascending.
"""

import math
from typing import Callable, Iterable, List, Optional, Tuple

from dealer_search.models import NumericRange, ScoredCandidate, SearchFilters, VehicleListing


ScoringRule = Callable[[VehicleListing, SearchFilters], int]

FIRST_MODEL_BONUS = 6
PREFERRED_MODEL_BONUS = 4
CONDITION_BONUS = 3
FUEL_TYPE_BONUS = 3
EXACT_YEAR_BONUS = 2
NEAR_YEAR_BONUS = 1
MULTI_RANGE_PRICE_BASE = 3
SINGLE_RANGE_PRICE_BASE = 5
PRICE_PENALTY_STEP = 5000
LOW_MILEAGE_THRESHOLD = 30000


def model_preference_score(listing: VehicleListing, filters: SearchFilters) -> int:
    preferred = [name.lower() for name in filters.preferred_models]
    if not preferred:
        return 0

    model = listing.model.lower()
    score = 0
    if model == preferred[0]:
        score += FIRST_MODEL_BONUS
    if model in preferred:
        score += PREFERRED_MODEL_BONUS
    return score


def condition_score(listing: VehicleListing, filters: SearchFilters) -> int:
    if filters.condition == "new" and listing.is_new_condition:
        return CONDITION_BONUS
    if filters.condition == "used" and not listing.is_new_condition:
        return CONDITION_BONUS
    return 0


def fuel_type_score(listing: VehicleListing, filters: SearchFilters) -> int:
    if filters.fuel_type and listing.fuel_type.lower() == filters.fuel_type.lower():
        return FUEL_TYPE_BONUS
    return 0


def year_score(listing: VehicleListing, filters: SearchFilters) -> int:
    if not filters.year:
        return 0
    diff = abs(listing.year - filters.year)
    if diff == 0:
        return EXACT_YEAR_BONUS
    if diff == 1:
        return NEAR_YEAR_BONUS
    return 0


def fuel_economy_score(listing: VehicleListing, filters: SearchFilters) -> int:
    """Reward MPG above the requested threshold, or naturally high MPG when none was asked for."""
    avg_mpg = listing.average_mpg

    if filters.overall_mpg:
        if avg_mpg < filters.overall_mpg:
            return 0
        excess = avg_mpg - filters.overall_mpg
        return min(4, 1 + math.floor(excess / 5))

    if avg_mpg >= 35:
        return 2
    if avg_mpg >= 30:
        return 1
    return 0


def mileage_score(listing: VehicleListing, filters: SearchFilters) -> int:
    mileage_range = filters.mileage

    if mileage_range is None:
        if listing.is_new_condition or listing.mileage <= LOW_MILEAGE_THRESHOLD:
            return 1
        return 0

    if not mileage_range.contains(listing.mileage):
        return 0

    score = 2
    # lower quartile of the requested range
    if listing.mileage - mileage_range.min <= 0.25 * mileage_range.span:
        score += 1
    return score


def price_range_bonus(price: float, price_range: NumericRange, base: int) -> int:
    """
    Bonus for one price range.

    Inside the range, cheaper scores higher: base + floor(position * 3), where
    position is 1 at the range minimum and 0 at the maximum. Outside, the
    bonus drops by one per $5,000 away from the nearest bound.
    """
    if price_range.contains(price):
        span = max(1, price_range.span)
        return base + math.floor((price_range.max - price) / span * 3)

    if price < price_range.min:
        distance = price_range.min - price
    else:
        distance = price - price_range.max
    return max(0, 2 - math.floor(distance / PRICE_PENALTY_STEP))


def price_score(listing: VehicleListing, filters: SearchFilters) -> int:
    price = listing.price

    if filters.price_ranges:
        return max(
            price_range_bonus(price, price_range, MULTI_RANGE_PRICE_BASE)
            for price_range in filters.price_ranges
        )

    if filters.price_range:
        return price_range_bonus(price, filters.price_range, SINGLE_RANGE_PRICE_BASE)

    return 0


SCORING_RULES: Tuple[ScoringRule, ...] = (
    model_preference_score,
    condition_score,
    fuel_type_score,
    year_score,
    fuel_economy_score,
    mileage_score,
    price_score,
)


def score_listing(
    listing: VehicleListing,
    filters: SearchFilters,
    rules: Optional[Iterable[ScoringRule]] = None
) -> int:
    """Sum every rule's contribution for one listing."""
    return sum(rule(listing, filters) for rule in (rules or SCORING_RULES))


def rank_listings(listings: Iterable[VehicleListing], filters: SearchFilters) -> List[ScoredCandidate]:
    """
    Score and sort candidates.

    Args:
        listings: Candidates that already passed matching
        filters: The search filters the candidates are scored against

    Returns:
        Scored candidates, highest score first, cheaper first on ties
    """
    scored = [
        ScoredCandidate(listing=listing, score=score_listing(listing, filters))
        for listing in listings
    ]
    scored.sort(key=lambda candidate: (-candidate.score, candidate.listing.price))
    return scored
