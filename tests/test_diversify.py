"""
Tests for per-model diversification.
"""

from collections import Counter

import pytest

from dealer_search.diversify import diversify
from dealer_search.models import ScoredCandidate


@pytest.fixture
def ranked(listing_factory):
    """A1..A4 are Camrys, B1 a Corolla, in rank order."""
    return [
        listing_factory(id="A1", model="Camry"),
        listing_factory(id="A2", model="Camry"),
        listing_factory(id="A3", model="Camry"),
        listing_factory(id="A4", model="Camry"),
        listing_factory(id="B1", model="Corolla"),
    ]


def ids(items):
    return [item.id for item in items]


def test_scenario_cap_two_limit_three(ranked):
    assert ids(diversify(ranked, max_per_model=2, limit=3)) == ["A1", "A2", "B1"]


def test_cap_respected_when_supply_allows(listing_factory):
    ranked = [listing_factory(id=f"{model}{i}", model=model) for model in ("Camry", "RAV4", "Prius") for i in range(5)]

    result = diversify(ranked, max_per_model=3, limit=9)

    assert len(result) == 9
    assert max(Counter(item.model for item in result).values()) == 3


def test_never_exceeds_limit(ranked):
    assert len(diversify(ranked, max_per_model=10, limit=2)) == 2


def test_backfill_ignores_cap_when_short(ranked):
    """Only one other model exists, so leftovers fill in rank order."""
    assert ids(diversify(ranked, max_per_model=1, limit=4)) == ["A1", "B1", "A2", "A3"]


def test_fewer_candidates_than_limit_returns_all(ranked):
    assert sorted(ids(diversify(ranked, max_per_model=2, limit=10))) == ["A1", "A2", "A3", "A4", "B1"]


def test_order_within_model_is_preserved(listing_factory):
    ranked = [
        listing_factory(id="c1", model="Camry"),
        listing_factory(id="r1", model="RAV4"),
        listing_factory(id="c2", model="Camry"),
        listing_factory(id="r2", model="RAV4"),
        listing_factory(id="c3", model="Camry"),
    ]

    result = ids(diversify(ranked, max_per_model=2, limit=4))

    assert result == ["c1", "r1", "c2", "r2"]


def test_model_names_are_case_insensitive(listing_factory):
    ranked = [
        listing_factory(id="1", model="Camry"),
        listing_factory(id="2", model="CAMRY"),
        listing_factory(id="3", model="camry"),
        listing_factory(id="4", model="Corolla"),
    ]

    assert ids(diversify(ranked, max_per_model=2, limit=3)) == ["1", "2", "4"]


def test_non_positive_limit_is_empty(ranked):
    assert diversify(ranked, max_per_model=2, limit=0) == []
    assert diversify(ranked, max_per_model=2, limit=-1) == []


def test_non_positive_cap_disables_cap(ranked):
    """Without a cap one model may fill the list; round-robin still lets B1 in."""
    assert ids(diversify(ranked, max_per_model=0, limit=4)) == ["A1", "A2", "A3", "B1"]
    assert ids(diversify(ranked, max_per_model=-1, limit=5)) == ["A1", "A2", "A3", "A4", "B1"]


def test_empty_input():
    assert diversify([], max_per_model=3, limit=10) == []


def test_scored_candidates_are_supported(ranked):
    candidates = [ScoredCandidate(listing=listing, score=10 - i) for i, listing in enumerate(ranked)]

    result = diversify(candidates, max_per_model=2, limit=3)

    assert [c.listing.id for c in result] == ["A1", "A2", "B1"]


def test_custom_key(ranked):
    result = diversify(ranked, max_per_model=1, limit=2, key=lambda item: item.dealer)
    assert ids(result) == ["A1", "A2"]
