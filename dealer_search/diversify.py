"""
Per-model diversification of a ranked result list.
Caps how many results a single model contributes while keeping rank order.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

T = TypeVar("T")


def model_name(item: Any) -> str:
    """Model of a listing, summary or scored candidate."""
    listing = getattr(item, "listing", item)
    return listing.model


def diversify(
    ranked: Sequence[T],
    max_per_model: int = 3,
    limit: int = 10,
    key: Optional[Callable[[T], str]] = None
) -> List[T]:
    """
    Select at most `limit` items with no model contributing more than
    `max_per_model` of them, degrading to plain rank order when the capped
    selection cannot fill the limit.

    Items are bucketed by case-insensitive model in first-seen order and
    taken round-robin, one bucket head per pass, until the limit is reached
    or a pass adds nothing. The selection is emitted in its original rank
    order; leftovers then backfill in rank order, ignoring the cap.

    Args:
        ranked: Items ordered best first
        max_per_model: Per-model cap; zero or less means no cap
        limit: Maximum number of items returned
        key: Returns the model name of an item (defaults to model_name)

    Returns:
        The diversified list
    """
    if limit <= 0:
        return []

    model_of = key or model_name
    cap = max_per_model if max_per_model > 0 else len(ranked)

    buckets: Dict[str, List[int]] = {}
    for position, item in enumerate(ranked):
        buckets.setdefault(model_of(item).lower(), []).append(position)

    taken = {bucket: 0 for bucket in buckets}
    selected: List[int] = []

    while len(selected) < limit:
        added = False
        for bucket, positions in buckets.items():
            if len(selected) >= limit:
                break
            if taken[bucket] >= min(cap, len(positions)):
                continue
            selected.append(positions[taken[bucket]])
            taken[bucket] += 1
            added = True
        if not added:
            break

    selected.sort()
    result = [ranked[position] for position in selected]

    if len(result) < limit:
        chosen = set(selected)
        for position, item in enumerate(ranked):
            if len(result) >= limit:
                break
            if position not in chosen:
                result.append(item)

    return result
