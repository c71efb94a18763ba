"""Deduplicate candidate posts by main url and rank them."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Callable, Literal, Optional

from feedrank.models import RankedPost

Order = Literal["strength", "recency"]


def _strength(post: RankedPost) -> float:
    return post.strength if post.strength is not None else float("-inf")


def _order_key(order: Order) -> Callable[[RankedPost], tuple[float, int]]:
    """Sort key where smaller means better: highest value first, then lowest id."""
    if order == "strength":
        return lambda p: (-_strength(p), p.id)
    if order == "recency":
        return lambda p: (-p.created_at, p.id)
    raise ValueError(f"Unknown order: {order}")


def dedupe_by_main_url(
    posts: Iterable[RankedPost], order: Order = "strength"
) -> list[RankedPost]:
    """
    Keep one representative per `main_url`.

    The winner of each group is the best post under `order` (highest strength,
    or newest for recency), ties going to the lowest post id. Groups come back
    in first-seen order.
    """
    key = _order_key(order)
    best: dict[str, RankedPost] = {}
    for post in posts:
        current = best.get(post.main_url)
        if current is None or key(post) < key(current):
            best[post.main_url] = post
    return list(best.values())


def rank_posts(
    posts: Iterable[RankedPost],
    order: Order = "strength",
    offset: int = 0,
    limit: Optional[int] = None,
) -> list[RankedPost]:
    """Dedup, sort descending by `order`, then apply offset and limit."""
    if offset < 0:
        raise ValueError("offset must be non-negative")
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative")

    ranked: Sequence[RankedPost] = sorted(
        dedupe_by_main_url(posts, order), key=_order_key(order)
    )
    end = None if limit is None else offset + limit
    return list(ranked[offset:end])
