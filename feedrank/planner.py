"""
Query plans for the four feed shapes.

A plan is a storage-agnostic description of the predicates, the strength
formula and the ranking window for one request. `store.PostStore` turns it
into SQL; `ranking.rank_posts` applies its order and window.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal, Optional, Union

from feedrank.config import FeedSettings
from feedrank.errors import ClientInputError, MissingTagError
from feedrank.ranking import Order

Shape = Literal["tags", "trending", "top", "announcements"]
StrengthKind = Literal["plain", "decayed"]


@dataclass(frozen=True)
class QueryPlan:
    shape: Shape
    order: Order
    strength: Optional[StrengthKind] = None
    decay: Optional[float] = None
    max_age_hours: Optional[int] = None
    score_floor: Optional[float] = None
    require_text: bool = True
    tags: tuple[str, ...] = ()
    exclude_prefixes: tuple[str, ...] = ()
    include_prefixes: tuple[str, ...] = ()
    offset: int = 0
    limit: Optional[int] = None


def normalize_tags(raw: Union[str, Iterable[str], None]) -> list[str]:
    """Unique, non-blank tags in lexicographic order."""
    if raw is None:
        raise MissingTagError()
    if isinstance(raw, str):
        raw = [raw]
    tags = sorted({t.strip() for t in raw if t and t.strip()})
    if not tags:
        raise MissingTagError()
    return tags


def _non_negative(name: str, value: int) -> int:
    if value < 0:
        raise ClientInputError(f"{name} must be non-negative")
    return value


def clamp_limit(limit: Optional[int], settings: FeedSettings) -> int:
    if limit is None:
        limit = settings.tags_default_limit
    return min(_non_negative("limit", limit), settings.tags_max_limit)


def plan_tags(
    tags: list[str],
    settings: FeedSettings,
    offset: int = 0,
    limit: Optional[int] = None,
) -> QueryPlan:
    return QueryPlan(
        shape="tags",
        order="strength",
        strength="plain",
        tags=tuple(tags),
        exclude_prefixes=settings.prefixes(settings.excluded_channels),
        offset=_non_negative("offset", offset),
        limit=clamp_limit(limit, settings),
    )


def plan_trending(settings: FeedSettings) -> QueryPlan:
    return QueryPlan(
        shape="trending",
        order="strength",
        strength="decayed",
        decay=settings.trending_decay_seconds,
        max_age_hours=settings.trending_age_hours,
        score_floor=settings.trending_score_floor,
        exclude_prefixes=settings.prefixes(settings.trending_excluded_channels),
        limit=settings.trending_limit,
    )


def plan_top(age: int, settings: FeedSettings) -> QueryPlan:
    return QueryPlan(
        shape="top",
        order="strength",
        strength="plain",
        max_age_hours=_non_negative("age", age),
        exclude_prefixes=settings.prefixes(settings.excluded_channels),
        limit=settings.top_limit,
    )


def plan_announcements(age: int, settings: FeedSettings) -> QueryPlan:
    # Inclusion-based: only the active announcement channels qualify, text may be empty
    return QueryPlan(
        shape="announcements",
        order="recency",
        max_age_hours=_non_negative("age", age),
        require_text=False,
        include_prefixes=settings.prefixes(settings.announcement_channels),
        limit=settings.announcements_limit,
    )
