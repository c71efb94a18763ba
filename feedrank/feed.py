"""
Feed pipeline: cache gate -> plan -> storage -> dedup/rank -> tag enrichment.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import replace
from typing import Awaitable, Optional, Protocol, Union

from feedrank import cache as cache_keys
from feedrank.cache import ResultCache
from feedrank.config import FeedSettings
from feedrank.enrich import enrich_with_tags
from feedrank.errors import FeedQueryError
from feedrank.logging_config import get_logger
from feedrank.models import PostDict, RankedPost, TagAssociation
from feedrank.planner import (
    QueryPlan,
    normalize_tags,
    plan_announcements,
    plan_tags,
    plan_top,
    plan_trending,
)
from feedrank.ranking import rank_posts

logger = get_logger(__name__)


class PostSource(Protocol):
    def afetch_candidates(self, plan: QueryPlan) -> Awaitable[list[RankedPost]]: ...

    def afetch_tags(self, post_ids: list[int]) -> Awaitable[list[TagAssociation]]: ...


class FeedService:
    """Serves the four feed shapes on top of injected storage and cache."""

    def __init__(
        self,
        store: PostSource,
        cache: ResultCache,
        settings: Optional[FeedSettings] = None,
    ) -> None:
        self.store = store
        self.cache = cache
        self.settings = settings or FeedSettings()

    async def tags(
        self,
        tag: Union[str, Iterable[str], None],
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> list[PostDict]:
        """Posts carrying any of `tag`, paged by `offset`/`limit`.

        The cache key covers the tag set only, so the entry holds the whole
        ranked feed and every page is sliced from it.
        """
        tags = normalize_tags(tag)
        plan = plan_tags(tags, self.settings, offset=offset, limit=limit)
        feed = await self._serve(
            cache_keys.tags_key(tags), replace(plan, offset=0, limit=None)
        )
        return feed[plan.offset : plan.offset + plan.limit]

    async def trending(self) -> list[PostDict]:
        return await self._serve(cache_keys.trending_key(), plan_trending(self.settings))

    async def top(self, age: Optional[int] = None) -> list[PostDict]:
        if age is None:
            age = self.settings.top_age_hours
        plan = plan_top(age, self.settings)
        return await self._serve(cache_keys.top_key(age), plan)

    async def announcements(self, age: Optional[int] = None) -> list[PostDict]:
        if age is None:
            age = self.settings.announcements_age_hours
        plan = plan_announcements(age, self.settings)
        return await self._serve(cache_keys.announcements_key(age), plan)

    async def _serve(self, key: str, plan: QueryPlan) -> list[PostDict]:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("feed_cache_hit", key=key)
            return cached

        start = time.perf_counter()
        try:
            candidates = await self.store.afetch_candidates(plan)
            ranked = rank_posts(candidates, plan.order, offset=plan.offset, limit=plan.limit)
            enriched = await enrich_with_tags(ranked, self.store)
        except Exception as e:
            logger.error("feed_query_failed", shape=plan.shape, key=key, error=str(e))
            raise FeedQueryError(plan.shape, e) from e

        result = [post.to_dict() for post in enriched]
        self.cache.set(key, result)
        logger.info(
            "feed_computed",
            shape=plan.shape,
            key=key,
            candidates=len(candidates),
            returned=len(result),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return result
