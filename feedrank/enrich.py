"""Attach tag associations to selected posts."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Awaitable, Protocol

from feedrank.models import RankedPost, TagAssociation


class TagStore(Protocol):
    def afetch_tags(self, post_ids: Sequence[int]) -> Awaitable[list[TagAssociation]]: ...


def attach_tags(
    posts: list[RankedPost], associations: Iterable[TagAssociation]
) -> list[RankedPost]:
    by_post: dict[int, list[TagAssociation]] = defaultdict(list)
    for assoc in associations:
        by_post[assoc.post_id].append(assoc)
    for post in posts:
        post.tags = list(by_post.get(post.id, []))
    return posts


async def enrich_with_tags(posts: list[RankedPost], tag_store: TagStore) -> list[RankedPost]:
    """Fetch tags for all posts in one batched lookup and attach them in place."""
    if not posts:
        return posts
    associations = await tag_store.afetch_tags([p.id for p in posts])
    return attach_tags(posts, associations)
