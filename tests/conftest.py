import time

import pytest

from feedrank.cache import MemoryResultCache
from feedrank.config import FeedSettings, channel_prefix
from feedrank.constants import (
    CHANNEL_ANNOUNCEMENTS,
    CHANNEL_BETA_ANNOUNCEMENTS,
    CHANNEL_GENERAL,
    CHANNEL_NETWORK_STATUS,
    CHANNEL_REP_ANNOUNCEMENTS,
)
from feedrank.feed import FeedService
from feedrank.store import create_store, post_tags_table, posts_table, sources_table

HOUR = 3600
NOW = int(time.time())

# Channel used for ordinary community posts
CHANNEL_COMMUNITY = "111111111111111111"

PID = {
    "community": channel_prefix(CHANNEL_COMMUNITY),
    "general": channel_prefix(CHANNEL_GENERAL),
    "network_status": channel_prefix(CHANNEL_NETWORK_STATUS),
    "announcements": channel_prefix(CHANNEL_ANNOUNCEMENTS),
    "beta_announcements": channel_prefix(CHANNEL_BETA_ANNOUNCEMENTS),
    "rep_announcements": channel_prefix(CHANNEL_REP_ANNOUNCEMENTS),
}


def source_row(sid=1, score_avg=10.0, title="Source", logo_url="https://img/logo.png"):
    return {"id": sid, "title": title, "logo_url": logo_url, "score_avg": score_avg}


def post_row(
    post_id,
    sid=1,
    channel="community",
    score=10.0,
    url=None,
    content_url="",
    text="some text",
    age_hours=1.0,
):
    return {
        "id": post_id,
        "sid": sid,
        "pid": f"{PID[channel]}{post_id}",
        "score": score,
        "url": url or f"https://example.com/posts/{post_id}",
        "content_url": content_url,
        "text": text,
        "created_at": int(NOW - age_hours * HOUR),
    }


@pytest.fixture
def store():
    s = create_store("sqlite://")
    s.create_schema()
    yield s
    s.engine.dispose()


@pytest.fixture
def seed(store):
    """Insert sources, posts and (post_id, tag) pairs."""

    def _seed(sources=(), posts=(), tags=()):
        with store.engine.begin() as conn:
            if sources:
                conn.execute(sources_table.insert(), list(sources))
            if posts:
                conn.execute(posts_table.insert(), list(posts))
            if tags:
                conn.execute(
                    post_tags_table.insert(),
                    [{"post_id": pid, "tag": tag} for pid, tag in tags],
                )

    return _seed


@pytest.fixture
def settings():
    return FeedSettings(database_url="sqlite://")


@pytest.fixture
def cache():
    return MemoryResultCache()


@pytest.fixture
def service(store, cache, settings):
    return FeedService(store, cache, settings)
