"""
Read-only SQL access to posts, sources and tag associations.
"""
from __future__ import annotations

import asyncio
import math
from collections.abc import Sequence
from typing import Optional

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    case,
    create_engine,
    event,
    false,
    func,
    not_,
    or_,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Select

from feedrank.logging_config import get_logger
from feedrank.models import RankedPost, TagAssociation
from feedrank.planner import QueryPlan
from feedrank.scoring import (
    created_after_expr,
    decayed_strength_expr,
    plain_strength_expr,
)

logger = get_logger(__name__)

metadata = MetaData()

sources_table = Table(
    "sources",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("title", String(255), nullable=False, default=""),
    Column("logo_url", String(1024), nullable=False, default=""),
    Column("score_avg", Float, nullable=False),
)

posts_table = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("sid", Integer, ForeignKey("sources.id"), nullable=False, index=True),
    Column("pid", String(255), nullable=False, index=True),
    Column("score", Float, nullable=False, default=0),
    Column("url", String(1024), nullable=False, default=""),
    Column("content_url", String(1024), nullable=False, default=""),
    Column("text", Text, nullable=True),
    Column("created_at", Integer, nullable=False, index=True),
)

post_tags_table = Table(
    "post_tags",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, ForeignKey("posts.id"), nullable=False, index=True),
    Column("tag", String(255), nullable=False, index=True),
)


# TRIM() only strips spaces on SQLite, MySQL and Postgres
_BLANKS = ("\t", "\n", "\r", "\v", "\f")


def trimmed_text(column):
    """`column` with every whitespace character folded to a space, then trimmed."""
    expr = column
    for ch in _BLANKS:
        expr = func.replace(expr, ch, " ")
    return func.trim(expr)


def _sqlite_log10(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    return math.log10(value)


def create_store(database_url: str) -> PostStore:
    """Build an engine for `database_url` and wrap it in a PostStore."""
    kwargs: dict = {}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        # queries run in worker threads
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, future=True, **kwargs)

    if is_sqlite:

        @event.listens_for(engine, "connect")
        def _register_functions(dbapi_connection, connection_record):
            dbapi_connection.create_function("log10", 1, _sqlite_log10, deterministic=True)

    return PostStore(engine)


class PostStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_schema(self) -> None:
        metadata.create_all(self.engine)

    def select_candidates(self, plan: QueryPlan) -> Select:
        posts, sources = posts_table, sources_table

        main_url = case(
            (or_(posts.c.content_url.is_(None), posts.c.content_url == ""), posts.c.url),
            else_=posts.c.content_url,
        ).label("main_url")

        columns = [
            posts.c.id,
            posts.c.sid,
            posts.c.pid,
            posts.c.score,
            posts.c.url,
            posts.c.content_url,
            posts.c.text,
            posts.c.created_at,
            sources.c.score_avg,
            sources.c.title.label("source_title"),
            sources.c.logo_url.label("source_logo_url"),
            main_url,
        ]
        if plan.strength == "plain":
            columns.append(
                plain_strength_expr(posts.c.score, sources.c.score_avg).label("strength")
            )
        elif plan.strength == "decayed":
            if not plan.decay:
                raise ValueError("decayed strength needs a positive decay constant")
            columns.append(
                decayed_strength_expr(
                    posts.c.score, sources.c.score_avg, posts.c.created_at, plan.decay
                ).label("strength")
            )

        stmt = select(*columns).select_from(
            posts.join(sources, posts.c.sid == sources.c.id)
        )

        if plan.require_text:
            stmt = stmt.where(
                posts.c.text.is_not(None), trimmed_text(posts.c.text) != ""
            )
        if plan.tags:
            tagged = select(post_tags_table.c.post_id).where(
                post_tags_table.c.tag.in_(plan.tags)
            )
            stmt = stmt.where(posts.c.id.in_(tagged))
        if plan.max_age_hours is not None:
            stmt = stmt.where(created_after_expr(posts.c.created_at, plan.max_age_hours))
        if plan.score_floor is not None:
            stmt = stmt.where(posts.c.score > plan.score_floor)
        for prefix in plan.exclude_prefixes:
            stmt = stmt.where(not_(posts.c.pid.startswith(prefix, autoescape=True)))
        if plan.shape == "announcements" or plan.include_prefixes:
            included = [posts.c.pid.startswith(p, autoescape=True) for p in plan.include_prefixes]
            stmt = stmt.where(or_(*included) if included else false())

        return stmt.order_by(posts.c.id)

    def fetch_candidates(self, plan: QueryPlan) -> list[RankedPost]:
        stmt = self.select_candidates(plan)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        logger.debug("candidates_fetched", shape=plan.shape, rows=len(rows))
        return [RankedPost.from_row(row) for row in rows]

    def fetch_tags(self, post_ids: Sequence[int]) -> list[TagAssociation]:
        if not post_ids:
            return []
        stmt = (
            select(post_tags_table.c.post_id, post_tags_table.c.tag)
            .where(post_tags_table.c.post_id.in_(list(post_ids)))
            .order_by(post_tags_table.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [TagAssociation.from_row(row) for row in rows]

    async def afetch_candidates(self, plan: QueryPlan) -> list[RankedPost]:
        return await asyncio.to_thread(self.fetch_candidates, plan)

    async def afetch_tags(self, post_ids: Sequence[int]) -> list[TagAssociation]:
        return await asyncio.to_thread(self.fetch_tags, list(post_ids))
