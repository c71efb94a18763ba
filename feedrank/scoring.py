"""
Post strength formulas.

Strength makes raw scores comparable across sources by dividing by the
source's `score_avg`. The decayed variant takes log10 of that ratio and
subtracts a linear age penalty of `age_seconds / decay`, so a larger decay
constant means slower decay.

Each formula exists twice: as a plain Python function, and as a SQLAlchemy
expression so the storage layer can compute the strength column inside the
query using the database clock.
"""

from __future__ import annotations

import math

from sqlalchemy import Float, Integer, cast, func, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import ColumnElement, FunctionElement

SECONDS_PER_HOUR = 3600


def plain_strength(score: float, score_avg: float) -> float:
    # score_avg == 0 is not guarded; sources are expected to carry a positive baseline
    return score / score_avg


def decayed_strength(
    score: float, score_avg: float, age_seconds: float, decay: float
) -> float:
    return math.log10(score / score_avg) - (age_seconds / decay)


def max_age_seconds(hours: int) -> int:
    return hours * SECONDS_PER_HOUR


class unix_now(FunctionElement):
    """Current unix time according to the database server."""

    type = Integer()
    name = "unix_now"
    inherit_cache = True


@compiles(unix_now)
def _unix_now_default(element, compiler, **kw):
    return "UNIX_TIMESTAMP()"


@compiles(unix_now, "sqlite")
def _unix_now_sqlite(element, compiler, **kw):
    return "CAST(strftime('%s', 'now') AS INTEGER)"


@compiles(unix_now, "postgresql")
def _unix_now_postgresql(element, compiler, **kw):
    return "CAST(EXTRACT(EPOCH FROM NOW()) AS BIGINT)"


def plain_strength_expr(score: ColumnElement, score_avg: ColumnElement) -> ColumnElement:
    return cast(score, Float) / cast(score_avg, Float)


def decayed_strength_expr(
    score: ColumnElement,
    score_avg: ColumnElement,
    created_at: ColumnElement,
    decay: float,
) -> ColumnElement:
    age = unix_now() - created_at
    return func.log10(plain_strength_expr(score, score_avg)) - (
        cast(age, Float) / literal(float(decay), Float)
    )


def created_after_expr(created_at: ColumnElement, hours: int) -> ColumnElement:
    """Age window predicate: created within the last `hours`."""
    return created_at > unix_now() - literal(max_age_seconds(hours), Integer)
