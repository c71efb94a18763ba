import pytest

from feedrank.config import FeedSettings
from feedrank.errors import ClientInputError, MissingTagError
from feedrank.planner import (
    clamp_limit,
    normalize_tags,
    plan_announcements,
    plan_tags,
    plan_top,
    plan_trending,
)

from conftest import PID


def test_normalize_tags_sorts_lexicographically():
    # numeric comparison would leave these unsorted
    assert normalize_tags(["b", "a", "c"]) == ["a", "b", "c"]
    assert normalize_tags(["10", "9", "100"]) == ["10", "100", "9"]


def test_normalize_tags_single_string():
    assert normalize_tags("defi") == ["defi"]


def test_normalize_tags_drops_blanks_and_duplicates():
    assert normalize_tags(["x", " ", "x", ""]) == ["x"]


@pytest.mark.parametrize("raw", [None, [], "", ["", "  "]])
def test_normalize_tags_missing(raw):
    with pytest.raises(MissingTagError):
        normalize_tags(raw)


def test_missing_tag_is_client_input_error():
    assert issubclass(MissingTagError, ClientInputError)
    assert str(MissingTagError()) == "missing tag param"


def test_clamp_limit():
    settings = FeedSettings()
    assert clamp_limit(None, settings) == 50
    assert clamp_limit(20, settings) == 20
    assert clamp_limit(500, settings) == 100
    with pytest.raises(ClientInputError):
        clamp_limit(-1, settings)


def test_plan_tags():
    plan = plan_tags(["a", "b"], FeedSettings(), offset=5, limit=10)
    assert plan.shape == "tags"
    assert plan.strength == "plain"
    assert plan.order == "strength"
    assert plan.tags == ("a", "b")
    assert plan.require_text
    assert plan.max_age_hours is None
    assert plan.score_floor is None
    assert (plan.offset, plan.limit) == (5, 10)
    assert set(plan.exclude_prefixes) == {
        PID["network_status"],
        PID["announcements"],
        PID["beta_announcements"],
        PID["rep_announcements"],
    }


def test_plan_tags_rejects_negative_offset():
    with pytest.raises(ClientInputError):
        plan_tags(["a"], FeedSettings(), offset=-1)


def test_plan_trending_defaults():
    plan = plan_trending(FeedSettings())
    assert plan.strength == "decayed"
    assert plan.decay == 90000
    assert plan.max_age_hours == 72
    assert plan.score_floor == 4
    assert plan.exclude_prefixes == (PID["general"],)
    assert plan.limit == 100
    assert plan.offset == 0


def test_plan_trending_uses_alternate_constants():
    settings = FeedSettings(trending_decay_seconds=1000, trending_age_hours=6, trending_score_floor=0)
    plan = plan_trending(settings)
    assert (plan.decay, plan.max_age_hours, plan.score_floor) == (1000, 6, 0)


def test_plan_top():
    plan = plan_top(24, FeedSettings())
    assert plan.strength == "plain"
    assert plan.max_age_hours == 24
    assert (plan.offset, plan.limit) == (0, 5)
    assert len(plan.exclude_prefixes) == 4


def test_plan_announcements_is_inclusion_only():
    plan = plan_announcements(336, FeedSettings())
    assert plan.order == "recency"
    assert plan.strength is None
    assert not plan.require_text
    assert plan.exclude_prefixes == ()
    assert plan.include_prefixes == (
        PID["network_status"],
        PID["announcements"],
        PID["rep_announcements"],
    )
    assert plan.limit is None


def test_plan_announcements_beta_toggle():
    plan = plan_announcements(336, FeedSettings(include_beta_announcements=True))
    assert PID["beta_announcements"] in plan.include_prefixes
    assert len(plan.include_prefixes) == 4


def test_negative_age_rejected():
    with pytest.raises(ClientInputError):
        plan_top(-1, FeedSettings())
    with pytest.raises(ClientInputError):
        plan_announcements(-5, FeedSettings())
