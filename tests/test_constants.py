from feedrank import constants


def test_default_constants():
    """Guard ranking defaults from accidental drift."""
    assert constants.TRENDING_DECAY_SECONDS == 90000
    assert constants.TRENDING_SCORE_FLOOR == 4.0
    assert isinstance(constants.TRENDING_SCORE_FLOOR, float)
    assert constants.TRENDING_AGE_HOURS == 72
    assert constants.TRENDING_LIMIT == 100
    assert constants.TOP_AGE_HOURS == 168
    assert constants.TOP_LIMIT == 5
    assert constants.ANNOUNCEMENTS_AGE_HOURS == 336
    assert constants.TAGS_DEFAULT_LIMIT == 50
    assert constants.TAGS_MAX_LIMIT == 100


def test_channel_lists():
    assert constants.TRENDING_EXCLUDED_CHANNELS == ["370266023905198085"]
    assert len(constants.ANNOUNCEMENT_CHANNELS) == 4
    assert constants.CHANNEL_BETA_ANNOUNCEMENTS in constants.ANNOUNCEMENT_CHANNELS
    assert constants.INCLUDE_BETA_ANNOUNCEMENTS is False
