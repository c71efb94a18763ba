"""
Constants and configuration defaults for feed ranking.
"""

# Provider ids (Discord channels)
PROVIDER = "discord"
CHANNEL_NETWORK_STATUS = "844618231553720330"
CHANNEL_ANNOUNCEMENTS = "370285586894028811"
CHANNEL_BETA_ANNOUNCEMENTS = "572793415138410517"
CHANNEL_REP_ANNOUNCEMENTS = "644987172935565335"
CHANNEL_GENERAL = "370266023905198085"

ANNOUNCEMENT_CHANNELS = [
    CHANNEL_NETWORK_STATUS,
    CHANNEL_ANNOUNCEMENTS,
    CHANNEL_BETA_ANNOUNCEMENTS,
    CHANNEL_REP_ANNOUNCEMENTS,
]
TRENDING_EXCLUDED_CHANNELS = [CHANNEL_GENERAL]

# Beta announcements are kept out of the announcements feed unless enabled
INCLUDE_BETA_ANNOUNCEMENTS = False

# Tags
TAGS_DEFAULT_LIMIT = 50
TAGS_MAX_LIMIT = 100

# Trending (log score minus linear age penalty)
TRENDING_LIMIT = 100
TRENDING_AGE_HOURS = 72
TRENDING_DECAY_SECONDS = 90000
TRENDING_SCORE_FLOOR = 4.0

# Top
TOP_LIMIT = 5
TOP_AGE_HOURS = 168

# Announcements
ANNOUNCEMENTS_AGE_HOURS = 336
ANNOUNCEMENTS_LIMIT = None  # no cap

# Storage
DATABASE_URL = "sqlite:///feedrank.db"

# Logging ("auto" picks JSON unless stderr is a terminal)
LOG_LEVEL = "INFO"
LOG_FORMAT = "auto"

# HTTP
CORS_ORIGINS = ["*"]
