from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

from feedrank import constants
from feedrank.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_DIR = Path.home() / ".config" / "feedrank"
CONFIG_FILE = CONFIG_DIR / "config.json"
ENV_PREFIX = "FEEDRANK_"


def channel_prefix(channel_id: str, provider: str = constants.PROVIDER) -> str:
    """Provider-id prefix shared by every post of a channel."""
    return f"{provider}:{channel_id}:"


@dataclass(frozen=True)
class FeedSettings:
    """Tunable values for the four feed shapes."""

    database_url: str = constants.DATABASE_URL
    provider: str = constants.PROVIDER

    tags_default_limit: int = constants.TAGS_DEFAULT_LIMIT
    tags_max_limit: int = constants.TAGS_MAX_LIMIT
    excluded_channels: list[str] = field(
        default_factory=lambda: list(constants.ANNOUNCEMENT_CHANNELS)
    )

    trending_limit: int = constants.TRENDING_LIMIT
    trending_age_hours: int = constants.TRENDING_AGE_HOURS
    trending_decay_seconds: int = constants.TRENDING_DECAY_SECONDS
    trending_score_floor: float = constants.TRENDING_SCORE_FLOOR
    trending_excluded_channels: list[str] = field(
        default_factory=lambda: list(constants.TRENDING_EXCLUDED_CHANNELS)
    )

    top_limit: int = constants.TOP_LIMIT
    top_age_hours: int = constants.TOP_AGE_HOURS

    announcements_age_hours: int = constants.ANNOUNCEMENTS_AGE_HOURS
    announcements_limit: Optional[int] = constants.ANNOUNCEMENTS_LIMIT
    include_beta_announcements: bool = constants.INCLUDE_BETA_ANNOUNCEMENTS

    log_level: str = constants.LOG_LEVEL
    log_format: str = constants.LOG_FORMAT
    cors_origins: list[str] = field(default_factory=lambda: list(constants.CORS_ORIGINS))

    @property
    def announcement_channels(self) -> list[str]:
        channels = [
            constants.CHANNEL_NETWORK_STATUS,
            constants.CHANNEL_ANNOUNCEMENTS,
            constants.CHANNEL_REP_ANNOUNCEMENTS,
        ]
        if self.include_beta_announcements:
            channels.insert(2, constants.CHANNEL_BETA_ANNOUNCEMENTS)
        return channels

    def prefixes(self, channels: list[str]) -> tuple[str, ...]:
        return tuple(channel_prefix(c, self.provider) for c in channels)


def load_config() -> dict:
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r") as f:
            return json.load(f)
    except Exception as e:
        logger.warning("config_unreadable", path=str(CONFIG_FILE), error=str(e))
        return {}


def save_config(key: str, value: Any):
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config = load_config()
    config[key] = value
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)


def _coerce(name: str, current: Any, raw: Any) -> Any:
    if isinstance(current, bool):
        if isinstance(raw, str):
            return raw.strip().lower() in ("1", "true", "yes", "on")
        return bool(raw)
    if isinstance(current, list):
        if isinstance(raw, str):
            return [part.strip() for part in raw.split(",") if part.strip()]
        return [str(part) for part in raw]
    if isinstance(current, int) or name.endswith(("_limit", "_hours", "_seconds")):
        value = int(raw)
        if value < 0:
            raise ValueError(f"{name} must be non-negative")
        return value
    if isinstance(current, float):
        return float(raw)
    return str(raw)


def load_settings(overrides: Optional[dict] = None) -> FeedSettings:
    """Build settings from defaults, the config file, env vars and overrides."""
    base = FeedSettings()
    known = {f.name for f in fields(FeedSettings)}

    sources: list[dict] = [load_config()]
    env = {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in os.environ.items()
        if key.startswith(ENV_PREFIX)
    }
    sources.append(env)
    if overrides:
        sources.append(overrides)

    values: dict[str, Any] = {}
    for source in sources:
        for name, raw in source.items():
            if name not in known:
                continue
            current = values.get(name, getattr(base, name))
            if raw is None:
                values[name] = None
                continue
            try:
                values[name] = _coerce(name, current, raw)
            except (TypeError, ValueError):
                logger.warning(
                    "invalid_setting",
                    setting=name,
                    value=raw,
                    default=getattr(base, name),
                )
    return replace(base, **values)
