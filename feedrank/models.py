"""Typed data models for feed ranking."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, TypedDict


class TagDict(TypedDict):
    post_id: int
    tag: str


class PostDict(TypedDict):
    """Serialized ranked post, as returned to callers and cached."""

    id: int
    sid: int
    pid: str
    score: float
    url: str
    content_url: str
    text: Optional[str]
    created_at: int
    score_avg: float
    source_title: str
    source_logo_url: str
    main_url: str
    strength: Optional[float]
    tags: list[TagDict]


@dataclass
class TagAssociation:
    post_id: int
    tag: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> TagAssociation:
        return cls(post_id=int(row["post_id"]), tag=str(row["tag"]))

    def to_dict(self) -> TagDict:
        return {"post_id": self.post_id, "tag": self.tag}


@dataclass
class RankedPost:
    """A candidate row joined with its source and computed ranking fields."""

    id: int
    sid: int
    pid: str
    score: float
    url: str
    content_url: str
    text: Optional[str]
    created_at: int
    score_avg: float
    source_title: str
    source_logo_url: str
    main_url: str
    strength: Optional[float] = None
    tags: list[TagAssociation] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> RankedPost:
        """Create from a storage row mapping."""
        strength = row.get("strength")
        return cls(
            id=int(row["id"]),
            sid=int(row["sid"]),
            pid=str(row["pid"]),
            score=float(row["score"]),
            url=str(row.get("url") or ""),
            content_url=str(row.get("content_url") or ""),
            text=row.get("text"),
            created_at=int(row["created_at"]),
            score_avg=float(row["score_avg"]),
            source_title=str(row.get("source_title") or ""),
            source_logo_url=str(row.get("source_logo_url") or ""),
            main_url=str(
                row.get("main_url")
                or main_url(row.get("url") or "", row.get("content_url") or "")
            ),
            strength=float(strength) if strength is not None else None,
        )

    def to_dict(self) -> PostDict:
        """Serialize for caching and API responses."""
        return {
            "id": self.id,
            "sid": self.sid,
            "pid": self.pid,
            "score": self.score,
            "url": self.url,
            "content_url": self.content_url,
            "text": self.text,
            "created_at": self.created_at,
            "score_avg": self.score_avg,
            "source_title": self.source_title,
            "source_logo_url": self.source_logo_url,
            "main_url": self.main_url,
            "strength": self.strength,
            "tags": [t.to_dict() for t in self.tags],
        }


def main_url(url: str, content_url: Optional[str]) -> str:
    """Canonical dedup key: the content url override, else the post url."""
    return content_url if content_url else url
