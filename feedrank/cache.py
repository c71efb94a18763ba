"""
Result cache for ranked feeds.

Entries are keyed by a canonical request signature and hold the final,
enriched result. There is no TTL and no size cap: entries live for the process
lifetime unless evicted through `delete`/`clear`. Varying `age` on the top and
announcements shapes therefore grows the cache without bound.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any, Optional, Protocol


class ResultCache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


def _escape_tag(tag: str) -> str:
    return tag.replace("\\", "\\\\").replace("-", "\\-")


def tags_key(tags: Sequence[str]) -> str:
    """`tags_a-b` for ["a", "b"]; a "-" inside a tag is escaped as `\\-`.

    tags must already be normalized (sorted, unique).
    """
    return f"tags_{'-'.join(_escape_tag(t) for t in tags)}"


def trending_key() -> str:
    return "trending"


def top_key(age: int) -> str:
    return f"top{age}"


def announcements_key(age: int) -> str:
    return f"announcements{age}"


class MemoryResultCache:
    """Process-local cache safe for concurrent readers and writers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self, prefix: Optional[str] = None) -> int:
        """Evict every entry, or only those whose key starts with `prefix`."""
        with self._lock:
            if prefix is None:
                removed = len(self._entries)
                self._entries.clear()
                return removed
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def snapshot(self) -> dict[str, object]:
        """Keys and entry sizes, without payloads."""
        with self._lock:
            entries = [
                {"key": key, "items": len(value) if hasattr(value, "__len__") else 1}
                for key, value in sorted(self._entries.items())
            ]
        return {"entries": entries, "size": len(entries)}
