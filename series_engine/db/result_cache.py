"""
Cache for semantic (AI) series detection results.

Entries are keyed by a fingerprint of the dataset's titles and store each
group's video titles rather than the records themselves. Loading re-resolves
the titles against the current dataset, so a stale entry degrades gracefully
instead of pointing at records that no longer exist.

The cache is an optimization only: every failure is logged and reported as
a miss.
"""
import json
import logging
from typing import Dict, List, Optional, Protocol, Sequence

from ..analysis.models import SeriesGroup, VideoRecord

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "series_ai_"
MIN_CACHED_SERIES_SIZE = 3

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class KeyValueStore(Protocol):
    """Minimal persistent store: both calls may fail."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryStore:
    """Dict-backed KeyValueStore."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def _hash32(text: str) -> int:
    """h = h*31 + c, wrapped to a signed 32-bit integer at every step."""
    h = 0
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
        if h >= 0x80000000:
            h -= 0x100000000
    return h


def fingerprint(videos: Sequence[VideoRecord]) -> str:
    """Order-independent cache key for a dataset, derived from its titles."""
    joined = "|".join(sorted(v.title or "" for v in videos))
    return CACHE_KEY_PREFIX + _to_base36(abs(_hash32(joined)))


def serialize_groups(groups: Sequence[SeriesGroup]) -> str:
    return json.dumps([
        {
            "name": g.name,
            "detectionMethod": g.detection_method,
            "confidence": g.confidence,
            "videoTitles": g.titles,
        }
        for g in groups
    ])


def rehydrate_groups(
    payload: str, videos: Sequence[VideoRecord]
) -> List[SeriesGroup]:
    """Resolve cached titles back to records of the current dataset.

    Unresolved titles are dropped; groups left with fewer than
    MIN_CACHED_SERIES_SIZE videos are discarded.
    """
    by_title: Dict[str, VideoRecord] = {}
    for v in videos:
        by_title.setdefault(v.title, v)

    groups = []
    for entry in json.loads(payload):
        resolved = [by_title[t] for t in entry.get("videoTitles") or [] if t in by_title]
        if len(resolved) < MIN_CACHED_SERIES_SIZE:
            logger.debug(
                "Dropping cached group '%s': %d videos resolved",
                entry.get("name"), len(resolved),
            )
            continue
        groups.append(SeriesGroup(
            name=entry["name"],
            videos=resolved,
            detection_method=entry.get("detectionMethod") or "semantic",
            confidence=entry.get("confidence"),
        ))
    return groups


class ResultCache:
    """Persists semantic detection output per dataset fingerprint."""

    def __init__(self, store: KeyValueStore):
        """
        Args:
            store: Injected key-value store (sqlite Database, InMemoryStore, ...)
        """
        self.store = store

    def load(self, videos: Sequence[VideoRecord]) -> Optional[List[SeriesGroup]]:
        """
        Load cached groups for this dataset.

        Returns:
            Rehydrated groups, or None on a miss, a read/parse failure, or
            when no cached group still resolves to enough videos.
        """
        if not videos:
            return None
        key = fingerprint(videos)
        try:
            payload = self.store.get(key)
            if not payload:
                return None
            groups = rehydrate_groups(payload, videos)
        except Exception as e:
            logger.warning("Series cache read failed for %s: %s", key, e)
            return None

        if not groups:
            return None
        logger.info("Loaded %d cached semantic groups (%s)", len(groups), key)
        return groups

    def save(self, videos: Sequence[VideoRecord], groups: Sequence[SeriesGroup]) -> bool:
        """
        Store groups for this dataset.

        Returns:
            True if written, False if the write failed
        """
        try:
            key = fingerprint(videos)
            self.store.set(key, serialize_groups(groups))
        except Exception as e:
            logger.warning("Series cache write failed: %s", e)
            return False
        logger.info("Cached %d semantic groups (%s)", len(groups), key)
        return True
