"""
Tests for the semantic result cache.
"""
import json

import pytest

from series_engine.analysis.models import SeriesGroup, VideoRecord
from series_engine.db.result_cache import (
    CACHE_KEY_PREFIX,
    InMemoryStore,
    ResultCache,
    _hash32,
    fingerprint,
)


def make_videos(n, prefix="Video"):
    return [VideoRecord(title=f"{prefix} {i}", views=1000 + i) for i in range(n)]


def make_group(name, videos):
    return SeriesGroup(name=name, videos=list(videos), detection_method="semantic",
                       confidence="high")


class FailingStore:
    """Store whose every call raises."""

    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk full")


class TestFingerprint:
    def test_order_independent(self):
        videos = make_videos(5)
        assert fingerprint(videos) == fingerprint(list(reversed(videos)))

    def test_prefix(self):
        assert fingerprint(make_videos(3)).startswith(CACHE_KEY_PREFIX)

    def test_different_titles_different_key(self):
        assert fingerprint(make_videos(3)) != fingerprint(make_videos(3, prefix="Other"))

    def test_hash_wraps_to_32_bits(self):
        h = _hash32("x" * 500)
        assert -(2 ** 31) <= h < 2 ** 31

    def test_known_values(self):
        assert _hash32("") == 0
        assert _hash32("a") == 97
        assert _hash32("ab") == 97 * 31 + 98


class TestResultCache:
    def test_round_trip(self):
        videos = make_videos(12)
        groups = [make_group("A", videos[:3]), make_group("B", videos[5:9])]
        cache = ResultCache(InMemoryStore())

        assert cache.save(videos, groups) is True
        loaded = cache.load(videos)

        assert [g.name for g in loaded] == ["A", "B"]
        assert [g.titles for g in loaded] == [g.titles for g in groups]
        assert loaded[0].videos[0] is videos[0]
        assert loaded[0].detection_method == "semantic"
        assert loaded[0].confidence == "high"

    def test_stores_titles_not_records(self):
        videos = make_videos(6)
        store = InMemoryStore()
        ResultCache(store).save(videos, [make_group("A", videos[:3])])
        payload = json.loads(store.data[fingerprint(videos)])
        assert payload[0]["videoTitles"] == ["Video 0", "Video 1", "Video 2"]
        assert "videos" not in payload[0]

    def test_miss(self):
        assert ResultCache(InMemoryStore()).load(make_videos(4)) is None

    def test_empty_dataset(self):
        assert ResultCache(InMemoryStore()).load([]) is None

    def test_group_below_minimum_dropped(self):
        """A cached group that resolves to fewer than 3 videos is discarded."""
        videos = make_videos(10)
        store = InMemoryStore()
        key = fingerprint(videos)
        store.set(key, json.dumps([
            {"name": "Keep", "videoTitles": ["Video 0", "Video 1", "Video 2"]},
            {"name": "Drop", "videoTitles": ["Video 3", "Video 4", "Gone"]},
        ]))
        loaded = ResultCache(store).load(videos)
        assert [g.name for g in loaded] == ["Keep"]
        assert loaded[0].detection_method == "semantic"

    def test_all_groups_dropped_is_miss(self):
        videos = make_videos(5)
        store = InMemoryStore()
        store.set(fingerprint(videos), json.dumps([{"name": "X", "videoTitles": ["Nope"]}]))
        assert ResultCache(store).load(videos) is None

    def test_corrupt_payload_is_miss(self):
        videos = make_videos(5)
        store = InMemoryStore()
        store.set(fingerprint(videos), "{not json")
        assert ResultCache(store).load(videos) is None

    def test_wrong_shape_is_miss(self):
        videos = make_videos(5)
        store = InMemoryStore()
        store.set(fingerprint(videos), json.dumps({"series": 1}))
        assert ResultCache(store).load(videos) is None

    def test_store_failures_never_raise(self):
        cache = ResultCache(FailingStore())
        videos = make_videos(5)
        assert cache.load(videos) is None
        assert cache.save(videos, [make_group("A", videos[:3])]) is False

    def test_sqlite_store(self, db):
        videos = make_videos(8)
        cache = ResultCache(db)
        cache.save(videos, [make_group("A", videos[:4])])
        loaded = cache.load(videos)
        assert loaded[0].titles == ["Video 0", "Video 1", "Video 2", "Video 3"]
