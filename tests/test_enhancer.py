"""
Tests for the single-flight AI enhancement task.
"""
import asyncio

import pytest

from series_engine.analysis.models import PatternDetectionResult, SeriesGroup, VideoRecord
from series_engine.db.result_cache import InMemoryStore, ResultCache
from series_engine.detection.enhancer import DONE, FAILED, IDLE, EnhancementTask


def make_videos(n):
    return [VideoRecord(title=f"Video {i}", views=1000) for i in range(n)]


class FakeDetector:
    def __init__(self, groups=None, error=None):
        self.groups = groups or []
        self.error = error
        self.calls = []

    async def detect(self, uncategorized, existing_names=None):
        self.calls.append((list(uncategorized), list(existing_names or [])))
        if self.error:
            raise self.error
        return self.groups


class BlockingDetector:
    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def detect(self, uncategorized, existing_names=None):
        self.calls += 1
        await self.release.wait()
        return []


@pytest.fixture
def videos():
    return make_videos(6)


@pytest.fixture
def pattern_result(videos):
    return PatternDetectionResult(pattern_series=[], uncategorized=list(videos))


class TestEnhancementTask:
    def test_initial_state(self):
        task = EnhancementTask(FakeDetector())
        assert task.state == IDLE
        assert task.result is None
        assert task.error is None

    @pytest.mark.asyncio
    async def test_success(self, videos, pattern_result):
        group = SeriesGroup(name="Theme", videos=videos[:3], detection_method="semantic")
        detector = FakeDetector(groups=[group])
        task = EnhancementTask(detector)

        groups = await task.run(videos, pattern_result)

        assert groups == [group]
        assert task.state == DONE
        assert task.result == [group]
        assert detector.calls[0][0] == videos

    @pytest.mark.asyncio
    async def test_failure_then_retry(self, videos, pattern_result):
        detector = FakeDetector(error=RuntimeError("model not found"))
        task = EnhancementTask(detector)

        assert await task.run(videos, pattern_result) is None
        assert task.state == FAILED
        assert task.error == "model not found"

        detector.error = None
        assert await task.run(videos, pattern_result) == []
        assert task.state == DONE
        assert task.error is None
        assert len(detector.calls) == 2

    @pytest.mark.asyncio
    async def test_single_flight(self, videos, pattern_result):
        detector = BlockingDetector()
        task = EnhancementTask(detector)

        first = asyncio.ensure_future(task.run(videos, pattern_result))
        await asyncio.sleep(0)
        assert task.is_running

        second = await task.run(videos, pattern_result)
        assert second is None
        assert detector.calls == 1

        detector.release.set()
        assert await first == []
        assert task.state == DONE

    @pytest.mark.asyncio
    async def test_success_saved_to_cache(self, videos, pattern_result):
        group = SeriesGroup(name="Theme", videos=videos[:3], detection_method="semantic")
        store = InMemoryStore()
        task = EnhancementTask(FakeDetector(groups=[group]), ResultCache(store))

        await task.run(videos, pattern_result)

        assert len(store.data) == 1
        fresh = EnhancementTask(FakeDetector(), ResultCache(store))
        cached = fresh.load_cached(videos)
        assert [g.name for g in cached] == ["Theme"]
        assert fresh.state == DONE

    @pytest.mark.asyncio
    async def test_failure_not_cached(self, videos, pattern_result):
        store = InMemoryStore()
        task = EnhancementTask(FakeDetector(error=RuntimeError("boom")), ResultCache(store))
        await task.run(videos, pattern_result)
        assert store.data == {}

    def test_load_cached_without_cache(self, videos):
        task = EnhancementTask(FakeDetector())
        assert task.load_cached(videos) is None
        assert task.state == IDLE

    @pytest.mark.asyncio
    async def test_cancelled_run_can_be_retried(self, videos, pattern_result):
        detector = BlockingDetector()
        task = EnhancementTask(detector)

        first = asyncio.ensure_future(task.run(videos, pattern_result))
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        assert task.state == FAILED
        assert task.error == "cancelled"

        detector.release.set()
        assert await task.run(videos, pattern_result) == []
        assert detector.calls == 2
        assert task.state == DONE
