"""
Single-flight AI enhancement task.

Wraps the semantic detector so that a second trigger while a call is
outstanding is a no-op rather than a queued or parallel call. A failure
leaves the task in the "failed" state with the error message, as does a
cancelled call; calling run() again retries.
"""
import logging
from typing import List, Optional, Sequence

from ..analysis.models import PatternDetectionResult, SeriesGroup, VideoRecord
from ..db.result_cache import ResultCache

logger = logging.getLogger(__name__)

IDLE = "idle"
RUNNING = "running"
DONE = "done"
FAILED = "failed"


class EnhancementTask:
    """Tracks one channel's semantic enhancement (idle/running/done/failed)."""

    def __init__(self, detector, cache: Optional[ResultCache] = None):
        """
        Args:
            detector: Object with ``async detect(uncategorized, existing_names)``
            cache: Optional ResultCache for persisting successful results
        """
        self.detector = detector
        self.cache = cache
        self.state = IDLE
        self.result: Optional[List[SeriesGroup]] = None
        self.error: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state == RUNNING

    def load_cached(self, videos: Sequence[VideoRecord]) -> Optional[List[SeriesGroup]]:
        """Adopt a cached result for this dataset, if there is one."""
        if self.cache is None or self.is_running:
            return None
        cached = self.cache.load(videos)
        if cached is not None:
            self.result = cached
            self.state = DONE
        return cached

    async def run(
        self,
        videos: Sequence[VideoRecord],
        pattern_result: PatternDetectionResult,
    ) -> Optional[List[SeriesGroup]]:
        """Run semantic detection over the pattern residual.

        Returns:
            The semantic groups, or None if already running or on failure.
        """
        if self.is_running:
            logger.debug("Enhancement already running; ignoring trigger")
            return None

        self.state = RUNNING
        self.error = None
        try:
            groups = await self.detector.detect(
                pattern_result.uncategorized, pattern_result.series_names
            )
        except Exception as e:
            logger.error("AI enhancement failed: %s", e)
            self.error = str(e)
            self.state = FAILED
            return None
        else:
            self.result = groups
            self.state = DONE
        finally:
            # Cancelled mid-call; leave the task retryable
            if self.state == RUNNING:
                logger.warning("AI enhancement cancelled")
                self.error = "cancelled"
                self.state = FAILED

        if self.cache is not None:
            self.cache.save(videos, groups)
        return groups
