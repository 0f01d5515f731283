"""
One-hit wonder detection: standout videos that belong to no series and are
candidates for becoming one.
"""
import logging
from typing import List, Sequence

from .baseline import _safe_ratio
from .models import ChannelBaseline, OneHitWonder, VideoRecord

logger = logging.getLogger(__name__)

ONE_HIT_SETTINGS = {
    "min_view_multiple": 1.5,  # strictly above this multiple of channel avg views
    "limit": 5,
}


def find_one_hit_wonders(
    videos: Sequence[VideoRecord],
    baseline: ChannelBaseline,
    limit: int = ONE_HIT_SETTINGS["limit"],
) -> List[OneHitWonder]:
    """
    Find the strongest uncategorized videos.

    Args:
        videos: Videos not claimed by any retained series
        baseline: Channel baseline
        limit: Maximum number of results

    Returns:
        Up to ``limit`` OneHitWonder entries, most viewed first
    """
    threshold = baseline.avg_views * ONE_HIT_SETTINGS["min_view_multiple"]
    standouts = [v for v in videos if v.views > threshold]
    standouts.sort(key=lambda v: v.views, reverse=True)

    wonders = [
        OneHitWonder(
            title=v.title,
            views=v.views,
            view_lift=_safe_ratio(v.views - baseline.avg_views, baseline.avg_views),
            ctr=v.ctr,
            retention=v.retention,
        )
        for v in standouts[:limit]
    ]
    logger.debug(
        "%d of %d uncategorized videos beat %.0f views; keeping %d",
        len(standouts), len(videos), threshold, len(wonders),
    )
    return wonders
