"""
Channel baseline statistics.

The baseline is the yardstick every series is measured against. Only
records with a positive value for a metric count toward that metric's
average, so unknown CTR or retention never drags the baseline toward zero.
"""
import logging
import math
from typing import Iterable, List, Sequence

import numpy as np

from .models import ChannelBaseline, VideoRecord

logger = logging.getLogger(__name__)


def _safe_ratio(numerator: float, denominator: float) -> float:
    """Compute ratio safely, returning 0.0 when denominator is zero or the result is not finite."""
    if not denominator:
        return 0.0
    value = numerator / denominator
    if not math.isfinite(value):
        return 0.0
    return float(value)


def _mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=float)))


def _positive(values: Iterable) -> List[float]:
    return [float(v) for v in values if v is not None and v > 0]


def compute_baseline(videos: Sequence[VideoRecord]) -> ChannelBaseline:
    """Compute channel-wide averages from the full video set.

    Args:
        videos: Every video of the channel, including zero-view rows.

    Returns:
        ChannelBaseline; all zeros when ``videos`` is empty.
    """
    if not videos:
        return ChannelBaseline()

    watched = [v for v in videos if v.views > 0]

    avg_views = _mean([v.views for v in watched])
    avg_ctr = _mean(_positive(v.ctr for v in watched))
    avg_retention = _mean(_positive(v.retention for v in watched))
    avg_subs = _mean([v.subscribers or 0 for v in watched])

    # Conversion uses every record, zero-view ones included
    total_views = float(sum(v.views for v in videos))
    total_subs = float(sum(v.subscribers or 0 for v in videos))
    avg_subs_per_k_views = _safe_ratio(total_subs, total_views) * 1000

    baseline = ChannelBaseline(
        avg_views=avg_views,
        avg_ctr=avg_ctr,
        avg_retention=avg_retention,
        avg_subs_per_k_views=avg_subs_per_k_views,
        avg_subs=avg_subs,
        video_count=len(videos),
    )
    logger.debug(
        "Baseline over %d videos: views=%.1f ctr=%.4f retention=%.4f subs/1K=%.3f",
        len(videos), avg_views, avg_ctr, avg_retention, avg_subs_per_k_views,
    )
    return baseline
