"""
Per-series analytics.

For every retained series group:
  - averages and subscriber conversion (subs per 1K views)
  - momentum trend from a first-half / second-half split of dated episodes
  - lift of each metric over the channel baseline
  - composite performance score
  - recency (abandonment) and audience-builder flags
  - the strategic recommendation

Series are mutually independent; only the final ordering by performance
score ties them together.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from .baseline import _mean, _safe_ratio
from .models import (
    ChannelBaseline,
    SeriesAnalytics,
    SeriesGroup,
    SeriesMetrics,
    VideoRecord,
)
from .recommender import determine_recommendation, has_quality_engagement

logger = logging.getLogger(__name__)

TREND_SETTINGS = {
    "min_dated_videos": 4,
    "growth_threshold": 0.15,  # +/- share of first-half average views
}

ABANDONMENT_SETTINGS = {
    "max_days_since_last": 60,
    "min_count": 3,
    "undated_days": 999,
}

AUDIENCE_BUILDER_SETTINGS = {
    "min_conversion_lift": 0.3,
    "min_conversion_multiple": 1.5,
}

# Subscriber conversion is a secondary signal next to views, CTR and retention
SUBS_CONVERSION_WEIGHT = 0.5

SECONDS_PER_DAY = 60 * 60 * 24


def _lift(value: float, baseline_value: float) -> float:
    """Relative difference from the baseline, 0.0 when the baseline is zero."""
    return _safe_ratio(value - baseline_value, baseline_value)


def _dated_videos(videos: Sequence[VideoRecord]) -> List[VideoRecord]:
    """Videos with a publish date, oldest first (stable for equal dates)."""
    return sorted(
        (v for v in videos if v.publish_date is not None),
        key=lambda v: v.publish_date,
    )


def detect_trend(videos: Sequence[VideoRecord]) -> Tuple[str, float]:
    """Compare average views of the later half of a series to the earlier half.

    Args:
        videos: Series videos in any order; undated ones are ignored.

    Returns:
        Tuple of (trend, trend_pct) where trend is 'growing', 'declining'
        or 'stable'. Fewer than four dated videos is always ('stable', 0.0).
    """
    dated = _dated_videos(videos)
    if len(dated) < TREND_SETTINGS["min_dated_videos"]:
        return "stable", 0.0

    midpoint = len(dated) // 2
    first_half_avg = _mean([v.views for v in dated[:midpoint]])
    second_half_avg = _mean([v.views for v in dated[midpoint:]])
    trend_pct = _safe_ratio(second_half_avg - first_half_avg, first_half_avg)

    threshold = TREND_SETTINGS["growth_threshold"]
    if trend_pct > threshold:
        return "growing", trend_pct
    if trend_pct < -threshold:
        return "declining", trend_pct
    return "stable", trend_pct


def utc_now() -> datetime:
    """Current time as naive UTC, matching the dates the loader produces."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def days_since(now: datetime, then: datetime) -> float:
    """Fractional days between two datetimes, tolerating naive/aware mixes."""
    if then.tzinfo is None and now.tzinfo is not None:
        then = then.replace(tzinfo=now.tzinfo)
    elif then.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=then.tzinfo)
    return (now - then).total_seconds() / SECONDS_PER_DAY


def best_and_worst(videos: Sequence[VideoRecord]) -> Tuple[VideoRecord, VideoRecord]:
    """Highest- and lowest-viewed videos; ties keep input order."""
    ranked = sorted(videos, key=lambda v: v.views, reverse=True)
    return ranked[0], ranked[-1]


def analyze_series(
    group: SeriesGroup,
    baseline: ChannelBaseline,
    now: Optional[datetime] = None,
) -> SeriesAnalytics:
    """Score a single series against the channel baseline.

    Args:
        group: Retained series group (at least one video).
        baseline: Channel baseline from compute_baseline().
        now: Reference time for recency; defaults to utc_now().

    Returns:
        SeriesAnalytics with metrics, trend and recommendation filled in.
    """
    if not group.videos:
        raise ValueError(f"Series '{group.name}' has no videos")

    now = now or utc_now()
    videos = group.videos
    count = len(videos)

    total_views = float(sum(v.views for v in videos))
    total_subs = float(sum(v.subscribers or 0 for v in videos))
    avg_views = total_views / count
    avg_ctr = _mean([v.ctr or 0.0 for v in videos])
    avg_retention = _mean([v.retention or 0.0 for v in videos])
    avg_subs = total_subs / count
    subs_per_k_views = _safe_ratio(total_subs, total_views) * 1000

    trend, trend_pct = detect_trend(videos)

    view_lift = _lift(avg_views, baseline.avg_views)
    ctr_lift = _lift(avg_ctr, baseline.avg_ctr)
    retention_lift = _lift(avg_retention, baseline.avg_retention)
    subs_lift = _lift(avg_subs, baseline.avg_subs)
    subs_conversion_lift = _lift(subs_per_k_views, baseline.avg_subs_per_k_views)

    performance_score = (
        (1 + view_lift)
        * (1 + ctr_lift)
        * (1 + retention_lift)
        * (1 + subs_conversion_lift * SUBS_CONVERSION_WEIGHT)
    )

    builder = AUDIENCE_BUILDER_SETTINGS
    is_audience_builder = (
        subs_conversion_lift > builder["min_conversion_lift"]
        or subs_per_k_views > baseline.avg_subs_per_k_views * builder["min_conversion_multiple"]
    )

    metrics = SeriesMetrics(
        count=count,
        avg_ctr=avg_ctr,
        avg_retention=avg_retention,
        subs_per_k_views=subs_per_k_views,
        view_lift=view_lift,
        trend=trend,
        trend_pct=trend_pct,
        performance_score=performance_score,
        is_audience_builder=is_audience_builder,
    )
    recommendation, recommendation_text = determine_recommendation(metrics, baseline)

    dated = _dated_videos(videos)
    if dated:
        days_since_last = days_since(now, dated[-1].publish_date)
    else:
        days_since_last = float(ABANDONMENT_SETTINGS["undated_days"])
    is_abandoned = (
        days_since_last > ABANDONMENT_SETTINGS["max_days_since_last"]
        and count >= ABANDONMENT_SETTINGS["min_count"]
    )

    best_video, worst_video = best_and_worst(videos)

    logger.debug(
        "Series '%s': count=%d score=%.3f trend=%s(%.1f%%) -> %s",
        group.name, count, performance_score, trend, trend_pct * 100, recommendation,
    )

    return SeriesAnalytics(
        name=group.name,
        detection_method=group.detection_method,
        confidence=group.confidence,
        count=count,
        avg_views=avg_views,
        avg_ctr=avg_ctr,
        avg_retention=avg_retention,
        avg_subs=avg_subs,
        subs_per_k_views=subs_per_k_views,
        view_lift=view_lift,
        ctr_lift=ctr_lift,
        retention_lift=retention_lift,
        subs_lift=subs_lift,
        subs_conversion_lift=subs_conversion_lift,
        trend=trend,
        trend_pct=trend_pct,
        performance_score=performance_score,
        best_video=best_video,
        worst_video=worst_video,
        recommendation=recommendation,
        recommendation_text=recommendation_text,
        days_since_last_episode=days_since_last,
        is_abandoned=is_abandoned,
        is_audience_builder=is_audience_builder,
        has_quality_engagement=has_quality_engagement(avg_ctr, avg_retention, baseline),
        videos=list(videos),
    )


def analyze_all(
    groups: Sequence[SeriesGroup],
    baseline: ChannelBaseline,
    now: Optional[datetime] = None,
) -> List[SeriesAnalytics]:
    """Analyze every group and rank by performance score, best first."""
    now = now or utc_now()
    analyzed = [analyze_series(g, baseline, now=now) for g in groups]
    analyzed.sort(key=lambda s: s.performance_score, reverse=True)
    return analyzed
