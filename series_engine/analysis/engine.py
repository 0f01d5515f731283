"""
Series analysis orchestrator.

Combines the channel baseline, merged detector output, per-series analytics
and one-hit wonder detection into a single SeriesReport.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from .analyzer import analyze_all
from .baseline import compute_baseline
from .merger import merge_series_groups
from .models import PatternDetectionResult, SeriesGroup, SeriesReport, VideoRecord
from .one_hit import find_one_hit_wonders

logger = logging.getLogger(__name__)


def analyze_channel(
    videos: Sequence[VideoRecord],
    pattern_result: PatternDetectionResult,
    semantic_groups: Optional[Sequence[SeriesGroup]] = None,
    now: Optional[datetime] = None,
) -> SeriesReport:
    """Run the full series analysis over one channel snapshot.

    Steps:
        1. Compute the channel baseline
        2. Merge pattern and semantic groups (dedup + size filter)
        3. Analyze and rank each retained series
        4. Find one-hit wonders among the residual videos

    Args:
        videos: Full video set for the channel.
        pattern_result: Pattern detector output for the same videos.
        semantic_groups: Optional semantic detector output.
        now: Reference time for recency checks.

    Returns:
        SeriesReport; SeriesReport.empty() when there are no videos.
    """
    if not videos:
        logger.info("No videos to analyze")
        return SeriesReport.empty()

    baseline = compute_baseline(videos)

    merged = merge_series_groups(
        pattern_result.pattern_series,
        semantic_groups or [],
        total_video_count=len(videos),
    )

    series = analyze_all(merged.groups, baseline, now=now)

    # Residual: pattern leftovers not claimed by an accepted semantic group
    claimed = {t for g in merged.accepted_semantic for t in g.titles}
    residual = [v for v in pattern_result.uncategorized if v.title not in claimed]

    one_hit_wonders = find_one_hit_wonders(residual, baseline)

    logger.info(
        "Analyzed %d videos: %d series, %d one-hit wonders, %d uncategorized",
        len(videos),
        len(series),
        len(one_hit_wonders),
        len(residual),
    )

    return SeriesReport(
        series=series,
        one_hit_wonders=one_hit_wonders,
        avg_views=baseline.avg_views,
        avg_ctr=baseline.avg_ctr,
        avg_retention=baseline.avg_retention,
        avg_subs_per_k_views=baseline.avg_subs_per_k_views,
        uncategorized_count=len(residual),
    )
