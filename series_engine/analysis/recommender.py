"""
Strategic recommendation for a content series.

An ordered decision tree: the first rule that matches wins, so a series that
qualifies for both "scale" and "sunset" is always scaled.
"""
import logging
from typing import Tuple

from .models import ChannelBaseline, SeriesMetrics

logger = logging.getLogger(__name__)

RECOMMENDATIONS = ("scale", "optimize", "maintain", "sunset")

RECOMMENDATION_THRESHOLDS = {
    "scale": {
        "min_performance_score": 1.3,
        "min_growth_pct": 0.2,
        "max_growth_count": 15,
    },
    "quality_engagement": {
        "min_metric_multiple": 1.1,  # CTR and retention vs baseline
        "max_view_lift": 0.2,
    },
    "weak_engagement": {
        "min_view_lift": 0.2,
        "max_metric_multiple": 0.9,
    },
    "sunset": {
        "max_performance_score": 0.7,
        "max_view_lift": -0.3,
        "max_metric_multiple": 0.8,
        "max_decline_pct": -0.3,
    },
    "optimize": {
        "min_performance_score": 0.9,
        "max_performance_score": 1.2,
    },
}

RECOMMENDATION_TEXT = {
    "high_performer": "High performer across all metrics - increase frequency",
    "audience_builder": (
        "Strong subscriber conversion ({subs_per_k_views:.1f} subs/1K views) "
        "- this builds your audience"
    ),
    "needs_reach": (
        "Strong engagement (CTR + Retention) - improve thumbnails/titles for more reach"
    ),
    "growing": "Growing momentum - publish more to capitalize",
    "weak_engagement": "Good views but weak engagement - improve content quality/hooks",
    "declining": "Declining performance across metrics - consider ending or major refresh",
    "underperforming": "Underperforming on views and engagement - audience not interested",
    "sharp_decline": "Sharp decline with weak engagement - time to move on",
    "good_baseline": "Good baseline - test improvements to reach next level",
    "stable": "Stable performance - maintain current pace",
}


def has_quality_engagement(
    avg_ctr: float, avg_retention: float, baseline: ChannelBaseline
) -> bool:
    """Both CTR and retention at least 10% above the channel baseline."""
    multiple = RECOMMENDATION_THRESHOLDS["quality_engagement"]["min_metric_multiple"]
    return (
        avg_ctr > baseline.avg_ctr * multiple
        and avg_retention > baseline.avg_retention * multiple
    )


def determine_recommendation(
    metrics: SeriesMetrics, baseline: ChannelBaseline
) -> Tuple[str, str]:
    """
    Determine the strategic recommendation for a series.

    Args:
        metrics: Per-series metrics (lifts, trend, score)
        baseline: Channel baseline the metrics were computed against

    Returns:
        Tuple of (label, rationale) where label is one of
        'scale', 'optimize', 'maintain', 'sunset'
    """
    score = metrics.performance_score
    declining = metrics.trend == "declining"
    quality = has_quality_engagement(metrics.avg_ctr, metrics.avg_retention, baseline)

    # Strong overall performance
    scale = RECOMMENDATION_THRESHOLDS["scale"]
    if score > scale["min_performance_score"] and not declining:
        return "scale", RECOMMENDATION_TEXT["high_performer"]

    # Audience builder, even if other metrics are average
    if metrics.is_audience_builder and not declining:
        return "scale", RECOMMENDATION_TEXT["audience_builder"].format(
            subs_per_k_views=metrics.subs_per_k_views
        )

    # Good engagement, needs more reach
    if quality and metrics.view_lift < RECOMMENDATION_THRESHOLDS["quality_engagement"]["max_view_lift"]:
        return "optimize", RECOMMENDATION_TEXT["needs_reach"]

    # Growing momentum
    if (metrics.trend == "growing" and
        metrics.trend_pct > scale["min_growth_pct"] and
        metrics.count < scale["max_growth_count"]):
        return "scale", RECOMMENDATION_TEXT["growing"]

    # Good views, weak engagement
    weak = RECOMMENDATION_THRESHOLDS["weak_engagement"]
    if (metrics.view_lift > weak["min_view_lift"] and
        (metrics.avg_ctr < baseline.avg_ctr * weak["max_metric_multiple"] or
         metrics.avg_retention < baseline.avg_retention * weak["max_metric_multiple"])):
        return "optimize", RECOMMENDATION_TEXT["weak_engagement"]

    sunset = RECOMMENDATION_THRESHOLDS["sunset"]
    if score < sunset["max_performance_score"] and declining:
        return "sunset", RECOMMENDATION_TEXT["declining"]

    if (metrics.view_lift < sunset["max_view_lift"] and
        metrics.avg_ctr < baseline.avg_ctr * sunset["max_metric_multiple"] and
        metrics.avg_retention < baseline.avg_retention * sunset["max_metric_multiple"]):
        return "sunset", RECOMMENDATION_TEXT["underperforming"]

    if declining and metrics.trend_pct < sunset["max_decline_pct"] and not quality:
        return "sunset", RECOMMENDATION_TEXT["sharp_decline"]

    optimize = RECOMMENDATION_THRESHOLDS["optimize"]
    if optimize["min_performance_score"] < score < optimize["max_performance_score"]:
        return "optimize", RECOMMENDATION_TEXT["good_baseline"]

    return "maintain", RECOMMENDATION_TEXT["stable"]
