# Analysis module
from .analyzer import analyze_all, analyze_series, detect_trend
from .baseline import compute_baseline
from .engine import analyze_channel
from .merger import MergeResult, merge_series_groups
from .models import (
    ChannelBaseline,
    OneHitWonder,
    PatternDetectionResult,
    SeriesAnalytics,
    SeriesGroup,
    SeriesMetrics,
    SeriesReport,
    VideoRecord,
)
from .one_hit import find_one_hit_wonders
from .recommender import determine_recommendation
