"""
Data models for series analysis.

VideoRecord is the caller-owned input row. SeriesGroup is a candidate cluster
handed to the engine by a detector. Everything else is derived per run and
never persisted.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class VideoRecord:
    """One analyzed video. None means the metric is unknown, 0 is a real value."""
    title: str
    views: float
    ctr: Optional[float] = None
    retention: Optional[float] = None
    subscribers: int = 0
    publish_date: Optional[datetime] = None
    video_id: Optional[str] = None


@dataclass
class SeriesGroup:
    """A candidate series produced by the pattern or semantic detector."""
    name: str
    videos: List[VideoRecord]
    detection_method: str  # pattern, semantic
    confidence: Optional[str] = None
    pattern: Optional[str] = None

    @property
    def titles(self) -> List[str]:
        return [v.title for v in self.videos]


@dataclass
class ChannelBaseline:
    """Channel-wide reference statistics."""
    avg_views: float = 0.0
    avg_ctr: float = 0.0
    avg_retention: float = 0.0
    avg_subs_per_k_views: float = 0.0
    avg_subs: float = 0.0
    video_count: int = 0


@dataclass
class SeriesAnalytics:
    """Scored view of one retained series."""
    name: str
    detection_method: str
    confidence: Optional[str]
    count: int
    avg_views: float
    avg_ctr: float
    avg_retention: float
    avg_subs: float
    subs_per_k_views: float
    view_lift: float
    ctr_lift: float
    retention_lift: float
    subs_lift: float
    subs_conversion_lift: float
    trend: str  # growing, declining, stable
    trend_pct: float
    performance_score: float
    best_video: VideoRecord
    worst_video: VideoRecord
    recommendation: str  # scale, optimize, maintain, sunset
    recommendation_text: str
    days_since_last_episode: float
    is_abandoned: bool
    is_audience_builder: bool
    has_quality_engagement: bool
    videos: List[VideoRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "detectionMethod": self.detection_method,
            "confidence": self.confidence,
            "count": self.count,
            "avgViews": round(self.avg_views, 2),
            "avgCtr": round(self.avg_ctr, 4),
            "avgRet": round(self.avg_retention, 4),
            "avgSubs": round(self.avg_subs, 2),
            "subsPerKViews": round(self.subs_per_k_views, 3),
            "viewLift": round(self.view_lift, 4),
            "ctrLift": round(self.ctr_lift, 4),
            "retLift": round(self.retention_lift, 4),
            "subsLift": round(self.subs_lift, 4),
            "subsConversionLift": round(self.subs_conversion_lift, 4),
            "trend": self.trend,
            "trendPct": round(self.trend_pct, 4),
            "performanceScore": round(self.performance_score, 4),
            "bestVideo": {"title": self.best_video.title, "views": self.best_video.views},
            "worstVideo": {"title": self.worst_video.title, "views": self.worst_video.views},
            "recommendation": self.recommendation,
            "recommendationText": self.recommendation_text,
            "daysSinceLastEpisode": round(self.days_since_last_episode, 1),
            "isAbandoned": self.is_abandoned,
            "isAudienceBuilder": self.is_audience_builder,
            "videoTitles": [v.title for v in self.videos],
        }


@dataclass
class OneHitWonder:
    """A standout video that belongs to no series."""
    title: str
    views: float
    view_lift: float
    ctr: Optional[float]
    retention: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "views": self.views,
            "viewLift": round(self.view_lift, 4),
            "ctr": self.ctr,
            "retention": self.retention,
        }


@dataclass
class SeriesReport:
    """Full engine output for one dataset."""
    series: List[SeriesAnalytics]
    one_hit_wonders: List[OneHitWonder]
    avg_views: float
    avg_ctr: float
    avg_retention: float
    avg_subs_per_k_views: float
    uncategorized_count: int

    @classmethod
    def empty(cls) -> "SeriesReport":
        return cls(
            series=[],
            one_hit_wonders=[],
            avg_views=0.0,
            avg_ctr=0.0,
            avg_retention=0.0,
            avg_subs_per_k_views=0.0,
            uncategorized_count=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "series": [s.to_dict() for s in self.series],
            "oneHitWonders": [w.to_dict() for w in self.one_hit_wonders],
            "avgViews": round(self.avg_views, 2),
            "avgCtr": round(self.avg_ctr, 4),
            "avgRet": round(self.avg_retention, 4),
            "avgSubsPerKViews": round(self.avg_subs_per_k_views, 3),
            "uncategorizedCount": self.uncategorized_count,
        }


@dataclass
class SeriesMetrics:
    """Raw per-series numbers the recommendation rules read."""
    count: int
    avg_ctr: float
    avg_retention: float
    subs_per_k_views: float
    view_lift: float
    trend: str
    trend_pct: float
    performance_score: float
    is_audience_builder: bool


@dataclass
class PatternDetectionResult:
    """Output of the title pattern detector."""
    pattern_series: List[SeriesGroup] = field(default_factory=list)
    uncategorized: List[VideoRecord] = field(default_factory=list)

    @property
    def series_names(self) -> List[str]:
        return [g.name for g in self.pattern_series]
