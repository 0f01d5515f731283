"""
Tests for the channel baseline.
"""
import pytest

from series_engine.analysis.analyzer import analyze_series
from series_engine.analysis.baseline import _safe_ratio, compute_baseline
from series_engine.analysis.models import SeriesGroup, VideoRecord


def make_video(title="Video", views=1000, ctr=0.05, retention=0.4, subscribers=0):
    """Helper to create a VideoRecord for testing."""
    return VideoRecord(
        title=title,
        views=views,
        ctr=ctr,
        retention=retention,
        subscribers=subscribers,
    )


class TestSafeRatio:
    """Tests for the division guard."""

    def test_zero_denominator(self):
        assert _safe_ratio(5, 0) == 0.0

    def test_normal_division(self):
        assert _safe_ratio(3, 4) == 0.75

    def test_non_finite_result(self):
        assert _safe_ratio(float("inf"), 1) == 0.0
        assert _safe_ratio(float("nan"), 1) == 0.0


class TestComputeBaseline:
    """Tests for compute_baseline."""

    def test_empty_input_returns_zeros(self):
        baseline = compute_baseline([])
        assert baseline.avg_views == 0.0
        assert baseline.avg_ctr == 0.0
        assert baseline.avg_retention == 0.0
        assert baseline.avg_subs_per_k_views == 0.0
        assert baseline.video_count == 0

    def test_identical_records(self):
        """Identical records give a baseline equal to the shared values."""
        videos = [make_video(f"V{i}", views=5000, ctr=0.06, retention=0.5, subscribers=10)
                  for i in range(10)]
        baseline = compute_baseline(videos)
        assert baseline.avg_views == pytest.approx(5000)
        assert baseline.avg_ctr == pytest.approx(0.06)
        assert baseline.avg_retention == pytest.approx(0.5)
        assert baseline.avg_subs_per_k_views == pytest.approx(2.0)

    def test_identical_records_give_zero_lift(self):
        videos = [make_video(f"V{i}", views=5000, ctr=0.06, retention=0.5, subscribers=10)
                  for i in range(10)]
        baseline = compute_baseline(videos)
        group = SeriesGroup(name="S", videos=videos[:4], detection_method="pattern")
        analytics = analyze_series(group, baseline)
        assert analytics.view_lift == pytest.approx(0.0, abs=1e-9)
        assert analytics.ctr_lift == pytest.approx(0.0, abs=1e-9)
        assert analytics.retention_lift == pytest.approx(0.0, abs=1e-9)
        assert analytics.subs_conversion_lift == pytest.approx(0.0, abs=1e-9)
        assert analytics.performance_score == pytest.approx(1.0)

    def test_zero_view_records_excluded_from_view_average(self):
        videos = [make_video("A", views=1000), make_video("B", views=0)]
        baseline = compute_baseline(videos)
        assert baseline.avg_views == 1000

    def test_missing_and_zero_metrics_do_not_pull_down(self):
        """None and 0 CTR/retention are left out of the average."""
        videos = [
            make_video("A", ctr=0.05, retention=0.4),
            make_video("B", ctr=None, retention=None),
            make_video("C", ctr=0.0, retention=0.0),
            make_video("D", ctr=0.07, retention=0.6),
        ]
        baseline = compute_baseline(videos)
        assert baseline.avg_ctr == pytest.approx(0.06)
        assert baseline.avg_retention == pytest.approx(0.5)

    def test_zero_view_record_metrics_ignored(self):
        videos = [make_video("A", views=1000, ctr=0.04), make_video("B", views=0, ctr=0.5)]
        baseline = compute_baseline(videos)
        assert baseline.avg_ctr == pytest.approx(0.04)

    def test_subscriber_conversion_uses_all_records(self):
        """Zero-view rows still contribute their subscribers."""
        videos = [
            make_video("A", views=1000, subscribers=10),
            make_video("B", views=0, subscribers=5),
        ]
        baseline = compute_baseline(videos)
        # 15 subs / 1000 views * 1000
        assert baseline.avg_subs_per_k_views == pytest.approx(15.0)

    def test_all_zero_views(self):
        videos = [make_video("A", views=0, subscribers=3), make_video("B", views=0)]
        baseline = compute_baseline(videos)
        assert baseline.avg_views == 0.0
        assert baseline.avg_subs_per_k_views == 0.0
        assert baseline.video_count == 2

    def test_negative_subscribers(self):
        videos = [make_video("A", views=2000, subscribers=-4)]
        baseline = compute_baseline(videos)
        assert baseline.avg_subs_per_k_views == pytest.approx(-2.0)
