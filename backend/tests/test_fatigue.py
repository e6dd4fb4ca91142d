"""
Tests for RPE fatigue analysis.
"""
import pytest

from trainload.services.analytics.strategies.fatigue import FatigueAnalyzer

from conftest import NOW


def _daily(make_set, rpes):
    """One set per data-day; rpes are oldest first, ending today."""
    count = len(rpes)
    return [
        make_set("Squat", days_ago=count - 1 - i, rpe=rpe)
        for i, rpe in enumerate(rpes)
    ]


class TestEmptyAndFiltering:

    def setup_method(self):
        self.analyzer = FatigueAnalyzer()

    def test_empty_report(self):
        report = self.analyzer.analyze([], now=NOW)

        assert report.chart_series == []
        assert report.recent_avg is None
        assert report.fatigue_score == 100
        assert report.data_status == "insufficient_data"
        assert report.load_state == "unknown"
        assert report.weekly_trend is None

    def test_sets_without_rpe_ignored(self, make_set):
        report = self.analyzer.analyze([make_set(rpe=None), make_set(rpe=None)], now=NOW)
        assert report.total_sets == 0
        assert report.data_status == "insufficient_data"

    def test_unmapped_exercises_still_count(self, make_set):
        report = self.analyzer.analyze([make_set("Sled Drag", rpe=7), make_set("Squat", rpe=7)], now=NOW)
        assert report.total_sets == 2

    def test_lookback_boundary(self, make_set):
        sets = [make_set(days_ago=30, rpe=7), make_set(days_ago=31, rpe=9)]
        report = self.analyzer.analyze(sets, lookback_days=30, now=NOW)

        assert report.total_sets == 1
        assert report.recent_avg == 7

    def test_invalid_lookback(self):
        with pytest.raises(ValueError):
            self.analyzer.analyze([], lookback_days=0, now=NOW)


class TestSeries:

    def setup_method(self):
        self.analyzer = FatigueAnalyzer()

    def test_daily_average_and_volume(self, make_set):
        sets = [
            make_set(rpe=6, weight=100, reps=5),
            make_set(seconds=120, rpe=8, weight=100, reps=3),
        ]
        snap = self.analyzer.analyze(sets, now=NOW).chart_series[0]

        assert snap.date.isoformat() == "2024-06-12"
        assert snap.avg_rpe == 7
        assert snap.set_count == 2
        assert snap.volume == 800

    def test_days_without_data_are_skipped(self, make_set):
        report = self.analyzer.analyze([make_set(days_ago=20, rpe=7), make_set(rpe=8)], now=NOW)

        assert [s.date.isoformat() for s in report.chart_series] == ["2024-05-23", "2024-06-12"]
        assert report.recent_day_count == 2
        assert report.prior_avg is None

    def test_rolling_average_uses_seven_data_days(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [6, 6, 6, 6, 6, 6, 6, 10]), now=NOW)

        assert report.chart_series[0].rolling_7day_avg == 6
        assert report.chart_series[-1].rolling_7day_avg == pytest.approx(46 / 7)

    def test_high_rpe_sets(self, make_set):
        sets = [make_set(rpe=9), make_set(seconds=60, rpe=9.5), make_set(seconds=120, rpe=8.9)]
        assert self.analyzer.analyze(sets, now=NOW).high_rpe_set_count == 2


class TestLoadState:

    def setup_method(self):
        self.analyzer = FatigueAnalyzer()

    def test_overtraining_threshold_inclusive(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [8.5, 8.5, 8.5]), now=NOW)

        assert report.is_overtraining
        assert report.load_state == "overtraining"
        assert report.fatigue_score == 15

    def test_just_below_threshold(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [8.49, 8.49, 8.49]), now=NOW)

        assert not report.is_overtraining
        assert not report.is_optimal
        assert report.load_state == "unknown"

    def test_sharp_rise_after_moderate_week(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [7.0] * 7 + [9.0] * 7), now=NOW)

        assert report.prior_avg == pytest.approx(7.0)
        assert report.delta == pytest.approx(2.0)
        assert report.is_overtraining
        assert report.weekly_trend == "increasing"

    def test_rising_load_below_absolute_threshold(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [6.5] * 7 + [7.8] * 7), now=NOW)

        assert report.is_overtraining
        assert report.is_optimal
        assert report.load_state == "overtraining"

    def test_undertraining_needs_three_days(self, make_set):
        three = self.analyzer.analyze(_daily(make_set, [5.0, 5.0, 5.0]), now=NOW)
        two = self.analyzer.analyze(_daily(make_set, [5.0, 5.0]), now=NOW)

        assert three.is_undertraining
        assert three.fatigue_score == 50
        assert not two.is_undertraining
        assert two.load_state == "unknown"

    def test_optimal_and_stable(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [7.0] * 10), now=NOW)

        assert report.prior_day_count == 3
        assert report.is_optimal
        assert report.load_state == "optimal"
        assert report.weekly_trend == "stable"
        assert report.fatigue_score == 30

    def test_decreasing_trend(self, make_set):
        report = self.analyzer.analyze(_daily(make_set, [8.0] * 7 + [7.0] * 7), now=NOW)
        assert report.weekly_trend == "decreasing"
        assert report.data_status == "ok"
