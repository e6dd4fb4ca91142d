"""
Fatigue Strategy - RPE-based training load state detection.

Fatigue metrics:
- Daily average RPE over days that have RPE data
- Trailing 7-data-day rolling average
- Recent vs prior week comparison (overtraining / undertraining / optimal)
- Freshness score (0-100, higher = fresher)
"""
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.strategies.base import AnalyzerStrategy
from trainload.services.analytics.windows import local_day, lookback_start

ROLLING_WINDOW_DAYS = 7
COMPARISON_DAYS = 7

OVERTRAINING_RPE = 8.5
OVERTRAINING_RISING_RPE = 7.5
OVERTRAINING_RISING_DELTA = 1.0
UNDERTRAINING_RPE = 5.5
UNDERTRAINING_MIN_DAYS = 3
OPTIMAL_RPE_LOW = 6.0
OPTIMAL_RPE_HIGH = 8.0
TREND_THRESHOLD = 0.5
HIGH_RPE = 9.0

STATE_OVERTRAINING = "overtraining"
STATE_UNDERTRAINING = "undertraining"
STATE_OPTIMAL = "optimal"
STATE_UNKNOWN = "unknown"

TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"
TREND_STABLE = "stable"

DATA_OK = "ok"
DATA_INSUFFICIENT = "insufficient_data"


@dataclass(frozen=True)
class FatigueSnapshot:
    """One data-day of the RPE series."""
    date: date
    avg_rpe: float
    rolling_7day_avg: float
    set_count: int
    volume: float


@dataclass
class FatigueReport:
    """
    Training load state derived from RPE.

    The three predicates are independent; load_state resolves them with
    overtraining > undertraining > optimal > unknown.
    """
    chart_series: List[FatigueSnapshot] = field(default_factory=list)
    recent_avg: Optional[float] = None
    prior_avg: Optional[float] = None
    delta: Optional[float] = None
    is_overtraining: bool = False
    is_undertraining: bool = False
    is_optimal: bool = False
    fatigue_score: int = 100
    weekly_trend: Optional[str] = None
    total_sets: int = 0
    high_rpe_set_count: int = 0
    recent_day_count: int = 0
    prior_day_count: int = 0

    @property
    def load_state(self) -> str:
        if self.is_overtraining:
            return STATE_OVERTRAINING
        if self.is_undertraining:
            return STATE_UNDERTRAINING
        if self.is_optimal:
            return STATE_OPTIMAL
        return STATE_UNKNOWN

    @property
    def data_status(self) -> str:
        # A score of 100 with no data means "no signal", not "fresh"
        return DATA_OK if self.recent_avg is not None else DATA_INSUFFICIENT


class FatigueAnalyzer(AnalyzerStrategy):
    """
    Strategy for RPE fatigue analysis.

    Only sets with an RPE value take part. Days without RPE data are left
    out of the series entirely rather than counted as zero.
    """

    name = "fatigue"

    def analyze(
        self,
        sets: Sequence[LoggedSet],
        lookback_days: int = 30,
        now: Optional[datetime] = None,
    ) -> FatigueReport:
        """
        Compute the fatigue report.

        Args:
            sets: Set history (sets without RPE are ignored)
            lookback_days: Calendar days to look back from today
            now: Reference time (defaults to current UTC time)

        Returns:
            FatigueReport; a well-formed empty report when there is no data
        """
        start = lookback_start(lookback_days, self._resolve_now(now), self.zone)
        rated = [s for s in self._in_range(sets, start) if s.has_rpe()]

        report = FatigueReport(
            total_sets=len(rated),
            high_rpe_set_count=sum(1 for s in rated if s.rpe >= HIGH_RPE),
        )
        if not rated:
            return report

        report.chart_series = self._build_series(rated)
        daily = [snap.avg_rpe for snap in report.chart_series]

        recent = daily[-COMPARISON_DAYS:]
        prior = daily[-2 * COMPARISON_DAYS:-COMPARISON_DAYS]
        report.recent_day_count = len(recent)
        report.prior_day_count = len(prior)
        report.recent_avg = self._mean(recent)
        report.prior_avg = self._mean(prior)
        if report.prior_avg is not None:
            report.delta = report.recent_avg - report.prior_avg

        self._classify(report)
        report.weekly_trend = self._weekly_trend(report.delta)
        report.fatigue_score = self._fatigue_score(report.recent_avg)

        return report

    # ========================================
    # Fatigue-specific helpers
    # ========================================

    def _build_series(self, rated: Sequence[LoggedSet]) -> List[FatigueSnapshot]:
        """Daily averages plus the trailing rolling average, oldest first."""
        by_day: Dict[date, List[LoggedSet]] = {}
        for logged in rated:
            by_day.setdefault(local_day(logged.completed_at, self.zone), []).append(logged)

        days = sorted(by_day)
        averages = [
            math.fsum(s.rpe for s in by_day[day]) / len(by_day[day])
            for day in days
        ]

        series = []
        for index, day in enumerate(days):
            window = averages[max(0, index - ROLLING_WINDOW_DAYS + 1):index + 1]
            series.append(FatigueSnapshot(
                date=day,
                avg_rpe=averages[index],
                rolling_7day_avg=math.fsum(window) / len(window),
                set_count=len(by_day[day]),
                volume=math.fsum(s.volume for s in by_day[day]),
            ))
        return series

    def _classify(self, report: FatigueReport) -> None:
        """Set the three independent load predicates."""
        recent = report.recent_avg
        if recent is None:
            return

        rising = (
            report.delta is not None
            and report.delta > OVERTRAINING_RISING_DELTA
            and recent >= OVERTRAINING_RISING_RPE
        )
        report.is_overtraining = recent >= OVERTRAINING_RPE or rising
        report.is_undertraining = (
            recent <= UNDERTRAINING_RPE
            and report.recent_day_count >= UNDERTRAINING_MIN_DAYS
        )
        report.is_optimal = OPTIMAL_RPE_LOW <= recent <= OPTIMAL_RPE_HIGH

    def _weekly_trend(self, delta: Optional[float]) -> Optional[str]:
        if delta is None:
            return None
        if delta > TREND_THRESHOLD:
            return TREND_INCREASING
        if delta < -TREND_THRESHOLD:
            return TREND_DECREASING
        return TREND_STABLE

    def _fatigue_score(self, recent_avg: Optional[float]) -> int:
        """Freshness 0-100; 100 when there is no RPE signal at all."""
        if recent_avg is None:
            return 100
        return int(round(self._clamp((10 - recent_avg) / 10 * 100)))
