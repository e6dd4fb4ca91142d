"""
Rest Strategy - Inter-set rest interval analysis.

Rest metrics:
- Gaps between consecutive sets of the same exercise
- Distribution over fixed duration bands
- Per-exercise average rest ranking
- Consistency (inverse coefficient of variation, percent)
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from trainload.core.config import settings
from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.strategies.base import AnalyzerStrategy
from trainload.services.analytics.windows import lookback_start

# (label, lower bound inclusive, upper bound exclusive)
REST_BANDS: Tuple[Tuple[str, float, float], ...] = (
    ("30-60s", 30, 60),
    ("60-90s", 60, 90),
    ("90-120s", 90, 120),
    ("120-180s", 120, 180),
    ("180s+", 180, math.inf),
)


@dataclass(frozen=True)
class RestSample:
    """Rest between two adjacent sets of one exercise."""
    user_id: str
    exercise_name: str
    gap_seconds: float


@dataclass(frozen=True)
class RestBand:
    band: str
    count: int


@dataclass(frozen=True)
class ExerciseRest:
    exercise: str
    avg_rest_seconds: float
    sample_count: int


@dataclass
class RestReport:
    """Rest interval distribution and consistency."""
    distribution: List[RestBand] = field(default_factory=list)
    per_exercise_averages: List[ExerciseRest] = field(default_factory=list)
    overall_avg_rest_seconds: Optional[float] = None
    consistency_percent: int = 0
    total_samples: int = 0


class RestIntervalAnalyzer(AnalyzerStrategy):
    """
    Strategy for rest interval analysis.

    Gaps outside [min_seconds, max_seconds] are not rest: shorter ones come
    from interleaved exercises or double logging, longer ones from breaks.
    """

    name = "rest"

    def __init__(
        self,
        zone: Optional[tzinfo] = None,
        min_seconds: Optional[float] = None,
        max_seconds: Optional[float] = None,
        min_samples: Optional[int] = None,
        top_n: Optional[int] = None,
    ):
        super().__init__(zone)
        self.min_seconds = settings.REST_MIN_SECONDS if min_seconds is None else min_seconds
        self.max_seconds = settings.REST_MAX_SECONDS if max_seconds is None else max_seconds
        self.min_samples = settings.REST_MIN_SAMPLES_PER_EXERCISE if min_samples is None else min_samples
        self.top_n = settings.REST_TOP_EXERCISES if top_n is None else top_n

        # Every kept gap must land in a band
        if self.min_seconds < REST_BANDS[0][1]:
            raise ValueError(
                f"min_seconds must be >= {REST_BANDS[0][1]}, got {self.min_seconds}"
            )
        if self.max_seconds < self.min_seconds:
            raise ValueError("max_seconds must be >= min_seconds")

    def config_key(self) -> Tuple[float, float, int, int]:
        """Settings that change the report, for memoization."""
        return (self.min_seconds, self.max_seconds, self.min_samples, self.top_n)

    def analyze(
        self,
        sets: Sequence[LoggedSet],
        lookback_days: int = 30,
        now: Optional[datetime] = None,
    ) -> RestReport:
        """
        Compute the rest report.

        Args:
            sets: Set history
            lookback_days: Calendar days to look back from today
            now: Reference time (defaults to current UTC time)

        Returns:
            RestReport; all bands zero and consistency 0 without samples
        """
        start = lookback_start(lookback_days, self._resolve_now(now), self.zone)
        samples = self.extract_samples(self._in_range(sets, start))
        gaps = [s.gap_seconds for s in samples]

        report = RestReport(
            distribution=self._distribution(gaps),
            per_exercise_averages=self._rank_exercises(samples),
            total_samples=len(gaps),
        )

        report.overall_avg_rest_seconds = self._mean(gaps)
        report.consistency_percent = self._consistency(gaps)

        return report

    def extract_samples(self, sets: Sequence[LoggedSet]) -> List[RestSample]:
        """
        Rest samples from consecutive sets of the same user and exercise.

        Exercise names are compared exactly; rest cadence is specific to
        the movement, not the muscle group.
        """
        groups: Dict[Tuple[str, str], List[datetime]] = {}
        for logged in sets:
            groups.setdefault((logged.user_id, logged.exercise_name), []).append(logged.completed_at)

        samples = []
        for (user_id, exercise), stamps in sorted(groups.items()):
            stamps.sort()
            for previous, current in zip(stamps, stamps[1:]):
                gap = (current - previous).total_seconds()
                if self.min_seconds <= gap <= self.max_seconds:
                    samples.append(RestSample(user_id, exercise, gap))
        return samples

    # ========================================
    # Rest-specific helpers
    # ========================================

    def _distribution(self, gaps: Sequence[float]) -> List[RestBand]:
        counts = [0] * len(REST_BANDS)
        for gap in gaps:
            for index, (_, low, high) in enumerate(REST_BANDS):
                if low <= gap < high:
                    counts[index] += 1
                    break
        return [RestBand(band=label, count=counts[i]) for i, (label, _, _) in enumerate(REST_BANDS)]

    def _rank_exercises(self, samples: Sequence[RestSample]) -> List[ExerciseRest]:
        """Exercises with enough samples, longest average rest first."""
        by_exercise: Dict[str, List[float]] = {}
        for sample in samples:
            by_exercise.setdefault(sample.exercise_name, []).append(sample.gap_seconds)

        ranked = [
            ExerciseRest(
                exercise=exercise,
                avg_rest_seconds=math.fsum(gaps) / len(gaps),
                sample_count=len(gaps),
            )
            for exercise, gaps in by_exercise.items()
            if len(gaps) >= self.min_samples
        ]
        ranked.sort(key=lambda e: (-e.avg_rest_seconds, e.exercise))
        return ranked[:self.top_n]

    def _consistency(self, gaps: Sequence[float]) -> int:
        """100 - CV% clamped to 0-100; 0 when dispersion is undefined."""
        if len(gaps) < 2:
            return 0
        mean = self._mean(gaps)
        cv = self._safe_ratio(self._pstdev(gaps), mean)
        if cv is None:
            return 0
        return int(round(self._clamp(100 - cv * 100)))
