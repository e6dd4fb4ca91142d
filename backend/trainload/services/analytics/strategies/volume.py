"""
Volume Strategy - Per-muscle-group training volume over time windows.

Volume metrics:
- Volume load per set (weight × reps, kg-reps)
- Per (muscle group × window) accumulation
- Window totals, heatmap intensity and week-over-week trend
"""
import math
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, List, Optional, Sequence, Tuple

from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.classifier import ExerciseClassifier, MuscleTag
from trainload.services.analytics.strategies.base import AnalyzerStrategy
from trainload.services.analytics.windows import WINDOW_WEEK, TimeWindow, build_windows

ALL_MUSCLES = "all"


@dataclass(frozen=True)
class VolumeCell:
    """Accumulated volume of one muscle group in one window."""
    muscle: MuscleTag
    window: TimeWindow
    volume: float

    @property
    def label(self) -> str:
        return self.window.label


@dataclass(frozen=True)
class VolumeTrend:
    """Change of the last window against the one before it."""
    muscle: str
    change_pct: float
    last_volume: float
    previous_volume: float

    @property
    def value(self) -> float:
        return abs(self.change_pct)

    @property
    def is_positive(self) -> bool:
        return self.change_pct >= 0


@dataclass
class VolumeReport:
    """Volume cells plus the derived figures the dashboard shows."""
    windows: List[TimeWindow]
    cells: List[VolumeCell]
    window_totals: List[float] = field(default_factory=list)
    gross_volume: float = 0.0
    unclassified_volume: float = 0.0
    max_cell_volume: float = 0.0
    trend: Optional[VolumeTrend] = None

    def volume_for(self, muscle: MuscleTag, label: str) -> float:
        """Volume of one (muscle, window label) cell, 0 if absent."""
        for cell in self.cells:
            if cell.muscle == muscle and cell.label == label:
                return cell.volume
        return 0.0

    def intensity(self, cell: VolumeCell) -> int:
        """
        Heatmap level 0-4 relative to the busiest cell.

        0 means no volume at all; 4 means at least 75% of the max.
        """
        if cell.volume <= 0 or self.max_cell_volume <= 0:
            return 0
        ratio = cell.volume / self.max_cell_volume
        if ratio < 0.25:
            return 1
        if ratio < 0.5:
            return 2
        if ratio < 0.75:
            return 3
        return 4


class VolumeAggregator(AnalyzerStrategy):
    """
    Buckets sets into windows and sums volume per muscle tag.

    A multi-tag exercise adds its full volume to every tag; a compound
    lift loads each group at comparable intensity, it is not split.
    """

    name = "volume"

    def __init__(
        self,
        classifier: Optional[ExerciseClassifier] = None,
        zone: Optional[tzinfo] = None,
    ):
        super().__init__(zone)
        self.classifier = classifier if classifier is not None else ExerciseClassifier()

    def aggregate(
        self,
        sets: Sequence[LoggedSet],
        window_count: int,
        window_kind: str = WINDOW_WEEK,
        now: Optional[datetime] = None,
    ) -> List[VolumeCell]:
        """
        Compute volume cells.

        Args:
            sets: Set history
            window_count: Number of windows ending at now
            window_kind: "day" or "week"
            now: Reference time (defaults to current UTC time)

        Returns:
            One cell per (window, muscle tag), oldest window first,
            tags in vocabulary order. Zero cells included.
        """
        windows = build_windows(window_count, window_kind, self._resolve_now(now), self.zone)
        cells, _, _ = self._accumulate(sets, windows)
        return cells

    def analyze(
        self,
        sets: Sequence[LoggedSet],
        window_count: int,
        window_kind: str = WINDOW_WEEK,
        now: Optional[datetime] = None,
        muscle: str = ALL_MUSCLES,
    ) -> VolumeReport:
        """
        Compute cells with totals, heatmap scale and trend.

        Args:
            sets: Set history
            window_count: Number of windows ending at now
            window_kind: "day" or "week"
            now: Reference time
            muscle: Muscle tag for the trend, or "all" for window totals

        Returns:
            VolumeReport
        """
        if muscle != ALL_MUSCLES:
            muscle = MuscleTag(muscle).value

        windows = build_windows(window_count, window_kind, self._resolve_now(now), self.zone)
        cells, gross, unclassified = self._accumulate(sets, windows)

        totals = []
        for index in range(len(windows)):
            row = cells[index * len(MuscleTag):(index + 1) * len(MuscleTag)]
            totals.append(math.fsum(c.volume for c in row))

        report = VolumeReport(
            windows=windows,
            cells=cells,
            window_totals=totals,
            gross_volume=gross,
            unclassified_volume=unclassified,
            max_cell_volume=max((c.volume for c in cells), default=0.0),
        )
        report.trend = self._compute_trend(report, muscle)
        return report

    # ========================================
    # Volume-specific helpers
    # ========================================

    def _accumulate(
        self,
        sets: Sequence[LoggedSet],
        windows: List[TimeWindow],
    ) -> Tuple[List[VolumeCell], float, float]:
        """Returns (cells, gross volume in range, unclassified volume in range)."""
        starts = [w.start for w in windows]
        contributions: Dict[Tuple[int, MuscleTag], List[float]] = {}
        gross: List[float] = []
        unclassified: List[float] = []

        for logged in sets:
            volume = logged.volume
            if volume <= 0:
                continue

            index = bisect_right(starts, logged.completed_at) - 1
            if index < 0 or logged.completed_at >= windows[index].end:
                continue

            gross.append(volume)
            tags = self.classifier.classify(logged.exercise_name)
            if not tags:
                unclassified.append(volume)
                continue

            for tag in tags:
                contributions.setdefault((index, tag), []).append(volume)

        # fsum keeps the totals independent of input order
        cells = [
            VolumeCell(
                muscle=tag,
                window=window,
                volume=math.fsum(contributions.get((index, tag), ())),
            )
            for index, window in enumerate(windows)
            for tag in MuscleTag
        ]
        return cells, math.fsum(gross), math.fsum(unclassified)

    def _compute_trend(self, report: VolumeReport, muscle: str) -> VolumeTrend:
        """Percent change of the last window vs the previous one."""
        if muscle == ALL_MUSCLES:
            series = report.window_totals
        else:
            tag = MuscleTag(muscle)
            series = [report.volume_for(tag, w.label) for w in report.windows]

        if len(series) < 2:
            last = series[-1] if series else 0.0
            return VolumeTrend(muscle=muscle, change_pct=0.0, last_volume=last, previous_volume=0.0)

        last, previous = series[-1], series[-2]
        ratio = self._safe_ratio(last - previous, previous)
        return VolumeTrend(
            muscle=muscle,
            change_pct=0.0 if ratio is None else ratio * 100,
            last_volume=last,
            previous_volume=previous,
        )
