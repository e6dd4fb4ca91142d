"""
Training Load Calculator - Main engine for athlete load analytics.

Orchestrates:
- One read of the set log per request
- Fan-out of the analyzers over the same immutable snapshot
- Memoization of finished reports
"""
import asyncio
from dataclasses import dataclass
from datetime import datetime, tzinfo
from threading import Lock
from typing import Any, Callable, Hashable, Optional, Sequence, Tuple

from cachetools import LRUCache

from trainload.core.config import settings
from trainload.core.logging import AnalysisTracker, get_logger
from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.classifier import ExerciseClassifier
from trainload.services.analytics.store import SetLogStore
from trainload.services.analytics.strategies import (
    FatigueAnalyzer,
    FatigueReport,
    RestIntervalAnalyzer,
    RestReport,
    VolumeAggregator,
    VolumeReport,
)
from trainload.services.analytics.strategies.volume import ALL_MUSCLES
from trainload.services.analytics.windows import (
    WINDOW_DAY,
    WINDOW_WEEK,
    build_windows,
    ensure_aware,
    local_day,
    lookback_start,
    resolve_zone,
)

logger = get_logger(__name__)


@dataclass
class TrainingLoadSummary:
    """All dashboard reports computed from one set log snapshot."""
    fatigue: FatigueReport
    volume: VolumeReport
    heatmap: VolumeReport
    rest: RestReport


class ReportCache:
    """
    Bounded LRU of finished reports.

    Keys include the newest completed_at and the set count, so a new
    logged set produces a new key instead of needing invalidation.
    """

    def __init__(self, max_size: int = 128):
        self.max_size = max_size
        self._items = LRUCache(maxsize=max(max_size, 1))
        # Reports are filled from worker threads during summary()
        self._lock = Lock()

    def get(self, key: Hashable) -> Any:
        with self._lock:
            return self._items.get(key)

    def put(self, key: Hashable, value: Any) -> None:
        if self.max_size <= 0:
            return
        with self._lock:
            self._items[key] = value

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


_report_cache = ReportCache(settings.ANALYTICS_CACHE_SIZE)


class TrainingLoadCalculator:
    """
    Main training load analytics engine.

    Usage:
        calculator = TrainingLoadCalculator(store)
        fatigue = await calculator.fatigue_report(user_id, lookback_days=30)
        summary = await calculator.summary(user_id)
    """

    def __init__(
        self,
        store: SetLogStore,
        classifier: Optional[ExerciseClassifier] = None,
        zone: Optional[tzinfo] = None,
        cache: Optional[ReportCache] = None,
    ):
        self.store = store
        self.zone = zone if zone is not None else resolve_zone(settings.ANALYTICS_TIMEZONE)
        self.classifier = classifier or ExerciseClassifier(match_mode=settings.CLASSIFIER_MATCH_MODE)
        self.cache = cache if cache is not None else _report_cache
        self.tracker = AnalysisTracker(logger)

        # Initialize analyzers
        self.fatigue = FatigueAnalyzer(zone=self.zone)
        self.volume = VolumeAggregator(classifier=self.classifier, zone=self.zone)
        self.rest = RestIntervalAnalyzer(zone=self.zone)

    async def fatigue_report(
        self,
        user_id: str,
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> FatigueReport:
        """
        Fetch RPE sets and compute the fatigue report.

        Args:
            user_id: Athlete ID
            lookback_days: Days of history (defaults to FATIGUE_LOOKBACK_DAYS)
            now: Reference time

        Returns:
            FatigueReport
        """
        now = ensure_aware(now)
        days = settings.FATIGUE_LOOKBACK_DAYS if lookback_days is None else lookback_days
        sets = await self._fetch(user_id, lookback_start(days, now, self.zone), now, rpe_only=True)

        return self._memoized(
            (user_id, "fatigue", days), sets, now,
            lambda: self._run(self.fatigue, user_id, sets, days, now=now),
        )

    async def volume_report(
        self,
        user_id: str,
        window_count: Optional[int] = None,
        window_kind: str = WINDOW_WEEK,
        muscle: str = ALL_MUSCLES,
        now: Optional[datetime] = None,
    ) -> VolumeReport:
        """
        Fetch sets and compute per-muscle volume cells.

        Args:
            user_id: Athlete ID
            window_count: Number of windows (defaults to VOLUME_WINDOW_COUNT)
            window_kind: "day" or "week"
            muscle: Muscle tag for the trend, or "all"
            now: Reference time

        Returns:
            VolumeReport
        """
        now = ensure_aware(now)
        count = settings.VOLUME_WINDOW_COUNT if window_count is None else window_count
        windows = build_windows(count, window_kind, now, self.zone)
        sets = await self._fetch(user_id, windows[0].start, now, end=windows[-1].end)

        return self._memoized(
            (user_id, "volume", count, window_kind, muscle), sets, now,
            lambda: self._run(self.volume, user_id, sets, count, window_kind, now=now, muscle=muscle),
        )

    async def rest_report(
        self,
        user_id: str,
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> RestReport:
        """
        Fetch sets and compute the rest interval report.

        Args:
            user_id: Athlete ID
            lookback_days: Days of history (defaults to REST_LOOKBACK_DAYS)
            now: Reference time

        Returns:
            RestReport
        """
        now = ensure_aware(now)
        days = settings.REST_LOOKBACK_DAYS if lookback_days is None else lookback_days
        sets = await self._fetch(user_id, lookback_start(days, now, self.zone), now)

        return self._memoized(
            (user_id, "rest", days, self.rest.config_key()), sets, now,
            lambda: self._run(self.rest, user_id, sets, days, now=now),
        )

    async def summary(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> TrainingLoadSummary:
        """
        Compute every dashboard report from a single fetch.

        The analyzers share one immutable snapshot and run concurrently.

        Args:
            user_id: Athlete ID
            now: Reference time

        Returns:
            TrainingLoadSummary
        """
        now = ensure_aware(now)
        volume_windows = build_windows(settings.VOLUME_WINDOW_COUNT, WINDOW_WEEK, now, self.zone)
        heatmap_windows = build_windows(settings.HEATMAP_WINDOW_COUNT, WINDOW_WEEK, now, self.zone)
        start = min(
            lookback_start(settings.FATIGUE_LOOKBACK_DAYS, now, self.zone),
            lookback_start(settings.REST_LOOKBACK_DAYS, now, self.zone),
            volume_windows[0].start,
            heatmap_windows[0].start,
        )
        sets = await self._fetch(user_id, start, now, end=volume_windows[-1].end)

        fatigue, volume, heatmap, rest = await asyncio.gather(
            asyncio.to_thread(
                self._run, self.fatigue, user_id, sets, settings.FATIGUE_LOOKBACK_DAYS, now=now
            ),
            asyncio.to_thread(
                self._run, self.volume, user_id, sets,
                settings.VOLUME_WINDOW_COUNT, WINDOW_WEEK, now=now,
            ),
            asyncio.to_thread(
                self._run, self.volume, user_id, sets,
                settings.HEATMAP_WINDOW_COUNT, WINDOW_WEEK, now=now,
            ),
            asyncio.to_thread(
                self._run, self.rest, user_id, sets, settings.REST_LOOKBACK_DAYS, now=now
            ),
        )

        return TrainingLoadSummary(fatigue=fatigue, volume=volume, heatmap=heatmap, rest=rest)

    def compute_only(
        self,
        sets: Sequence[LoggedSet],
        now: Optional[datetime] = None,
    ) -> TrainingLoadSummary:
        """
        Compute every report over sets already in hand, without fetching.

        Useful for previews and imports.
        """
        now = ensure_aware(now)
        snapshot = tuple(sets)
        return TrainingLoadSummary(
            fatigue=self.fatigue.analyze(snapshot, settings.FATIGUE_LOOKBACK_DAYS, now=now),
            volume=self.volume.analyze(snapshot, settings.VOLUME_WINDOW_COUNT, WINDOW_WEEK, now=now),
            heatmap=self.volume.analyze(snapshot, settings.HEATMAP_WINDOW_COUNT, WINDOW_WEEK, now=now),
            rest=self.rest.analyze(snapshot, settings.REST_LOOKBACK_DAYS, now=now),
        )

    async def _fetch(
        self,
        user_id: str,
        start: datetime,
        now: datetime,
        end: Optional[datetime] = None,
        rpe_only: bool = False,
    ) -> Tuple[LoggedSet, ...]:
        """Read the set log once; the tuple is the shared snapshot."""
        if end is None:
            # Through the end of today, in the analytics zone
            end = build_windows(1, WINDOW_DAY, now, self.zone)[0].end

        sets = await self.store.get_sets(user_id, start, end, rpe_only=rpe_only)

        logger.debug(
            "Fetched set log",
            user_id=user_id,
            backend=self.store.backend,
            sets=len(sets),
            rpe_only=rpe_only,
        )
        return tuple(sets)

    def _run(self, analyzer: Any, user_id: str, sets: Sequence[LoggedSet], *args: Any, **kwargs: Any) -> Any:
        """Run one analyzer under the tracker."""
        with self.tracker.track(analyzer.name, user_id=user_id, input_sets=len(sets)) as run:
            report = analyzer.analyze(sets, *args, **kwargs)
            run.set_result(self._output_size(report))
        return report

    def _output_size(self, report: Any) -> int:
        if isinstance(report, FatigueReport):
            return len(report.chart_series)
        if isinstance(report, VolumeReport):
            return len(report.cells)
        if isinstance(report, RestReport):
            return report.total_samples
        return 0

    def _memoized(
        self,
        report_key: tuple,
        sets: Sequence[LoggedSet],
        now: datetime,
        compute: Callable[[], Any],
    ) -> Any:
        """Reuse a report computed for the same data and the same day."""
        newest = max((s.completed_at for s in sets), default=None)
        key = report_key + (
            self.zone,
            local_day(now, self.zone),
            newest,
            len(sets),
            self.classifier.match_mode,
            self.classifier.muscle_map,
        )

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Using cached report", report=report_key[1], user_id=report_key[0])
            return cached

        report = compute()
        self.cache.put(key, report)
        return report
