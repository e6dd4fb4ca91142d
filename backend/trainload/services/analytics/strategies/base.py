"""
Base Strategy - Abstract interface for set-history analyzers.
"""
import math
from abc import ABC, abstractmethod
from datetime import datetime, tzinfo
from typing import Any, List, Optional, Sequence

from trainload.core.config import settings
from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.windows import ensure_aware, resolve_zone


class AnalyzerStrategy(ABC):
    """
    Abstract base class for training load analyzers.

    Analyzers are pure: they read an immutable sequence of LoggedSet
    and return a fresh report. They hold configuration only, so one
    instance can serve concurrent calls.
    """

    name: str = "unknown"

    def __init__(self, zone: Optional[tzinfo] = None):
        self.zone = zone if zone is not None else resolve_zone(settings.ANALYTICS_TIMEZONE)

    @abstractmethod
    def analyze(self, sets: Sequence[LoggedSet], *args: Any, **kwargs: Any) -> Any:
        """
        Compute the analyzer's report.

        Args:
            sets: Set history, any order

        Returns:
            Report object
        """
        pass

    # ========================================
    # Shared Helper Methods
    # ========================================

    def _resolve_now(self, now: Optional[datetime]) -> datetime:
        """Reference time; naive values are taken as UTC."""
        return ensure_aware(now)

    def _in_range(
        self,
        sets: Sequence[LoggedSet],
        start: datetime,
        end: Optional[datetime] = None
    ) -> List[LoggedSet]:
        """Sets with start <= completed_at (< end when given)."""
        return [
            s for s in sets
            if s.completed_at >= start and (end is None or s.completed_at < end)
        ]

    def _mean(self, values: Sequence[float]) -> Optional[float]:
        """Arithmetic mean, None for an empty sequence."""
        if not values:
            return None
        return sum(values) / len(values)

    def _pstdev(self, values: Sequence[float]) -> Optional[float]:
        """Population standard deviation, None for an empty sequence."""
        mean = self._mean(values)
        if mean is None:
            return None
        return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))

    def _clamp(self, value: float, low: float = 0.0, high: float = 100.0) -> float:
        return max(low, min(high, value))

    def _safe_ratio(self, numerator: float, denominator: float) -> Optional[float]:
        """numerator / denominator, None when the denominator is 0."""
        if not denominator:
            return None
        return numerator / denominator
