"""
Set Row Adapter - Normalize raw set log rows into LoggedSet facts.

Supported row shapes:
- Database / PostgREST rows (snake_case: exercise_name, completed_at)
- Client payloads (camelCase: exerciseName, completedAt)
- ORM objects exposing to_dict()
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from trainload.core.logging import get_logger

logger = get_logger(__name__)

RPE_MIN = 1.0
RPE_MAX = 10.0


@dataclass(frozen=True)
class LoggedSet:
    """
    One recorded exercise set.

    Immutable fact; every analyzer treats a sequence of these as
    read-only history. Missing numeric values are None and contribute
    nothing to the metrics that need them.
    """
    user_id: str
    exercise_name: str
    completed_at: datetime  # always timezone-aware
    weight: Optional[float] = None
    reps: Optional[int] = None
    rpe: Optional[float] = None
    set_number: Optional[int] = None

    @property
    def volume(self) -> float:
        """Training volume in kg-reps (0 when weight or reps is missing)."""
        if not self.weight or not self.reps:
            return 0.0
        return float(self.weight) * int(self.reps)

    def has_rpe(self) -> bool:
        """Check if an RPE value was logged."""
        return self.rpe is not None


# Accepted spellings per field, first hit wins
_FIELD_ALIASES: Dict[str, tuple] = {
    "user_id": ("user_id", "userId"),
    "exercise_name": ("exercise_name", "exerciseName", "exercise"),
    "completed_at": ("completed_at", "completedAt", "timestamp"),
    "weight": ("weight", "weight_kg", "weightKg"),
    "reps": ("reps",),
    "rpe": ("rpe",),
    "set_number": ("set_number", "setNumber"),
}


class SetRowAdapter:
    """
    Adapter from raw set rows to LoggedSet.

    Rows that cannot form a set at all (no exercise name, no timestamp)
    are skipped. Out-of-range numbers are normalized to None instead of
    failing the whole batch.
    """

    def normalize(self, raw: Any, user_id: Optional[str] = None) -> Optional[LoggedSet]:
        """
        Normalize one raw row.

        Args:
            raw: Row dict or ORM object with to_dict()
            user_id: Fallback user id when the row does not carry one

        Returns:
            LoggedSet, or None if the row is unusable
        """
        row = raw.to_dict() if hasattr(raw, "to_dict") else raw

        exercise_name = self._pick(row, "exercise_name")
        completed_at = self._parse_timestamp(self._pick(row, "completed_at"))

        if not exercise_name or completed_at is None:
            logger.warning(
                "Skipping unusable set row",
                has_exercise=bool(exercise_name),
                has_timestamp=completed_at is not None,
            )
            return None

        row_user = self._pick(row, "user_id")
        return LoggedSet(
            user_id=str(row_user if row_user is not None else user_id or ""),
            exercise_name=str(exercise_name).strip(),
            completed_at=completed_at,
            weight=self._non_negative_float(self._pick(row, "weight")),
            reps=self._non_negative_int(self._pick(row, "reps")),
            rpe=self._rpe(self._pick(row, "rpe")),
            set_number=self._non_negative_int(self._pick(row, "set_number")),
        )

    def normalize_many(
        self,
        rows: Iterable[Any],
        user_id: Optional[str] = None
    ) -> List[LoggedSet]:
        """Normalize a batch, dropping unusable rows."""
        sets = []
        skipped = 0
        for raw in rows:
            logged = self.normalize(raw, user_id=user_id)
            if logged is None:
                skipped += 1
                continue
            sets.append(logged)

        if skipped:
            logger.info("Dropped unusable set rows", skipped=skipped, kept=len(sets))

        return sets

    def _pick(self, row: Dict[str, Any], field_name: str) -> Any:
        for key in _FIELD_ALIASES[field_name]:
            if key in row and row[key] is not None:
                return row[key]
        return None

    def _parse_timestamp(self, value: Any) -> Optional[datetime]:
        """Parse datetime or ISO string; naive values are taken as UTC."""
        if value is None:
            return None

        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                logger.debug("Unparseable timestamp", value=value)
                return None
        else:
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def _to_float(self, value: Any) -> Optional[float]:
        if value is None or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None

    def _non_negative_float(self, value: Any) -> Optional[float]:
        number = self._to_float(value)
        if number is None or number < 0:
            return None
        return number

    def _non_negative_int(self, value: Any) -> Optional[int]:
        number = self._to_float(value)
        if number is None or number < 0:
            return None
        return int(number)

    def _rpe(self, value: Any) -> Optional[float]:
        number = self._to_float(value)
        if number is None or not RPE_MIN <= number <= RPE_MAX:
            return None
        return number
