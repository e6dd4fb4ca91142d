"""
Tests for raw set row normalization.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

from trainload.services.analytics.adapter import LoggedSet, SetRowAdapter


class TestNormalize:

    def setup_method(self):
        self.adapter = SetRowAdapter()

    def test_snake_case_row(self):
        logged = self.adapter.normalize({
            "user_id": "u1",
            "exercise_name": " Bench Press ",
            "completed_at": "2024-06-12T10:00:00Z",
            "weight": "82.5",
            "reps": 5,
            "rpe": 8,
            "set_number": 2,
        })

        assert logged == LoggedSet(
            user_id="u1",
            exercise_name="Bench Press",
            completed_at=datetime(2024, 6, 12, 10, 0, tzinfo=timezone.utc),
            weight=82.5,
            reps=5,
            rpe=8.0,
            set_number=2,
        )

    def test_camel_case_row_with_fallback_user(self):
        logged = self.adapter.normalize(
            {"exerciseName": "Squat", "completedAt": "2024-06-12T10:00:00+02:00", "weight": 100, "reps": 3},
            user_id="u2",
        )

        assert logged.user_id == "u2"
        assert logged.completed_at.utcoffset().total_seconds() == 7200
        assert logged.volume == 300

    def test_naive_timestamp_is_utc(self):
        logged = self.adapter.normalize({"exercise_name": "Squat", "completed_at": datetime(2024, 6, 12, 9)})
        assert logged.completed_at.tzinfo == timezone.utc

    def test_out_of_range_values_become_none(self):
        logged = self.adapter.normalize({
            "exercise_name": "Squat",
            "completed_at": "2024-06-12T10:00:00",
            "weight": -20,
            "reps": "abc",
            "rpe": 11,
        })

        assert logged.weight is None
        assert logged.reps is None
        assert logged.rpe is None
        assert logged.volume == 0
        assert not logged.has_rpe()

    def test_non_finite_rejected(self):
        logged = self.adapter.normalize({
            "exercise_name": "Squat",
            "completed_at": "2024-06-12T10:00:00",
            "weight": float("nan"),
            "rpe": float("inf"),
        })
        assert logged.weight is None
        assert logged.rpe is None

    def test_unusable_rows_skipped(self):
        assert self.adapter.normalize({"completed_at": "2024-06-12T10:00:00"}) is None
        assert self.adapter.normalize({"exercise_name": "Squat"}) is None
        assert self.adapter.normalize({"exercise_name": "Squat", "completed_at": "yesterday"}) is None

    def test_orm_object(self):
        row = MagicMock()
        row.to_dict.return_value = {
            "user_id": "u3",
            "exercise_name": "Deadlift",
            "completed_at": datetime(2024, 6, 12, 9, tzinfo=timezone.utc),
            "weight": 180.0,
            "reps": 2,
            "rpe": None,
        }
        logged = self.adapter.normalize(row)

        assert logged.exercise_name == "Deadlift"
        assert logged.volume == 360


class TestNormalizeMany:

    def test_drops_unusable(self):
        rows = [
            {"exercise_name": "Squat", "completed_at": "2024-06-12T10:00:00Z"},
            {"exercise_name": "", "completed_at": "2024-06-12T10:02:00Z"},
            {"exercise_name": "Squat", "completed_at": "2024-06-12T10:04:00Z"},
        ]
        sets = SetRowAdapter().normalize_many(rows, user_id="u1")

        assert len(sets) == 2
        assert all(s.user_id == "u1" for s in sets)
