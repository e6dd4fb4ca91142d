"""
Shared fixtures for the training load tests.
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from trainload.services.analytics.adapter import LoggedSet
from trainload.services.analytics.store import SetLogStore

USER_ID = "6f1c2d3e-4b5a-4c7d-8e9f-0a1b2c3d4e5f"

# Wednesday; the current week window starts Monday 2024-06-10
NOW = datetime(2024, 6, 12, 12, 0, tzinfo=timezone.utc)


def _make_set(
    exercise: str = "Bench Press",
    days_ago: int = 0,
    seconds: float = 0,
    weight: Optional[float] = 100.0,
    reps: Optional[int] = 5,
    rpe: Optional[float] = None,
    user_id: str = USER_ID,
    now: datetime = NOW,
) -> LoggedSet:
    return LoggedSet(
        user_id=user_id,
        exercise_name=exercise,
        completed_at=now - timedelta(days=days_ago) + timedelta(seconds=seconds),
        weight=weight,
        reps=reps,
        rpe=rpe,
    )


class FakeSetLogStore(SetLogStore):
    """In-memory store that honours the query contract and records calls."""

    backend = "fake"

    def __init__(self, sets: List[LoggedSet], error: Optional[Exception] = None):
        self.sets = list(sets)
        self.error = error
        self.calls = []

    async def get_sets(self, user_id, start, end, rpe_only=False):
        self.calls.append({"user_id": user_id, "start": start, "end": end, "rpe_only": rpe_only})
        if self.error is not None:
            raise self.error
        rows = [
            s for s in self.sets
            if s.user_id == user_id
            and start <= s.completed_at < end
            and (not rpe_only or s.rpe is not None)
        ]
        return sorted(rows, key=lambda s: s.completed_at)


@pytest.fixture
def make_set():
    """Factory for LoggedSet relative to NOW."""
    return _make_set


@pytest.fixture
def fake_store():
    """Factory for an in-memory set log store."""
    return FakeSetLogStore
