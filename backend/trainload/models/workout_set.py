"""
Workout Set database model.

One row per logged exercise set. Written by the workout-logging flow,
read-only for the analytics engine.
"""
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Float, Integer, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from trainload.core.database import Base


class WorkoutSet(Base):
    """Logged exercise set stored in database."""

    __tablename__ = "workout_sets"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True
    )
    exercise_name: Mapped[str] = mapped_column(String(200), nullable=False)
    set_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rpe: Mapped[float | None] = mapped_column(Float, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False
    )

    __table_args__ = (
        Index("ix_workout_sets_user_completed", "user_id", "completed_at"),
    )

    def to_dict(self) -> dict:
        """Convert to the raw row shape consumed by the set adapter."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "exercise_name": self.exercise_name,
            "set_number": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "rpe": self.rpe,
            "completed_at": self.completed_at,
        }
