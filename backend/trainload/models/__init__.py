from trainload.models.workout_set import WorkoutSet

__all__ = [
    "WorkoutSet",
]
