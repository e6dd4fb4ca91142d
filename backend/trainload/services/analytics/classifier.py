"""
Exercise Classifier - Map free-text exercise names to muscle groups.

Matching is plain case-folded substring containment against an ordered
pattern table. Each exercise is attributed to at most one table entry so a
compound name never counts twice.
"""
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, Mapping, Optional, Sequence, Tuple


class MuscleTag(str, Enum):
    """Coarse muscle-group vocabulary. Declaration order is output order."""
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    QUADS = "quads"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"


class MatchMode(str, Enum):
    """Which entry wins when several patterns are contained in a name."""
    LONGEST = "longest"
    FIRST = "first"


class MuscleMap:
    """
    Immutable ordered pattern table: pattern -> muscle tags.

    Build a new table with extended() instead of mutating a shared one.
    """

    def __init__(self, entries: Iterable[Tuple[str, Sequence[str]]]):
        table = []
        seen = {}
        for pattern, tags in entries:
            key = pattern.strip().casefold()
            if not key:
                raise ValueError("Empty exercise pattern")
            parsed = tuple(MuscleTag(tag) for tag in tags)
            if key in seen:
                # Later definition replaces the earlier one in place
                table[seen[key]] = (key, parsed)
            else:
                seen[key] = len(table)
                table.append((key, parsed))
        self._entries: Tuple[Tuple[str, Tuple[MuscleTag, ...]], ...] = tuple(table)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Sequence[str]]) -> "MuscleMap":
        """Build from an insertion-ordered mapping."""
        return cls(mapping.items())

    def extended(self, mapping: Mapping[str, Sequence[str]]) -> "MuscleMap":
        """Return a new table with entries added or overridden."""
        return MuscleMap(
            list((p, [t.value for t in tags]) for p, tags in self._entries)
            + list(mapping.items())
        )

    def __iter__(self) -> Iterator[Tuple[str, Tuple[MuscleTag, ...]]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def patterns(self) -> Tuple[str, ...]:
        return tuple(p for p, _ in self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MuscleMap):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)


# Common exercises; general patterns come before specific ones,
# so FIRST mode reproduces the historical dashboard output
DEFAULT_MUSCLE_MAP = MuscleMap.from_dict({
    # Chest
    "bench press": ["chest", "triceps", "shoulders"],
    "incline bench press": ["chest", "triceps", "shoulders"],
    "dumbbell press": ["chest", "triceps", "shoulders"],
    "chest fly": ["chest"],
    "push-up": ["chest", "triceps", "shoulders"],

    # Back
    "deadlift": ["back", "glutes", "hamstrings"],
    "pull-up": ["back", "biceps"],
    "lat pulldown": ["back", "biceps"],
    "barbell row": ["back", "biceps"],
    "dumbbell row": ["back", "biceps"],
    "cable row": ["back", "biceps"],

    # Shoulders
    "overhead press": ["shoulders", "triceps"],
    "military press": ["shoulders", "triceps"],
    "lateral raise": ["shoulders"],
    "front raise": ["shoulders"],
    "face pull": ["shoulders", "back"],

    # Arms
    "bicep curl": ["biceps"],
    "hammer curl": ["biceps"],
    "tricep extension": ["triceps"],
    "tricep pushdown": ["triceps"],
    "skull crusher": ["triceps"],

    # Legs
    "squat": ["quads", "glutes", "hamstrings"],
    "back squat": ["quads", "glutes", "hamstrings"],
    "front squat": ["quads", "core"],
    "leg press": ["quads", "glutes"],
    "leg extension": ["quads"],
    "leg curl": ["hamstrings"],
    "romanian deadlift": ["hamstrings", "glutes", "back"],
    "hip thrust": ["glutes", "hamstrings"],
    "lunge": ["quads", "glutes"],
    "calf raise": ["calves"],

    # Core
    "plank": ["core"],
    "crunch": ["core"],
    "russian twist": ["core"],
    "ab wheel": ["core"],
})


class ExerciseClassifier:
    """
    Classify exercise names into muscle tags.

    Usage:
        classifier = ExerciseClassifier()
        classifier.classify("Barbell Bench Press")
        # frozenset({MuscleTag.CHEST, MuscleTag.TRICEPS, MuscleTag.SHOULDERS})
    """

    def __init__(
        self,
        muscle_map: Optional[MuscleMap] = None,
        match_mode: str = MatchMode.LONGEST.value,
    ):
        self.muscle_map = muscle_map if muscle_map is not None else DEFAULT_MUSCLE_MAP
        self.match_mode = MatchMode(match_mode)
        self._tags = {pattern: tags for pattern, tags in self.muscle_map}

    def match(self, exercise_name: str) -> Optional[str]:
        """
        Find the table pattern an exercise is attributed to.

        Args:
            exercise_name: Free-text exercise name

        Returns:
            Winning pattern, or None when nothing matches
        """
        key = (exercise_name or "").casefold()

        best: Optional[str] = None
        for pattern, _ in self.muscle_map:
            if pattern not in key:
                continue
            if self.match_mode is MatchMode.FIRST:
                best = pattern
                break
            # Strictly longer only, so ties keep the earlier entry
            if best is None or len(pattern) > len(best):
                best = pattern

        return best

    def classify(self, exercise_name: str) -> FrozenSet[MuscleTag]:
        """Return the muscle tags for an exercise (empty if unmapped)."""
        pattern = self.match(exercise_name)
        if pattern is None:
            return frozenset()
        return frozenset(self._tags[pattern])

    def is_mapped(self, exercise_name: str) -> bool:
        """Check if an exercise matches any pattern."""
        return self.match(exercise_name) is not None
