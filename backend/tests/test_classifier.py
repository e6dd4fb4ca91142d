"""
Tests for exercise name classification.
"""
import pytest

from trainload.services.analytics.classifier import (
    DEFAULT_MUSCLE_MAP,
    ExerciseClassifier,
    MatchMode,
    MuscleMap,
    MuscleTag,
)


class TestLongestMatch:
    """Default mode: the longest contained pattern wins."""

    def setup_method(self):
        self.classifier = ExerciseClassifier()

    def test_specific_pattern_beats_general(self):
        assert self.classifier.match("Incline Bench Press") == "incline bench press"
        assert self.classifier.match("Front Squat") == "front squat"

    def test_romanian_deadlift_is_hamstring_dominant(self):
        tags = self.classifier.classify("Romanian Deadlift")
        assert tags == frozenset({MuscleTag.HAMSTRINGS, MuscleTag.GLUTES, MuscleTag.BACK})

    def test_front_squat_tags(self):
        assert self.classifier.classify("front squat") == frozenset({MuscleTag.QUADS, MuscleTag.CORE})

    def test_case_insensitive_substring(self):
        assert self.classifier.classify("BARBELL BENCH PRESS (paused)") == frozenset(
            {MuscleTag.CHEST, MuscleTag.TRICEPS, MuscleTag.SHOULDERS}
        )

    def test_unmapped_is_empty(self):
        assert self.classifier.classify("Farmer's Walk") == frozenset()
        assert not self.classifier.is_mapped("Farmer's Walk")

    def test_empty_name(self):
        assert self.classifier.match("") is None
        assert self.classifier.classify(None) == frozenset()

    def test_tie_keeps_earlier_entry(self):
        muscle_map = MuscleMap([("row a", ["back"]), ("a row", ["biceps"])])
        classifier = ExerciseClassifier(muscle_map)
        assert classifier.match("a row a") == "row a"


class TestFirstMatch:
    """Table order decides in first-match mode."""

    def test_general_pattern_wins_when_listed_first(self):
        classifier = ExerciseClassifier(match_mode=MatchMode.FIRST.value)
        assert classifier.match("Incline Bench Press") == "bench press"
        assert classifier.match("Romanian Deadlift") == "deadlift"

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            ExerciseClassifier(match_mode="fuzzy")


class TestMuscleMap:
    """Tests for the immutable pattern table."""

    def test_patterns_are_casefolded(self):
        muscle_map = MuscleMap.from_dict({"  Cable Fly ": ["chest"]})
        assert muscle_map.patterns == ("cable fly",)

    def test_unknown_tag_rejected(self):
        with pytest.raises(ValueError):
            MuscleMap.from_dict({"neck curl": ["neck"]})

    def test_empty_pattern_rejected(self):
        with pytest.raises(ValueError):
            MuscleMap.from_dict({"   ": ["core"]})

    def test_duplicate_replaces_in_place(self):
        muscle_map = MuscleMap([("plank", ["core"]), ("squat", ["quads"]), ("Plank", ["shoulders"])])
        assert muscle_map.patterns == ("plank", "squat")
        assert dict(muscle_map)["plank"] == (MuscleTag.SHOULDERS,)

    def test_extended_leaves_original_untouched(self):
        size = len(DEFAULT_MUSCLE_MAP)
        extended = DEFAULT_MUSCLE_MAP.extended({"sled push": ["quads", "glutes"]})

        assert len(DEFAULT_MUSCLE_MAP) == size
        assert len(extended) == size + 1
        assert ExerciseClassifier(extended).classify("Sled Push") == frozenset(
            {MuscleTag.QUADS, MuscleTag.GLUTES}
        )
        assert not ExerciseClassifier().is_mapped("Sled Push")

    def test_equality_and_hash(self):
        a = MuscleMap.from_dict({"plank": ["core"]})
        b = MuscleMap.from_dict({"PLANK": ["core"]})
        assert a == b
        assert hash(a) == hash(b)
        assert a != DEFAULT_MUSCLE_MAP
