"""
Tests for report assembly (dashboard dicts and text digest).
"""
from trainload.services.analytics.calculator import TrainingLoadSummary
from trainload.services.analytics.report import ReportAssembler
from trainload.services.analytics.strategies import FatigueAnalyzer, RestIntervalAnalyzer, VolumeAggregator

from conftest import NOW


def _summary(sets):
    volume = VolumeAggregator()
    return TrainingLoadSummary(
        fatigue=FatigueAnalyzer().analyze(sets, now=NOW),
        volume=volume.analyze(sets, 8, now=NOW),
        heatmap=volume.analyze(sets, 4, now=NOW),
        rest=RestIntervalAnalyzer(min_samples=2).analyze(sets, now=NOW),
    )


class TestFatigueDict:

    def test_rounding_and_keys(self, make_set):
        sets = [make_set(rpe=7), make_set(seconds=100, rpe=7), make_set(seconds=200, rpe=8)]
        payload = ReportAssembler().fatigue_to_dict(FatigueAnalyzer().analyze(sets, now=NOW))

        assert payload["recentAvg"] == 7.33
        assert payload["chartSeries"] == [{
            "date": "2024-06-12",
            "avgRpe": 7.3,
            "rollingAvg": 7.3,
            "setCount": 3,
            "volume": 1500,
        }]
        assert payload["priorAvg"] is None
        assert payload["weeklyTrend"] is None
        assert payload["loadState"] == "optimal"
        assert payload["fatigueScore"] == 27
        assert payload["dataStatus"] == "ok"

    def test_empty(self):
        payload = ReportAssembler().fatigue_to_dict(FatigueAnalyzer().analyze([], now=NOW))

        assert payload["chartSeries"] == []
        assert payload["fatigueScore"] == 100
        assert payload["dataStatus"] == "insufficient_data"
        assert payload["recentAvg"] is None


class TestVolumeDict:

    def test_cells_and_trend(self, make_set):
        sets = [make_set("Squat", weight=100, reps=5), make_set("Plank", days_ago=7, weight=10, reps=10)]
        payload = ReportAssembler().volume_to_dict(VolumeAggregator().analyze(sets, 2, now=NOW))

        assert [w["label"] for w in payload["windows"]] == ["2024-06-03", "2024-06-10"]
        assert [w["total"] for w in payload["windows"]] == [100, 1500]
        quads = [c for c in payload["cells"] if c["muscle"] == "quads"]
        assert quads[-1] == {"muscle": "quads", "window": "2024-06-10", "volume": 500, "intensity": 4}
        core = [c for c in payload["cells"] if c["muscle"] == "core"]
        assert core[0]["intensity"] == 1
        assert payload["trend"]["isPositive"] is True
        assert payload["trend"]["value"] == 1400.0
        assert payload["maxCellVolume"] == 500


class TestRestDict:

    def test_seconds_are_integers(self, make_set):
        sets = [make_set("Squat", seconds=s) for s in (0, 90.4, 181.2)]
        payload = ReportAssembler().rest_to_dict(RestIntervalAnalyzer(min_samples=2).analyze(sets, now=NOW))

        assert payload["perExerciseAverages"] == [
            {"exercise": "Squat", "avgRestSeconds": 91, "sampleCount": 2},
        ]
        assert payload["overallAvgRestSeconds"] == 91
        assert payload["totalSamples"] == 2
        assert sum(b["count"] for b in payload["distribution"]) == 2


class TestSummary:

    def test_summary_dict_sections(self, make_set):
        payload = ReportAssembler().summary_to_dict(_summary([make_set(rpe=8)]))

        assert set(payload) == {"fatigue", "volume", "heatmap", "rest"}
        assert len(payload["volume"]["windows"]) == 8
        assert len(payload["heatmap"]["windows"]) == 4

    def test_format_summary(self, make_set):
        sets = [make_set("Bench Press", seconds=s, rpe=8) for s in (0, 120, 240)]
        text = ReportAssembler().format_summary(_summary(sets))

        assert text.startswith("### Training load")
        assert "- State: optimal" in text
        assert "- Sets at RPE 9+: 0 of 3" in text
        assert "- Avg rest: 120s over 2 intervals" in text
        assert "- Bench Press: 120s" in text

    def test_format_summary_without_data(self):
        text = ReportAssembler().format_summary(_summary([]))

        assert "Not enough RPE data yet" in text
        assert "No rest intervals recorded" in text
