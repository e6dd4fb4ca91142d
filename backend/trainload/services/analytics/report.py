"""
Report Assembler - Package analyzer output for the display layer.

Converts report dataclasses into camelCase dicts with display rounding.
Raw values stay full precision in the reports themselves; predicates are
computed before any rounding happens here.
"""
from typing import Any, Dict, List, Optional

from trainload.services.analytics.calculator import TrainingLoadSummary
from trainload.services.analytics.strategies import FatigueReport, RestReport, VolumeReport


def _round(value: Optional[float], digits: int = 1) -> Optional[float]:
    if value is None:
        return None
    return round(value, digits)


def _seconds(value: Optional[float]) -> Optional[int]:
    if value is None:
        return None
    return int(round(value))


class ReportAssembler:
    """
    Shapes reports for API responses and text digests.

    Usage:
        assembler = ReportAssembler()
        payload = assembler.fatigue_to_dict(report)
    """

    def fatigue_to_dict(self, report: FatigueReport) -> Dict[str, Any]:
        """Convert a fatigue report to the dashboard format."""
        return {
            "chartSeries": [
                {
                    "date": snap.date.isoformat(),
                    "avgRpe": _round(snap.avg_rpe),
                    "rollingAvg": _round(snap.rolling_7day_avg),
                    "setCount": snap.set_count,
                    "volume": _round(snap.volume),
                }
                for snap in report.chart_series
            ],
            "recentAvg": _round(report.recent_avg, 2),
            "priorAvg": _round(report.prior_avg, 2),
            "delta": _round(report.delta, 2),
            "isOvertraining": report.is_overtraining,
            "isUndertraining": report.is_undertraining,
            "isOptimal": report.is_optimal,
            "loadState": report.load_state,
            "fatigueScore": report.fatigue_score,
            "dataStatus": report.data_status,
            "weeklyTrend": report.weekly_trend,
            "totalSets": report.total_sets,
            "highRpeSetCount": report.high_rpe_set_count,
        }

    def volume_to_dict(self, report: VolumeReport) -> Dict[str, Any]:
        """Convert a volume report to the dashboard format."""
        windows = [
            {
                "label": window.label,
                "start": window.start.isoformat(),
                "end": window.end.isoformat(),
                "total": _round(total),
            }
            for window, total in zip(report.windows, report.window_totals)
        ]
        trend = None
        if report.trend is not None:
            trend = {
                "muscle": report.trend.muscle,
                "value": _round(report.trend.value),
                "isPositive": report.trend.is_positive,
                "lastVolume": _round(report.trend.last_volume),
                "previousVolume": _round(report.trend.previous_volume),
            }

        return {
            "windows": windows,
            "cells": [
                {
                    "muscle": cell.muscle.value,
                    "window": cell.label,
                    "volume": _round(cell.volume),
                    "intensity": report.intensity(cell),
                }
                for cell in report.cells
            ],
            "grossVolume": _round(report.gross_volume),
            "unclassifiedVolume": _round(report.unclassified_volume),
            "maxCellVolume": _round(report.max_cell_volume),
            "trend": trend,
        }

    def rest_to_dict(self, report: RestReport) -> Dict[str, Any]:
        """Convert a rest report to the dashboard format."""
        return {
            "distribution": [
                {"band": band.band, "count": band.count}
                for band in report.distribution
            ],
            "perExerciseAverages": [
                {
                    "exercise": entry.exercise,
                    "avgRestSeconds": _seconds(entry.avg_rest_seconds),
                    "sampleCount": entry.sample_count,
                }
                for entry in report.per_exercise_averages
            ],
            "overallAvgRestSeconds": _seconds(report.overall_avg_rest_seconds),
            "consistencyPercent": report.consistency_percent,
            "totalSamples": report.total_samples,
        }

    def summary_to_dict(self, summary: TrainingLoadSummary) -> Dict[str, Any]:
        """Convert all reports at once."""
        return {
            "fatigue": self.fatigue_to_dict(summary.fatigue),
            "volume": self.volume_to_dict(summary.volume),
            "heatmap": self.volume_to_dict(summary.heatmap),
            "rest": self.rest_to_dict(summary.rest),
        }

    def format_summary(self, summary: TrainingLoadSummary) -> str:
        """
        Format a short plain-text digest, e.g. for a coach note.

        Args:
            summary: Reports to describe

        Returns:
            Multi-line string
        """
        lines: List[str] = ["### Training load"]

        fatigue = summary.fatigue
        lines.append("\n**Fatigue:**")
        if fatigue.data_status != "ok":
            lines.append("- Not enough RPE data yet")
        else:
            lines.append(f"- State: {fatigue.load_state}")
            lines.append(f"- Recent avg RPE: {_round(fatigue.recent_avg)}")
            if fatigue.prior_avg is not None:
                lines.append(f"- Previous avg RPE: {_round(fatigue.prior_avg)} ({fatigue.weekly_trend})")
            lines.append(f"- Freshness score: {fatigue.fatigue_score}/100")
            lines.append(f"- Sets at RPE 9+: {fatigue.high_rpe_set_count} of {fatigue.total_sets}")

        volume = summary.volume
        lines.append("\n**Volume:**")
        if volume.window_totals:
            lines.append(f"- Last window: {_round(volume.window_totals[-1])} kg-reps")
        if volume.trend is not None and volume.trend.previous_volume:
            direction = "up" if volume.trend.is_positive else "down"
            lines.append(f"- Change vs previous: {direction} {_round(volume.trend.value)}%")
        if volume.unclassified_volume:
            lines.append(f"- Unclassified: {_round(volume.unclassified_volume)} kg-reps")

        rest = summary.rest
        lines.append("\n**Rest:**")
        if not rest.total_samples:
            lines.append("- No rest intervals recorded")
        else:
            lines.append(f"- Avg rest: {_seconds(rest.overall_avg_rest_seconds)}s over {rest.total_samples} intervals")
            lines.append(f"- Consistency: {rest.consistency_percent}%")
            for entry in rest.per_exercise_averages[:3]:
                lines.append(f"- {entry.exercise}: {_seconds(entry.avg_rest_seconds)}s")

        return "\n".join(lines)
