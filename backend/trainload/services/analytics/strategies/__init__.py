"""
Set-history analyzers.

Each strategy is a pure computation over an immutable sequence of
LoggedSet and can run concurrently with the others.
"""
from trainload.services.analytics.strategies.base import AnalyzerStrategy
from trainload.services.analytics.strategies.fatigue import FatigueAnalyzer, FatigueReport, FatigueSnapshot
from trainload.services.analytics.strategies.rest import RestIntervalAnalyzer, RestReport, RestSample
from trainload.services.analytics.strategies.volume import VolumeAggregator, VolumeCell, VolumeReport

__all__ = [
    "AnalyzerStrategy",
    "FatigueAnalyzer",
    "FatigueReport",
    "FatigueSnapshot",
    "RestIntervalAnalyzer",
    "RestReport",
    "RestSample",
    "VolumeAggregator",
    "VolumeCell",
    "VolumeReport",
]
