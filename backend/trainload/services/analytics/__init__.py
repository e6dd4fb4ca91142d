"""
Analytics module - Training load analytics over logged sets.

This module provides:
- Row adapter normalizing raw set rows into LoggedSet
- Exercise classifier mapping names to muscle groups
- Analyzer strategies (fatigue, volume, rest)
- Calculator engine and report assembler
- Set log store backends
"""
from trainload.services.analytics.adapter import LoggedSet, SetRowAdapter
from trainload.services.analytics.calculator import (
    ReportCache,
    TrainingLoadCalculator,
    TrainingLoadSummary,
)
from trainload.services.analytics.classifier import (
    DEFAULT_MUSCLE_MAP,
    ExerciseClassifier,
    MatchMode,
    MuscleMap,
    MuscleTag,
)
from trainload.services.analytics.report import ReportAssembler
from trainload.services.analytics.store import (
    RestSetLogStore,
    RetryingSetLogStore,
    SetLogStore,
    SetLogStoreError,
    SqlSetLogStore,
    TransientStoreError,
    get_set_log_store,
)

__all__ = [
    # Data structures
    "LoggedSet",
    "SetRowAdapter",
    # Classifier
    "DEFAULT_MUSCLE_MAP",
    "ExerciseClassifier",
    "MatchMode",
    "MuscleMap",
    "MuscleTag",
    # Calculator
    "ReportCache",
    "TrainingLoadCalculator",
    "TrainingLoadSummary",
    "ReportAssembler",
    # Store
    "SetLogStore",
    "SqlSetLogStore",
    "RestSetLogStore",
    "RetryingSetLogStore",
    "SetLogStoreError",
    "TransientStoreError",
    "get_set_log_store",
]
