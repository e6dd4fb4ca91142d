"""
Services module - Training load business logic layer.

Modules:
- analytics: Set log access, analyzers and report assembly
"""
from trainload.services.analytics import (
    ReportAssembler,
    TrainingLoadCalculator,
    get_set_log_store,
)

__all__ = [
    "ReportAssembler",
    "TrainingLoadCalculator",
    "get_set_log_store",
]
