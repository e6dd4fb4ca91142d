"""
Structured logging configuration.
Designed for easy debugging without exposing athlete data.
"""
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

import structlog
from structlog.types import Processor

from trainload.core.config import settings


def setup_logging() -> None:
    """Configure structured logging for the application."""

    # Common processors
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        # JSON format for production
        renderer = structlog.processors.JSONRenderer()
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure root logger
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_store_fetch(
    logger: structlog.stdlib.BoundLogger,
    backend: str,
    user_id: str,
    attempt: int,
    **extra: Any
) -> None:
    """
    Log a set log fetch attempt.
    NEVER logs set contents, only sizes and ranges.
    """
    logger.debug(
        "Set log fetch",
        backend=backend,
        user_id=user_id,
        attempt=attempt,
        **extra
    )


def log_store_retry(
    logger: structlog.stdlib.BoundLogger,
    backend: str,
    attempt: int,
    delay_seconds: float,
    error_type: str,
    error_message: str,
    **extra: Any
) -> None:
    """Log a transient fetch failure that will be retried."""
    logger.warning(
        "Set log fetch failed, retrying",
        backend=backend,
        attempt=attempt,
        delay_seconds=round(delay_seconds, 3),
        error_type=error_type,
        error_message=error_message,
        **extra
    )


# ========================================
# Analysis Tracking
# ========================================

@dataclass
class AnalysisLog:
    """Complete log entry for one analyzer run."""
    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    analyzer: str = ""
    user_id: Optional[str] = None

    # Input / output sizes
    input_sets: int = 0
    output_items: int = 0
    details: Dict[str, Any] = field(default_factory=dict)

    # Timing
    start_time: float = 0.0
    end_time: float = 0.0
    duration_ms: float = 0.0

    # Status
    success: bool = True
    error_type: Optional[str] = None
    error_message: Optional[str] = None


class AnalysisTracker:
    """
    Tracker for analyzer runs.

    Usage:
        tracker = AnalysisTracker(logger)
        with tracker.track("fatigue", user_id=user_id, input_sets=len(sets)) as run:
            report = analyzer.analyze(sets)
            run.set_result(len(report.chart_series), load_state=report.load_state)
    """

    def __init__(self, logger: structlog.stdlib.BoundLogger):
        self.logger = logger
        self.enabled = settings.ANALYTICS_DEBUG_LOG

    @contextmanager
    def track(
        self,
        analyzer: str,
        user_id: Optional[str] = None,
        input_sets: int = 0,
    ) -> Generator["AnalysisRun", None, None]:
        """Context manager for tracking one analyzer run."""
        run = AnalysisRun(
            logger=self.logger,
            enabled=self.enabled,
            analyzer=analyzer,
            user_id=user_id,
            input_sets=input_sets,
        )
        run.start()
        try:
            yield run
        except Exception as e:
            run.set_error(type(e).__name__, str(e))
            raise
        finally:
            run.finish()


class AnalysisRun:
    """State of a single tracked analyzer run."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        enabled: bool,
        analyzer: str,
        user_id: Optional[str],
        input_sets: int,
    ):
        self.logger = logger
        self.enabled = enabled
        self.log = AnalysisLog(
            analyzer=analyzer,
            user_id=user_id,
            input_sets=input_sets,
        )

    def start(self) -> None:
        """Mark the start of the run."""
        self.log.start_time = time.perf_counter()

        if self.enabled:
            self.logger.debug(
                "Analysis started",
                run_id=self.log.run_id,
                analyzer=self.log.analyzer,
                user_id=self.log.user_id,
                input_sets=self.log.input_sets,
            )

    def set_result(self, output_items: int, **details: Any) -> None:
        """Record output size and a few headline values."""
        self.log.output_items = output_items
        self.log.details.update(details)
        self.log.success = True

    def set_error(self, error_type: str, error_message: str) -> None:
        """Set error information."""
        self.log.success = False
        self.log.error_type = error_type
        self.log.error_message = error_message

    def finish(self) -> None:
        """Mark the end of the run and log summary."""
        self.log.end_time = time.perf_counter()
        self.log.duration_ms = (self.log.end_time - self.log.start_time) * 1000

        if self.log.success:
            self.logger.info(
                "Analysis completed",
                run_id=self.log.run_id,
                analyzer=self.log.analyzer,
                user_id=self.log.user_id,
                duration_ms=round(self.log.duration_ms, 2),
                input_sets=self.log.input_sets,
                output_items=self.log.output_items,
                **self.log.details,
            )
        else:
            self.logger.error(
                "Analysis failed",
                run_id=self.log.run_id,
                analyzer=self.log.analyzer,
                user_id=self.log.user_id,
                duration_ms=round(self.log.duration_ms, 2),
                error_type=self.log.error_type,
                error_message=self.log.error_message,
            )
