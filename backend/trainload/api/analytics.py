"""
Training Load Analytics API endpoints.
"""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from trainload.core.config import settings
from trainload.core.database import get_db
from trainload.core.logging import get_logger
from trainload.services.analytics import (
    ReportAssembler,
    SetLogStoreError,
    TrainingLoadCalculator,
    get_set_log_store,
)
from trainload.services.analytics.strategies.volume import ALL_MUSCLES
from trainload.services.analytics.windows import WINDOW_WEEK

logger = get_logger(__name__)
router = APIRouter()
assembler = ReportAssembler()


# ========================================
# Dependencies
# ========================================

async def get_training_load_calculator(
    db: AsyncSession = Depends(get_db),
) -> TrainingLoadCalculator:
    """Calculator over the configured set log backend."""
    try:
        store = get_set_log_store(db)
    except ValueError as e:
        logger.error("Set log store misconfigured", error=str(e))
        raise HTTPException(status_code=503, detail="Set log store is not configured")
    return TrainingLoadCalculator(store)


def _store_unavailable(user_id: str, error: SetLogStoreError) -> HTTPException:
    logger.error(
        "Set log unavailable",
        user_id=user_id,
        backend=error.backend,
        error_message=str(error),
    )
    return HTTPException(status_code=503, detail="Set log is temporarily unavailable")


# ========================================
# API Endpoints
# ========================================

@router.get("/{user_id}/fatigue", response_model=dict[str, Any])
async def get_fatigue(
    user_id: str,
    days: int = Query(settings.FATIGUE_LOOKBACK_DAYS, ge=1, le=365, description="Lookback days"),
    calculator: TrainingLoadCalculator = Depends(get_training_load_calculator),
):
    """
    Get the RPE fatigue report (daily series, load state, freshness score).
    """
    try:
        report = await calculator.fatigue_report(user_id, lookback_days=days)
    except SetLogStoreError as e:
        raise _store_unavailable(user_id, e)

    return assembler.fatigue_to_dict(report)


@router.get("/{user_id}/volume", response_model=dict[str, Any])
async def get_volume(
    user_id: str,
    windows: int = Query(settings.VOLUME_WINDOW_COUNT, ge=1, le=104, description="Number of windows"),
    kind: str = Query(WINDOW_WEEK, pattern="^(day|week)$", description="Window kind"),
    muscle: str = Query(ALL_MUSCLES, description="Muscle group for the trend, or 'all'"),
    calculator: TrainingLoadCalculator = Depends(get_training_load_calculator),
):
    """
    Get per-muscle volume by window, with heatmap intensity and trend.
    """
    try:
        report = await calculator.volume_report(
            user_id, window_count=windows, window_kind=kind, muscle=muscle
        )
    except SetLogStoreError as e:
        raise _store_unavailable(user_id, e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return assembler.volume_to_dict(report)


@router.get("/{user_id}/rest", response_model=dict[str, Any])
async def get_rest(
    user_id: str,
    days: int = Query(settings.REST_LOOKBACK_DAYS, ge=1, le=365, description="Lookback days"),
    calculator: TrainingLoadCalculator = Depends(get_training_load_calculator),
):
    """
    Get the rest interval distribution and per-exercise averages.
    """
    try:
        report = await calculator.rest_report(user_id, lookback_days=days)
    except SetLogStoreError as e:
        raise _store_unavailable(user_id, e)

    return assembler.rest_to_dict(report)


@router.get("/{user_id}/summary", response_model=dict[str, Any])
async def get_summary(
    user_id: str,
    calculator: TrainingLoadCalculator = Depends(get_training_load_calculator),
):
    """
    Get every dashboard report from a single set log read.
    """
    logger.info("Building training load summary", user_id=user_id)

    try:
        summary = await calculator.summary(user_id)
    except SetLogStoreError as e:
        raise _store_unavailable(user_id, e)

    payload = assembler.summary_to_dict(summary)
    payload["text"] = assembler.format_summary(summary)
    return payload
