"""
Training Load Analytics - FastAPI Application
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trainload.core.config import settings
from trainload.core.logging import setup_logging, get_logger
from trainload.core.database import init_db
from trainload.api import analytics

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    setup_logging()
    logger.info(
        "Starting training load service",
        version="0.1.0",
        set_log_backend=settings.SET_LOG_BACKEND,
        timezone=settings.ANALYTICS_TIMEZONE,
    )
    if settings.SET_LOG_BACKEND.lower() == "sql":
        await init_db()
        logger.info("Database initialized")

    yield

    logger.info("Shutting down training load service")


app = FastAPI(
    title="Training Load API",
    description="Fatigue, volume and rest analytics over logged strength sets",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "trainload"}
