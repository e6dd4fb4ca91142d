"""
Application configuration.
All sensitive values loaded from environment variables.
"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Database
    DATABASE_URL: str = "postgresql+asyncpg://postgres:postgres@db:5432/trainload"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or console

    # Analytics Debug Logging - enables per-step analyzer tracing
    ANALYTICS_DEBUG_LOG: bool = False

    # Set log source
    # Supported backends: sql, rest
    SET_LOG_BACKEND: str = "sql"
    SET_LOG_REST_URL: Optional[str] = None  # PostgREST base URL of the managed database
    SET_LOG_REST_API_KEY: str = ""
    SET_LOG_REST_PAGE_SIZE: int = 1000  # keep at or below the server max-rows cap

    # Fetch retry policy (transient failures only)
    SET_LOG_FETCH_ATTEMPTS: int = 3
    SET_LOG_FETCH_BACKOFF_SECONDS: float = 0.2
    SET_LOG_FETCH_TIMEOUT_SECONDS: float = 10.0

    # Day boundaries for bucketing are taken in this zone
    ANALYTICS_TIMEZONE: str = "UTC"

    # Lookback horizons
    FATIGUE_LOOKBACK_DAYS: int = 30
    REST_LOOKBACK_DAYS: int = 30
    VOLUME_WINDOW_COUNT: int = 8
    HEATMAP_WINDOW_COUNT: int = 4

    # Rest interval analysis
    REST_MIN_SECONDS: float = 30
    REST_MAX_SECONDS: float = 600
    REST_MIN_SAMPLES_PER_EXERCISE: int = 3
    REST_TOP_EXERCISES: int = 5

    # Exercise classification precedence: longest or first
    CLASSIFIER_MATCH_MODE: str = "longest"

    # Memoized reports per process (0 disables)
    ANALYTICS_CACHE_SIZE: int = 128

    def get_set_log_headers(self) -> dict:
        """Get auth headers for the REST set log backend."""
        if not self.SET_LOG_REST_API_KEY:
            return {}
        return {
            "apikey": self.SET_LOG_REST_API_KEY,
            "Authorization": f"Bearer {self.SET_LOG_REST_API_KEY}",
        }

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
