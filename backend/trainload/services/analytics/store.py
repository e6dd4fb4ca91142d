"""
Set Log Store - Read-only access to logged exercise sets.

Backends:
- SQL (SQLAlchemy async session over workout_sets)
- REST (PostgREST-style managed database endpoint, via httpx)

Transient failures are retried by RetryingSetLogStore; a failed attempt
has no side effects since every backend only reads.
"""
import asyncio
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from trainload.core.config import settings
from trainload.core.logging import get_logger, log_store_fetch, log_store_retry
from trainload.models.workout_set import WorkoutSet
from trainload.services.analytics.adapter import LoggedSet, SetRowAdapter

logger = get_logger(__name__)

SET_COLUMNS = "user_id,exercise_name,set_number,weight,reps,rpe,completed_at"


class SetLogStoreError(Exception):
    """The set log could not be read."""

    def __init__(self, message: str, backend: str = "unknown"):
        super().__init__(message)
        self.backend = backend


class TransientStoreError(SetLogStoreError):
    """A failure worth retrying (timeout, dropped connection, 5xx)."""
    pass


class SetLogStore(ABC):
    """Abstract read interface over logged sets."""

    backend: str = "unknown"

    @abstractmethod
    async def get_sets(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool = False,
    ) -> List[LoggedSet]:
        """
        Get a user's sets completed in [start, end).

        Args:
            user_id: Athlete ID
            start: Inclusive lower bound (aware)
            end: Exclusive upper bound (aware)
            rpe_only: Only sets with an RPE value

        Returns:
            Sets ordered by completed_at ascending

        Raises:
            SetLogStoreError: If the backend cannot be read
        """
        pass


class SqlSetLogStore(SetLogStore):
    """Set log backed by the workout_sets table."""

    backend = "sql"

    def __init__(
        self,
        db: AsyncSession,
        timeout_seconds: Optional[float] = None,
        adapter: Optional[SetRowAdapter] = None,
    ):
        self.db = db
        self.timeout_seconds = timeout_seconds or settings.SET_LOG_FETCH_TIMEOUT_SECONDS
        self.adapter = adapter or SetRowAdapter()

    async def get_sets(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool = False,
    ) -> List[LoggedSet]:
        try:
            user_uuid = uuid.UUID(str(user_id))
        except ValueError:
            logger.warning("Invalid user_id format", user_id=user_id)
            return []

        query = (
            select(WorkoutSet)
            .where(WorkoutSet.user_id == user_uuid)
            .where(WorkoutSet.completed_at >= start)
            .where(WorkoutSet.completed_at < end)
            .order_by(WorkoutSet.completed_at.asc())
        )
        if rpe_only:
            query = query.where(WorkoutSet.rpe.is_not(None))

        try:
            result = await asyncio.wait_for(self.db.execute(query), self.timeout_seconds)
        except asyncio.TimeoutError as e:
            await self._rollback()
            raise TransientStoreError("Set log query timed out", self.backend) from e
        except OperationalError as e:
            await self._rollback()
            raise TransientStoreError(f"Database unavailable: {e.orig}", self.backend) from e
        except DBAPIError as e:
            await self._rollback()
            if e.connection_invalidated:
                raise TransientStoreError("Database connection lost", self.backend) from e
            raise SetLogStoreError(f"Set log query failed: {e.orig}", self.backend) from e

        rows = result.scalars().all()
        return self.adapter.normalize_many(rows, user_id=str(user_id))

    async def _rollback(self) -> None:
        """Return the session to a usable state so a retry can reuse it."""
        try:
            await self.db.rollback()
        except DBAPIError as e:
            logger.warning("Session rollback failed", error=str(e.orig))


class RestSetLogStore(SetLogStore):
    """
    Set log read from a PostgREST endpoint of the managed database.

    Filters run server side: eq. on user, gte./lt. on completed_at and
    optionally rpe=not.is.null. Results are read in limit/offset pages so
    the server's max-rows cap cannot truncate a long history.
    """

    backend = "rest"

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[dict] = None,
        timeout_seconds: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        adapter: Optional[SetRowAdapter] = None,
        page_size: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.SET_LOG_REST_URL or "").rstrip("/")
        self.headers = headers if headers is not None else settings.get_set_log_headers()
        self.timeout_seconds = timeout_seconds or settings.SET_LOG_FETCH_TIMEOUT_SECONDS
        self.client = client
        self.adapter = adapter or SetRowAdapter()
        self.page_size = settings.SET_LOG_REST_PAGE_SIZE if page_size is None else page_size

        if not self.base_url and client is None:
            raise ValueError("SET_LOG_REST_URL is required for the rest backend")
        if self.page_size < 1:
            raise ValueError("SET_LOG_REST_PAGE_SIZE must be >= 1")

    def _build_params(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool,
        offset: int = 0,
    ) -> List[tuple]:
        params = [
            ("select", SET_COLUMNS),
            ("user_id", f"eq.{user_id}"),
            ("completed_at", f"gte.{start.isoformat()}"),
            ("completed_at", f"lt.{end.isoformat()}"),
            # id breaks timestamp ties so pages never overlap
            ("order", "completed_at.asc,id.asc"),
            ("limit", str(self.page_size)),
            ("offset", str(offset)),
        ]
        if rpe_only:
            params.append(("rpe", "not.is.null"))
        return params

    async def get_sets(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool = False,
    ) -> List[LoggedSet]:
        if self.client is not None:
            rows = await self._read_all(self.client, user_id, start, end, rpe_only)
        else:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                rows = await self._read_all(client, user_id, start, end, rpe_only)

        return self.adapter.normalize_many(rows, user_id=str(user_id))

    async def _read_all(
        self,
        client: httpx.AsyncClient,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool,
    ) -> List[dict]:
        """Read every page; a short page is the last one."""
        rows: List[dict] = []
        while True:
            params = self._build_params(user_id, start, end, rpe_only, offset=len(rows))
            page = await self._read_page(client, params)
            rows.extend(page)
            if len(page) < self.page_size:
                break

        if len(rows) > self.page_size:
            logger.debug("Read set log in pages", user_id=str(user_id), rows=len(rows))
        return rows

    async def _read_page(self, client: httpx.AsyncClient, params: List[tuple]) -> list:
        url = f"{self.base_url}/rest/v1/workout_sets"
        try:
            response = await client.get(
                url, params=params, headers=self.headers, timeout=self.timeout_seconds
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransientStoreError("Set log request timed out", self.backend) from e
        except httpx.TransportError as e:
            raise TransientStoreError(f"Set log unreachable: {e}", self.backend) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status >= 500 or status == 429:
                raise TransientStoreError(f"Set log returned {status}", self.backend) from e
            raise SetLogStoreError(f"Set log returned {status}", self.backend) from e

        page = response.json()
        if not isinstance(page, list):
            raise SetLogStoreError("Unexpected set log payload", self.backend)
        return page


class RetryingSetLogStore(SetLogStore):
    """
    Wraps a store with retry and exponential backoff.

    Only TransientStoreError is retried. After the last attempt the error
    propagates; nothing is substituted for the missing data.
    """

    def __init__(
        self,
        inner: SetLogStore,
        attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.inner = inner
        self.attempts = max(1, attempts if attempts is not None else settings.SET_LOG_FETCH_ATTEMPTS)
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.SET_LOG_FETCH_BACKOFF_SECONDS
        )
        self._sleep = sleep

    @property
    def backend(self) -> str:
        return self.inner.backend

    async def get_sets(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        rpe_only: bool = False,
    ) -> List[LoggedSet]:
        for attempt in range(1, self.attempts + 1):
            log_store_fetch(
                logger, self.backend, str(user_id), attempt,
                start=start.isoformat(), end=end.isoformat(), rpe_only=rpe_only,
            )
            try:
                return await self.inner.get_sets(user_id, start, end, rpe_only=rpe_only)
            except TransientStoreError as e:
                if attempt == self.attempts:
                    logger.error(
                        "Set log fetch gave up",
                        backend=self.backend,
                        attempts=self.attempts,
                        error_message=str(e),
                    )
                    raise
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                log_store_retry(logger, self.backend, attempt, delay, type(e).__name__, str(e))
                await self._sleep(delay)

        raise SetLogStoreError("No fetch attempt made", self.backend)


def get_set_log_store(db: Optional[AsyncSession] = None) -> SetLogStore:
    """
    Build the configured store, wrapped with the retry policy.

    Args:
        db: Session for the sql backend

    Returns:
        SetLogStore

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    backend = settings.SET_LOG_BACKEND.lower()

    if backend == "sql":
        if db is None:
            raise ValueError("The sql set log backend needs a database session")
        inner: SetLogStore = SqlSetLogStore(db)
    elif backend == "rest":
        inner = RestSetLogStore()
    else:
        raise ValueError(f"Unknown set log backend: {settings.SET_LOG_BACKEND}")

    return RetryingSetLogStore(inner)
