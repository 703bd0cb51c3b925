"""
Dual-backend data access.

Each operation checks whether the database is reachable (cached for a short
while), runs against it with exponential-backoff retries on transient errors,
and falls back to the JSON data file when the database is down.

There is no reconciliation between the two backends: while the database is
unreachable writes go to the file, and they are not replayed later.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from portfolio.config import Settings
from portfolio.schemas import CollectionCounts, HealthStatus
from portfolio.services.database_store import DatabaseStore
from portfolio.services.json_store import JsonFileStore
from portfolio.services.store import BackendUnavailable


logger = logging.getLogger(__name__)


TRANSIENT_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


class HealthCache:
    """Last reachability result of the database, valid for `ttl` seconds."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self.healthy: Optional[bool] = None
        self.error: Optional[str] = None
        self.checked_at: Optional[float] = None

    def is_fresh(self) -> bool:
        if self.checked_at is None:
            return False
        return self._clock() - self.checked_at < self.ttl

    def record(self, healthy: bool, error: Optional[str] = None) -> None:
        self.healthy = healthy
        self.error = error
        self.checked_at = self._clock()


class ResilientStore:
    """
    Portfolio store that prefers the database and degrades to the JSON file.

    With no database configured every operation goes straight to the file.
    """

    def __init__(
        self,
        primary: Optional[DatabaseStore],
        fallback: JsonFileStore,
        *,
        health_ttl: float = 30.0,
        retry_attempts: int = 3,
        retry_wait_min: float = 1.0,
        retry_wait_max: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.primary = primary
        self.fallback = fallback
        self.health = HealthCache(health_ttl, clock)
        self.retry_attempts = retry_attempts
        self.retry_wait_min = retry_wait_min
        self.retry_wait_max = retry_wait_max

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResilientStore":
        primary = None
        if settings.database_configured:
            primary = DatabaseStore(
                settings.DATABASE_URL,
                connect_timeout=settings.DB_CONNECT_TIMEOUT_SECONDS,
            )
        return cls(
            primary,
            JsonFileStore(settings.DATA_FILE),
            health_ttl=settings.DB_HEALTH_CACHE_SECONDS,
            retry_attempts=settings.DB_RETRY_MAX_ATTEMPTS,
            retry_wait_min=settings.DB_RETRY_WAIT_MIN_SECONDS,
            retry_wait_max=settings.DB_RETRY_WAIT_MAX_SECONDS,
        )

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(
                multiplier=self.retry_wait_min,
                min=self.retry_wait_min,
                max=self.retry_wait_max,
            ),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    # === Availability ===

    @property
    def database_configured(self) -> bool:
        return self.primary is not None

    def is_database_available(self, refresh: bool = False) -> bool:
        """Ping the database unless a recent result is cached."""
        if self.primary is None:
            return False
        if not refresh and self.health.is_fresh():
            return bool(self.health.healthy)

        try:
            self.primary.ping()
        except SQLAlchemyError as e:
            if self.health.healthy is not False:
                logger.warning("Database unreachable, using data file: %s", e)
            self.health.record(False, str(e))
        else:
            if self.health.healthy is False:
                logger.info("Database reachable again")
            self.health.record(True)
        return bool(self.health.healthy)

    @property
    def mode(self) -> str:
        """Backend that currently serves requests: 'database' or 'json'."""
        return "database" if self.is_database_available() else "json"

    # === Dispatch ===

    def _run(self, operation: str, *args: Any) -> Any:
        if self.is_database_available():
            try:
                return self._retrying()(getattr(self.primary, operation), *args)
            except TRANSIENT_ERRORS as e:
                logger.warning(
                    "Database %s failed after %d attempts, using data file: %s",
                    operation, self.retry_attempts, e,
                )
                self.health.record(False, str(e))
        return getattr(self.fallback, operation)(*args)

    def run_on_database(self, operation: str, *args: Any) -> Any:
        """Run an operation on the database only, never falling back."""
        if self.primary is None:
            raise BackendUnavailable("No database configured (DATABASE_URL is not set)")
        if not self.is_database_available(refresh=True):
            raise BackendUnavailable(f"Database unreachable: {self.health.error}")
        try:
            return self._retrying()(getattr(self.primary, operation), *args)
        except TRANSIENT_ERRORS as e:
            self.health.record(False, str(e))
            raise BackendUnavailable(f"Database unreachable: {e}") from e

    # === Health ===

    def check_health(self, detailed: bool = False) -> HealthStatus:
        """
        Fresh reachability check of the active backend.

        - healthy: served by the database (or JSON-only mode with a readable file)
        - degraded: database configured but down, data file serving
        - unhealthy: nothing can serve reads
        """
        connected = self.is_database_available(refresh=True)
        backend = "database" if connected else "json"
        error = self.health.error if self.primary is not None else None

        if connected or self.primary is None:
            status = "healthy"
        else:
            status = "degraded"

        counts: Optional[CollectionCounts] = None
        if detailed or not connected:
            try:
                counts = CollectionCounts(**self._run("counts"))
            except BackendUnavailable as e:
                status = "unhealthy"
                error = str(e)

        return HealthStatus(
            status=status,
            backend=backend,
            connected=connected,
            fallback_mode=not connected,
            error=error,
            timestamp=datetime.now(timezone.utc),
            collections=counts if detailed else None,
            total_documents=counts.total if (detailed and counts) else None,
        )

    # === Store Protocol ===

    def get_profile(self):
        return self._run("get_profile")

    def save_profile(self, profile):
        return self._run("save_profile", profile)

    def list_links(self):
        return self._run("list_links")

    def get_link(self, link_id):
        return self._run("get_link", link_id)

    def add_link(self, link):
        return self._run("add_link", link)

    def update_link(self, link_id, changes):
        return self._run("update_link", link_id, changes)

    def delete_link(self, link_id):
        return self._run("delete_link", link_id)

    def replace_links(self, links):
        return self._run("replace_links", links)

    def list_notes(self):
        return self._run("list_notes")

    def get_note(self, note_id):
        return self._run("get_note", note_id)

    def add_note(self, note):
        return self._run("add_note", note)

    def update_note(self, note_id, changes):
        return self._run("update_note", note_id, changes)

    def delete_note(self, note_id):
        return self._run("delete_note", note_id)

    def list_learning(self):
        return self._run("list_learning")

    def get_learning(self, item_id):
        return self._run("get_learning", item_id)

    def add_learning(self, item):
        return self._run("add_learning", item)

    def update_learning(self, item_id, changes):
        return self._run("update_learning", item_id, changes)

    def delete_learning(self, item_id):
        return self._run("delete_learning", item_id)

    def counts(self):
        return self._run("counts")

    def load_all(self):
        return self._run("load_all")

    def replace_all(self, data):
        return self._run("replace_all", data)
