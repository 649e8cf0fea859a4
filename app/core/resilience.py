"""Bounded retry with exponential backoff for units of work against the database.

One primitive serves single reads and multi-statement transactions alike: each
attempt checks out a fresh session, optionally wraps the work in BEGIN/COMMIT
(rolling back on any failure), and transient store failures are retried by
tenacity with `base * 2^(attempt-1)` seconds of delay plus up to `jitter_ratio`
of jitter, within an attempt count and a wall-clock budget.
"""

import logging
import random
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt
from tenacity.stop import stop_base

from app.core.exceptions import NonRetryableStoreError, TransientStoreError

if TYPE_CHECKING:
    from app.core.config import Settings
    from app.core.database import Database

logger = logging.getLogger(__name__)

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

# SQLSTATE codes that retrying cannot fix.
NON_RETRYABLE_SQLSTATES: frozenset[str] = frozenset(
    {
        "23505",  # unique_violation
        "23503",  # foreign_key_violation
        "22P02",  # invalid_text_representation
        "42703",  # undefined_column
    }
)

# Used when the driver does not report a SQLSTATE (e.g. SQLite).
NON_RETRYABLE_ERROR_TYPES = (
    sa_exc.IntegrityError,
    sa_exc.DataError,
    sa_exc.ProgrammingError,
)


class UnitOfWork(Protocol[T_co]):
    """Self-contained database work run by ResilientExecutor, possibly more than once."""

    def execute(self, session: Session) -> T_co: ...


def sqlstate_of(error: BaseException) -> str | None:
    """Return the SQLSTATE reported by the DBAPI driver, if any (psycopg2 pgcode or psycopg sqlstate)."""
    orig = getattr(error, "orig", None)
    if orig is None:
        return None
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_retryable(error: BaseException) -> bool:
    """True for transient store failures: connection loss, pool timeout, deadlock, serialization."""
    if isinstance(error, (sa_exc.TimeoutError, sa_exc.DisconnectionError)):
        return True
    if not isinstance(error, sa_exc.DBAPIError):
        return False
    code = sqlstate_of(error)
    if code is not None:
        return code not in NON_RETRYABLE_SQLSTATES
    return not isinstance(error, NON_RETRYABLE_ERROR_TYPES)


class stop_before_budget(stop_base):
    """Stop when the upcoming sleep would carry the run past `max_elapsed` seconds since it started."""

    def __init__(self, max_elapsed: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_elapsed = max_elapsed
        self._clock = clock
        self._started = clock()

    def __call__(self, retry_state: RetryCallState) -> bool:
        elapsed = self._clock() - self._started
        return elapsed + (retry_state.upcoming_sleep or 0) > self.max_elapsed


class ResilientExecutor:
    """Runs units of work with bounded retries; only SQLAlchemy failures are ever retried."""

    def __init__(
        self,
        database: "Database",
        *,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        jitter_ratio: float = 0.1,
        max_elapsed: float = 15.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        rand: Callable[[], float] = random.random,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.database = database
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.jitter_ratio = jitter_ratio
        self.max_elapsed = max_elapsed
        self._sleep = sleep
        self._clock = clock
        self._rand = rand

    @classmethod
    def from_settings(cls, database: "Database", settings: "Settings") -> "ResilientExecutor":
        return cls(
            database,
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY_SEC,
            jitter_ratio=settings.RETRY_JITTER_RATIO,
            max_elapsed=settings.RETRY_MAX_ELAPSED_SEC,
        )

    def backoff_delay(self, attempt: int) -> float:
        """Delay in seconds before the retry that follows failed attempt number `attempt`."""
        exponential = self.base_delay * 2 ** (attempt - 1)
        return exponential + self._rand() * exponential * self.jitter_ratio

    def run(self, work: UnitOfWork[T], *, atomic: bool = True) -> T:
        """
        Execute work, retrying transient store failures.

        atomic=True runs each attempt inside one transaction (commit on success,
        rollback on any failure). atomic=False is for read-only work.

        Raises NonRetryableStoreError on the first non-retryable store failure,
        TransientStoreError once attempts or the wall-clock budget run out.
        Any other exception (including domain errors) propagates unchanged.
        """
        attempts = 0

        def attempt() -> T:
            nonlocal attempts
            attempts += 1
            return self._run_once(work, atomic)

        retrying = Retrying(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(self.max_attempts)
            | stop_before_budget(self.max_elapsed, self._clock),
            wait=self._wait,
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            return retrying(attempt)
        except sa_exc.SQLAlchemyError as e:
            if not is_retryable(e):
                raise NonRetryableStoreError(
                    f"Database rejected the operation: {_describe(e)}", attempts=attempts
                ) from e
            raise TransientStoreError(
                f"Database operation failed after {attempts} attempt(s): {_describe(e)}",
                attempts=attempts,
            ) from e

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.backoff_delay(retry_state.attempt_number)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        delay_ms = round(retry_state.next_action.sleep * 1000)
        logger.warning(
            "Database attempt %s failed, retrying in %sms. Error: %s",
            retry_state.attempt_number,
            delay_ms,
            _describe(retry_state.outcome.exception()),
            extra={"attempt": retry_state.attempt_number, "delay_ms": delay_ms},
        )

    def _run_once(self, work: UnitOfWork[T], atomic: bool) -> T:
        with self.database.session() as session:
            if atomic:
                with session.begin():
                    return work.execute(session)
            return work.execute(session)


def _describe(error: BaseException | None) -> str:
    if error is None:
        return "unknown error"
    orig = getattr(error, "orig", None)
    return str(orig if orig is not None else error).strip()
