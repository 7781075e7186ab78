"""Optimistic transaction runner.

Runs a unit of work in a fresh session and commits it. Rows carry a version
column, so a concurrent writer turns our UPDATE into a zero-row match and
SQLAlchemy raises StaleDataError at flush time. The whole unit of work is
then rolled back and replayed from its first read:

- Version conflicts and unique-key races -> retried, then TransientConflictError
- Driver connectivity/lock errors -> retried, then StorageUnavailableError
- RedemptionError subclasses -> propagated immediately, never retried
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ecopoints.core.config import Settings, get_settings
from ecopoints.core.exceptions import (
    RedemptionError,
    StorageUnavailableError,
    TransientConflictError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[], AsyncSession]
UnitOfWork = Callable[[AsyncSession], Awaitable[T]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for optimistic transactions."""

    max_attempts: int = 5
    backoff_ms: int = 20
    backoff_max_ms: int = 500
    jitter: bool = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RetryPolicy":
        """Build policy from application settings."""
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.transaction_max_attempts,
            backoff_ms=settings.transaction_retry_backoff_ms,
            backoff_max_ms=settings.transaction_retry_backoff_max_ms,
            jitter=settings.transaction_retry_jitter,
        )

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        delay_ms = min(self.backoff_ms * 2 ** (attempt - 1), self.backoff_max_ms)
        if self.jitter:
            delay_ms = random.uniform(0, delay_ms)
        return delay_ms / 1000


async def run_transaction(
    session_factory: SessionFactory,
    work: UnitOfWork[T],
    *,
    policy: RetryPolicy | None = None,
    name: str = "transaction",
) -> T:
    """Execute a unit of work atomically with bounded conflict retry.

    @param session_factory - Factory producing a new AsyncSession per attempt
    @param work - Coroutine function doing reads/writes on the session
    @param policy - Retry policy (defaults to settings)
    @param name - Operation name for logs
    @returns Whatever the unit of work returned on the committed attempt
    @raises RedemptionError on business rule violations (no retry)
    @raises TransientConflictError when conflicts persist past the budget
    @raises StorageUnavailableError when the store stays unreachable
    """
    policy = policy or RetryPolicy.from_settings()
    failure: RedemptionError | None = None
    cause: Exception | None = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            async with session_factory() as session:
                result = await work(session)
                await session.commit()
                return result
        except RedemptionError:
            raise
        except (StaleDataError, IntegrityError) as e:
            cause = e
            failure = TransientConflictError(
                f"{name} conflicted with a concurrent update",
                attempts=attempt,
            )
        except (OperationalError, InterfaceError, OSError) as e:
            cause = e
            failure = StorageUnavailableError(
                f"{name} could not reach the database",
                attempts=attempt,
            )

        if attempt < policy.max_attempts:
            delay = policy.delay_for(attempt)
            logger.warning(
                f"{name} attempt {attempt}/{policy.max_attempts} failed "
                f"({failure.code}), retrying in {delay * 1000:.0f}ms",
                extra={"operation": name, "attempt": attempt, "error": str(cause)},
            )
            await asyncio.sleep(delay)

    logger.error(
        f"{name} gave up after {policy.max_attempts} attempts: {failure.code}",
        extra={"operation": name, "error": str(cause)},
    )
    raise failure from cause
