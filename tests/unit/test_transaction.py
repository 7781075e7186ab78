"""Tests for the optimistic transaction runner."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ecopoints.core.exceptions import (
    InsufficientPointsError,
    StorageUnavailableError,
    TransientConflictError,
)
from ecopoints.infrastructure.database import RetryPolicy, run_transaction
from ecopoints.models import UserAccount


def make_session_factory():
    """Session factory whose sessions are async context managers."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    factory = MagicMock(return_value=session)
    return factory, session


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_exponential_backoff_without_jitter(self):
        """Test delays double until capped."""
        policy = RetryPolicy(max_attempts=6, backoff_ms=10, backoff_max_ms=50, jitter=False)

        delays = [policy.delay_for(attempt) for attempt in range(1, 6)]

        assert delays == [0.01, 0.02, 0.04, 0.05, 0.05]

    def test_jitter_stays_within_bound(self):
        """Test jittered delay never exceeds the deterministic one."""
        policy = RetryPolicy(backoff_ms=10, backoff_max_ms=50, jitter=True)

        for _ in range(100):
            assert 0 <= policy.delay_for(3) <= 0.04

    def test_from_settings(self, settings):
        """Test policy mirrors settings."""
        settings.transaction_max_attempts = 7
        settings.transaction_retry_jitter = False

        policy = RetryPolicy.from_settings(settings)

        assert policy.max_attempts == 7
        assert policy.jitter is False


class TestRunTransaction:
    """Tests for run_transaction with mocked sessions."""

    def setup_method(self):
        """Set up test fixtures."""
        self.policy = RetryPolicy(max_attempts=3, backoff_ms=0, backoff_max_ms=0, jitter=False)

    @pytest.mark.asyncio
    async def test_commits_and_returns_result(self):
        """Test a clean run commits once."""
        factory, session = make_session_factory()
        work = AsyncMock(return_value="ok")

        result = await run_transaction(factory, work, policy=self.policy)

        assert result == "ok"
        work.assert_awaited_once_with(session)
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retries_stale_data_then_succeeds(self):
        """Test a version conflict replays the whole unit of work."""
        factory, session = make_session_factory()
        work = AsyncMock(side_effect=[StaleDataError("stale"), "ok"])

        result = await run_transaction(factory, work, policy=self.policy)

        assert result == "ok"
        assert work.await_count == 2
        assert factory.call_count == 2

    @pytest.mark.asyncio
    async def test_conflict_exhaustion(self):
        """Test persistent conflicts surface as TransientConflictError."""
        factory, session = make_session_factory()
        work = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("dup")))

        with pytest.raises(TransientConflictError) as exc_info:
            await run_transaction(factory, work, policy=self.policy, name="redeem")

        assert work.await_count == 3
        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.__cause__, IntegrityError)
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_unavailable(self):
        """Test connectivity failures surface as StorageUnavailableError."""
        factory, _ = make_session_factory()
        work = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("database is locked"))
        )

        with pytest.raises(StorageUnavailableError):
            await run_transaction(factory, work, policy=self.policy)

        assert work.await_count == 3

    @pytest.mark.asyncio
    async def test_commit_conflict_is_retried(self):
        """Test a conflict detected at commit time is retried too."""
        factory, session = make_session_factory()
        session.commit.side_effect = [StaleDataError("stale"), None]
        work = AsyncMock(return_value=42)

        result = await run_transaction(factory, work, policy=self.policy)

        assert result == 42
        assert session.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_business_errors_are_not_retried(self):
        """Test domain errors propagate on the first attempt."""
        factory, session = make_session_factory()
        work = AsyncMock(side_effect=InsufficientPointsError("too poor"))

        with pytest.raises(InsufficientPointsError):
            await run_transaction(factory, work, policy=self.policy)

        assert work.await_count == 1
        session.commit.assert_not_awaited()


class TestRunTransactionDatabase:
    """Tests for run_transaction against SQLite."""

    @pytest.mark.asyncio
    async def test_failed_attempt_leaves_no_writes(self, seed, fetch, session_factory):
        """Test an aborted unit of work is rolled back entirely."""
        await seed.account("erin", balance=50)

        async def work(session):
            account = await session.get(UserAccount, "erin")
            account.point_balance -= 20
            await session.flush()
            raise InsufficientPointsError("abort after write")

        with pytest.raises(InsufficientPointsError):
            await run_transaction(session_factory, work)

        account = await fetch.account("erin")
        assert account.point_balance == 50
        assert account.version == 1
