"""Concurrency tests for the redemption engine.

Run against a file-backed SQLite database so every session has its own
connection and version conflicts happen for real.
"""

import asyncio

import pytest

from ecopoints.infrastructure.database import RetryPolicy
from ecopoints.models import RewardListing
from ecopoints.services.points import PointsService
from ecopoints.services.redemption import (
    InsufficientPointsError,
    InvalidStateTransitionError,
    OutOfStockError,
    RedemptionRecordOut,
    RedemptionService,
)


@pytest.fixture
def contention_policy():
    """Generous budget: SQLite serializes writers with lock errors too."""
    return RetryPolicy(max_attempts=50, backoff_ms=2, backoff_max_ms=50, jitter=True)


@pytest.fixture
def service(session_factory, notifier, contention_policy, settings):
    """Redemption service with a contention-friendly retry budget."""
    return RedemptionService(
        session_factory,
        notifier=notifier,
        retry_policy=contention_policy,
        settings=settings,
    )


@pytest.mark.slow
class TestConcurrentRedeem:
    """Races between redemptions."""

    @pytest.mark.asyncio
    async def test_last_unit_is_sold_once(self, service, seed, fetch):
        """Test N buyers racing for one unit yield one sale."""
        users = [f"user-{i}" for i in range(8)]
        for user_id in users:
            await seed.account(user_id, balance=100)
        reward = await seed.reward(cost=30, stock=1)

        results = await asyncio.gather(
            *(service.redeem(user_id, reward.id) for user_id in users),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, RedemptionRecordOut)]
        sold_out = [r for r in results if isinstance(r, OutOfStockError)]
        assert len(successes) == 1
        assert len(sold_out) == len(users) - 1
        assert (await fetch.reward(reward.id)).stock == 0

        balances = [(await fetch.account(u)).point_balance for u in users]
        assert sorted(balances) == [70] + [100] * (len(users) - 1)
        assert (await fetch.account(successes[0].user_id)).point_balance == 70

    @pytest.mark.asyncio
    async def test_balance_never_overdrawn(self, service, seed, fetch):
        """Test parallel redeems by one user stop when points run out."""
        await seed.account("alice", balance=60)
        reward = await seed.reward(cost=30, stock=10)

        results = await asyncio.gather(
            *(service.redeem("alice", reward.id) for _ in range(5)),
            return_exceptions=True,
        )

        successes = [r for r in results if isinstance(r, RedemptionRecordOut)]
        rejected = [r for r in results if isinstance(r, InsufficientPointsError)]
        assert len(successes) == 2
        assert len(rejected) == 3
        assert (await fetch.account("alice")).point_balance == 0
        assert (await fetch.reward(reward.id)).stock == 8

    @pytest.mark.asyncio
    async def test_parallel_cancel_refunds_once(self, service, seed, fetch):
        """Test racing cancels of one record refund exactly once."""
        await seed.account("alice", balance=100)
        reward = await seed.reward(cost=30, stock=2)
        record = await service.redeem("alice", reward.id)

        results = await asyncio.gather(
            *(service.cancel(record.id, "alice") for _ in range(4)),
            return_exceptions=True,
        )

        assert results.count(None) == 1
        assert sum(isinstance(r, InvalidStateTransitionError) for r in results) == 3
        assert (await fetch.account("alice")).point_balance == 100


class TestConflictReplay:
    """Deterministic interleavings forcing a version conflict."""

    @pytest.mark.asyncio
    async def test_concurrent_credit_is_not_lost(
        self, service, seed, fetch, session_factory, notifier, retry_policy, settings
    ):
        """Test a credit landing mid-redeem forces a replay, keeping both."""
        points = PointsService(
            session_factory, notifier=notifier, retry_policy=retry_policy, settings=settings
        )
        await seed.account("alice", balance=100)
        reward = await seed.reward(cost=30, stock=2)

        issue_code = service._issue_code
        calls = 0

        async def racing_issue_code(ledger):
            nonlocal calls
            calls += 1
            if calls == 1:
                await points.credit_points("alice", 50, reason="bottle return")
            return await issue_code(ledger)

        service._issue_code = racing_issue_code

        record = await service.redeem("alice", reward.id)

        assert calls == 2
        assert record.cost_snapshot == 30
        assert (await fetch.account("alice")).point_balance == 120
        assert (await fetch.reward(reward.id)).stock == 1

        listing = await service.list_redemptions("alice")
        assert listing.meta.total_items == 1

    @pytest.mark.asyncio
    async def test_stock_taken_mid_redeem_rechecked(
        self, service, seed, fetch, session_factory
    ):
        """Test the replay sees the new stock and refuses the sale."""
        await seed.account("alice", balance=100)
        reward = await seed.reward(cost=30, stock=1)

        issue_code = service._issue_code

        async def racing_issue_code(ledger):
            async with session_factory() as session:
                listing = await session.get(RewardListing, reward.id)
                if listing.stock > 0:
                    listing.stock = 0
                    await session.commit()
            return await issue_code(ledger)

        service._issue_code = racing_issue_code

        with pytest.raises(OutOfStockError):
            await service.redeem("alice", reward.id)

        assert (await fetch.account("alice")).point_balance == 100
        assert (await fetch.reward(reward.id)).stock == 0
