"""Redemption service: atomic point-for-reward exchange.

Every operation is one optimistic transaction over the account, catalog and
ledger rows it touches:
- Redeem: debit points, take one unit of stock, append a pending record
- Cancel: refund the cost snapshot and close a pending record

Balance changes also append a point history entry in the same transaction.
- Complete: close a pending record once the reward was handed over

Business rule failures abort before the first write. Version conflicts are
retried by the transaction runner; change events go out only after commit.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from ecopoints.core.config import Settings, get_settings
from ecopoints.core.exceptions import (
    CodeGenerationExhaustedError,
    InsufficientPointsError,
    OutOfStockError,
    RecordNotFoundError,
    RedemptionError,
    UnauthorizedError,
)
from ecopoints.core.schemas import PaginationMeta
from ecopoints.core.validation import validate_request
from ecopoints.infrastructure.database.session import AsyncSessionLocal
from ecopoints.infrastructure.database.transaction import RetryPolicy, run_transaction
from ecopoints.models.base import utcnow
from ecopoints.models.redemption import RedemptionRecord
from ecopoints.repositories.account import AccountRepository
from ecopoints.repositories.point_transaction import PointTransactionRepository
from ecopoints.repositories.redemption import RedemptionRepository
from ecopoints.repositories.reward import RewardRepository
from ecopoints.services.notifications import (
    ChangeEvent,
    ChangeNotifier,
    ChangeType,
    get_change_notifier,
)
from ecopoints.services.points.schemas import TransactionType
from ecopoints.services.redemption.codes import CodeGenerator
from ecopoints.services.redemption.schemas import (
    CancelRequest,
    CompleteRequest,
    RedeemRequest,
    RedemptionListResponse,
    RedemptionLookup,
    RedemptionQuery,
    RedemptionRecordOut,
    RedemptionStats,
    RedemptionStatus,
)
from ecopoints.services.redemption.state import ensure_transition

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RedemptionService:
    """Service for exchanging points for rewards and reversing exchanges.

    Uses Repository pattern for database operations and the optimistic
    transaction runner for atomicity.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        *,
        code_generator: CodeGenerator | None = None,
        notifier: ChangeNotifier | None = None,
        retry_policy: RetryPolicy | None = None,
        settings: Settings | None = None,
    ):
        """Initialize redemption service.

        @param session_factory - Optional factory for creating database sessions
        @param code_generator - Claim code generator
        @param notifier - Change notifier for post-commit events
        @param retry_policy - Conflict retry policy
        @param settings - Settings override
        """
        settings = settings or get_settings()
        self._session_factory = session_factory or AsyncSessionLocal
        self._codes = code_generator or CodeGenerator.from_settings(settings)
        self._notifier = notifier or get_change_notifier()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(settings)
        self._max_code_attempts = settings.claim_code_max_attempts
        self.restore_stock_on_cancel = settings.restore_stock_on_cancel

    async def redeem(self, user_id: str, reward_id: int) -> RedemptionRecordOut:
        """Exchange points for one unit of a reward.

        @param user_id - Authenticated caller
        @param reward_id - Reward listing ID
        @returns The created pending record, including its claim code
        @raises ValidationError, RecordNotFoundError, InsufficientPointsError,
            OutOfStockError, CodeGenerationExhaustedError,
            TransientConflictError, StorageUnavailableError
        """
        request = validate_request(RedeemRequest, user_id=user_id, reward_id=reward_id)

        async def work(session: AsyncSession) -> tuple[RedemptionRecordOut, int, int]:
            accounts = AccountRepository(session)
            rewards = RewardRepository(session)
            ledger = RedemptionRepository(session)
            history = PointTransactionRepository(session)

            account = await accounts.get_by_id(request.user_id)
            reward = await rewards.get_by_id(request.reward_id)

            if account is None:
                raise RecordNotFoundError(
                    f"Account {request.user_id} not found", user_id=request.user_id
                )
            if reward is None:
                raise RecordNotFoundError(
                    f"Reward {request.reward_id} not found", reward_id=request.reward_id
                )
            if account.point_balance < reward.cost:
                raise InsufficientPointsError(
                    f"Reward costs {reward.cost} points, balance is "
                    f"{account.point_balance}",
                    balance=account.point_balance,
                    cost=reward.cost,
                )
            if reward.stock <= 0:
                raise OutOfStockError(
                    f"Reward {reward.id} is out of stock", reward_id=reward.id
                )

            code = await self._issue_code(ledger)

            account.point_balance -= reward.cost
            reward.stock -= 1
            record = await ledger.create(
                RedemptionRecord(
                    user_id=account.id,
                    reward_id=reward.id,
                    cost_snapshot=reward.cost,
                    code=code,
                    status=RedemptionStatus.PENDING.value,
                    created_at=utcnow(),
                )
            )
            await history.record(
                account.id,
                -reward.cost,
                TransactionType.POINTS_REDEEMED.value,
                description=f"Redeemed {reward.name}",
                redemption_id=record.id,
            )
            return (
                RedemptionRecordOut.model_validate(record),
                account.point_balance,
                reward.stock,
            )

        record, balance, stock = await self._execute("redeem", work)

        logger.info(
            f"Redemption {record.id} created: user={record.user_id} "
            f"reward={record.reward_id} cost={record.cost_snapshot}"
        )
        await self._notifier.publish(
            ChangeEvent(
                type=ChangeType.REDEMPTION_CREATED,
                user_id=record.user_id,
                point_balance=balance,
                reward_id=record.reward_id,
                stock=stock,
                redemption_id=record.id,
            )
        )
        return record

    async def cancel(self, redemption_id: int, user_id: str) -> None:
        """Cancel a pending redemption and refund its cost snapshot.

        Stock is only returned to the catalog when restore_stock_on_cancel
        is enabled.

        @param redemption_id - Redemption record ID
        @param user_id - Authenticated caller, must own the record
        @raises ValidationError, RecordNotFoundError, UnauthorizedError,
            InvalidStateTransitionError, TransientConflictError,
            StorageUnavailableError
        """
        request = validate_request(
            CancelRequest, redemption_id=redemption_id, user_id=user_id
        )
        restore_stock = self.restore_stock_on_cancel

        async def work(session: AsyncSession) -> tuple[int, int, int | None]:
            accounts = AccountRepository(session)
            ledger = RedemptionRepository(session)

            record = await ledger.get_by_id(request.redemption_id)
            account = await accounts.get_by_id(request.user_id)

            if record is None:
                raise RecordNotFoundError(
                    f"Redemption {request.redemption_id} not found",
                    redemption_id=request.redemption_id,
                )
            if record.user_id != request.user_id:
                raise UnauthorizedError(
                    f"Redemption {record.id} does not belong to {request.user_id}",
                    redemption_id=record.id,
                )
            ensure_transition(record.id, record.status, RedemptionStatus.CANCELLED)
            if account is None:
                raise RecordNotFoundError(
                    f"Account {request.user_id} not found", user_id=request.user_id
                )

            account.point_balance += record.cost_snapshot
            record.status = RedemptionStatus.CANCELLED.value
            record.cancelled_at = utcnow()

            await PointTransactionRepository(session).record(
                account.id,
                record.cost_snapshot,
                TransactionType.POINTS_REFUNDED.value,
                description=f"Cancelled redemption {record.code}",
                redemption_id=record.id,
            )

            stock = None
            if restore_stock:
                reward = await RewardRepository(session).get_by_id(record.reward_id)
                if reward is not None:
                    reward.stock += 1
                    stock = reward.stock

            await session.flush()
            return record.reward_id, account.point_balance, stock

        reward_id, balance, stock = await self._execute("cancel", work)

        logger.info(
            f"Redemption {request.redemption_id} cancelled by {request.user_id}, "
            f"refunded to balance {balance}"
        )
        await self._notifier.publish(
            ChangeEvent(
                type=ChangeType.REDEMPTION_CANCELLED,
                user_id=request.user_id,
                point_balance=balance,
                reward_id=reward_id,
                stock=stock,
                redemption_id=request.redemption_id,
            )
        )

    async def complete(self, redemption_id: int) -> RedemptionRecordOut:
        """Mark a pending redemption as fulfilled.

        Called by the fulfillment workflow once the claim code was presented.

        @param redemption_id - Redemption record ID
        @returns The completed record
        @raises ValidationError, RecordNotFoundError,
            InvalidStateTransitionError
        """
        request = validate_request(CompleteRequest, redemption_id=redemption_id)

        async def work(session: AsyncSession) -> RedemptionRecordOut:
            ledger = RedemptionRepository(session)
            record = await ledger.get_by_id(request.redemption_id)
            if record is None:
                raise RecordNotFoundError(
                    f"Redemption {request.redemption_id} not found",
                    redemption_id=request.redemption_id,
                )
            ensure_transition(record.id, record.status, RedemptionStatus.COMPLETED)

            record.status = RedemptionStatus.COMPLETED.value
            record.completed_at = utcnow()
            await session.flush()
            return RedemptionRecordOut.model_validate(record)

        record = await self._execute("complete", work)

        logger.info(f"Redemption {record.id} completed (code {record.code})")
        await self._notifier.publish(
            ChangeEvent(
                type=ChangeType.REDEMPTION_COMPLETED,
                user_id=record.user_id,
                reward_id=record.reward_id,
                redemption_id=record.id,
            )
        )
        return record

    async def get_redemption(self, redemption_id: int, user_id: str) -> RedemptionRecordOut:
        """Get one of the caller's redemptions.

        @param redemption_id - Redemption record ID
        @param user_id - Authenticated caller, must own the record
        @returns Redemption record
        @raises RecordNotFoundError, UnauthorizedError
        """
        request = validate_request(
            RedemptionLookup, redemption_id=redemption_id, user_id=user_id
        )

        async def work(session: AsyncSession) -> RedemptionRecordOut:
            record = await RedemptionRepository(session).get_by_id(request.redemption_id)
            if record is None:
                raise RecordNotFoundError(
                    f"Redemption {request.redemption_id} not found",
                    redemption_id=request.redemption_id,
                )
            if record.user_id != request.user_id:
                raise UnauthorizedError(
                    f"Redemption {record.id} does not belong to {request.user_id}",
                    redemption_id=record.id,
                )
            return RedemptionRecordOut.model_validate(record)

        return await self._execute("get_redemption", work)

    async def list_redemptions(
        self,
        user_id: str,
        status: RedemptionStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> RedemptionListResponse:
        """List the caller's ledger, newest first.

        @param user_id - Owner user id
        @param status - Optional status filter
        @param page - Page number (1-based)
        @param page_size - Items per page
        @returns Paginated list response
        """
        query = validate_request(
            RedemptionQuery,
            user_id=user_id,
            status=status,
            page=page,
            page_size=page_size,
        )
        status_value = query.status.value if query.status else None

        async def work(session: AsyncSession) -> RedemptionListResponse:
            ledger = RedemptionRepository(session)
            total_items = await ledger.count_by_user(query.user_id, status=status_value)
            records = await ledger.get_by_user(
                query.user_id,
                status=status_value,
                skip=(query.page - 1) * query.page_size,
                limit=query.page_size,
            )

            return RedemptionListResponse(
                items=[RedemptionRecordOut.model_validate(r) for r in records],
                meta=PaginationMeta.build(query.page, query.page_size, total_items),
            )

        return await self._execute("list_redemptions", work)

    async def get_stats(self) -> RedemptionStats:
        """Get ledger-wide redemption statistics.

        Success rate is the completed share of closed (completed or
        cancelled) redemptions; points redeemed only count completed ones.

        @returns Redemption statistics
        """

        async def work(session: AsyncSession) -> dict[str, tuple[int, int]]:
            return await RedemptionRepository(session).get_status_totals()

        totals = await self._execute("get_stats", work)

        def count(status: RedemptionStatus) -> int:
            return totals.get(status.value, (0, 0))[0]

        completed = count(RedemptionStatus.COMPLETED)
        cancelled = count(RedemptionStatus.CANCELLED)
        closed = completed + cancelled
        return RedemptionStats(
            total=sum(c for c, _ in totals.values()),
            pending=count(RedemptionStatus.PENDING),
            completed=completed,
            cancelled=cancelled,
            success_rate=round(completed / closed * 100, 2) if closed else 0.0,
            total_points_redeemed=totals.get(RedemptionStatus.COMPLETED.value, (0, 0))[1],
        )

    async def _issue_code(self, ledger: RedemptionRepository) -> str:
        """Generate a claim code not yet present in the ledger.

        @param ledger - Ledger repository bound to the current transaction
        @returns Unused claim code
        @raises CodeGenerationExhaustedError if every attempt collided
        """
        for attempt in range(1, self._max_code_attempts + 1):
            code = self._codes.generate()
            if not await ledger.code_exists(code):
                return code
            logger.warning(f"Claim code collision (attempt {attempt})")

        raise CodeGenerationExhaustedError(
            f"No unused claim code after {self._max_code_attempts} attempts"
        )

    async def _execute(
        self,
        name: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        try:
            return await run_transaction(
                self._session_factory, work, policy=self._retry_policy, name=name
            )
        except RedemptionError as e:
            if not e.retryable:
                logger.info(f"{name} rejected: {e.code} ({e.detail})")
            raise


# Service singleton with dependency injection support
_redemption_service: RedemptionService | None = None


def get_redemption_service() -> RedemptionService:
    """Get or create redemption service singleton.

    @returns RedemptionService instance
    """
    global _redemption_service
    if _redemption_service is None:
        _redemption_service = RedemptionService()
    return _redemption_service


def reset_redemption_service() -> None:
    """Reset redemption service singleton (for testing)."""
    global _redemption_service
    _redemption_service = None
