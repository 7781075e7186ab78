"""Point account service.

Opens accounts at registration and applies credits coming from the point
accrual workflow (e.g. approved waste submissions) and serves the point
history. Credits go through the same versioned-row transaction runner as
redemptions, so a credit racing a redeem on the same account is detected
and replayed, never lost.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from ecopoints.core.config import Settings, get_settings
from ecopoints.core.exceptions import RecordNotFoundError
from ecopoints.core.schemas import PaginationMeta
from ecopoints.core.validation import validate_request
from ecopoints.infrastructure.database.session import AsyncSessionLocal
from ecopoints.infrastructure.database.transaction import RetryPolicy, run_transaction
from ecopoints.models.account import UserAccount
from ecopoints.repositories.account import AccountRepository
from ecopoints.repositories.point_transaction import PointTransactionRepository
from ecopoints.services.notifications import (
    ChangeEvent,
    ChangeNotifier,
    ChangeType,
    get_change_notifier,
)
from ecopoints.services.points.schemas import (
    AccountBalance,
    AccountRef,
    CreditRequest,
    PointTransactionOut,
    TransactionListResponse,
    TransactionQuery,
    TransactionType,
)

logger = logging.getLogger(__name__)


def _to_balance(account: UserAccount) -> AccountBalance:
    return AccountBalance(
        user_id=account.id,
        point_balance=account.point_balance,
        updated_at=account.updated_at,
    )


class PointsService:
    """Service for point account lifecycle and crediting."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        *,
        notifier: ChangeNotifier | None = None,
        retry_policy: RetryPolicy | None = None,
        settings: Settings | None = None,
    ):
        """Initialize points service.

        @param session_factory - Optional factory for creating database sessions
        @param notifier - Change notifier for post-commit events
        @param retry_policy - Conflict retry policy
        @param settings - Settings override
        """
        settings = settings or get_settings()
        self._session_factory = session_factory or AsyncSessionLocal
        self._notifier = notifier or get_change_notifier()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(settings)

    async def open_account(self, user_id: str) -> AccountBalance:
        """Create a zero-balance account, or return the existing one.

        @param user_id - Identity provider user id
        @returns Account balance
        """
        ref = validate_request(AccountRef, user_id=user_id)

        async def work(session: AsyncSession) -> tuple[AccountBalance, bool]:
            accounts = AccountRepository(session)
            account = await accounts.get_by_id(ref.user_id)
            if account is not None:
                return _to_balance(account), False
            account = await accounts.open(ref.user_id)
            return _to_balance(account), True

        balance, created = await run_transaction(
            self._session_factory, work, policy=self._retry_policy, name="open_account"
        )
        if created:
            logger.info(f"Opened point account for {ref.user_id}")
        return balance

    async def credit_points(
        self,
        user_id: str,
        amount: int,
        reason: str | None = None,
    ) -> AccountBalance:
        """Add points to an account.

        @param user_id - Account owner
        @param amount - Positive number of points
        @param reason - Description stored in the point history
        @returns Balance after the credit
        @raises ValidationError, RecordNotFoundError,
            TransientConflictError, StorageUnavailableError
        """
        request = validate_request(
            CreditRequest, user_id=user_id, amount=amount, reason=reason
        )

        async def work(session: AsyncSession) -> AccountBalance:
            account = await AccountRepository(session).get_by_id(request.user_id)
            if account is None:
                raise RecordNotFoundError(
                    f"Account {request.user_id} not found", user_id=request.user_id
                )
            account.point_balance += request.amount
            await PointTransactionRepository(session).record(
                account.id,
                request.amount,
                TransactionType.POINTS_AWARDED.value,
                description=request.reason,
            )
            return _to_balance(account)

        balance = await run_transaction(
            self._session_factory, work, policy=self._retry_policy, name="credit_points"
        )

        logger.info(
            f"Credited {request.amount} points to {request.user_id}"
            + (f" ({request.reason})" if request.reason else ""),
            extra={"user_id": request.user_id, "amount": request.amount},
        )
        await self._notifier.publish(
            ChangeEvent(
                type=ChangeType.POINTS_CREDITED,
                user_id=request.user_id,
                point_balance=balance.point_balance,
            )
        )
        return balance

    async def get_balance(self, user_id: str) -> AccountBalance:
        """Get an account's current balance.

        @param user_id - Account owner
        @returns Account balance
        @raises RecordNotFoundError if the account does not exist
        """
        ref = validate_request(AccountRef, user_id=user_id)

        async def work(session: AsyncSession) -> AccountBalance:
            account = await AccountRepository(session).get_by_id(ref.user_id)
            if account is None:
                raise RecordNotFoundError(
                    f"Account {ref.user_id} not found", user_id=ref.user_id
                )
            return _to_balance(account)

        return await run_transaction(
            self._session_factory, work, policy=self._retry_policy, name="get_balance"
        )

    async def list_transactions(
        self,
        user_id: str,
        type: TransactionType | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> TransactionListResponse:
        """List a user's point history, newest first.

        @param user_id - Account owner
        @param type - Optional transaction type filter
        @param page - Page number (1-based)
        @param page_size - Items per page
        @returns Paginated history
        """
        query = validate_request(
            TransactionQuery,
            user_id=user_id,
            type=type,
            page=page,
            page_size=page_size,
        )
        type_value = query.type.value if query.type else None

        async def work(session: AsyncSession) -> TransactionListResponse:
            history = PointTransactionRepository(session)
            total_items = await history.count_by_user(query.user_id, type=type_value)
            entries = await history.get_by_user(
                query.user_id,
                type=type_value,
                skip=(query.page - 1) * query.page_size,
                limit=query.page_size,
            )
            return TransactionListResponse(
                items=[PointTransactionOut.model_validate(e) for e in entries],
                meta=PaginationMeta.build(query.page, query.page_size, total_items),
            )

        return await run_transaction(
            self._session_factory, work, policy=self._retry_policy, name="list_transactions"
        )


# Service singleton with dependency injection support
_points_service: PointsService | None = None


def get_points_service() -> PointsService:
    """Get or create points service singleton.

    @returns PointsService instance
    """
    global _points_service
    if _points_service is None:
        _points_service = PointsService()
    return _points_service


def reset_points_service() -> None:
    """Reset points service singleton (for testing)."""
    global _points_service
    _points_service = None
