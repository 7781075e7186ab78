"""Repository for redemption ledger operations."""

from typing import Sequence

from sqlalchemy import desc, func, select

from ecopoints.models.redemption import RedemptionRecord
from ecopoints.repositories.base import BaseRepository


class RedemptionRepository(BaseRepository[RedemptionRecord]):
    """Repository for RedemptionRecord database operations.

    Handles ledger queries including:
    - Claim code collision checks
    - Per-user history with status filter
    - Ledger-wide totals by status
    """

    model = RedemptionRecord

    async def code_exists(self, code: str) -> bool:
        """Check whether a claim code is already in the ledger.

        @param code - Claim code
        @returns True if taken
        """
        return await self.exists(code=code)

    async def get_by_user(
        self,
        user_id: str,
        *,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Sequence[RedemptionRecord]:
        """Get a user's redemptions, newest first.

        @param user_id - Owner user id
        @param status - Optional status filter
        @param skip - Pagination offset
        @param limit - Maximum results
        @returns List of redemption records
        """
        stmt = self._build_query().where(self.model.user_id == user_id)
        if status:
            stmt = stmt.where(self.model.status == status)
        stmt = (
            stmt.order_by(desc(self.model.created_at), desc(self.model.id))
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_user(self, user_id: str, *, status: str | None = None) -> int:
        """Count a user's redemptions.

        @param user_id - Owner user id
        @param status - Optional status filter
        @returns Number of records
        """
        return await self.count(user_id=user_id, status=status)

    async def get_status_totals(self) -> dict[str, tuple[int, int]]:
        """Aggregate the whole ledger by status.

        @returns Mapping of status to (record count, summed cost snapshots)
        """
        stmt = select(
            self.model.status,
            func.count(),
            func.coalesce(func.sum(self.model.cost_snapshot), 0),
        ).group_by(self.model.status)
        result = await self.session.execute(stmt)
        return {status: (count, points) for status, count, points in result.all()}
