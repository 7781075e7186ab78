"""Repository for point transaction history."""

from typing import Sequence

from sqlalchemy import desc

from ecopoints.models.point_transaction import PointTransaction
from ecopoints.repositories.base import BaseRepository


class PointTransactionRepository(BaseRepository[PointTransaction]):
    """Repository for PointTransaction database operations."""

    model = PointTransaction

    async def record(
        self,
        user_id: str,
        points: int,
        type: str,
        *,
        description: str | None = None,
        redemption_id: int | None = None,
    ) -> PointTransaction:
        """Append a history entry to the current transaction.

        @param user_id - Account owner
        @param points - Signed balance change
        @param type - Transaction type value
        @param description - Human readable description
        @param redemption_id - Related redemption record, if any
        @returns Created entry
        """
        return await self.create(
            {
                "user_id": user_id,
                "points": points,
                "type": type,
                "description": description,
                "redemption_id": redemption_id,
            }
        )

    async def get_by_user(
        self,
        user_id: str,
        *,
        type: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Sequence[PointTransaction]:
        """Get a user's history, newest first.

        @param user_id - Account owner
        @param type - Optional type filter
        @param skip - Pagination offset
        @param limit - Maximum results
        @returns List of entries
        """
        stmt = self._build_query().where(self.model.user_id == user_id)
        if type:
            stmt = stmt.where(self.model.type == type)
        stmt = (
            stmt.order_by(desc(self.model.created_at), desc(self.model.id))
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_by_user(self, user_id: str, *, type: str | None = None) -> int:
        """Count a user's history entries.

        @param user_id - Account owner
        @param type - Optional type filter
        @returns Number of entries
        """
        return await self.count(user_id=user_id, type=type)
