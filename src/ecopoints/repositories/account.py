"""Repository for user point accounts."""

from ecopoints.models.account import UserAccount
from ecopoints.repositories.base import BaseRepository


class AccountRepository(BaseRepository[UserAccount]):
    """Repository for UserAccount database operations."""

    model = UserAccount

    async def open(self, user_id: str) -> UserAccount:
        """Insert a zero-balance account.

        @param user_id - Identity provider user id
        @returns Created account
        """
        return await self.create({"id": user_id, "point_balance": 0})
