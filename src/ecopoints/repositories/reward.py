"""Repository for reward catalog listings."""

from ecopoints.models.reward import RewardListing
from ecopoints.repositories.base import BaseRepository


class RewardRepository(BaseRepository[RewardListing]):
    """Repository for RewardListing database operations.

    The engine only reads cost/stock and decrements stock; listings are
    created by catalog administration.
    """

    model = RewardListing
