"""Repository layer for database operations.

This module provides async repository implementations using SQLAlchemy 2.x.
All repositories follow the Repository pattern with consistent CRUD operations.
"""

from ecopoints.repositories.account import AccountRepository
from ecopoints.repositories.base import BaseRepository
from ecopoints.repositories.point_transaction import PointTransactionRepository
from ecopoints.repositories.redemption import RedemptionRepository
from ecopoints.repositories.reward import RewardRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "RewardRepository",
    "RedemptionRepository",
    "PointTransactionRepository",
]
