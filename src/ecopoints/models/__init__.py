"""Database models for EcoPoints Backend."""

from ecopoints.models.account import UserAccount
from ecopoints.models.base import Base, TimestampMixin
from ecopoints.models.point_transaction import PointTransaction
from ecopoints.models.redemption import RedemptionRecord
from ecopoints.models.reward import RewardListing

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Business models
    "UserAccount",
    "RewardListing",
    "RedemptionRecord",
    "PointTransaction",
]
