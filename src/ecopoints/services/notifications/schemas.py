"""Schemas for change notifications."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    """Committed state changes observable by subscribers."""

    REDEMPTION_CREATED = "redemption.created"
    REDEMPTION_CANCELLED = "redemption.cancelled"
    REDEMPTION_COMPLETED = "redemption.completed"
    POINTS_CREDITED = "points.credited"


class ChangeEvent(BaseModel):
    """State snapshot taken right after a commit."""

    type: ChangeType = Field(..., description="Change type")
    user_id: str = Field(..., description="Affected account")
    point_balance: int | None = Field(None, description="Balance after the change")
    reward_id: int | None = Field(None, description="Affected reward listing")
    stock: int | None = Field(None, description="Stock after the change, if touched")
    redemption_id: int | None = Field(None, description="Affected redemption record")
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Commit time",
    )
