"""Redemption schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ecopoints.core.schemas import USER_ID_PATTERN, PaginationMeta


class RedemptionStatus(str, Enum):
    """Redemption record status."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RedeemRequest(BaseModel):
    """Exchange points for one unit of a reward."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        pattern=USER_ID_PATTERN,
        strict=True,
        description="Caller user id",
    )
    reward_id: int = Field(..., gt=0, strict=True, description="Reward listing ID")


class RedemptionLookup(BaseModel):
    """A redemption addressed on behalf of its owner."""

    redemption_id: int = Field(..., gt=0, strict=True, description="Redemption record ID")
    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        pattern=USER_ID_PATTERN,
        strict=True,
        description="Caller user id",
    )


class CancelRequest(RedemptionLookup):
    """Reverse a pending redemption."""


class CompleteRequest(BaseModel):
    """Mark a pending redemption as fulfilled."""

    redemption_id: int = Field(..., gt=0, strict=True, description="Redemption record ID")


class RedemptionQuery(BaseModel):
    """Filter and pagination for a user's ledger."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        pattern=USER_ID_PATTERN,
        strict=True,
        description="Owner user id",
    )
    status: RedemptionStatus | None = Field(None, description="Filter by status")
    page: int = Field(1, ge=1, strict=True, description="Page number")
    page_size: int = Field(20, ge=1, le=100, strict=True, description="Items per page")


class RedemptionRecordOut(BaseModel):
    """Redemption record as returned to callers."""

    id: int = Field(..., description="Redemption record ID")
    user_id: str = Field(..., description="Owner user id")
    reward_id: int = Field(..., description="Reward listing ID")
    cost_snapshot: int = Field(..., description="Reward cost at redemption time")
    code: str = Field(..., description="Claim code presented to collect the reward")
    status: RedemptionStatus = Field(..., description="Current status")
    created_at: datetime = Field(..., description="Redemption time")
    cancelled_at: datetime | None = Field(None, description="Cancellation time")
    completed_at: datetime | None = Field(None, description="Fulfillment time")

    class Config:
        from_attributes = True


class RedemptionListResponse(BaseModel):
    """Paginated redemption list response."""

    items: list[RedemptionRecordOut] = Field(..., description="Redemption records")
    meta: PaginationMeta = Field(..., description="Pagination metadata")


class RedeemBody(BaseModel):
    """HTTP body for creating a redemption."""

    reward_id: int = Field(..., gt=0, strict=True, description="Reward listing ID")


class RedemptionStats(BaseModel):
    """Ledger-wide redemption statistics for catalog administration."""

    total: int = Field(..., ge=0, description="All redemption records")
    pending: int = Field(..., ge=0, description="Awaiting fulfillment")
    completed: int = Field(..., ge=0, description="Fulfilled redemptions")
    cancelled: int = Field(..., ge=0, description="Cancelled redemptions")
    success_rate: float = Field(
        ..., ge=0, le=100, description="Completed share of closed redemptions (%)"
    )
    total_points_redeemed: int = Field(
        ..., ge=0, description="Cost snapshots of completed redemptions"
    )
