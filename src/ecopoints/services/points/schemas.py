"""Point account schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ecopoints.core.schemas import USER_ID_PATTERN, PaginationMeta


class TransactionType(str, Enum):
    """Kind of point balance change."""

    POINTS_AWARDED = "points_awarded"
    POINTS_REDEEMED = "points_redeemed"
    POINTS_REFUNDED = "points_refunded"


class AccountRef(BaseModel):
    """An account addressed by its user id."""

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        pattern=USER_ID_PATTERN,
        strict=True,
        description="Identity provider user id",
    )


class CreditRequest(AccountRef):
    """Credit points earned outside the redemption engine."""

    amount: int = Field(..., gt=0, strict=True, description="Points to add")
    reason: str | None = Field(None, max_length=500, description="Why points were awarded")


class TransactionQuery(AccountRef):
    """Filter and pagination for a user's point history."""

    type: TransactionType | None = Field(None, description="Filter by type")
    page: int = Field(1, ge=1, strict=True, description="Page number")
    page_size: int = Field(20, ge=1, le=100, strict=True, description="Items per page")


class AccountBalance(BaseModel):
    """Current point balance of an account."""

    user_id: str = Field(..., description="Account owner")
    point_balance: int = Field(..., ge=0, description="Spendable points")
    updated_at: datetime = Field(..., description="Last balance change")


class PointTransactionOut(BaseModel):
    """Point history entry as returned to callers."""

    id: int = Field(..., description="Entry ID")
    user_id: str = Field(..., description="Account owner")
    points: int = Field(..., description="Signed balance change")
    type: TransactionType = Field(..., description="Change type")
    description: str | None = Field(None, description="What the change was for")
    redemption_id: int | None = Field(None, description="Related redemption record")
    created_at: datetime = Field(..., description="Change time")

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    """Paginated point history response."""

    items: list[PointTransactionOut] = Field(..., description="History entries")
    meta: PaginationMeta = Field(..., description="Pagination metadata")
