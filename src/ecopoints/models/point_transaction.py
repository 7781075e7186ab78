"""Point transaction history model."""

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ecopoints.models.base import Base, TimestampMixin


class PointTransaction(Base, TimestampMixin):
    """One signed change of a user's point balance.

    Append-only: rows are written in the same transaction as the balance
    change they describe and never updated afterwards.
    """

    __tablename__ = "point_transactions"

    # Primary key
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("user_accounts.id"), nullable=False, index=True
    )

    # Positive for awards and refunds, negative for redemptions
    points: Mapped[int] = mapped_column(BigInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    redemption_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("redemption_records.id"), nullable=True
    )

    __table_args__ = (
        CheckConstraint("points <> 0", name="points_non_zero"),
        CheckConstraint(
            "type IN ('points_awarded', 'points_redeemed', 'points_refunded')",
            name="type",
        ),
    )
