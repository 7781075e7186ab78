"""Redemption ledger model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ecopoints.models.base import Base, TimestampMixin


class RedemptionRecord(Base, TimestampMixin):
    """One point-for-reward exchange in the ledger."""

    __tablename__ = "redemption_records"

    # Primary key
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )

    # References (the ledger owns neither)
    user_id: Mapped[str] = mapped_column(
        String(128), ForeignKey("user_accounts.id"), nullable=False, index=True
    )
    reward_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("reward_listings.id"), nullable=False, index=True
    )

    # Exchange details
    cost_snapshot: Mapped[int] = mapped_column(BigInteger, nullable=False)
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)

    # Status info
    status: Mapped[str] = mapped_column(
        String(20), default="pending", nullable=False, index=True
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="status",
        ),
        CheckConstraint("cost_snapshot > 0", name="cost_snapshot_positive"),
    )
