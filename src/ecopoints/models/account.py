"""User point account model."""

from sqlalchemy import BigInteger, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ecopoints.models.base import Base, TimestampMixin


class UserAccount(Base, TimestampMixin):
    """Point balance held by a single user."""

    __tablename__ = "user_accounts"

    # Opaque id issued by the identity provider
    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    point_balance: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("point_balance >= 0", name="point_balance_non_negative"),
    )
