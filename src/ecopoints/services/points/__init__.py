"""Point account service module."""

from ecopoints.services.points.schemas import (
    AccountBalance,
    CreditRequest,
    PointTransactionOut,
    TransactionListResponse,
    TransactionType,
)
from ecopoints.services.points.service import (
    PointsService,
    get_points_service,
    reset_points_service,
)

__all__ = [
    # Enums
    "TransactionType",
    # Schemas
    "AccountBalance",
    "CreditRequest",
    "PointTransactionOut",
    "TransactionListResponse",
    # Service
    "PointsService",
    "get_points_service",
    "reset_points_service",
]
