"""Redemption consistency engine."""

from ecopoints.core.exceptions import (
    CodeGenerationExhaustedError,
    InsufficientPointsError,
    InvalidStateTransitionError,
    OutOfStockError,
    RecordNotFoundError,
    RedemptionError,
    StorageUnavailableError,
    TransientConflictError,
    UnauthorizedError,
    ValidationError,
)
from ecopoints.services.redemption.codes import CodeGenerator
from ecopoints.services.redemption.schemas import (
    RedeemBody,
    RedemptionListResponse,
    RedemptionRecordOut,
    RedemptionStats,
    RedemptionStatus,
)
from ecopoints.services.redemption.service import (
    RedemptionService,
    get_redemption_service,
    reset_redemption_service,
)

__all__ = [
    # Enums
    "RedemptionStatus",
    # Schemas
    "RedeemBody",
    "RedemptionRecordOut",
    "RedemptionListResponse",
    "RedemptionStats",
    # Errors
    "RedemptionError",
    "ValidationError",
    "RecordNotFoundError",
    "InsufficientPointsError",
    "OutOfStockError",
    "UnauthorizedError",
    "InvalidStateTransitionError",
    "TransientConflictError",
    "StorageUnavailableError",
    "CodeGenerationExhaustedError",
    # Service
    "CodeGenerator",
    "RedemptionService",
    "get_redemption_service",
    "reset_redemption_service",
]
