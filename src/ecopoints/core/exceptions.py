"""Error taxonomy shared by the services and the HTTP layer.

Business-rule errors are terminal: they are raised before any write and are
never retried. Infrastructure errors are retried inside the transaction
runner and only surface once the attempt budget is spent; callers may then
repeat the whole operation because nothing was partially applied.
"""

from typing import Any


class RedemptionError(Exception):
    """Base class for all engine errors."""

    code: str = "redemption_error"
    status_code: int = 400
    retryable: bool = False

    def __init__(self, detail: str, **context: Any) -> None:
        super().__init__(detail)
        self.detail = detail
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "error": self.code,
            "detail": self.detail,
            "retryable": self.retryable,
        }


class ValidationError(RedemptionError):
    """Malformed input."""

    code = "validation_error"
    status_code = 422


class RecordNotFoundError(RedemptionError):
    """Unknown user, reward or redemption id."""

    code = "record_not_found"
    status_code = 404


class InsufficientPointsError(RedemptionError):
    code = "insufficient_points"
    status_code = 409


class OutOfStockError(RedemptionError):
    code = "out_of_stock"
    status_code = 409


class UnauthorizedError(RedemptionError):
    """Redemption does not belong to the caller."""

    code = "unauthorized"
    status_code = 403


class InvalidStateTransitionError(RedemptionError):
    code = "invalid_state_transition"
    status_code = 409


class TransientConflictError(RedemptionError):
    """Optimistic concurrency retries exhausted."""

    code = "transient_conflict"
    status_code = 503
    retryable = True


class StorageUnavailableError(RedemptionError):
    """Underlying transactional store unreachable."""

    code = "storage_unavailable"
    status_code = 503
    retryable = True


class CodeGenerationExhaustedError(RedemptionError):
    """Every generated claim code collided with an existing one."""

    code = "code_generation_exhausted"
    status_code = 503
    retryable = True
