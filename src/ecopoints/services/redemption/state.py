"""Redemption record state machine.

pending -> completed   (fulfillment)
pending -> cancelled   (cancel)

Both targets are terminal; a record that left pending is immutable.
"""

from ecopoints.core.exceptions import InvalidStateTransitionError
from ecopoints.services.redemption.schemas import RedemptionStatus

ALLOWED_TRANSITIONS: dict[RedemptionStatus, frozenset[RedemptionStatus]] = {
    RedemptionStatus.PENDING: frozenset(
        {RedemptionStatus.COMPLETED, RedemptionStatus.CANCELLED}
    ),
    RedemptionStatus.COMPLETED: frozenset(),
    RedemptionStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def can_transition(current: RedemptionStatus, target: RedemptionStatus) -> bool:
    """Check whether a status change is allowed."""
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(
    redemption_id: int,
    current: str | RedemptionStatus,
    target: RedemptionStatus,
) -> None:
    """Validate a status change.

    @param redemption_id - Record ID (for the error message)
    @param current - Current status
    @param target - Requested status
    @raises InvalidStateTransitionError if the transition is not allowed
    """
    current = RedemptionStatus(current)
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            f"Redemption {redemption_id} cannot move from {current.value} "
            f"to {target.value}",
            redemption_id=redemption_id,
            current=current.value,
            target=target.value,
        )
