"""Tests for the redemption state machine."""

import pytest

from ecopoints.core.exceptions import InvalidStateTransitionError
from ecopoints.services.redemption.schemas import RedemptionStatus
from ecopoints.services.redemption.state import (
    TERMINAL_STATES,
    can_transition,
    ensure_transition,
)


class TestTransitions:
    """Tests for allowed status changes."""

    def test_pending_can_close(self):
        """Test pending moves to either terminal state."""
        assert can_transition(RedemptionStatus.PENDING, RedemptionStatus.CANCELLED)
        assert can_transition(RedemptionStatus.PENDING, RedemptionStatus.COMPLETED)

    def test_terminal_states(self):
        """Test completed and cancelled are terminal."""
        assert TERMINAL_STATES == {RedemptionStatus.COMPLETED, RedemptionStatus.CANCELLED}

    @pytest.mark.parametrize("current", [RedemptionStatus.COMPLETED, RedemptionStatus.CANCELLED])
    @pytest.mark.parametrize("target", list(RedemptionStatus))
    def test_terminal_states_are_immutable(self, current, target):
        """Test nothing leaves a terminal state."""
        assert not can_transition(current, target)

    def test_pending_to_pending_rejected(self):
        """Test self-transition is not a transition."""
        assert not can_transition(RedemptionStatus.PENDING, RedemptionStatus.PENDING)

    def test_ensure_transition_accepts_raw_status(self):
        """Test database strings are accepted."""
        ensure_transition(1, "pending", RedemptionStatus.CANCELLED)

    def test_ensure_transition_raises(self):
        """Test invalid change raises with context."""
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            ensure_transition(7, "cancelled", RedemptionStatus.CANCELLED)

        assert exc_info.value.context == {
            "redemption_id": 7,
            "current": "cancelled",
            "target": "cancelled",
        }
        assert exc_info.value.status_code == 409
