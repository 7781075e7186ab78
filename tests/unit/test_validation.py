"""Tests for shared request validation."""

import pytest

from ecopoints.core.exceptions import ValidationError
from ecopoints.core.schemas import PaginationMeta
from ecopoints.core.validation import validate_request
from ecopoints.services.points.schemas import CreditRequest
from ecopoints.services.redemption.schemas import RedeemRequest


class TestValidateRequest:
    """Tests for validate_request."""

    def test_returns_model(self):
        """Test valid input builds the model."""
        request = validate_request(RedeemRequest, user_id="alice", reward_id=3)

        assert request.reward_id == 3

    def test_names_failing_field(self):
        """Test the error detail names the field and keeps pydantic errors."""
        with pytest.raises(ValidationError) as exc_info:
            validate_request(CreditRequest, user_id="alice", amount="5")

        assert exc_info.value.detail.startswith("Invalid amount:")
        assert exc_info.value.context["errors"][0]["loc"] == ("amount",)
        assert exc_info.value.status_code == 422

    @pytest.mark.parametrize("value", [True, "1", 1.5])
    def test_no_lax_integer_coercion(self, value):
        """Test bools, numeric strings and floats are not taken as ids."""
        with pytest.raises(ValidationError):
            validate_request(RedeemRequest, user_id="alice", reward_id=value)


class TestPaginationMeta:
    """Tests for PaginationMeta.build."""

    @pytest.mark.parametrize(
        "total_items,total_pages",
        [(0, 0), (1, 1), (20, 1), (21, 2)],
    )
    def test_page_count(self, total_items, total_pages):
        """Test total pages round up and are zero when empty."""
        meta = PaginationMeta.build(1, 20, total_items)

        assert meta.total_pages == total_pages
        assert meta.total_items == total_items
