"""Redemption API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from ecopoints.services.auth import CurrentCaller
from ecopoints.services.redemption import (
    RedeemBody,
    RedemptionListResponse,
    RedemptionRecordOut,
    RedemptionService,
    RedemptionStatus,
    get_redemption_service,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/redemptions", tags=["Redemptions"])


@router.post(
    "",
    response_model=RedemptionRecordOut,
    status_code=status.HTTP_201_CREATED,
)
async def redeem_reward(
    body: RedeemBody,
    caller: CurrentCaller,
    service: Annotated[RedemptionService, Depends(get_redemption_service)],
) -> RedemptionRecordOut:
    """Exchange points for one unit of a reward.

    Returns the pending record with its claim code.
    """
    return await service.redeem(user_id=caller.user_id, reward_id=body.reward_id)


@router.get("", response_model=RedemptionListResponse)
async def list_redemptions(
    caller: CurrentCaller,
    service: Annotated[RedemptionService, Depends(get_redemption_service)],
    status: RedemptionStatus | None = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
) -> RedemptionListResponse:
    """List the caller's redemptions, newest first."""
    return await service.list_redemptions(
        user_id=caller.user_id,
        status=status,
        page=page,
        page_size=page_size,
    )


@router.get("/{redemption_id}", response_model=RedemptionRecordOut)
async def get_redemption(
    redemption_id: int,
    caller: CurrentCaller,
    service: Annotated[RedemptionService, Depends(get_redemption_service)],
) -> RedemptionRecordOut:
    """Get one of the caller's redemptions."""
    return await service.get_redemption(
        redemption_id=redemption_id, user_id=caller.user_id
    )


@router.post("/{redemption_id}/cancel")
async def cancel_redemption(
    redemption_id: int,
    caller: CurrentCaller,
    service: Annotated[RedemptionService, Depends(get_redemption_service)],
) -> dict:
    """Cancel a pending redemption and refund its points."""
    await service.cancel(redemption_id=redemption_id, user_id=caller.user_id)
    return {
        "success": True,
        "redemption_id": redemption_id,
        "message": "Redemption cancelled successfully",
    }
