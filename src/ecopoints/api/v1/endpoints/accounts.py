"""Point account API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ecopoints.services.auth import CurrentCaller
from ecopoints.services.points import (
    AccountBalance,
    PointsService,
    TransactionListResponse,
    TransactionType,
    get_points_service,
)

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.get("/me", response_model=AccountBalance)
async def get_my_balance(
    caller: CurrentCaller,
    service: Annotated[PointsService, Depends(get_points_service)],
) -> AccountBalance:
    """Get the caller's point balance."""
    return await service.get_balance(caller.user_id)


@router.get("/me/transactions", response_model=TransactionListResponse)
async def list_my_transactions(
    caller: CurrentCaller,
    service: Annotated[PointsService, Depends(get_points_service)],
    type: TransactionType | None = Query(None, description="Filter by type"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
) -> TransactionListResponse:
    """List the caller's point history, newest first."""
    return await service.list_transactions(
        user_id=caller.user_id,
        type=type,
        page=page,
        page_size=page_size,
    )
