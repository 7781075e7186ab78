"""API v1 module."""

from fastapi import APIRouter

from ecopoints.api.v1.endpoints import accounts, redemptions

api_router = APIRouter()

# Include routers
api_router.include_router(redemptions.router)
api_router.include_router(accounts.router)
