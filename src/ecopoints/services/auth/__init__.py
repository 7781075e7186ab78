"""Caller identity module."""

from ecopoints.services.auth.dependencies import (
    AuthenticatedCaller,
    CurrentCaller,
    get_current_caller,
)

__all__ = [
    "AuthenticatedCaller",
    "get_current_caller",
    "CurrentCaller",
]
