"""Caller identity dependencies for FastAPI.

Authentication happens upstream: the gateway verifies the session and
forwards the user id in a trusted header. This module only turns that
header into an explicit caller object handed to the services.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from ecopoints.core.config import get_settings

logger = logging.getLogger(__name__)


class AuthenticatedCaller:
    """Represents the caller asserted by the gateway."""

    def __init__(self, user_id: str):
        """Initialize caller.

        @param user_id - User id from the identity header
        """
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"AuthenticatedCaller(user_id={self.user_id!r})"


async def get_current_caller(request: Request) -> AuthenticatedCaller:
    """Get the calling user from the identity header.

    @param request - Incoming request
    @returns AuthenticatedCaller for the asserted user id
    @raises HTTPException if the header is missing or blank
    """
    header = get_settings().identity_header
    user_id = (request.headers.get(header) or "").strip()

    if not user_id:
        logger.debug(f"Rejected request without {header} header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return AuthenticatedCaller(user_id=user_id)


# Type alias for dependency injection
CurrentCaller = Annotated[AuthenticatedCaller, Depends(get_current_caller)]
