import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from src.auth.jwt import get_user_id_from_token
from src.auth.exceptions import InvalidTokenError

# Logger for this module
logger = logging.getLogger(__name__)

# Security scheme for JWT Bearer tokens
security = HTTPBearer(auto_error=False)

async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """
    Dependency returning the id of the authenticated user.

    There is no user table: the identity provider owns users, and every
    record here is scoped by the token's subject.

    Args:
        credentials: HTTP Bearer credentials containing the JWT

    Returns:
        User id ('sub' claim)

    Raises:
        HTTPException 401: If the token is missing or invalid

    Usage:
        @router.get("/")
        async def list_clients(user_id: CurrentUserId):
            ...
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return get_user_id_from_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

# Type alias for route handlers
CurrentUserId = Annotated[str, Depends(get_current_user_id)]
