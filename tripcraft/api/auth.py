"""Minimal advisor auth dependency.

Stub implementation that extracts org_id/user_id from a bearer token or uses
development defaults. Client share requests do not use this; they are
authorized by share token.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from tripcraft.db.context import RequestContext

DEFAULT_ORG_ID = "00000000-0000-0000-0000-000000000001"
DEFAULT_USER_ID = "00000000-0000-0000-0000-000000000002"


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from authorization header.

    Either parses a simple "Bearer <org_id>:<user_id>" format or returns the
    development defaults when no header is sent.

    Args:
        authorization: Authorization header (e.g., "Bearer <token>")

    Returns:
        RequestContext with org_id and user_id

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(org_id=DEFAULT_ORG_ID, user_id=DEFAULT_USER_ID)

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # Strip "Bearer "

    org_id, _, user_id = token.partition(":")
    if not org_id or not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected org_id:user_id)",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(org_id=org_id, user_id=user_id)
