"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from storefront_gate.db.session import get_db
from storefront_gate.schemas.session import AuthenticatedUser, SessionDescriptor

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_descriptor(request: Request) -> SessionDescriptor:
    """Return the session descriptor validated by the authentication middleware.

    Raises:
        HTTPException: If the request bypassed session validation
    """
    descriptor = getattr(request.state, "session", None)
    if descriptor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized Request: Missing session token (ts)",
        )
    return descriptor


def get_optional_user(request: Request) -> AuthenticatedUser | None:
    """Return the identity recovered from the public auth token, if any."""
    return getattr(request.state, "user", None)


def get_current_user(
    user: Annotated[AuthenticatedUser | None, Depends(get_optional_user)],
) -> AuthenticatedUser:
    """Require a logged-in identity.

    Raises:
        HTTPException: If the request was not made with `login: true`
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Login required",
        )
    return user


SessionDescriptorDep = Annotated[SessionDescriptor, Depends(get_session_descriptor)]
OptionalUserDep = Annotated[AuthenticatedUser | None, Depends(get_optional_user)]
CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
