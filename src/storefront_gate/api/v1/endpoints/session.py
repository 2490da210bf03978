# src/storefront_gate/api/v1/endpoints/session.py
"""Endpoints exposing the authentication context of the current request."""

from __future__ import annotations

from fastapi import APIRouter, Request

from storefront_gate.api.v1.dependencies import (
    CurrentUserDep,
    OptionalUserDep,
    SessionDescriptorDep,
)
from storefront_gate.schemas.session import AuthenticatedUser, SessionContextResponse

router = APIRouter(tags=["session"])


@router.get("/session", response_model=SessionContextResponse)
async def get_session_context(
    request: Request,
    descriptor: SessionDescriptorDep,
    user: OptionalUserDep,
) -> SessionContextResponse:
    """Return the validated session descriptor and any recovered identity."""
    return SessionContextResponse(
        session=descriptor,
        user_id=user.id if user else None,
        public_token_presented=getattr(request.state, "public_token", None) is not None,
    )


@router.get("/me", response_model=AuthenticatedUser)
async def get_me(user: CurrentUserDep) -> AuthenticatedUser:
    """Return the identity of a logged-in caller."""
    return user
