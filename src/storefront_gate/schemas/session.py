"""Session descriptor and request identity schemas."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)


class SessionDescriptor(BaseModel):
    """Client-minted metadata proving that a session token is fresh.

    Clients send it Base64-encoded JSON in the `ts` header using camelCase keys.
    Only `sessionId`, `sessionPoint` and `generatedAt` are required; the other
    fields are descriptive and values of the wrong shape are dropped.
    """

    model_config = ConfigDict(
        validate_by_alias=True,
        validate_by_name=False,
        coerce_numbers_to_str=True,
        extra="ignore",
    )

    session_id: str = Field(..., alias="sessionId", min_length=1)
    session_point: str = Field(
        ...,
        alias="sessionPoint",
        min_length=1,
        description="Unique per tab or connection",
    )
    generated_at: int = Field(
        ...,
        alias="generatedAt",
        gt=0,
        description="Client clock, epoch milliseconds",
    )
    user_agent: str | None = Field(None, alias="userAgent")
    language: str | None = None
    platform: str | None = None
    screen_resolution: str | None = Field(None, alias="screenResolution")
    timezone_offset: int | None = Field(
        None,
        alias="timezoneOffset",
        description="Offset from UTC in minutes",
    )
    last_access: int | None = Field(None, alias="lastAccess")

    @field_validator(
        "user_agent",
        "language",
        "platform",
        "screen_resolution",
        "timezone_offset",
        "last_access",
        mode="wrap",
    )
    @classmethod
    def _drop_unparseable(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class AuthenticatedUser(BaseModel):
    """Identity recovered from a public auth token."""

    id: str


class SessionContextResponse(BaseModel):
    """Authentication context attached to the current request."""

    session: SessionDescriptor
    user_id: str | None = Field(None, description="Present when the request carried `login: true`")
    public_token_presented: bool = Field(
        ...,
        description="True when the authorization header was passed through unchecked",
    )
