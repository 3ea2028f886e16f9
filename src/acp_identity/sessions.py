"""Session state for one authenticated user.

Owned and mutated by the broader login flow. Identity backends only read
the access token; resolved groups are returned to the caller, who persists
them into the session.

Token lifecycle (owned here, observed by backends):
    issued -> active -> revoked | expired
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator


class OAuthToken(BaseModel):
    """OAuth2 token pair as returned by the provider's token endpoint.

    Attributes:
        access_token: Bearer credential presented to provider APIs.
        token_type: Token type (almost always "Bearer").
        refresh_token: Optional refresh token.
        expiry: When the access token expires (UTC), if known.
        id_token: Raw OIDC ID token, if issued.
    """

    access_token: str
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expiry: datetime | None = None
    id_token: str | None = None

    @field_validator("expiry")
    @classmethod
    def expiry_as_utc(cls, value: datetime | None) -> datetime | None:
        """Treat an expiry without an offset as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_expired(self) -> bool:
        """Check if access token has expired. Tokens without expiry never expire."""
        if self.expiry is None:
            return False
        return datetime.now(timezone.utc) >= self.expiry


class SessionState(BaseModel):
    """Token pair and identity claims for one authenticated user.

    Attributes:
        access_token: Current OAuth token, None before login or after logout.
        claims: Identity claims resolved during login.
        groups: Group identifiers last resolved for this user.
    """

    access_token: OAuthToken | None = None
    claims: dict[str, Any] = Field(default_factory=dict)
    groups: list[str] = Field(default_factory=list)
