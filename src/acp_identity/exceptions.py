"""Exceptions for acp-identity.

Hierarchy:
    IdentityError
    ├── ProviderDiscoveryError    - discovery failed at construction (fatal for that backend)
    ├── EmptySessionError         - group resolution called without a usable session
    ├── UnsupportedProviderError  - registry has no backend of the requested kind
    ├── IDTokenVerificationError  - ID token rejected (signature, issuer, audience, expiry)
    └── TransportError            - remote call failed or response could not be decoded
        └── TokenRevokedError     - provider reports the token as expired or revoked

Only Revoke treats TokenRevokedError as success. Everything else propagates
to the caller unchanged.
"""

from __future__ import annotations

__all__ = [
    "EmptySessionError",
    "IDTokenVerificationError",
    "IdentityError",
    "ProviderDiscoveryError",
    "TokenRevokedError",
    "TransportError",
    "UnsupportedProviderError",
]


class IdentityError(Exception):
    """Base class for all acp-identity errors."""


class ProviderDiscoveryError(IdentityError):
    """Raised when the OIDC discovery document cannot be fetched or parsed.

    The backend must not be registered for login traffic.
    """

    def __init__(self, provider_url: str, reason: str) -> None:
        super().__init__(f"OIDC discovery failed for {provider_url}: {reason}")
        self.provider_url = provider_url
        self.reason = reason


class EmptySessionError(IdentityError, ValueError):
    """Raised when group resolution is invoked without a session or access token."""


class UnsupportedProviderError(IdentityError, ValueError):
    """Raised when no backend is registered for the configured provider kind."""

    def __init__(self, provider: str, supported: list[str]) -> None:
        super().__init__(f"Unsupported identity provider: {provider}. Valid options: {', '.join(supported)}")
        self.provider = provider


class IDTokenVerificationError(IdentityError):
    """Raised when an ID token fails signature or claims validation."""


class TransportError(IdentityError):
    """Raised when a request to the identity provider fails.

    Attributes:
        status_code: HTTP status returned by the provider, or None when the
            request never produced a response (connection error, timeout).
        body: Response body text when available.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        if status_code is not None:
            super().__init__(f"{message} (HTTP {status_code})")
        else:
            super().__init__(message)
        self.status_code = status_code
        self.body = body


class TokenRevokedError(TransportError):
    """Raised when the provider rejects a token as expired or revoked (HTTP 401)."""

    def __init__(self, body: str | None = None) -> None:
        super().__init__("token expired or revoked", status_code=401, body=body)
