"""Provider core and the uniform backend interface.

ProviderCore holds the OAuth2/OIDC configuration every backend needs
(credentials, discovered endpoints, scopes, ID token verifier). Backends
own a ProviderCore and add their own endpoints and operations.

The authorization layer talks to backends only through IdentityBackend,
so it never needs to know which concrete backend it is holding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable
from urllib.parse import urlencode

from acp_identity.idp.discovery import ProviderMetadata, discover
from acp_identity.idp.verifier import IDTokenVerifier

if TYPE_CHECKING:
    from acp_identity.config import ProviderConfig
    from acp_identity.sessions import OAuthToken, SessionState
    from acp_identity.utils.http_client import HTTPClient


@dataclass(frozen=True)
class OAuth2Config:
    """OAuth2 client configuration built from discovered endpoints."""

    client_id: str
    client_secret: str
    authorization_endpoint: str
    token_endpoint: str
    redirect_url: str
    scopes: tuple[str, ...]

    def authorization_url(self, state: str, **params: str) -> str:
        """Build the authorization-code request URL the user is redirected to.

        Args:
            state: Opaque CSRF state echoed back by the provider.
            **params: Extra query parameters (e.g. nonce, prompt).
        """
        query = {
            "client_id": self.client_id,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
        }
        if self.redirect_url:
            query["redirect_uri"] = self.redirect_url
        query.update(params)

        separator = "&" if "?" in self.authorization_endpoint else "?"
        return f"{self.authorization_endpoint}{separator}{urlencode(query)}"


@dataclass(frozen=True)
class ProviderCore:
    """Per-backend OAuth2/OIDC configuration. Immutable once built.

    Attributes:
        provider_url: Discovery base URL actually used.
        client_id: OAuth client ID.
        client_secret: OAuth client secret.
        redirect_url: Callback URL (may be empty).
        scopes: Scopes actually requested.
        metadata: Discovered endpoints and claims.
        oauth: OAuth2 client configuration.
        verifier: ID token verifier bound to client_id.
    """

    provider_url: str
    client_id: str
    client_secret: str
    redirect_url: str
    scopes: tuple[str, ...]
    metadata: ProviderMetadata
    oauth: OAuth2Config
    verifier: IDTokenVerifier


@runtime_checkable
class IdentityBackend(Protocol):
    """Protocol for pluggable identity-provider backends.

    Implementations are immutable after construction and safe to call
    concurrently. Each call is one network round trip with no retries.
    """

    name: str
    core: ProviderCore

    async def resolve_groups(self, session: "SessionState | None") -> list[str]:
        """Return the group identifiers of the session's user.

        Raises:
            EmptySessionError: If session or its access token is missing.
            TransportError: If the provider call fails.
        """
        ...

    async def revoke(self, token: "OAuthToken") -> None:
        """Revoke an access token. Already-revoked tokens are not an error.

        Raises:
            TransportError: If the provider call fails.
        """
        ...


async def build_provider_core(
    config: "ProviderConfig",
    http_client: "HTTPClient",
    *,
    default_provider_url: str,
    default_scopes: tuple[str, ...],
) -> ProviderCore:
    """Run the construction steps shared by all backends.

    1. Substitute the backend's default provider URL if none is configured.
    2. Perform OIDC discovery (one network call).
    3. Substitute the backend's default scopes if none are configured.
    4. Build the OAuth2 client configuration.
    5. Build the ID token verifier bound to the client ID.

    Raises:
        ProviderDiscoveryError: If discovery fails. Nothing is built.
    """
    provider_url = config.provider_url or default_provider_url

    metadata = await discover(provider_url, http_client)

    scopes = tuple(config.scopes) if config.scopes else default_scopes

    oauth = OAuth2Config(
        client_id=config.client_id,
        client_secret=config.client_secret,
        authorization_endpoint=metadata.authorization_endpoint,
        token_endpoint=metadata.token_endpoint,
        redirect_url=config.redirect_url,
        scopes=scopes,
    )
    verifier = IDTokenVerifier(
        issuer=metadata.issuer,
        client_id=config.client_id,
        jwks_uri=metadata.jwks_uri,
    )

    return ProviderCore(
        provider_url=provider_url,
        client_id=config.client_id,
        client_secret=config.client_secret,
        redirect_url=config.redirect_url,
        scopes=scopes,
        metadata=metadata,
        oauth=oauth,
        verifier=verifier,
    )
