"""OIDC discovery.

Fetches <provider_url>/.well-known/openid-configuration and validates the
fields every backend relies on. The full document is retained so backends
can decode provider-specific claims (e.g. revocation_endpoint).
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from acp_identity.constants import OIDC_DISCOVERY_PATH
from acp_identity.exceptions import ProviderDiscoveryError, TransportError
from acp_identity.telemetry.system_logger import get_system_logger
from acp_identity.utils.http_client import HTTPClient

_logger = get_system_logger()

ClaimsT = TypeVar("ClaimsT", bound=BaseModel)


class ProviderMetadata(BaseModel):
    """Discovered provider endpoints.

    Unknown fields are kept (extra="allow") and available through claims().
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    jwks_uri: str
    userinfo_endpoint: str | None = None
    revocation_endpoint: str | None = None

    def claims(self, model: type[ClaimsT]) -> ClaimsT:
        """Decode the discovery document into a backend-specific claims model.

        Args:
            model: Pydantic model describing the claims the backend cares about.

        Raises:
            ProviderDiscoveryError: If the document doesn't fit the model.
        """
        try:
            return model.model_validate(self.model_dump())
        except ValidationError as e:
            raise ProviderDiscoveryError(self.issuer, f"invalid claims: {e}") from e


def discovery_url(provider_url: str) -> str:
    """Well-known discovery URL for a provider base URL."""
    return provider_url.rstrip("/") + OIDC_DISCOVERY_PATH


def _discovery_failed(provider_url: str, reason: str, error: Exception | None = None) -> ProviderDiscoveryError:
    """Log a provider_discovery_failed event and build the matching error."""
    _logger.error(
        {
            "event": "provider_discovery_failed",
            "provider_url": provider_url,
            "error_type": type(error).__name__ if error is not None else ProviderDiscoveryError.__name__,
            "error_message": reason,
        }
    )
    return ProviderDiscoveryError(provider_url, reason)


async def discover(provider_url: str, http_client: HTTPClient) -> ProviderMetadata:
    """Fetch and validate the provider's discovery document.

    One network call. The issuer in the document must match provider_url
    (ignoring a trailing slash). Every failure is logged as
    provider_discovery_failed before it is raised.

    Args:
        provider_url: Provider base URL (e.g. "https://gitlab.com").
        http_client: Transport used for the request.

    Returns:
        ProviderMetadata with endpoints and retained claims.

    Raises:
        ProviderDiscoveryError: Network failure, non-200 response, malformed
            document, missing required endpoints or issuer mismatch.
    """
    url = discovery_url(provider_url)

    try:
        document: Any = await http_client.request("GET", url)
    except TransportError as e:
        raise _discovery_failed(provider_url, str(e), e) from e

    if not isinstance(document, dict):
        raise _discovery_failed(provider_url, "discovery document is not a JSON object")

    try:
        metadata = ProviderMetadata.model_validate(document)
    except ValidationError as e:
        raise _discovery_failed(provider_url, f"malformed discovery document: {e}", e) from e

    if metadata.issuer.rstrip("/") != provider_url.rstrip("/"):
        raise _discovery_failed(
            provider_url,
            f"issuer did not match the issuer returned by provider, expected {provider_url!r} got {metadata.issuer!r}",
        )

    _logger.info(
        {
            "event": "provider_discovered",
            "provider_url": provider_url,
            "details": {
                "authorization_endpoint": metadata.authorization_endpoint,
                "token_endpoint": metadata.token_endpoint,
            },
        }
    )
    return metadata
