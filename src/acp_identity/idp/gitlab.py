"""GitLab identity backend.

Authenticates against GitLab's OpenID Connect provider, lists the user's
groups through the GitLab REST API and revokes access tokens.

Docs:
- https://docs.gitlab.com/ee/integration/openid_connect_provider.html
- https://docs.gitlab.com/ee/api/groups.html#list-groups
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from acp_identity.constants import SCOPE_OPENID
from acp_identity.exceptions import EmptySessionError, TokenRevokedError, TransportError
from acp_identity.idp.provider import ProviderCore, build_provider_core
from acp_identity.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from acp_identity.config import ProviderConfig
    from acp_identity.sessions import OAuthToken, SessionState
    from acp_identity.utils.http_client import HTTPClient

_logger = get_system_logger()

DEFAULT_GITLAB_PROVIDER_URL = "https://gitlab.com"
DEFAULT_GITLAB_REVOKE_URL = "https://gitlab.com/oauth/revoke"
DEFAULT_GITLAB_GROUPS_URL = "https://gitlab.com/api/v4/groups"

# "api" is required for the groups API
DEFAULT_GITLAB_SCOPES: tuple[str, ...] = (SCOPE_OPENID, "api", "read_user", "profile", "email")

_GROUPS_API_PATH = "/api/v4/groups"


class GitLabClaims(BaseModel):
    """Discovery document claims GitLab may publish beyond the standard endpoints."""

    model_config = ConfigDict(extra="ignore")

    revocation_endpoint: str | None = None


class GitLabGroup(BaseModel):
    """One entry of GET /api/v4/groups.

    Only id is read; every other attribute (name, path, full_path, ...) is
    ignored, whatever its value.
    """

    model_config = ConfigDict(extra="ignore")

    id: int | str


_GROUP_LIST = TypeAdapter(list[GitLabGroup])


def groups_url_for(provider_url: str) -> str:
    """Groups API endpoint for a GitLab instance."""
    if provider_url.rstrip("/") == DEFAULT_GITLAB_PROVIDER_URL:
        return DEFAULT_GITLAB_GROUPS_URL
    return provider_url.rstrip("/") + _GROUPS_API_PATH


class GitLabProvider:
    """GitLab implementation of the IdentityBackend protocol.

    Built once per configured backend with create(); read-only afterwards,
    so resolve_groups() and revoke() can be awaited concurrently.

    Usage:
        provider = await GitLabProvider.create(config, http_client)
        session.groups = await provider.resolve_groups(session)
        await provider.revoke(session.access_token)
    """

    def __init__(
        self,
        core: ProviderCore,
        http_client: "HTTPClient",
        *,
        name: str = "gitlab",
        revoke_url: str = DEFAULT_GITLAB_REVOKE_URL,
        groups_url: str = DEFAULT_GITLAB_GROUPS_URL,
    ) -> None:
        self.name = name
        self.core = core
        self.revoke_url = revoke_url
        self.groups_url = groups_url
        self._http = http_client

    @classmethod
    async def create(cls, config: "ProviderConfig", http_client: "HTTPClient") -> "GitLabProvider":
        """Build a GitLab backend from configuration.

        Runs discovery against the configured (or default) provider URL,
        fills default scopes, and lets the discovery document override the
        revoke endpoint when it publishes revocation_endpoint.

        Args:
            config: Backend configuration.
            http_client: Transport shared with other backends.

        Returns:
            Fully initialized backend.

        Raises:
            ProviderDiscoveryError: If discovery fails.
        """
        core = await build_provider_core(
            config,
            http_client,
            default_provider_url=DEFAULT_GITLAB_PROVIDER_URL,
            default_scopes=DEFAULT_GITLAB_SCOPES,
        )

        claims = core.metadata.claims(GitLabClaims)

        return cls(
            core,
            http_client,
            name=config.backend_name,
            revoke_url=claims.revocation_endpoint or DEFAULT_GITLAB_REVOKE_URL,
            groups_url=groups_url_for(core.provider_url),
        )

    async def resolve_groups(self, session: "SessionState | None") -> list[str]:
        """Return the IDs of the groups the user belongs to.

        Only the first page of results is fetched (GitLab returns 20 per
        page by default); later pages are not requested.

        Args:
            session: Authenticated session with an access token.

        Returns:
            Group IDs as strings, in the order GitLab returned them.

        Raises:
            EmptySessionError: If session or access token is missing. No request is made.
            TransportError: If the request fails or the response isn't a group list.
        """
        if session is None or session.access_token is None:
            raise EmptySessionError("User session cannot be empty: an access token is required to list GitLab groups")

        headers = {"Authorization": f"Bearer {session.access_token.access_token}"}
        response = await self._http.request("GET", self.groups_url, headers=headers)

        _logger.debug(
            {
                "event": "groups_resolved",
                "backend": self.name,
                "details": {"response": response},
            }
        )

        try:
            groups = _GROUP_LIST.validate_python(response)
        except ValidationError as e:
            raise TransportError(f"GET {self.groups_url} returned an unexpected group list: {e}") from e

        return [str(group.id) for group in groups]

    async def revoke(self, token: "OAuthToken") -> None:
        """Revoke the access token at GitLab's revocation endpoint.

        A token GitLab already considers revoked or expired counts as revoked.

        Args:
            token: Token whose access_token is revoked.

        Raises:
            TransportError: If revocation fails for any other reason.
        """
        try:
            await self._http.request("POST", self.revoke_url, form={"access_token": token.access_token})
        except TokenRevokedError:
            _logger.info({"event": "token_already_revoked", "backend": self.name})
            return

        _logger.info({"event": "token_revoked", "backend": self.name})
