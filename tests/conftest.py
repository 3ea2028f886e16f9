"""Shared fixtures: a fake identity provider served through httpx.MockTransport."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from acp_identity.config import ProviderConfig
from acp_identity.utils.http_client import HTTPClient

GITLAB_URL = "https://gitlab.com"
GITLAB_DISCOVERY_URL = "https://gitlab.com/.well-known/openid-configuration"
GITLAB_GROUPS_URL = "https://gitlab.com/api/v4/groups"
GITLAB_REVOKE_URL = "https://gitlab.com/oauth/revoke"

TEST_USER_AGENT = "acp-identity-test/1.0"


def make_discovery_document(issuer: str = GITLAB_URL, **overrides: Any) -> dict[str, Any]:
    """Discovery document shaped like GitLab's."""
    document: dict[str, Any] = {
        "issuer": issuer,
        "authorization_endpoint": f"{issuer}/oauth/authorize",
        "token_endpoint": f"{issuer}/oauth/token",
        "revocation_endpoint": f"{issuer}/oauth/revoke",
        "userinfo_endpoint": f"{issuer}/oauth/userinfo",
        "jwks_uri": f"{issuer}/oauth/discovery/keys",
        "scopes_supported": ["api", "read_user", "openid", "profile", "email"],
        "response_types_supported": ["code"],
        "id_token_signing_alg_values_supported": ["RS256"],
    }
    document.update(overrides)
    return {k: v for k, v in document.items() if v is not None}


Responder = Callable[[httpx.Request], httpx.Response]


class FakeProvider:
    """Routes requests by (method, URL without query) and records them.

    Unrouted requests get a 404, like a real server would.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Responder] = {}
        self.requests: list[httpx.Request] = []

    def route(
        self,
        method: str,
        url: str,
        *,
        status: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        responder: Responder | None = None,
    ) -> None:
        """Register a canned response (a fresh Response is built per request)."""
        if responder is None:

            def responder(request: httpx.Request) -> httpx.Response:
                if content is not None:
                    return httpx.Response(status, content=content, headers=headers)
                if json is not None:
                    return httpx.Response(status, json=json, headers=headers)
                return httpx.Response(status, headers=headers)

        self._routes[(method.upper(), url)] = responder

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url.copy_with(query=None)) == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, str(request.url.copy_with(query=None)))
        responder = self._routes.get(key)
        if responder is None:
            return httpx.Response(404, json={"message": "404 Not Found"})
        return responder(request)

    def client(self) -> HTTPClient:
        """New HTTPClient whose requests are answered by this fake."""
        return HTTPClient(
            client=httpx.AsyncClient(transport=httpx.MockTransport(self)),
            agent=TEST_USER_AGENT,
        )


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Fake gitlab.com with discovery already routed."""
    fake = FakeProvider()
    fake.route("GET", GITLAB_DISCOVERY_URL, json=make_discovery_document())
    return fake


@pytest.fixture
async def http_client(fake_provider: FakeProvider):
    client = fake_provider.client()
    yield client
    await client.aclose()


@pytest.fixture
def gitlab_config() -> ProviderConfig:
    """GitLab config relying on all defaults."""
    return ProviderConfig(
        provider="gitlab",
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_url="https://proxy.example.com/oauth2/callback",
    )
