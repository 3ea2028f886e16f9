"""Identity-provider backends.

Backends normalize external OpenID Connect providers into one interface
(IdentityBackend) consumed by the authorization layer:
- resolve_groups(session): group IDs for policy matching
- revoke(token): invalidate an access token on logout/expiry

Backends:
- GitLabProvider: gitlab.com or self-hosted GitLab
"""

from acp_identity.idp.discovery import ProviderMetadata, discover
from acp_identity.idp.gitlab import GitLabProvider
from acp_identity.idp.provider import IdentityBackend, OAuth2Config, ProviderCore
from acp_identity.idp.registry import build_backends, create_identity_backend
from acp_identity.idp.verifier import IDTokenVerifier

__all__ = [
    "GitLabProvider",
    "IDTokenVerifier",
    "IdentityBackend",
    "OAuth2Config",
    "ProviderCore",
    "ProviderMetadata",
    "build_backends",
    "create_identity_backend",
    "discover",
]
