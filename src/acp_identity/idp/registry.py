"""Identity backend registry.

Maps a configured provider kind to the backend that implements it and
builds backends at startup. Callers hold backends only as IdentityBackend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from acp_identity.exceptions import ProviderDiscoveryError, UnsupportedProviderError
from acp_identity.idp.gitlab import GitLabProvider
from acp_identity.idp.provider import IdentityBackend
from acp_identity.telemetry.system_logger import get_system_logger

if TYPE_CHECKING:
    from acp_identity.config import AppConfig, ProviderConfig
    from acp_identity.utils.http_client import HTTPClient

_logger = get_system_logger()

BackendFactory = Callable[["ProviderConfig", "HTTPClient"], Awaitable[IdentityBackend]]

BACKEND_FACTORIES: dict[str, BackendFactory] = {
    "gitlab": GitLabProvider.create,
}


async def create_identity_backend(config: "ProviderConfig", http_client: "HTTPClient") -> IdentityBackend:
    """Construct the backend for one provider configuration.

    Args:
        config: Backend configuration; config.provider selects the backend.
        http_client: Transport shared by all backends.

    Returns:
        Initialized backend.

    Raises:
        UnsupportedProviderError: If no backend handles config.provider.
        ProviderDiscoveryError: If the backend's discovery fails.
    """
    factory = BACKEND_FACTORIES.get(config.provider.lower())
    if factory is None:
        raise UnsupportedProviderError(config.provider, sorted(BACKEND_FACTORIES))

    return await factory(config, http_client)


async def build_backends(app_config: "AppConfig", http_client: "HTTPClient") -> dict[str, IdentityBackend]:
    """Construct every configured backend, keyed by backend name.

    Runs once at startup, before any request traffic. Backends are built
    one after another; the first failure aborts startup so a backend whose
    discovery failed is never registered.

    Raises:
        ValueError: If two backends share a name.
        UnsupportedProviderError: If a provider kind is unknown.
        ProviderDiscoveryError: If any backend's discovery fails.
    """
    backends: dict[str, IdentityBackend] = {}

    for provider_config in app_config.providers:
        name = provider_config.backend_name
        if name in backends:
            raise ValueError(f"Duplicate identity backend name: {name}")

        try:
            backend = await create_identity_backend(provider_config, http_client)
        except ProviderDiscoveryError as e:
            _logger.error(
                {
                    "event": "backend_registration_failed",
                    "backend": name,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
            )
            raise

        backends[name] = backend
        _logger.info(
            {
                "event": "backend_registered",
                "backend": name,
                "details": {"provider": provider_config.provider, "provider_url": backend.core.provider_url},
            }
        )

    return backends
