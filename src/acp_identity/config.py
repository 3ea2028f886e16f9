"""Application configuration for acp-identity.

Defines configuration models for identity-provider backends, logging and
the HTTP client. Config is stored as JSON at the OS-appropriate location
(via platformdirs), or at a path passed explicitly.

Example usage:
    # Load from config file
    config = AppConfig.load_from_files(config_path)

    # Save new configuration
    config.save_to_file(config_path)
"""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from acp_identity.constants import (
    CONFIG_DIR,
    CONFIG_FILENAME,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    MAX_HTTP_TIMEOUT_SECONDS,
    MIN_HTTP_TIMEOUT_SECONDS,
)


# =============================================================================
# Identity Provider Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Configuration for one identity-provider backend.

    Empty optional fields are filled with backend-specific defaults when the
    backend is constructed, not here.

    Attributes:
        name: Unique name used to address this backend (defaults to the provider kind).
        provider: Backend kind, matched case-insensitively against the registry
            when backends are built (unknown kinds fail there).
        client_id: OAuth client ID.
        client_secret: OAuth client secret.
        provider_url: OIDC discovery base URL (empty = backend default).
        redirect_url: URL the provider redirects back to after login.
        scopes: OAuth scopes to request (empty = backend default).
    """

    name: str = ""
    provider: str = "gitlab"
    client_id: str
    client_secret: str
    provider_url: str = ""
    redirect_url: str = ""
    scopes: list[str] = Field(default_factory=list)

    @property
    def backend_name(self) -> str:
        """Name used to address this backend, falling back to the provider kind."""
        return self.name or self.provider


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    System events always go to stderr. When log_dir is set they are also
    written to:
        <log_dir>/
        └── acp_identity_logs/
            └── system.jsonl

    Attributes:
        log_dir: Base directory for logs (optional).
        log_level: Logging level (DEBUG or INFO). DEBUG includes raw provider responses.
    """

    log_dir: str | None = None
    log_level: Literal["DEBUG", "INFO"] = "INFO"


class HTTPConfig(BaseModel):
    """HTTP client configuration.

    Attributes:
        timeout: Request timeout in seconds (1-300).
    """

    timeout: int = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        ge=MIN_HTTP_TIMEOUT_SECONDS,
        le=MAX_HTTP_TIMEOUT_SECONDS,
    )


class AppConfig(BaseModel):
    """Main application configuration for acp-identity.

    Attributes:
        providers: Identity-provider backends to construct at startup.
        logging: Logging configuration.
        http: HTTP client configuration.
    """

    providers: list[ProviderConfig] = Field(default_factory=list)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)

    def get_provider(self, name: str) -> ProviderConfig:
        """Look up a configured backend by name.

        Raises:
            KeyError: If no backend has that name.
        """
        for provider in self.providers:
            if provider.backend_name == name:
                return provider
        raise KeyError(name)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist.
        Sets secure permissions (0o700) on the config directory,
        since the file holds client secrets.

        Args:
            config_path: Path where the config should be saved.
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.parent.chmod(0o700)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2)

        config_path.chmod(0o600)

    @classmethod
    def load_from_files(cls, config_path: Path) -> "AppConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config file.

        Returns:
            AppConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid or missing required fields.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e


def get_config_path() -> Path:
    """Default config file location (OS-specific config directory)."""
    return Path(CONFIG_DIR) / CONFIG_FILENAME
