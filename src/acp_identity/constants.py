"""Application-wide constants for acp-identity.

Constants that define application behavior.
For user-configurable settings per deployment, see config.py.
Backend-specific defaults (well-known URLs, default scopes) live in the
backend's own module under acp_identity.idp.
"""

import os

from platformdirs import user_config_dir

# ============================================================================
# Configuration Location
# ============================================================================

APP_NAME: str = "acp-identity"

# Platform-specific paths:
# - macOS: ~/Library/Application Support/acp-identity/
# - Linux: ~/.config/acp-identity/
# - Windows: %APPDATA%\acp-identity\
CONFIG_DIR: str = os.path.realpath(user_config_dir(APP_NAME))

CONFIG_FILENAME: str = "acp_identity_config.json"

# ============================================================================
# HTTP Client
# ============================================================================

# Default timeout for identity-provider requests (discovery, groups, revoke)
DEFAULT_HTTP_TIMEOUT_SECONDS: int = 30

# Timeout validation range (seconds)
MIN_HTTP_TIMEOUT_SECONDS: int = 1
MAX_HTTP_TIMEOUT_SECONDS: int = 300  # 5 minutes

FORM_CONTENT_TYPE: str = "application/x-www-form-urlencoded"

# ============================================================================
# OpenID Connect
# ============================================================================

# Appended to the provider URL to fetch the discovery document
OIDC_DISCOVERY_PATH: str = "/.well-known/openid-configuration"

SCOPE_OPENID: str = "openid"

# Signing algorithms accepted for ID tokens
ID_TOKEN_SIGNING_ALGORITHMS: tuple[str, ...] = ("RS256", "RS384", "RS512", "ES256")

# Tolerated clock skew when checking ID token exp/iat (seconds)
ID_TOKEN_LEEWAY_SECONDS: int = 30

# ============================================================================
# Logging
# ============================================================================

SYSTEM_LOGGER_NAME: str = "acp_identity.system"

LOGS_SUBDIR: str = "acp_identity_logs"

SYSTEM_LOG_FILENAME: str = "system.jsonl"
