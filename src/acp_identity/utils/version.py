"""User-Agent string sent with every identity-provider request."""

import platform

from acp_identity import __version__
from acp_identity.constants import APP_NAME


def user_agent() -> str:
    """Build the User-Agent header value.

    Example:
        acp-identity/0.1.0 (Python/3.12.1; Linux)
    """
    return f"{APP_NAME}/{__version__} (Python/{platform.python_version()}; {platform.system()})"
