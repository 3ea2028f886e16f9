"""HTTP client for identity-provider APIs.

Narrow transport used by discovery and by backends:
- GET and POST only (form values become the query string or the POST body)
- Form content type and User-Agent are always sent
- 200 responses are decoded as JSON (empty body -> None)
- 401 is reported as TokenRevokedError (token expired or revoked)
- Any other status, connection failure or timeout is a TransportError

No retries. Cancellation (asyncio.CancelledError) propagates unchanged.
"""

from __future__ import annotations

__all__ = [
    "HTTPClient",
]

import json
import logging
from types import TracebackType
from typing import Any

import httpx

from acp_identity.constants import DEFAULT_HTTP_TIMEOUT_SECONDS, FORM_CONTENT_TYPE
from acp_identity.exceptions import TokenRevokedError, TransportError
from acp_identity.utils.version import user_agent

logger = logging.getLogger(__name__)

_ALLOWED_METHODS: frozenset[str] = frozenset({"GET", "POST"})


class HTTPClient:
    """Async HTTP client shared by all backends built from one configuration.

    Safe for concurrent use: it holds no per-request state beyond the
    underlying httpx.AsyncClient connection pool.

    Usage:
        async with HTTPClient(timeout=10) as client:
            groups = await client.request("GET", url, headers={"Authorization": "Bearer ..."})
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
        agent: str | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds (ignored when client is given).
            client: Preconfigured httpx client (tests pass one with a MockTransport).
            agent: User-Agent override (default: acp-identity version string).
        """
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._user_agent = agent or user_agent()

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        form: dict[str, str] | None = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: "GET" or "POST".
            url: Absolute endpoint URL.
            headers: Extra headers (e.g. Authorization). Override the defaults.
            form: Form values; POST body for POST, query string for GET.

        Returns:
            Decoded JSON body, or None when the body is empty.

        Raises:
            ValueError: If method is not GET or POST.
            TokenRevokedError: If the provider answers 401.
            TransportError: On any other failure (status, network, decoding).
        """
        method = method.upper()
        if method not in _ALLOWED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        request_headers = {
            "Content-Type": FORM_CONTENT_TYPE,
            "User-Agent": self._user_agent,
        }
        if headers:
            request_headers.update(headers)

        try:
            if method == "POST":
                response = await self._client.post(url, headers=request_headers, data=form)
            else:
                response = await self._client.get(url, headers=request_headers, params=form)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise TokenRevokedError(body=response.text)

        if response.status_code != httpx.codes.OK:
            logger.debug("%s %s returned %s: %s", method, url, response.status_code, response.text)
            raise TransportError(
                f"{method} {url} failed",
                status_code=response.status_code,
                body=response.text,
            )

        if not response.content:
            return None

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise TransportError(f"{method} {url} returned invalid JSON: {e}", body=response.text) from e
