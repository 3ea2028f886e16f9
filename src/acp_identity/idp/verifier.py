"""ID token verification.

Validates an OIDC ID token's signature (keys from the provider's JWKS),
issuer, audience (the OAuth client ID) and expiry. Built during backend
construction and used by the login flow; group resolution does not need it.
"""

from __future__ import annotations

from typing import Any

import jwt

from acp_identity.constants import ID_TOKEN_LEEWAY_SECONDS, ID_TOKEN_SIGNING_ALGORITHMS
from acp_identity.exceptions import IDTokenVerificationError


class IDTokenVerifier:
    """Verifier bound to one provider issuer and one client ID.

    Keys are fetched lazily by PyJWKClient and cached there.
    """

    def __init__(
        self,
        *,
        issuer: str,
        client_id: str,
        jwks_uri: str,
        jwks_client: jwt.PyJWKClient | None = None,
    ) -> None:
        """Initialize verifier.

        Args:
            issuer: Expected "iss" claim.
            client_id: Expected "aud" claim.
            jwks_uri: Provider JWKS endpoint (from discovery).
            jwks_client: Key client override (tests).
        """
        self.issuer = issuer
        self.client_id = client_id
        self.jwks_uri = jwks_uri
        self._jwks_client = jwks_client or jwt.PyJWKClient(jwks_uri)

    def verify(self, raw_id_token: str) -> dict[str, Any]:
        """Verify an ID token and return its claims.

        Args:
            raw_id_token: Compact-serialized JWT.

        Returns:
            Verified claims.

        Raises:
            IDTokenVerificationError: If the token is malformed, signed by an
                unknown key, expired, or issued for another issuer/audience.
        """
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(raw_id_token)
            return jwt.decode(
                raw_id_token,
                signing_key.key,
                algorithms=list(ID_TOKEN_SIGNING_ALGORITHMS),
                audience=self.client_id,
                issuer=self.issuer,
                leeway=ID_TOKEN_LEEWAY_SECONDS,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise IDTokenVerificationError("ID token expired") from e
        except jwt.PyJWTError as e:
            raise IDTokenVerificationError(f"Invalid ID token: {e}") from e
