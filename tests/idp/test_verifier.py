"""Tests for ID token verification (signed with a throwaway RSA key)."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from acp_identity.exceptions import IDTokenVerificationError
from acp_identity.idp.verifier import IDTokenVerifier

ISSUER = "https://gitlab.com"
CLIENT_ID = "test-client-id"


@pytest.fixture
def rsa_key_pair() -> tuple[rsa.RSAPrivateKey, rsa.RSAPublicKey]:
    """Generate RSA key pair for JWT signing."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


@pytest.fixture
def verifier(rsa_key_pair: tuple) -> IDTokenVerifier:
    """Verifier whose JWKS client always returns the test public key."""
    _, public_key = rsa_key_pair
    jwks_client = MagicMock(spec=jwt.PyJWKClient)
    jwks_client.get_signing_key_from_jwt.return_value = MagicMock(key=public_key)
    return IDTokenVerifier(
        issuer=ISSUER,
        client_id=CLIENT_ID,
        jwks_uri=f"{ISSUER}/oauth/discovery/keys",
        jwks_client=jwks_client,
    )


def _sign(private_key: rsa.RSAPrivateKey, **overrides) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "1234",
        "iss": ISSUER,
        "aud": CLIENT_ID,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
        "groups": ["gitlab-org"],
    }
    payload.update(overrides)
    return jwt.encode(payload, private_key, algorithm="RS256")


class TestIDTokenVerifier:
    """Tests for IDTokenVerifier.verify()."""

    def test_valid_token_returns_claims(self, verifier: IDTokenVerifier, rsa_key_pair: tuple):
        # Arrange
        token = _sign(rsa_key_pair[0])

        # Act
        claims = verifier.verify(token)

        # Assert
        assert claims["sub"] == "1234"
        assert claims["groups"] == ["gitlab-org"]

    def test_wrong_audience_raises(self, verifier: IDTokenVerifier, rsa_key_pair: tuple):
        # Arrange
        token = _sign(rsa_key_pair[0], aud="another-client")

        # Act & Assert
        with pytest.raises(IDTokenVerificationError, match="Invalid ID token"):
            verifier.verify(token)

    def test_wrong_issuer_raises(self, verifier: IDTokenVerifier, rsa_key_pair: tuple):
        # Arrange
        token = _sign(rsa_key_pair[0], iss="https://evil.example.com")

        # Act & Assert
        with pytest.raises(IDTokenVerificationError):
            verifier.verify(token)

    def test_expired_token_raises(self, verifier: IDTokenVerifier, rsa_key_pair: tuple):
        # Arrange
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = _sign(
            rsa_key_pair[0],
            iat=int(past.timestamp()),
            exp=int((past + timedelta(minutes=5)).timestamp()),
        )

        # Act & Assert
        with pytest.raises(IDTokenVerificationError, match="expired"):
            verifier.verify(token)

    def test_signed_by_other_key_raises(self, verifier: IDTokenVerifier):
        # Arrange
        other_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        token = _sign(other_key)

        # Act & Assert
        with pytest.raises(IDTokenVerificationError):
            verifier.verify(token)

    def test_unknown_key_id_raises(self, verifier: IDTokenVerifier, rsa_key_pair: tuple):
        """Given the JWKS has no matching key, raises IDTokenVerificationError."""
        # Arrange
        verifier._jwks_client.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientError("Unable to find a signing key")
        token = _sign(rsa_key_pair[0])

        # Act & Assert
        with pytest.raises(IDTokenVerificationError):
            verifier.verify(token)
