"""Unit tests for access token verification."""

import jwt
import pytest

from infrastructure.auth.security import TokenVerifier
from infrastructure.exceptions import AuthError
from tests.fixtures.tokens import JWT_SECRET


@pytest.mark.unit
class TestTokenVerifier:
    def test_valid_token_returns_claims(self, token_verifier, issue_token):
        claims = token_verifier.verify(issue_token("customer-1", role="CUSTOMER"))

        assert claims["sub"] == "customer-1"
        assert claims["role"] == "CUSTOMER"

    def test_bearer_prefix_is_stripped(self, token_verifier, issue_token):
        claims = token_verifier.verify(f"Bearer {issue_token('admin-1')}")

        assert claims["sub"] == "admin-1"

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, token_verifier, token):
        with pytest.raises(AuthError, match="Missing"):
            token_verifier.verify(token)

    def test_expired_token(self, token_verifier, issue_token):
        with pytest.raises(AuthError, match="expired"):
            token_verifier.verify(issue_token(expires_in=-60))

    def test_wrong_signature(self, token_verifier, issue_token):
        with pytest.raises(AuthError, match="Invalid"):
            token_verifier.verify(issue_token(secret="another-secret"))

    def test_malformed_token(self, token_verifier):
        with pytest.raises(AuthError, match="Invalid"):
            token_verifier.verify("not-a-jwt")

    def test_subject_is_required(self, token_verifier):
        token = jwt.encode({"role": "ADMIN"}, JWT_SECRET, algorithm="HS256")

        with pytest.raises(AuthError):
            token_verifier.verify(token)

    def test_unconfigured_verifier_rejects_everything(self, issue_token):
        verifier = TokenVerifier(secret=None)

        with pytest.raises(AuthError, match="not configured"):
            verifier.verify(issue_token())
