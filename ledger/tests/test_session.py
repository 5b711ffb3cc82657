import pytest

from ledger.service import InvalidCredentialsError
from ledger.session import SessionIssuer


def test_issued_token_carries_claims():
    issuer = SessionIssuer("test-secret")
    claims = issuer.decode(issuer.issue("user-1", "user@example.com"))

    assert claims["userId"] == "user-1"
    assert claims["email"] == "user@example.com"
    assert claims["exp"] - claims["iat"] == 3600


def test_token_from_other_key_rejected():
    token = SessionIssuer("other-secret").issue("user-1", "user@example.com")
    with pytest.raises(InvalidCredentialsError):
        SessionIssuer("test-secret").decode(token)


def test_expired_token_rejected():
    issuer = SessionIssuer("test-secret", ttl_minutes=-1)
    with pytest.raises(InvalidCredentialsError):
        issuer.decode(issuer.issue("user-1", "user@example.com"))
