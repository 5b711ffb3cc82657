"""
Tests for password checks against Firebase Authentication

The Identity Toolkit endpoint is replaced with an httpx mock transport.
"""

import httpx
import pytest

from ledger.exceptions import InvalidCredentialsError
from ledger.identity import FirebaseIdentityProvider, InMemoryIdentityProvider


def firebase_provider(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return FirebaseIdentityProvider(api_key="test-key", http_client=client)


class TestFirebaseIdentityProvider:

    def test_returns_local_id(self):
        def handler(request):
            assert request.url.params["key"] == "test-key"
            return httpx.Response(200, json={"localId": "uid-1", "idToken": "t"})

        assert firebase_provider(handler).verify_password("a@example.com", "pw") == "uid-1"

    def test_rejected_password(self):
        provider = firebase_provider(
            lambda request: httpx.Response(400, json={"error": {"message": "INVALID_PASSWORD"}})
        )
        with pytest.raises(InvalidCredentialsError):
            provider.verify_password("a@example.com", "wrong")

    def test_response_without_local_id(self):
        provider = firebase_provider(lambda request: httpx.Response(200, json={}))
        with pytest.raises(InvalidCredentialsError):
            provider.verify_password("a@example.com", "pw")

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(InvalidCredentialsError):
            firebase_provider(handler).verify_password("a@example.com", "pw")

    def test_missing_api_key(self):
        provider = FirebaseIdentityProvider(api_key=None)
        with pytest.raises(InvalidCredentialsError):
            provider.verify_password("a@example.com", "pw")


class TestInMemoryIdentityProvider:

    def test_email_is_case_insensitive(self):
        provider = InMemoryIdentityProvider()
        uid = provider.create_identity("Someone@Example.com", "password-123")
        assert provider.verify_password("someone@example.com", "password-123") == uid
