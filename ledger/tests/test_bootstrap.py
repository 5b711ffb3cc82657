"""
Tests for building the ledger from settings
"""

from fastapi.testclient import TestClient

from ledger.api import app
from ledger.bootstrap import build_reward_ledger
from ledger.models import SignupRequest
from ledger.settings import Settings, settings


def test_memory_backend_seeds_genesis_account():
    config = Settings(storage_backend="memory")
    ledger = build_reward_ledger(config)

    genesis = ledger.store.find_by_id(config.genesis_account_id)
    assert genesis is not None
    assert genesis.referral_code == config.genesis_account_id
    assert genesis.referred_by == config.genesis_referral_code
    assert genesis.balance == 0


def test_memory_backend_completes_signup():
    config = Settings(storage_backend="memory")
    ledger = build_reward_ledger(config)

    response = ledger.create_account(SignupRequest(
        email="first@example.com",
        password="password-123",
        wallet_address="FIRST-WALLET",
    ))

    assert response.balance == 5
    genesis = ledger.store.find_by_id(config.genesis_account_id)
    assert genesis.balance == 5
    assert genesis.referrals == [response.user_id]
    assert ledger.total_members() == 2


def test_default_app_signup():
    """Test the app as shipped, without dependency overrides."""
    app.dependency_overrides.clear()
    client = TestClient(app)
    headers = {"Origin": settings.origins[0]}
    body = {
        "email": "default-app@example.com",
        "password": "password-123",
        "walletAddress": "DEFAULT-APP-WALLET",
    }

    first = client.post("/signup", json=body, headers=headers)
    assert first.status_code == 201
    assert first.json()["aaaBalance"] == 5

    retry = client.post("/signup", json=body, headers=headers)
    assert retry.status_code == 400
    assert retry.json()["detail"] == "This wallet address is already in use."
