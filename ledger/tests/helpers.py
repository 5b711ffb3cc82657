from ledger.identity import InMemoryIdentityProvider
from ledger.models import Account, SignupRequest
from ledger.service import RewardLedger
from ledger.settings import Settings
from ledger.storage import InMemoryAccountStore


GENESIS_ID = "genesis-root"


def genesis_account() -> Account:
    return Account(
        id=GENESIS_ID,
        email="genesis@example.com",
        wallet_address="GENESISWALLET",
        referral_code=GENESIS_ID,
        referred_by="GENESIS",
        balance=0,
    )


def make_ledger(**overrides) -> RewardLedger:
    config = Settings(genesis_account_id=GENESIS_ID, **overrides)
    return RewardLedger(
        store=InMemoryAccountStore([genesis_account()]),
        identity=InMemoryIdentityProvider(),
        config=config,
    )


def signup(ledger: RewardLedger, name: str, referral_code=None):
    return ledger.create_account(SignupRequest(
        email=f"{name}@example.com",
        password="password-123",
        wallet_address=f"WALLET-{name.upper()}",
        referral_code=referral_code,
    ))
