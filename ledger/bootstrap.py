"""Wire the ledger and verifier to their backends from settings."""

import firebase_admin
from firebase_admin import credentials

from .identity import FirebaseIdentityProvider, InMemoryIdentityProvider
from .logging_config import get_logger
from .models import Account
from .service import RewardLedger
from .settings import Settings, settings
from .storage import FirestoreAccountStore, InMemoryAccountStore
from .verifier import AlgorandIndexerOracle, TransactionVerifier

logger = get_logger(__name__)


def init_firebase(config: Settings = settings) -> None:
    if firebase_admin._apps:
        return
    if config.firebase_credentials_path:
        firebase_admin.initialize_app(credentials.Certificate(config.firebase_credentials_path))
    else:
        firebase_admin.initialize_app()
    logger.info("firebase_initialized", credentials=config.firebase_credentials_path or "default")


def genesis_account(config: Settings = settings) -> Account:
    """Root account credited on every signup; Firestore deployments create it by hand."""
    return Account(
        id=config.genesis_account_id,
        email="",
        wallet_address="",
        referral_code=config.genesis_account_id,
        referred_by=config.genesis_referral_code,
        balance=0,
    )


def build_reward_ledger(config: Settings = settings) -> RewardLedger:
    if config.storage_backend == "firestore":
        init_firebase(config)
        store = FirestoreAccountStore(
            collection=config.users_collection,
            wallets_collection=config.wallets_collection,
            default_referred_by=config.genesis_referral_code,
        )
        identity = FirebaseIdentityProvider(
            config.firebase_api_key, timeout=config.identity_timeout_seconds
        )
    elif config.storage_backend == "memory":
        store = InMemoryAccountStore([genesis_account(config)])
        identity = InMemoryIdentityProvider()
    else:
        raise ValueError(f"Unknown storage backend: {config.storage_backend}")
    return RewardLedger(store=store, identity=identity, config=config)


def build_transaction_verifier(config: Settings = settings) -> TransactionVerifier:
    oracle = AlgorandIndexerOracle(config.algorand_indexer_address, config.algorand_indexer_token)
    return TransactionVerifier(
        oracle,
        expected_recipient=config.fee_recipient_address,
        expected_amount=config.fee_amount,
    )
