"""Application settings and configuration."""

from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Referral ledger configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "referral-ledger"
    log_level: str = "INFO"
    log_format: str = "console"
    # one list for every route: the app and the airdrop page that reads the member count
    allowed_origins: str = "https://aaa-test-env.vercel.app,https://algoadoptairdrop.vercel.app"

    # Storage
    storage_backend: str = "memory"  # memory | firestore
    users_collection: str = "users"
    wallets_collection: str = "walletAddresses"

    # Rewards
    genesis_referral_code: str = "GENESIS"
    genesis_account_id: str = Field(
        default="default_document_path",
        validation_alias=AliasChoices("genesis_account_id", "document_path"),
    )
    signup_grant: int = 5
    referral_reward: int = 5
    max_referral_depth: int = 5
    atomic_signup: bool = False  # commit the whole signup as one batch

    # Sessions
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    session_ttl_minutes: int = 60

    # Firebase
    firebase_api_key: Optional[str] = None
    firebase_credentials_path: Optional[str] = None
    identity_timeout_seconds: float = 15.0

    # Algorand
    algorand_indexer_address: str = "https://mainnet-idx.algonode.cloud"
    algorand_indexer_token: str = ""
    fee_recipient_address: str = "SJDMEUSIKIU4LIJIMH4F7ZVMJOGF6PO4RNTPLISOVBLG6LOPG4HMWGVIKU"
    fee_amount: int = 500000  # microAlgos

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
