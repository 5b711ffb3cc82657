from typing import Optional

from .exceptions import (
    LedgerServiceError,
    DuplicateWalletError,
    DuplicateEmailError,
    InvalidReferralCodeError,
    AccountNotFoundError,
    InvalidCredentialsError,
    OracleUnavailableError,
)
from .identity import IdentityProvider, InMemoryIdentityProvider
from .logging_config import get_logger
from .models import (
    Account,
    RewardCredit,
    SignupRequest,
    LoginRequest,
    SignupResponse,
    LoginResponse,
)
from .session import SessionIssuer
from .settings import Settings, settings as default_settings
from .storage import AccountStore, InMemoryAccountStore

__all__ = [
    "RewardLedger",
    "LedgerServiceError",
    "DuplicateWalletError",
    "DuplicateEmailError",
    "InvalidReferralCodeError",
    "AccountNotFoundError",
    "InvalidCredentialsError",
    "OracleUnavailableError",
]

logger = get_logger(__name__)


class RewardLedger:
    """Signup, login and multi-level referral rewards.

    Every signup grants the new account ``signup_grant``, credits the genesis
    account ``referral_reward`` and then walks the referrer chain, crediting
    each ancestor ``referral_reward`` until the genesis code, a missing
    referrer, or ``max_referral_depth`` levels.

    By default each credit is its own atomic store write and nothing is rolled
    back if a later write fails. With ``atomic_signup`` the chain is resolved
    first and the account plus all credits are committed in one batch.
    """

    def __init__(
        self,
        store: Optional[AccountStore] = None,
        identity: Optional[IdentityProvider] = None,
        sessions: Optional[SessionIssuer] = None,
        config: Optional[Settings] = None,
    ):
        self.config = config or default_settings
        self.store = store or InMemoryAccountStore()
        self.identity = identity or InMemoryIdentityProvider()
        self.sessions = sessions or SessionIssuer(
            self.config.jwt_secret_key,
            self.config.jwt_algorithm,
            self.config.session_ttl_minutes,
        )
        self.genesis_code = self.config.genesis_referral_code
        self.genesis_account_id = self.config.genesis_account_id
        self.reward = self.config.referral_reward
        self.max_depth = self.config.max_referral_depth

    def create_account(self, request: SignupRequest) -> SignupResponse:
        referred_by = self._validate_signup(request)

        user_id = self.identity.create_identity(request.email, request.password)
        account = Account(
            id=user_id,
            email=request.email,
            wallet_address=request.wallet_address,
            referral_code=user_id,
            referred_by=referred_by,
            balance=self.config.signup_grant,
            referrals=[],
            last_withdrawal_date=None,
        )
        logger.info("referral_resolved", referral_code=request.referral_code, referred_by=referred_by)

        if self.config.atomic_signup:
            credits = [self._genesis_credit(user_id)] + self.resolve_chain(referred_by, user_id)
            self.store.commit_signup(account, credits)
        else:
            self.store.create(account)
            self.store.credit(self._genesis_credit(user_id))
            self.propagate_reward(referred_by, user_id)

        logger.info("account_created", user_id=user_id, referred_by=referred_by)
        return SignupResponse.from_account(account, self.sessions.issue(user_id, account.email))

    def propagate_reward(self, start_referral_code: str, rewarded_account_id: str) -> int:
        """Credit up to ``max_depth`` ancestors starting at ``start_referral_code``.

        Returns the number of accounts credited.
        """
        current_code = start_referral_code
        level = 0
        while level < self.max_depth:
            if current_code == self.genesis_code:
                logger.debug("propagation_stopped", reason="genesis", level=level)
                return level

            referrer = self.store.find_by_referral_code(current_code)
            if referrer is None:
                logger.info("propagation_stopped", reason="broken_chain",
                            referral_code=current_code, level=level)
                return level

            self.store.credit(RewardCredit(
                account_id=referrer.id,
                amount=self.reward,
                rewarded_account_id=rewarded_account_id,
                level=level,
            ))
            logger.info("referral_credited", account_id=referrer.id,
                        rewarded_account_id=rewarded_account_id, level=level)

            current_code = referrer.referred_by or self.genesis_code
            level += 1

        logger.debug("propagation_stopped", reason="max_depth", level=level)
        return level

    def resolve_chain(self, start_referral_code: str, rewarded_account_id: str) -> list[RewardCredit]:
        """Read-only twin of ``propagate_reward``: the credits it would apply."""
        credits = []
        current_code = start_referral_code
        for level in range(self.max_depth):
            if current_code == self.genesis_code:
                break
            referrer = self.store.find_by_referral_code(current_code)
            if referrer is None:
                break
            credits.append(RewardCredit(
                account_id=referrer.id,
                amount=self.reward,
                rewarded_account_id=rewarded_account_id,
                level=level,
            ))
            current_code = referrer.referred_by or self.genesis_code
        return credits

    def authenticate(self, request: LoginRequest) -> LoginResponse:
        if request.uses_password:
            user_id = self.identity.verify_password(request.email, request.password)
            account = self.store.find_by_id(user_id)
            if account is None:
                raise AccountNotFoundError("User not found")
            email = request.email
        else:
            account = self.store.find_by_wallet(request.wallet_address)
            if account is None:
                raise AccountNotFoundError("Wallet address not registered")
            email = account.email

        return LoginResponse.from_account(account, token=self.sessions.issue(account.id, email))

    def get_account(self, account_id: str) -> Account:
        account = self.store.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def total_members(self) -> int:
        return self.store.count()

    def _validate_signup(self, request: SignupRequest) -> str:
        if self.store.find_by_wallet(request.wallet_address) is not None:
            logger.info("signup_rejected", reason="duplicate_wallet")
            raise DuplicateWalletError("This wallet address is already in use.")

        code = (request.referral_code or "").strip()
        if not code:
            return self.genesis_code

        if self.store.find_by_referral_code(code) is None:
            logger.info("signup_rejected", reason="invalid_referral_code", referral_code=code)
            raise InvalidReferralCodeError("Invalid referral code")
        return code

    def _genesis_credit(self, user_id: str) -> RewardCredit:
        return RewardCredit(
            account_id=self.genesis_account_id,
            amount=self.reward,
            rewarded_account_id=user_id,
        )
