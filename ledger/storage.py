import threading
from typing import Optional, Protocol

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions

from .exceptions import AccountNotFoundError, DuplicateWalletError
from .models import Account, RewardCredit


class AccountStore(Protocol):
    """Keyed account records with store-side atomic increment and set-append."""

    def find_by_id(self, account_id: str) -> Optional[Account]: ...

    def find_by_wallet(self, wallet_address: str) -> Optional[Account]: ...

    def find_by_referral_code(self, referral_code: str) -> Optional[Account]: ...

    def create(self, account: Account) -> None:
        """Store a new account; raises DuplicateWalletError if the wallet is taken."""
        ...

    def increment_balance(self, account_id: str, amount: int) -> None: ...

    def append_referral(self, account_id: str, member_id: str) -> None: ...

    def credit(self, credit: RewardCredit) -> None:
        """Increment and append for one account as a single write."""
        ...

    def commit_signup(self, account: Account, credits: list[RewardCredit]) -> None:
        """Create the account and apply every credit, all or nothing."""
        ...

    def count(self) -> int: ...


class InMemoryAccountStore:
    """Dict-backed store; every read and mutation runs under one lock."""

    def __init__(self, accounts: Optional[list[Account]] = None):
        self.accounts: dict[str, dict] = {}
        self._lock = threading.RLock()
        for account in accounts or []:
            self.create(account)

    def find_by_id(self, account_id: str) -> Optional[Account]:
        with self._lock:
            data = self.accounts.get(account_id)
            return Account(**data) if data else None

    def find_by_wallet(self, wallet_address: str) -> Optional[Account]:
        return self._find_by("wallet_address", wallet_address)

    def find_by_referral_code(self, referral_code: str) -> Optional[Account]:
        return self._find_by("referral_code", referral_code)

    def create(self, account: Account) -> None:
        with self._lock:
            for account_id, data in self.accounts.items():
                if data["wallet_address"] == account.wallet_address and account_id != account.id:
                    raise DuplicateWalletError("This wallet address is already in use.")
            self.accounts[account.id] = account.model_dump()

    def increment_balance(self, account_id: str, amount: int) -> None:
        with self._lock:
            self._require(account_id)["balance"] += amount

    def append_referral(self, account_id: str, member_id: str) -> None:
        with self._lock:
            referrals = self._require(account_id)["referrals"]
            if member_id not in referrals:
                referrals.append(member_id)

    def credit(self, credit: RewardCredit) -> None:
        with self._lock:
            self._require(credit.account_id)
            self.increment_balance(credit.account_id, credit.amount)
            self.append_referral(credit.account_id, credit.rewarded_account_id)

    def commit_signup(self, account: Account, credits: list[RewardCredit]) -> None:
        with self._lock:
            # every target must exist before the first write
            for credit in credits:
                if credit.account_id != account.id:
                    self._require(credit.account_id)
            self.create(account)
            for credit in credits:
                self.credit(credit)

    def count(self) -> int:
        with self._lock:
            return len(self.accounts)

    def _find_by(self, field: str, value: str) -> Optional[Account]:
        with self._lock:
            for data in self.accounts.values():
                if data[field] == value:
                    return Account(**data)
        return None

    def _require(self, account_id: str) -> dict:
        data = self.accounts.get(account_id)
        if data is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return data


class FirestoreAccountStore:
    """Account documents in a Firestore collection.

    Balance and referral updates are sent as ``Increment`` and ``ArrayUnion``
    field transforms, so concurrent signups crediting the same ancestor are
    merged server-side.
    """

    FIELD_MAP = {
        "email": "email",
        "wallet_address": "walletAddress",
        "referral_code": "referralCode",
        "referred_by": "referredBy",
        "balance": "aaaBalance",
        "referrals": "referrals",
        "last_withdrawal_date": "lastWithdrawalDate",
    }

    def __init__(self, client=None, collection: str = "users",
                 wallets_collection: str = "walletAddresses",
                 default_referred_by: str = "GENESIS"):
        self.client = client or firestore.client()
        self.collection = collection
        self.wallets_collection = wallets_collection
        self.default_referred_by = default_referred_by

    def find_by_id(self, account_id: str) -> Optional[Account]:
        snapshot = self._ref(account_id).get()
        if not snapshot.exists:
            return None
        return self._to_account(snapshot.id, snapshot.to_dict())

    def find_by_wallet(self, wallet_address: str) -> Optional[Account]:
        return self._find_by("walletAddress", wallet_address)

    def find_by_referral_code(self, referral_code: str) -> Optional[Account]:
        return self._find_by("referralCode", referral_code)

    def create(self, account: Account) -> None:
        batch = self.client.batch()
        self._stage_account(batch, account)
        self._commit(batch)

    def increment_balance(self, account_id: str, amount: int) -> None:
        self._update(account_id, {"aaaBalance": firestore.Increment(amount)})

    def append_referral(self, account_id: str, member_id: str) -> None:
        self._update(account_id, {"referrals": firestore.ArrayUnion([member_id])})

    def credit(self, credit: RewardCredit) -> None:
        self._update(credit.account_id, self._credit_fields(credit))

    def commit_signup(self, account: Account, credits: list[RewardCredit]) -> None:
        batch = self.client.batch()
        self._stage_account(batch, account)
        for credit in credits:
            batch.update(self._ref(credit.account_id), self._credit_fields(credit))
        self._commit(batch)

    def count(self) -> int:
        result = self.client.collection(self.collection).count().get()
        return int(result[0][0].value)

    def _ref(self, account_id: str):
        return self.client.collection(self.collection).document(account_id)

    def _stage_account(self, batch, account: Account) -> None:
        # create() fails on an existing guard, so one wallet maps to one account
        guard = self.client.collection(self.wallets_collection).document(account.wallet_address)
        batch.create(guard, {"accountId": account.id})
        batch.set(self._ref(account.id), self._to_document(account))

    def _commit(self, batch) -> None:
        try:
            batch.commit()
        except google_exceptions.AlreadyExists as e:
            raise DuplicateWalletError("This wallet address is already in use.") from e
        except google_exceptions.NotFound as e:
            raise AccountNotFoundError(str(e)) from e

    def _find_by(self, field: str, value: str) -> Optional[Account]:
        query = (
            self.client.collection(self.collection)
            .where(filter=firestore.FieldFilter(field, "==", value))
            .limit(1)
        )
        for snapshot in query.stream():
            return self._to_account(snapshot.id, snapshot.to_dict())
        return None

    def _update(self, account_id: str, fields: dict) -> None:
        try:
            self._ref(account_id).update(fields)
        except google_exceptions.NotFound as e:
            raise AccountNotFoundError(f"Account {account_id} not found") from e

    def _credit_fields(self, credit: RewardCredit) -> dict:
        return {
            "aaaBalance": firestore.Increment(credit.amount),
            "referrals": firestore.ArrayUnion([credit.rewarded_account_id]),
        }

    def _to_document(self, account: Account) -> dict:
        data = account.model_dump(exclude={"id"})
        return {self.FIELD_MAP[k]: v for k, v in data.items()}

    def _to_account(self, account_id: str, document: dict) -> Account:
        data = {k: document.get(v) for k, v in self.FIELD_MAP.items()}
        # documents written by hand (e.g. the genesis account) may lack fields
        data["referred_by"] = data["referred_by"] or self.default_referred_by
        data["referral_code"] = data["referral_code"] or account_id
        data["balance"] = data["balance"] or 0
        data["referrals"] = data["referrals"] or []
        data["email"] = data["email"] or ""
        data["wallet_address"] = data["wallet_address"] or ""
        return Account(id=account_id, **data)
