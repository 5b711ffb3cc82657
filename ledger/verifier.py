"""
Fee payment verification against an Algorand indexer.

A member proves they paid the platform fee by submitting the id of a payment
transaction. The transaction is looked up on-chain and must move exactly the
configured fee from the member's wallet to the configured recipient.
"""

from typing import Optional, Protocol

from algosdk.error import IndexerHTTPError
from algosdk.v2client import indexer

from .exceptions import OracleUnavailableError
from .logging_config import get_logger
from .models import PaymentTransaction

logger = get_logger(__name__)


class LedgerOracle(Protocol):
    def lookup_transaction(self, tx_id: str) -> Optional[PaymentTransaction]: ...


class InMemoryLedgerOracle:
    def __init__(self, transactions: Optional[list[PaymentTransaction]] = None):
        self.transactions: dict[str, PaymentTransaction] = {
            tx.id: tx for tx in transactions or []
        }
        self.available = True

    def lookup_transaction(self, tx_id: str) -> Optional[PaymentTransaction]:
        if not self.available:
            raise OracleUnavailableError("Ledger oracle is unavailable")
        return self.transactions.get(tx_id)


class AlgorandIndexerOracle:
    def __init__(self, indexer_address: str, indexer_token: str = "", client=None):
        self.client = client or indexer.IndexerClient(
            indexer_token, indexer_address, headers={"User-Agent": "referral-ledger/algosdk"}
        )

    def lookup_transaction(self, tx_id: str) -> Optional[PaymentTransaction]:
        try:
            response = self.client.transaction(tx_id)
        except IndexerHTTPError as e:
            if getattr(e, "code", None) == 404 or "no transaction found" in str(e).lower():
                return None
            raise OracleUnavailableError(f"Indexer lookup failed for {tx_id}: {e}") from e

        txn = (response or {}).get("transaction") or {}
        if not txn:
            return None
        payment = txn.get("payment-transaction") or {}
        return PaymentTransaction(
            id=txn.get("id", tx_id),
            sender=txn.get("sender", ""),
            recipient=payment.get("receiver"),
            amount=payment.get("amount"),
        )


class TransactionVerifier:
    def __init__(self, oracle: LedgerOracle, expected_recipient: str, expected_amount: int):
        self.oracle = oracle
        self.expected_recipient = expected_recipient
        self.expected_amount = expected_amount

    def verify_payment(self, wallet_address: str, tx_id: str) -> bool:
        """True iff ``tx_id`` paid exactly the fee from ``wallet_address`` to the recipient.

        Lookup failures of any kind are logged and reported as ``False``.
        """
        try:
            transaction = self.oracle.lookup_transaction(tx_id)
        except Exception as e:
            logger.error("payment_verification_failed", tx_id=tx_id, error=str(e))
            return False

        if transaction is None:
            logger.info("payment_not_found", tx_id=tx_id)
            return False

        return (
            transaction.sender == wallet_address
            and transaction.recipient == self.expected_recipient
            and transaction.amount == self.expected_amount
        )
