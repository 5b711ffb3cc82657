"""
Referral Reward Ledger

This module provides:
- Wallet-linked signups with an initial balance grant
- Multi-level referral rewards, bounded depth, stopping at GENESIS
- Store-side atomic balance increments and referral set appends
- Optional all-or-nothing signup commits
- On-chain fee payment verification
"""

from .models import (
    Account,
    RewardCredit,
    PaymentTransaction,
)
from .service import RewardLedger
from .verifier import TransactionVerifier

__all__ = [
    "Account",
    "RewardCredit",
    "PaymentTransaction",
    "RewardLedger",
    "TransactionVerifier",
]
