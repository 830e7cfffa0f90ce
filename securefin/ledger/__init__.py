"""Ledger package: hash linking, the chain, balances and goal allocation."""

from securefin.ledger.balances import apply_transaction, check_funds, credit
from securefin.ledger.chain import Ledger
from securefin.ledger.goals import DEFAULT_GOALS, auto_allocate, default_goals
from securefin.ledger.hashing import (
    GENESIS_PREVIOUS_HASH,
    block_fingerprint,
    fingerprint,
)

__all__ = [
    "DEFAULT_GOALS",
    "GENESIS_PREVIOUS_HASH",
    "Ledger",
    "apply_transaction",
    "auto_allocate",
    "block_fingerprint",
    "check_funds",
    "credit",
    "default_goals",
    "fingerprint",
]
