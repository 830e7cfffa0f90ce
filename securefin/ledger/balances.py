"""
Account balance updates.

Pure functions: they return a new Account and never touch the ledger.
The processor commits the returned value.
"""

from decimal import Decimal

from securefin.exceptions import InsufficientFundsError
from securefin.models.ledger import Account, Transaction, TransactionType


def check_funds(account: Account, amount: Decimal) -> None:
    if amount > account.balance:
        raise InsufficientFundsError(requested=amount, available=account.balance)


def apply_transaction(account: Account, transaction: Transaction) -> Account:
    """
    Apply one transaction to an account.

    Income adds to the balance. Expense and outgoing Transfer subtract,
    failing with InsufficientFundsError when the amount exceeds the balance.
    """
    if transaction.type == TransactionType.INCOME:
        return credit(account, transaction.amount)

    check_funds(account, transaction.amount)
    return account.model_copy(update={"balance": account.balance - transaction.amount})


def credit(account: Account, amount: Decimal) -> Account:
    """Credit an account, e.g. the local recipient of a transfer."""
    return account.model_copy(update={"balance": account.balance + amount})
