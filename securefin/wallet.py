"""
Wallet: the owned state of one account.

A wallet holds the current Account value, its Ledger and its SavingsGoal
list. Only the TransactionProcessor commits new values into a wallet;
everything else reads immutable snapshots.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from securefin.ledger import Ledger, default_goals
from securefin.models.ledger import Account, SavingsGoal, WalletSnapshot


class Wallet:

    def __init__(
        self,
        account: Account,
        ledger: Ledger,
        goals: Iterable[SavingsGoal] = (),
    ):
        self._account = account
        self._ledger = ledger
        self._goals = tuple(goals)

    @classmethod
    def open(
        cls,
        mobile: str,
        name: str,
        language: str = "en",
        opening_balance: Decimal = Decimal("0"),
        goals: Optional[Iterable[SavingsGoal]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> "Wallet":
        """Create a new account and run ledger genesis for it."""
        account = Account(id=mobile, name=name, balance=opening_balance, language=language)
        ledger = Ledger(clock=clock)
        ledger.genesis(opening_balance)
        return cls(account, ledger, default_goals() if goals is None else goals)

    @property
    def account(self) -> Account:
        return self._account

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def goals(self) -> tuple[SavingsGoal, ...]:
        return self._goals

    def commit(self, account: Account, goals: Iterable[SavingsGoal]) -> None:
        """Replace account and goals after a block was appended."""
        self._account = account
        self._goals = tuple(goals)

    def snapshot(self) -> WalletSnapshot:
        return WalletSnapshot(
            account=self._account,
            blocks=self._ledger.blocks,
            goals=self._goals,
            chain_valid=self._ledger.verify(),
        )
