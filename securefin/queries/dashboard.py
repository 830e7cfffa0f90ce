"""
Dashboard Queries

DESIGN DECISION: Summary figures are computed DETERMINISTICALLY from the
committed wallet snapshot. The advice collaborator only gets to phrase
tips; it never produces a number shown on the dashboard.
"""

import asyncio
from collections import defaultdict
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from securefin.agents import AdviceService
from securefin.audit import AuditLogger
from securefin.config import get_settings
from securefin.models.ledger import Category, TransactionType, WalletSnapshot

NO_HISTORY_ADVICE = "Add some transactions to receive personalized advice!"
FALLBACK_ADVICE = "Keep tracking your expenses to get AI insights."


class GoalProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    goal_id: str
    name: str
    icon: str
    current_amount: Decimal
    target_amount: Decimal
    percent: int
    done: bool


class DashboardQuery:
    """
    Read-only summaries over a WalletSnapshot.

    GUARANTEES:
    - Only committed blocks are counted (genesis excluded)
    - Advice never raises; failures return a static message
    """

    def __init__(
        self,
        advice_service: Optional[AdviceService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._advice_service = advice_service
        self._audit_logger = audit_logger
        self._timeout = get_settings().app.collaborator_timeout_seconds

    @staticmethod
    def _sum(snapshot: WalletSnapshot, tx_type: TransactionType) -> Decimal:
        return sum(
            (t.amount for t in snapshot.transactions if t.type == tx_type),
            Decimal("0"),
        )

    def total_income(self, snapshot: WalletSnapshot) -> Decimal:
        return self._sum(snapshot, TransactionType.INCOME)

    def total_expense(self, snapshot: WalletSnapshot) -> Decimal:
        """Expense-type transactions only; transfers are reported separately."""
        return self._sum(snapshot, TransactionType.EXPENSE)

    def total_transferred_out(self, snapshot: WalletSnapshot) -> Decimal:
        return self._sum(snapshot, TransactionType.TRANSFER)

    def expense_breakdown(self, snapshot: WalletSnapshot) -> dict[Category, Decimal]:
        """Expense totals per category, non-zero categories only."""
        totals: dict[Category, Decimal] = defaultdict(Decimal)
        for t in snapshot.transactions:
            if t.type == TransactionType.EXPENSE:
                totals[t.category] += t.amount
        return {category: amount for category, amount in totals.items() if amount > 0}

    def goal_progress(self, snapshot: WalletSnapshot) -> list[GoalProgress]:
        return [
            GoalProgress(
                goal_id=g.id,
                name=g.name,
                icon=g.icon,
                current_amount=g.current_amount,
                target_amount=g.target_amount,
                percent=g.progress_percent,
                done=g.is_funded,
            )
            for g in snapshot.goals
        ]

    async def advice(self, snapshot: WalletSnapshot) -> str:
        """
        Ask the advice collaborator for tips on this wallet.

        Empty history short-circuits without calling the collaborator.
        """
        transactions = snapshot.transactions
        if not transactions:
            return NO_HISTORY_ADVICE
        if self._advice_service is None:
            return FALLBACK_ADVICE

        try:
            text = await asyncio.wait_for(
                self._advice_service.get_advice(
                    transactions,
                    snapshot.account.balance,
                    snapshot.account.language,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            await self._log_failure(f"Advice timed out after {self._timeout}s")
            return FALLBACK_ADVICE
        except Exception as e:
            await self._log_failure(str(e))
            return FALLBACK_ADVICE

        return text or FALLBACK_ADVICE

    async def _log_failure(self, message: str) -> None:
        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                service="advice",
                error_message=message,
            )
