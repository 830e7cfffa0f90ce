"""
Transaction Processor

The single write path into a wallet. One submit runs:

1. Validate request shape          -> ValidationError
2. Funds check for outgoing types  -> InsufficientFundsError
3. Risk gate for large transfers   -> REQUIRES_CONFIRMATION result
4. Append the block
5. Apply the balance update
6. Auto-allocate income to goals
7. Return the block with the new account and goals

All-or-nothing: every derived value is computed before the block is
appended, and nothing awaits between the append and the commit. A block is
either fully committed with its balance and goal effects or never created.

CRITICAL: The risk gate is advisory. A HIGH (or UNKNOWN) risk never blocks
silently; it hands the decision back to the caller, who re-submits with
acknowledge_risk=True to proceed.
"""

import asyncio
from typing import Optional

from securefin.agents import FraudRiskService
from securefin.audit import AuditLogger, create_correlation_id
from securefin.config import get_settings
from securefin.exceptions import InsufficientFundsError, ValidationError
from securefin.ledger import apply_transaction, auto_allocate, credit
from securefin.models.ledger import (
    Account,
    Category,
    RiskAssessment,
    RiskLevel,
    SavingsGoal,
    SubmitResult,
    SubmitStatus,
    Transaction,
    TransactionRequest,
    TransactionType,
)
from securefin.services.storage import WalletStoreInterface
from securefin.validation import TransactionValidator
from securefin.wallet import Wallet


class TransactionProcessor:
    """
    Orchestrates validation, the risk gate and the ledger commit.

    Args:
        wallets: Registry used to find local transfer recipients.
        risk_service: Fraud-risk collaborator. If None, large transfers are
            treated as risk unknown and need confirmation.
    """

    def __init__(
        self,
        wallets: Optional[WalletStoreInterface] = None,
        risk_service: Optional[FraudRiskService] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = get_settings()
        self._ledger_settings = settings.ledger
        self._timeout = settings.app.collaborator_timeout_seconds
        self._wallets = wallets
        self._risk_service = risk_service
        self._validator = validator or TransactionValidator(
            self._ledger_settings.currency_symbol
        )
        self._audit_logger = audit_logger

    @property
    def risk_threshold(self):
        return self._ledger_settings.risk_threshold

    def needs_risk_check(self, request: TransactionRequest) -> bool:
        return (
            request.type == TransactionType.TRANSFER
            and request.amount > self._ledger_settings.risk_threshold
        )

    async def check_risk(
        self,
        request: TransactionRequest,
        correlation_id: Optional[str] = None,
    ) -> RiskAssessment:
        """
        Call the fraud-risk collaborator once, with a timeout.

        Failure, timeout or a missing collaborator all yield UNKNOWN.
        """
        if self._risk_service is None:
            return RiskAssessment(
                risk_level=RiskLevel.UNKNOWN,
                reason="No fraud-risk service configured",
            )

        try:
            return await asyncio.wait_for(
                self._risk_service.check_risk(request),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            reason = f"Risk check timed out after {self._timeout}s"
        except Exception as e:
            reason = f"Risk check failed: {e}"

        if self._audit_logger:
            await self._audit_logger.log_external_service_error(
                service="fraud_risk",
                error_message=reason,
                correlation_id=correlation_id,
            )
        return RiskAssessment(risk_level=RiskLevel.UNKNOWN, reason=reason)

    async def submit(
        self,
        wallet: Wallet,
        request: TransactionRequest,
        acknowledge_risk: bool = False,
        correlation_id: Optional[str] = None,
    ) -> SubmitResult:
        """
        Submit one transaction against a wallet.

        Raises:
            ValidationError: Malformed request (no state change)
            InsufficientFundsError: Outgoing amount exceeds balance (no state change)
        """
        correlation_id = correlation_id or create_correlation_id()
        account = wallet.account

        # Steps 1-2: validation and funds check
        try:
            self._validator.ensure_valid(request, account)
        except (ValidationError, InsufficientFundsError) as e:
            if self._audit_logger:
                issues = [
                    {"field": i.field, "type": i.issue_type, "message": i.message}
                    for i in getattr(e, "issues", [])
                ]
                await self._audit_logger.log_transaction_rejected(
                    account_id=account.id,
                    reason=str(e),
                    issues=issues,
                    correlation_id=correlation_id,
                )
            raise

        request = self._with_default_description(request)

        # Step 3: risk gate, resolved before any mutation
        risk = None
        if self.needs_risk_check(request):
            if acknowledge_risk:
                if self._audit_logger:
                    await self._audit_logger.log_risk_acknowledged(
                        account_id=account.id,
                        amount=str(request.amount),
                        receiver=request.receiver,
                        correlation_id=correlation_id,
                    )
            else:
                risk = await self.check_risk(request, correlation_id)
                if self._audit_logger:
                    await self._audit_logger.log_risk_check(
                        account_id=account.id,
                        risk_level=risk.risk_level.value,
                        reason=risk.reason,
                        amount=str(request.amount),
                        correlation_id=correlation_id,
                    )
                if risk.requires_confirmation:
                    if self._audit_logger:
                        await self._audit_logger.log_confirmation_required(
                            account_id=account.id,
                            risk_level=risk.risk_level.value,
                            amount=str(request.amount),
                            receiver=request.receiver,
                            correlation_id=correlation_id,
                        )
                    return SubmitResult(
                        status=SubmitStatus.REQUIRES_CONFIRMATION,
                        account=account,
                        goals=wallet.goals,
                        risk=risk,
                    )

        # Steps 4-6: compute everything, then append and commit
        account = wallet.account
        transaction = self._build_transaction(request)
        new_account = apply_transaction(account, transaction)
        goals_before = wallet.goals
        new_goals = goals_before
        if transaction.type == TransactionType.INCOME:
            new_goals = self._allocate(goals_before, transaction)

        recipient = self._local_recipient(wallet, transaction)
        recipient_credit = None
        if recipient is not None:
            recipient_credit = self._prepare_recipient_credit(recipient, account, transaction)

        block = wallet.ledger.append(transaction)
        wallet.commit(new_account, new_goals)

        recipient_block = None
        if recipient_credit is not None:
            incoming, recipient_account, recipient_goals = recipient_credit
            recipient_block = recipient.ledger.append(incoming)
            recipient.commit(recipient_account, recipient_goals)

        # Step 7: audit after commit
        if self._audit_logger:
            await self._audit_logger.log_block_appended(
                account_id=new_account.id,
                index=block.index,
                block_hash=block.hash,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
                correlation_id=correlation_id,
            )
            if recipient_block is not None:
                await self._audit_logger.log_block_appended(
                    account_id=recipient.account.id,
                    index=recipient_block.index,
                    block_hash=recipient_block.hash,
                    transaction_type=recipient_block.data.type.value,
                    amount=str(recipient_block.data.amount),
                    correlation_id=correlation_id,
                )
            await self._log_goal_changes(goals_before, new_goals, correlation_id)

        return SubmitResult(
            status=SubmitStatus.COMMITTED,
            block=block,
            account=new_account,
            goals=new_goals,
            risk=risk,
        )

    @staticmethod
    def _with_default_description(request: TransactionRequest) -> TransactionRequest:
        """Transfers without a description read "Transfer to <receiver>"."""
        if request.description or request.type != TransactionType.TRANSFER:
            return request
        return request.model_copy(update={"description": f"Transfer to {request.receiver}"})

    def _build_transaction(self, request: TransactionRequest) -> Transaction:
        return Transaction(
            type=request.type,
            category=request.category,
            amount=request.amount,
            description=request.description,
            receiver=request.receiver if request.type == TransactionType.TRANSFER else None,
        )

    def _allocate(
        self,
        goals: tuple[SavingsGoal, ...],
        transaction: Transaction,
    ) -> tuple[SavingsGoal, ...]:
        return auto_allocate(
            goals,
            transaction.amount,
            rate=self._ledger_settings.goal_allocation_rate,
        )

    def _local_recipient(
        self,
        wallet: Wallet,
        transaction: Transaction,
    ) -> Optional[Wallet]:
        """Recipient wallet if the receiver is a registered local account."""
        if transaction.type != TransactionType.TRANSFER or self._wallets is None:
            return None
        recipient = self._wallets.get(transaction.receiver)
        if recipient is None or recipient is wallet:
            return None
        return recipient

    def _prepare_recipient_credit(
        self,
        recipient: Wallet,
        sender: Account,
        transfer: Transaction,
    ) -> tuple[Transaction, Account, tuple[SavingsGoal, ...]]:
        """Income block payload and new state for a local transfer recipient."""
        incoming = Transaction(
            type=TransactionType.INCOME,
            category=Category.OTHER,
            amount=transfer.amount,
            description=f"Transfer from {sender.id}",
        )
        new_account = credit(recipient.account, incoming.amount)
        new_goals = self._allocate(recipient.goals, incoming)
        return incoming, new_account, new_goals

    async def _log_goal_changes(
        self,
        goals_before: tuple[SavingsGoal, ...],
        goals_after: tuple[SavingsGoal, ...],
        correlation_id: str,
    ) -> None:
        for before, after in zip(goals_before, goals_after):
            if after.current_amount != before.current_amount:
                await self._audit_logger.log_goal_funded(
                    goal_id=after.id,
                    goal_name=after.name,
                    contribution=str(after.current_amount - before.current_amount),
                    current_amount=str(after.current_amount),
                    correlation_id=correlation_id,
                )
