"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of logins and ledger writes
2. Debugging capability
3. A record of every risk warning the user overrode

The audit logger:
- Is async so it can sit next to the collaborator calls
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import uuid4

import structlog

from securefin.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from securefin.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger."""
    logging.basicConfig(format="%(message)s", level=level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for the in-session history view)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for audit events.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("securefin.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=event.event_id,
                )
                return False

        return True

    async def log_otp_requested(
        self,
        mobile: str,
        mode: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.otp_requested(
            mobile=mobile,
            mode=mode,
            correlation_id=correlation_id,
        ))

    async def log_otp_rejected(
        self,
        mobile: str,
        reason: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.otp_rejected(
            mobile=mobile,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_otp_verified(
        self,
        mobile: str,
        mode: str,
        is_new_account: bool,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.otp_verified(
            mobile=mobile,
            mode=mode,
            is_new_account=is_new_account,
            correlation_id=correlation_id,
        ))

    async def log_transaction_rejected(
        self,
        account_id: str,
        reason: str,
        issues: list[dict],
        correlation_id: str,
    ) -> None:
        """Log a transaction refused by validation or the funds check."""
        await self.log(AuditEventBuilder.transaction_rejected(
            account_id=account_id,
            reason=reason,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_risk_check(
        self,
        account_id: str,
        risk_level: str,
        reason: str,
        amount: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.risk_check_completed(
            account_id=account_id,
            risk_level=risk_level,
            reason=reason,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_confirmation_required(
        self,
        account_id: str,
        risk_level: str,
        amount: str,
        receiver: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.confirmation_required(
            account_id=account_id,
            risk_level=risk_level,
            amount=amount,
            receiver=receiver,
            correlation_id=correlation_id,
        ))

    async def log_risk_acknowledged(
        self,
        account_id: str,
        amount: str,
        receiver: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.risk_acknowledged(
            account_id=account_id,
            amount=amount,
            receiver=receiver,
            correlation_id=correlation_id,
        ))

    async def log_block_appended(
        self,
        account_id: str,
        index: int,
        block_hash: str,
        transaction_type: str,
        amount: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.block_appended(
            account_id=account_id,
            index=index,
            block_hash=block_hash,
            transaction_type=transaction_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_goal_funded(
        self,
        goal_id: str,
        goal_name: str,
        contribution: str,
        current_amount: str,
        correlation_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.goal_funded(
            goal_id=goal_id,
            goal_name=goal_name,
            contribution=contribution,
            current_amount=current_amount,
            correlation_id=correlation_id,
        ))

    async def log_chain_verified(
        self,
        account_id: str,
        block_count: int,
        correlation_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.chain_verified(
            account_id=account_id,
            block_count=block_count,
            correlation_id=correlation_id,
        ))

    async def log_chain_verification_failed(
        self,
        account_id: str,
        broken_index: int,
        correlation_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.chain_verification_failed(
            account_id=account_id,
            broken_index=broken_index,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    async def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> str:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., one submit).
    Pass it through all subsequent operations.
    """
    return uuid4().hex
