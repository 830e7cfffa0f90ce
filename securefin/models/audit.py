"""
Audit Models for SecureFin

Every significant action in the system is logged for audit purposes.
This provides:
1. Complete traceability of every login and every submitted transaction
2. Debugging information when things go wrong
3. A record of every risk decision the user acknowledged

DESIGN DECISION: Audit logs are append-only, like the ledger itself.
We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from securefin.models.ledger import utc_now, new_id


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step in the auth and transaction pipelines has its own event type.
    """
    # Authentication
    OTP_REQUESTED = "otp_requested"
    OTP_VERIFIED = "otp_verified"
    OTP_REJECTED = "otp_rejected"
    ACCOUNT_REGISTERED = "account_registered"
    USER_LOGGED_IN = "user_logged_in"

    # Transaction pipeline
    TRANSACTION_REJECTED = "transaction_rejected"
    RISK_CHECK_COMPLETED = "risk_check_completed"
    CONFIRMATION_REQUIRED = "confirmation_required"
    RISK_ACKNOWLEDGED = "risk_acknowledged"
    BLOCK_APPENDED = "block_appended"
    GOAL_FUNDED = "goal_funded"

    # Integrity
    CHAIN_VERIFIED = "chain_verified"
    CHAIN_VERIFICATION_FAILED = "chain_verification_failed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: str = Field(
        default_factory=new_id,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'account', 'block', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[str] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one submit)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": self.event_id,
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": self.correlation_id,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.otp_requested(mobile, "login", correlation_id)
        event = AuditEventBuilder.block_appended(block, account_id, correlation_id)
    """

    @staticmethod
    def otp_requested(
        mobile: str,
        mode: str,
        correlation_id: str,
    ) -> AuditEvent:
        # The code itself is never written to the audit trail.
        return AuditEvent(
            event_type=AuditEventType.OTP_REQUESTED,
            entity_type="account",
            entity_id=mobile,
            correlation_id=correlation_id,
            description=f"OTP requested for {mode}",
            details={"mode": mode},
            is_user_action=True,
        )

    @staticmethod
    def otp_rejected(
        mobile: str,
        reason: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OTP_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=mobile,
            correlation_id=correlation_id,
            description="OTP verification failed",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def otp_verified(
        mobile: str,
        mode: str,
        is_new_account: bool,
        correlation_id: str,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ACCOUNT_REGISTERED
            if is_new_account
            else AuditEventType.USER_LOGGED_IN
        )
        return AuditEvent(
            event_type=event_type,
            entity_type="account",
            entity_id=mobile,
            correlation_id=correlation_id,
            description=(
                "New account registered" if is_new_account else "User logged in"
            ),
            details={"mode": mode},
            is_user_action=True,
        )

    @staticmethod
    def transaction_rejected(
        account_id: str,
        reason: str,
        issues: list[dict],
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Transaction rejected: {reason}",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def risk_check_completed(
        account_id: str,
        risk_level: str,
        reason: str,
        amount: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RISK_CHECK_COMPLETED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Fraud-risk check returned {risk_level}",
            details={
                "risk_level": risk_level,
                "reason": reason,
                "amount": amount,
            },
        )

    @staticmethod
    def confirmation_required(
        account_id: str,
        risk_level: str,
        amount: str,
        receiver: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIRMATION_REQUIRED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Transfer of {amount} to {receiver} needs confirmation",
            details={
                "risk_level": risk_level,
                "amount": amount,
                "receiver": receiver,
            },
        )

    @staticmethod
    def risk_acknowledged(
        account_id: str,
        amount: str,
        receiver: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RISK_ACKNOWLEDGED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"User acknowledged risk on transfer to {receiver}",
            details={
                "amount": amount,
                "receiver": receiver,
            },
            is_user_action=True,
        )

    @staticmethod
    def block_appended(
        account_id: str,
        index: int,
        block_hash: str,
        transaction_type: str,
        amount: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BLOCK_APPENDED,
            entity_type="block",
            entity_id=block_hash,
            correlation_id=correlation_id,
            description=f"Block #{index} appended: {transaction_type} {amount}",
            details={
                "account_id": account_id,
                "index": index,
                "transaction_type": transaction_type,
                "amount": amount,
            },
        )

    @staticmethod
    def goal_funded(
        goal_id: str,
        goal_name: str,
        contribution: str,
        current_amount: str,
        correlation_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_FUNDED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Auto-saved {contribution} to {goal_name}",
            details={
                "contribution": contribution,
                "current_amount": current_amount,
            },
        )

    @staticmethod
    def chain_verified(
        account_id: str,
        block_count: int,
        correlation_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAIN_VERIFIED,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Ledger verified: {block_count} blocks intact",
            details={"block_count": block_count},
        )

    @staticmethod
    def chain_verification_failed(
        account_id: str,
        broken_index: int,
        correlation_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAIN_VERIFICATION_FAILED,
            severity=AuditSeverity.CRITICAL,
            entity_type="account",
            entity_id=account_id,
            correlation_id=correlation_id,
            description=f"Ledger integrity check failed at block #{broken_index}",
            details={"broken_index": broken_index},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
