"""
Data Models Package

This package contains all Pydantic models used in SecureFin.
All data flowing through the ledger must conform to these schemas.
"""

from securefin.models.ledger import (
    Account,
    Block,
    Category,
    RiskAssessment,
    RiskLevel,
    SavingsGoal,
    SubmitResult,
    SubmitStatus,
    Transaction,
    TransactionRequest,
    TransactionType,
    WalletSnapshot,
)
from securefin.models.auth import (
    AuthMode,
    AuthOutcome,
    AuthPhase,
    OtpChallenge,
)
from securefin.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from securefin.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger models
    "Account",
    "Block",
    "Category",
    "RiskAssessment",
    "RiskLevel",
    "SavingsGoal",
    "SubmitResult",
    "SubmitStatus",
    "Transaction",
    "TransactionRequest",
    "TransactionType",
    "WalletSnapshot",
    # Auth models
    "AuthMode",
    "AuthOutcome",
    "AuthPhase",
    "OtpChallenge",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
