"""
Two-Stage Validation Pipeline

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount must be greater than zero
- Required fields present by transaction type (receiver for transfers)
- Format checks (description length, receiver is not the sender)

STAGE 2 - SEMANTIC VALIDATION:
- Funds check for outgoing transactions against the current balance

WHY TWO STAGES:
1. They map onto two different error kinds (ValidationError vs
   InsufficientFundsError)
2. Stage 2 needs account state, stage 1 does not
3. Stage 2 is skipped when stage 1 fails

IMPORTANT: Validation NEVER silently fixes issues.
It reports them and the processor refuses the transaction.
"""

import re
from decimal import Decimal
from typing import Optional

from securefin.config import get_settings
from securefin.exceptions import InsufficientFundsError, ValidationError
from securefin.models.ledger import Account, TransactionRequest, TransactionType
from securefin.models.validation import ValidationIssue, ValidationResult

MOBILE_PATTERN = re.compile(r"^\d{10}$")
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
MAX_RECEIVER_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 200


class TransactionValidator:
    """
    Validates transaction requests through a two-stage pipeline.

    Stage 1: Schema validation (no account state needed)
    Stage 2: Semantic validation (needs the current balance)
    """

    def __init__(self, currency_symbol: Optional[str] = None):
        self._currency = currency_symbol or get_settings().ledger.currency_symbol

    def _validate_schema(
        self,
        request: TransactionRequest,
        account: Account,
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if not request.amount.is_finite() or request.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a positive amount",
            ))

        if request.type == TransactionType.TRANSFER:
            if not request.receiver:
                issues.append(ValidationIssue(
                    field="receiver",
                    issue_type="missing",
                    message="Recipient ID / UPI is required for a transfer",
                    severity="error",
                    suggested_fix="Enter the recipient's mobile number or UPI handle",
                ))
            elif request.receiver == account.id:
                issues.append(ValidationIssue(
                    field="receiver",
                    issue_type="invalid_value",
                    message="You cannot transfer money to yourself",
                    severity="error",
                ))
            elif len(request.receiver) > MAX_RECEIVER_LENGTH:
                issues.append(ValidationIssue(
                    field="receiver",
                    issue_type="too_long",
                    message=f"Recipient ID / UPI must be at most {MAX_RECEIVER_LENGTH} characters",
                    severity="error",
                ))
        elif request.receiver:
            issues.append(ValidationIssue(
                field="receiver",
                issue_type="unexpected",
                message=f"Receiver is ignored for {request.type.value} transactions",
                severity="warning",
            ))

        if len(request.description) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        request: TransactionRequest,
        account: Account,
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if request.type != TransactionType.INCOME and request.amount > account.balance:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="insufficient_funds",
                message=(
                    f"Insufficient balance: {self._currency}{request.amount:,.2f} requested, "
                    f"{self._currency}{account.balance:,.2f} available"
                ),
                severity="error",
                suggested_fix="Reduce the amount or cancel",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        request: TransactionRequest,
        account: Account,
    ) -> ValidationResult:
        """Run the full pipeline and return every issue found."""
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(request, account)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(request, account)
            all_issues.extend(semantic_issues)

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
        )

    def ensure_valid(
        self,
        request: TransactionRequest,
        account: Account,
    ) -> ValidationResult:
        """
        Validate and raise the matching error kind.

        Raises:
            ValidationError: stage 1 failed
            InsufficientFundsError: stage 2 failed
        """
        result = self.validate(request, account)
        if not result.schema_valid:
            raise ValidationError(
                "; ".join(i.message for i in result.issues if i.severity == "error"),
                issues=result.issues,
            )
        if not result.semantic_valid:
            raise InsufficientFundsError(requested=request.amount, available=account.balance)
        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Summary of validation results for display."""
        if result.is_valid and not result.warnings:
            return "✅ All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("❌ This transaction cannot be processed:")
            for issue in errors:
                lines.append(f"   • {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            lines.append("⚠️ Please note:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)


def validate_mobile(mobile: str) -> list[ValidationIssue]:
    if MOBILE_PATTERN.match(mobile or ""):
        return []
    return [ValidationIssue(
        field="mobile",
        issue_type="invalid_format",
        message="Please enter a valid 10-digit mobile number",
        severity="error",
    )]


def validate_name(name: Optional[str]) -> list[ValidationIssue]:
    stripped = (name or "").strip()
    if len(stripped) > MAX_NAME_LENGTH:
        return [ValidationIssue(
            field="name",
            issue_type="too_long",
            message=f"Name must be at most {MAX_NAME_LENGTH} characters",
            severity="error",
        )]
    if len(stripped) >= MIN_NAME_LENGTH:
        return []
    return [ValidationIssue(
        field="name",
        issue_type="invalid_value",
        message="Please enter your full name",
        severity="error",
        suggested_fix=f"Names need at least {MIN_NAME_LENGTH} characters",
    )]
