"""
Core Data Models for the SecureFin Ledger

These models define the schemas for everything the ledger stores or returns.
They are designed to:
1. Enforce type safety at runtime
2. Be immutable once committed (payloads and blocks are frozen)
3. Serialize canonically for hashing and logging

DESIGN DECISION: Request models are lenient, committed models are strict.
A TransactionRequest accepts whatever the caller typed so the validator can
report every problem at once. A Transaction only exists after validation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid4().hex


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement relative to the account."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"  # Outgoing P2P transfer


class Category(str, Enum):
    """
    Supported transaction categories.

    Closed enumeration so the dashboard breakdown stays consistent.
    """
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    BILLS = "bills"
    EDUCATION = "education"
    HEALTH = "health"
    ENTERTAINMENT = "entertainment"
    SALARY = "salary"
    OTHER = "other"


class RiskLevel(str, Enum):
    """Fraud-risk label returned by the risk collaborator."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"  # Collaborator failed, timed out or is not configured


class SubmitStatus(str, Enum):
    COMMITTED = "committed"
    REQUIRES_CONFIRMATION = "requires_confirmation"


# =============================================================================
# LEDGER PAYLOAD
# =============================================================================

class Transaction(BaseModel):
    """
    A committed transaction, the payload of one Block.

    CRITICAL: Immutable once embedded in a Block.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(default_factory=utc_now)
    type: TransactionType
    category: Category = Category.OTHER
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in account currency (zero only for genesis)"
    )
    description: str = Field(default="", max_length=200)
    receiver: Optional[str] = Field(
        default=None,
        description="Recipient ID / UPI handle (transfers only)"
    )

    @model_validator(mode='after')
    def validate_receiver(self) -> 'Transaction':
        if self.type == TransactionType.TRANSFER and not self.receiver:
            raise ValueError("Transfer requires a receiver")
        return self

    @property
    def signed_amount(self) -> Decimal:
        """Amount with sign based on direction."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class Block(BaseModel):
    """
    One immutable ledger entry.

    `hash` is the fingerprint of {index, timestamp, data, previous_hash}.
    `previous_hash` links to the block at index - 1 (or the genesis sentinel).
    """
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    timestamp: datetime
    data: Transaction
    previous_hash: str
    hash: str

    @property
    def is_genesis(self) -> bool:
        return self.index == 0


# =============================================================================
# ACCOUNT & GOALS
# =============================================================================

class Account(BaseModel):
    """
    Account identity and balance.

    Balance changes only through the processor's apply step,
    which replaces the whole value.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., description="Mobile number")
    name: str = Field(..., min_length=1, max_length=100)
    balance: Decimal = Field(default=Decimal("0"), ge=0)
    language: str = Field(default="en", description="Locale tag for advice")


class SavingsGoal(BaseModel):
    """
    A savings goal funded automatically from income.

    NOTE: current_amount may exceed target_amount. Allocation does not cap
    the contribution; only the display percentage is capped at 100.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str
    icon: str = ""
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)

    @property
    def is_funded(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def progress_percent(self) -> int:
        """Progress for display, capped at 100."""
        percent = round(self.current_amount / self.target_amount * 100)
        return min(100, int(percent))


# =============================================================================
# PROCESSOR INPUT / OUTPUT
# =============================================================================

class TransactionRequest(BaseModel):
    """
    A transaction as submitted by the caller.

    This is PROPOSED data, NOT validated.
    Fields are unconstrained so the validator can report every issue.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    category: Category = Category.OTHER
    amount: Decimal
    description: str = ""
    receiver: Optional[str] = None


class RiskAssessment(BaseModel):
    """Result of a fraud-risk check on a candidate transfer."""

    risk_level: RiskLevel
    reason: str = ""

    @property
    def requires_confirmation(self) -> bool:
        return self.risk_level in (RiskLevel.HIGH, RiskLevel.UNKNOWN)


class SubmitResult(BaseModel):
    """
    Outcome of TransactionProcessor.submit.

    When status is REQUIRES_CONFIRMATION nothing was committed: `block` is
    None and `account` / `goals` are the unchanged current values. The caller
    re-submits with acknowledge_risk=True to proceed.
    """
    model_config = ConfigDict(frozen=True)

    status: SubmitStatus
    block: Optional[Block] = None
    account: Account
    goals: tuple[SavingsGoal, ...] = ()
    risk: Optional[RiskAssessment] = None

    @property
    def committed(self) -> bool:
        return self.status == SubmitStatus.COMMITTED


class WalletSnapshot(BaseModel):
    """Read-only view of one wallet for the UI layer."""
    model_config = ConfigDict(frozen=True)

    account: Account
    blocks: tuple[Block, ...]
    goals: tuple[SavingsGoal, ...]
    chain_valid: bool
    taken_at: datetime = Field(default_factory=utc_now)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Transaction history, genesis payload excluded."""
        return tuple(block.data for block in self.blocks if not block.is_genesis)
