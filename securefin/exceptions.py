"""
Error Kinds for SecureFin

Every failure the core can report to a caller is one of these.

- Recoverable by the user: ValidationError, InsufficientFundsError,
  InvalidCodeError (and their subclasses).
- Programmer errors: SessionStateError, EmptyLedgerError, GenesisExistsError.
- Integrity failures: ChainIntegrityError is reported, never repaired.
  There is no mechanism to fix a tampered chain, only to detect it.
"""

from decimal import Decimal
from typing import Optional


class SecureFinError(Exception):
    """Base exception for all SecureFin errors."""
    pass


class ValidationError(SecureFinError):
    """Malformed input. The user corrects it and resubmits."""

    def __init__(self, message: str, issues: Optional[list] = None):
        self.issues = list(issues or [])
        super().__init__(message)


class AccountNotFoundError(ValidationError):
    """No registered account for the given mobile number."""
    pass


class InsufficientFundsError(SecureFinError):
    """Outgoing amount exceeds the current balance."""

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient balance: requested {requested}, available {available}"
        )


class InvalidCodeError(SecureFinError):
    """Presented OTP does not match the issued code."""
    pass


class OtpExpiredError(InvalidCodeError):
    """The issued OTP is past its expiry time."""
    pass


class SessionStateError(SecureFinError):
    """Operation is not allowed in the current auth phase."""
    pass


class LedgerError(SecureFinError):
    """Base exception for ledger operations."""
    pass


class EmptyLedgerError(LedgerError):
    """Ledger used before genesis."""
    pass


class GenesisExistsError(LedgerError):
    """Genesis was requested on a ledger that already has one."""
    pass


class ChainIntegrityError(LedgerError):
    """Recomputed hashes or links do not match the stored chain."""

    def __init__(self, broken_index: int):
        self.broken_index = broken_index
        super().__init__(f"Chain integrity check failed at block #{broken_index}")
