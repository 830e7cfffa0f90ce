"""
Authentication Models

The OTP flow is a three-phase state machine:

    AWAITING_MOBILE -> OTP_ISSUED -> VERIFIED

VERIFIED is terminal for a session. A new login or registration attempt
starts a fresh session.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from securefin.models.ledger import Account, utc_now


class AuthPhase(str, Enum):
    AWAITING_MOBILE = "awaiting_mobile"
    OTP_ISSUED = "otp_issued"
    VERIFIED = "verified"


class AuthMode(str, Enum):
    LOGIN = "login"
    REGISTER = "register"


class OtpChallenge(BaseModel):
    """
    An issued one-time code.

    WARNING: The code is returned to the caller only to simulate SMS
    delivery in this mock-security design. A production design must never
    hand the code back to the requesting client.
    """
    model_config = ConfigDict(frozen=True)

    mobile: str
    code: str
    issued_at: datetime = Field(default_factory=utc_now)
    expires_at: Optional[datetime] = None


class AuthOutcome(BaseModel):
    """Result of a successful verification."""
    model_config = ConfigDict(frozen=True)

    mode: AuthMode
    account: Account
    is_new_account: bool
