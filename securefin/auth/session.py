"""
OTP Authentication Session

State machine:

    AWAITING_MOBILE --request_code--> OTP_ISSUED --verify_code--> VERIFIED
          ^                              |
          +--- switch_mode / change_mobile

Policy:
- One active code per session. A new request replaces the old code.
- No attempt limit: a wrong code leaves the session in OTP_ISSUED.
- Codes expire only when LedgerSettings.otp_ttl_seconds is set.
- A verified code is consumed and cannot be presented again.

WARNING: request_code returns the code to the caller to simulate SMS
delivery. This is a mock-security design; production code must never do
this.
"""

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from securefin.audit import AuditLogger, create_correlation_id
from securefin.config import get_settings
from securefin.exceptions import (
    AccountNotFoundError,
    InvalidCodeError,
    OtpExpiredError,
    SessionStateError,
    ValidationError,
)
from securefin.models.auth import AuthMode, AuthOutcome, AuthPhase, OtpChallenge
from securefin.models.ledger import utc_now
from securefin.services.storage import WalletStoreInterface
from securefin.validation import validate_mobile, validate_name
from securefin.wallet import Wallet


def generate_code(length: int) -> str:
    """Random numeric code from the OS CSPRNG; independent of prior codes."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


class AuthSession:
    """
    One login or registration attempt.

    Args:
        wallets: Registry to look up (login) or create (register) wallets.
        mode: Initial mode, login by default.
        code_generator: Override for the OTP source (tests).
        clock: Override for the current time (tests).
    """

    def __init__(
        self,
        wallets: WalletStoreInterface,
        mode: AuthMode = AuthMode.LOGIN,
        code_generator: Optional[Callable[[int], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._wallets = wallets
        self._settings = get_settings().ledger
        self._generate = code_generator or generate_code
        self._clock = clock or utc_now
        self._audit_logger = audit_logger
        self._correlation_id = create_correlation_id()

        self._mode = mode
        self._phase = AuthPhase.AWAITING_MOBILE
        self._pending_mobile: Optional[str] = None
        self._pending_name: Optional[str] = None
        self._language = "en"
        self._challenge: Optional[OtpChallenge] = None
        self._wallet: Optional[Wallet] = None

    @property
    def phase(self) -> AuthPhase:
        return self._phase

    @property
    def mode(self) -> AuthMode:
        return self._mode

    @property
    def pending_mobile(self) -> Optional[str]:
        return self._pending_mobile

    @property
    def wallet(self) -> Optional[Wallet]:
        """The authenticated wallet, once VERIFIED."""
        return self._wallet

    @property
    def is_verified(self) -> bool:
        return self._phase == AuthPhase.VERIFIED

    def _ensure_not_verified(self) -> None:
        if self._phase == AuthPhase.VERIFIED:
            raise SessionStateError("Session already verified; start a new session")

    def _reset(self) -> None:
        self._phase = AuthPhase.AWAITING_MOBILE
        self._pending_mobile = None
        self._pending_name = None
        self._challenge = None

    def switch_mode(self, mode: AuthMode) -> None:
        """Switch login/register. Discards any issued code."""
        self._ensure_not_verified()
        self._mode = mode
        self._reset()

    def change_mobile(self) -> None:
        """Go back to mobile entry. Discards any issued code."""
        self._ensure_not_verified()
        self._reset()

    async def request_code(
        self,
        mobile: str,
        name: Optional[str] = None,
        language: str = "en",
    ) -> OtpChallenge:
        """
        Validate the mobile (and name when registering) and issue a code.

        Raises:
            ValidationError: Bad mobile/name, or mobile already registered
            AccountNotFoundError: Login for an unregistered mobile
            SessionStateError: Session already verified
        """
        self._ensure_not_verified()

        mobile = (mobile or "").strip()
        issues = validate_mobile(mobile)
        if self._mode == AuthMode.REGISTER:
            issues += validate_name(name)
        if issues:
            raise ValidationError(issues[0].message, issues=issues)

        if self._mode == AuthMode.LOGIN and not self._wallets.exists(mobile):
            raise AccountNotFoundError(
                "No account found for this mobile number. Please register first."
            )
        if self._mode == AuthMode.REGISTER and self._wallets.exists(mobile):
            raise ValidationError("This mobile number is already registered. Please log in.")

        issued_at = self._clock()
        ttl = self._settings.otp_ttl_seconds
        self._challenge = OtpChallenge(
            mobile=mobile,
            code=self._generate(self._settings.otp_length),
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=ttl) if ttl else None,
        )
        self._pending_mobile = mobile
        self._pending_name = name.strip() if name else None
        self._language = language
        self._phase = AuthPhase.OTP_ISSUED

        if self._audit_logger:
            await self._audit_logger.log_otp_requested(
                mobile=mobile,
                mode=self._mode.value,
                correlation_id=self._correlation_id,
            )

        return self._challenge

    async def verify_code(self, candidate: str) -> AuthOutcome:
        """
        Check a presented code against the issued one.

        Raises:
            InvalidCodeError: Mismatch; the session stays in OTP_ISSUED
            OtpExpiredError: The issued code has expired
            SessionStateError: No code has been issued
        """
        if self._phase != AuthPhase.OTP_ISSUED or self._challenge is None:
            raise SessionStateError("No OTP has been issued for this session")

        challenge = self._challenge
        if challenge.expires_at is not None and self._clock() >= challenge.expires_at:
            await self._log_rejected("expired")
            raise OtpExpiredError("OTP has expired. Please request a new one.")

        if not secrets.compare_digest((candidate or "").strip(), challenge.code):
            await self._log_rejected("mismatch")
            raise InvalidCodeError("Invalid OTP. Please try again.")

        if self._mode == AuthMode.LOGIN:
            wallet = self._wallets.get(challenge.mobile)
            if wallet is None:
                self._reset()
                raise AccountNotFoundError("No account found for this mobile number.")
            is_new = False
        else:
            wallet = Wallet.open(
                mobile=challenge.mobile,
                name=self._pending_name,
                language=self._language,
            )
            self._wallets.add(wallet)
            is_new = True

        # Consumed only once the wallet is in place
        self._challenge = None
        self._wallet = wallet
        self._phase = AuthPhase.VERIFIED

        if self._audit_logger:
            await self._audit_logger.log_otp_verified(
                mobile=challenge.mobile,
                mode=self._mode.value,
                is_new_account=is_new,
                correlation_id=self._correlation_id,
            )

        return AuthOutcome(mode=self._mode, account=wallet.account, is_new_account=is_new)

    async def _log_rejected(self, reason: str) -> None:
        if self._audit_logger:
            await self._audit_logger.log_otp_rejected(
                mobile=self._pending_mobile,
                reason=reason,
                correlation_id=self._correlation_id,
            )
