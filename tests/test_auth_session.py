"""Tests for the OTP authentication state machine."""

import itertools

import pytest
from decimal import Decimal

from securefin.auth import AuthSession, generate_code
from securefin.exceptions import (
    AccountNotFoundError,
    InvalidCodeError,
    OtpExpiredError,
    SessionStateError,
    ValidationError,
)
from securefin.models.audit import AuditEventType
from securefin.models.auth import AuthMode, AuthPhase
from securefin.wallet import Wallet


def sequence_generator(*codes):
    """Code generator that hands out the given codes in order."""
    source = itertools.cycle(codes)
    return lambda length: next(source)


class TestGenerateCode:

    def test_length_and_digits(self):
        code = generate_code(4)
        assert len(code) == 4
        assert code.isdigit()

    def test_codes_vary(self):
        codes = {generate_code(6) for _ in range(50)}
        assert len(codes) > 1


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_flow(self, wallets):
        session = AuthSession(wallets, mode=AuthMode.REGISTER)
        assert session.phase == AuthPhase.AWAITING_MOBILE

        challenge = await session.request_code("9876543210", name="Asha Rao", language="hi")
        assert session.phase == AuthPhase.OTP_ISSUED
        assert len(challenge.code) == 4

        outcome = await session.verify_code(challenge.code)

        assert session.phase == AuthPhase.VERIFIED
        assert outcome.is_new_account is True
        assert outcome.account.name == "Asha Rao"
        assert outcome.account.language == "hi"
        assert outcome.account.balance == Decimal("0")
        assert wallets.exists("9876543210")
        assert session.wallet.ledger.latest().is_genesis
        assert len(session.wallet.goals) == 3

    @pytest.mark.asyncio
    async def test_short_name_rejected(self, wallets):
        session = AuthSession(wallets, mode=AuthMode.REGISTER)

        with pytest.raises(ValidationError) as exc:
            await session.request_code("9876543210", name="Al")

        assert exc.value.issues[0].field == "name"
        assert session.phase == AuthPhase.AWAITING_MOBILE

    @pytest.mark.asyncio
    async def test_overlong_name_rejected_before_code_is_issued(self, wallets):
        session = AuthSession(wallets, mode=AuthMode.REGISTER)

        with pytest.raises(ValidationError) as exc:
            await session.request_code("9876543210", name="A" * 150)

        assert exc.value.issues[0].issue_type == "too_long"
        assert session.phase == AuthPhase.AWAITING_MOBILE
        assert not wallets.exists("9876543210")

        challenge = await session.request_code("9876543210", name="A" * 100)
        outcome = await session.verify_code(challenge.code)
        assert len(outcome.account.name) == 100

    @pytest.mark.asyncio
    async def test_existing_mobile_rejected(self, wallet, wallets):
        session = AuthSession(wallets, mode=AuthMode.REGISTER)
        with pytest.raises(ValidationError, match="already registered"):
            await session.request_code(wallet.account.id, name="Someone Else")


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_flow(self, wallet, wallets):
        session = AuthSession(wallets)
        challenge = await session.request_code(wallet.account.id)
        outcome = await session.verify_code(challenge.code)

        assert outcome.is_new_account is False
        assert outcome.account == wallet.account
        assert session.wallet is wallet

    @pytest.mark.asyncio
    @pytest.mark.parametrize("mobile", ["12345", "98765432100", "abcdefghij", ""])
    async def test_invalid_mobile(self, wallets, mobile):
        session = AuthSession(wallets)
        with pytest.raises(ValidationError):
            await session.request_code(mobile)
        assert session.phase == AuthPhase.AWAITING_MOBILE

    @pytest.mark.asyncio
    async def test_unknown_mobile(self, wallets):
        session = AuthSession(wallets)
        with pytest.raises(AccountNotFoundError):
            await session.request_code("9000000000")
        assert session.phase == AuthPhase.AWAITING_MOBILE


class TestVerification:

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_otp_issued(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"))
        await session.request_code(wallet.account.id)

        with pytest.raises(InvalidCodeError):
            await session.verify_code("9999")

        assert session.phase == AuthPhase.OTP_ISSUED
        outcome = await session.verify_code("1234")
        assert outcome.account.id == wallet.account.id

    @pytest.mark.asyncio
    async def test_no_attempt_limit(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"))
        await session.request_code(wallet.account.id)

        for _ in range(10):
            with pytest.raises(InvalidCodeError):
                await session.verify_code("0000")

        await session.verify_code("1234")
        assert session.is_verified

    @pytest.mark.asyncio
    async def test_new_request_replaces_code(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1111", "2222"))
        await session.request_code(wallet.account.id)
        await session.request_code(wallet.account.id)

        with pytest.raises(InvalidCodeError):
            await session.verify_code("1111")
        await session.verify_code("2222")

    @pytest.mark.asyncio
    async def test_codes_for_different_mobiles_are_independent(self, wallet, wallets, clock):
        other = Wallet.open(mobile="9123456780", name="Ravi Kumar", clock=clock)
        wallets.add(other)
        session = AuthSession(wallets, code_generator=sequence_generator("1111", "2222"))

        first = await session.request_code(wallet.account.id)
        second = await session.request_code(other.account.id)

        with pytest.raises(InvalidCodeError):
            await session.verify_code(first.code)
        outcome = await session.verify_code(second.code)

        assert outcome.account.id == "9123456780"
        assert session.wallet is other

    @pytest.mark.asyncio
    async def test_verify_before_request(self, wallets):
        with pytest.raises(SessionStateError):
            await AuthSession(wallets).verify_code("1234")

    @pytest.mark.asyncio
    async def test_switch_mode_discards_code(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"))
        await session.request_code(wallet.account.id)

        session.switch_mode(AuthMode.REGISTER)

        assert session.mode == AuthMode.REGISTER
        assert session.phase == AuthPhase.AWAITING_MOBILE
        with pytest.raises(SessionStateError):
            await session.verify_code("1234")

    @pytest.mark.asyncio
    async def test_change_mobile_discards_code(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"))
        await session.request_code(wallet.account.id)

        session.change_mobile()

        assert session.pending_mobile is None
        with pytest.raises(SessionStateError):
            await session.verify_code("1234")

    @pytest.mark.asyncio
    async def test_verified_session_is_terminal(self, wallet, wallets):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"))
        await session.request_code(wallet.account.id)
        await session.verify_code("1234")

        with pytest.raises(SessionStateError):
            await session.verify_code("1234")
        with pytest.raises(SessionStateError):
            await session.request_code(wallet.account.id)
        with pytest.raises(SessionStateError):
            session.switch_mode(AuthMode.REGISTER)

    @pytest.mark.asyncio
    async def test_code_expires_when_ttl_set(self, wallet, wallets, clock, monkeypatch):
        monkeypatch.setenv("LEDGER_OTP_TTL_SECONDS", "60")
        session = AuthSession(wallets, code_generator=sequence_generator("1234"), clock=clock)
        challenge = await session.request_code(wallet.account.id)
        assert challenge.expires_at is not None

        clock.advance(61)

        with pytest.raises(OtpExpiredError):
            await session.verify_code("1234")

    @pytest.mark.asyncio
    async def test_code_does_not_expire_by_default(self, wallet, wallets, clock):
        session = AuthSession(wallets, code_generator=sequence_generator("1234"), clock=clock)
        challenge = await session.request_code(wallet.account.id)
        assert challenge.expires_at is None

        clock.advance(24 * 3600)
        await session.verify_code("1234")


class TestAuthAudit:

    @pytest.mark.asyncio
    async def test_events_never_contain_code(self, wallet, wallets, audit_logger, audit_storage):
        session = AuthSession(
            wallets,
            code_generator=sequence_generator("4321"),
            audit_logger=audit_logger,
        )
        await session.request_code(wallet.account.id)
        with pytest.raises(InvalidCodeError):
            await session.verify_code("0000")
        await session.verify_code("4321")

        events = list(reversed(await audit_storage.get_recent_events()))
        assert [e.event_type for e in events] == [
            AuditEventType.OTP_REQUESTED,
            AuditEventType.OTP_REJECTED,
            AuditEventType.USER_LOGGED_IN,
        ]
        assert all("4321" not in str(e.details) for e in events)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
