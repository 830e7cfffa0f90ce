"""
Shared fixtures and fakes.

No real API calls in tests: collaborators are replaced by the fakes below.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from securefin.agents import AdviceService, FraudRiskService
from securefin.audit import AuditLogger
from securefin.config import get_settings
from securefin.models.ledger import RiskAssessment, RiskLevel
from securefin.services.storage import InMemoryAuditStorage, InMemoryWalletStore
from securefin.wallet import Wallet


class FakeRiskService(FraudRiskService):
    """Returns a fixed risk level and records every call."""

    def __init__(self, level: RiskLevel = RiskLevel.LOW, reason: str = "test"):
        self.level = level
        self.reason = reason
        self.calls = []

    async def check_risk(self, transaction):
        self.calls.append(transaction)
        return RiskAssessment(risk_level=self.level, reason=self.reason)


class SlowRiskService(FraudRiskService):
    async def check_risk(self, transaction):
        await asyncio.sleep(10)
        return RiskAssessment(risk_level=RiskLevel.LOW)


class BrokenRiskService(FraudRiskService):
    async def check_risk(self, transaction):
        raise ConnectionError("service down")


class FakeAdviceService(AdviceService):

    def __init__(self, text: str = "Spend less on food."):
        self.text = text
        self.calls = []

    async def get_advice(self, transactions, balance, locale):
        self.calls.append((tuple(transactions), balance, locale))
        return self.text


class BrokenAdviceService(AdviceService):
    async def get_advice(self, transactions, balance, locale):
        raise RuntimeError("quota exceeded")


class FakeClock:
    """Deterministic clock; advance() moves it forward."""

    def __init__(self, start: datetime = datetime(2024, 12, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Fast collaborator timeout and a clean settings cache for every test."""
    monkeypatch.setenv("COLLABORATOR_TIMEOUT_SECONDS", "0.05")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wallets():
    return InMemoryWalletStore()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def wallet(wallets, clock):
    """Registered wallet with 10,000 opening balance."""
    w = Wallet.open(
        mobile="9876543210",
        name="Asha Rao",
        opening_balance=Decimal("10000"),
        clock=clock,
    )
    wallets.add(w)
    return w
