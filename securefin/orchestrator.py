"""
Main Orchestrator for SecureFin

This module ties together all the components and defines the
end-to-end flows for:
1. Authentication (mobile → OTP → verified session)
2. Transactions (request → validate → risk gate → commit)
3. Dashboard (snapshot → summaries → advice)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No ledger write without a verified session
- No large transfer without a risk check or explicit acknowledgement
- Every step is audited

This is the "glue" the UI layer talks to. It holds no business rules of
its own; those live in the processor, the auth session and the ledger.
"""

from typing import Optional

from securefin.agents import AdviceAgent, AdviceService, FraudRiskAgent, FraudRiskService
from securefin.audit import AuditLogger, configure_logging, create_correlation_id
from securefin.auth import AuthSession
from securefin.config import get_settings, validate_all_settings
from securefin.exceptions import SessionStateError
from securefin.models.auth import AuthMode, AuthOutcome, OtpChallenge
from securefin.models.ledger import SubmitResult, TransactionRequest, WalletSnapshot
from securefin.processor import TransactionProcessor
from securefin.queries import DashboardQuery
from securefin.services.storage import (
    InMemoryAuditStorage,
    InMemoryWalletStore,
    WalletStoreInterface,
)
from securefin.wallet import Wallet


class SecureFinApp:
    """
    Application facade for one user session.

    Flow:
    1. new_session() → request_code() → verify_code()
    2. submit() as many times as needed
    3. snapshot() / advice() / verify_chain() for the dashboard

    Logging out is just starting a new session.
    """

    def __init__(
        self,
        wallets: Optional[WalletStoreInterface] = None,
        processor: Optional[TransactionProcessor] = None,
        dashboard: Optional[DashboardQuery] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._wallets = wallets if wallets is not None else InMemoryWalletStore()
        self._audit_logger = audit_logger
        self._processor = processor or TransactionProcessor(
            wallets=self._wallets,
            audit_logger=audit_logger,
        )
        self._dashboard = dashboard or DashboardQuery(audit_logger=audit_logger)
        self._session: Optional[AuthSession] = None

    @property
    def wallets(self) -> WalletStoreInterface:
        return self._wallets

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def dashboard(self) -> DashboardQuery:
        return self._dashboard

    def new_session(self, mode: AuthMode = AuthMode.LOGIN, **kwargs) -> AuthSession:
        """Start a fresh auth session, discarding the current one."""
        self._session = AuthSession(
            self._wallets,
            mode=mode,
            audit_logger=self._audit_logger,
            **kwargs,
        )
        return self._session

    def _current_session(self) -> AuthSession:
        if self._session is None:
            return self.new_session()
        return self._session

    def _verified_wallet(self) -> Wallet:
        if self._session is None or not self._session.is_verified:
            raise SessionStateError("Please log in first")
        return self._session.wallet

    async def request_code(
        self,
        mobile: str,
        name: Optional[str] = None,
        language: str = "en",
    ) -> OtpChallenge:
        return await self._current_session().request_code(mobile, name, language)

    async def verify_code(self, code: str) -> AuthOutcome:
        return await self._current_session().verify_code(code)

    async def submit(
        self,
        request: TransactionRequest,
        acknowledge_risk: bool = False,
    ) -> SubmitResult:
        """
        Submit a transaction for the logged-in wallet.

        Raises:
            SessionStateError: No verified session
            ValidationError / InsufficientFundsError: From the processor
        """
        wallet = self._verified_wallet()
        return await self._processor.submit(
            wallet,
            request,
            acknowledge_risk=acknowledge_risk,
            correlation_id=create_correlation_id(),
        )

    def snapshot(self) -> WalletSnapshot:
        return self._verified_wallet().snapshot()

    async def advice(self) -> str:
        return await self._dashboard.advice(self.snapshot())

    async def verify_chain(self) -> bool:
        """Verify the logged-in ledger. Breaks are reported, never repaired."""
        wallet = self._verified_wallet()
        broken_index = wallet.ledger.find_broken_link()
        if broken_index is None:
            if self._audit_logger:
                await self._audit_logger.log_chain_verified(
                    account_id=wallet.account.id,
                    block_count=len(wallet.ledger),
                )
            return True

        if self._audit_logger:
            await self._audit_logger.log_chain_verification_failed(
                account_id=wallet.account.id,
                broken_index=broken_index,
            )
        return False


def create_app_components(
    use_agents: bool = True,
) -> SecureFinApp:
    """
    Factory function to create all application components.

    Args:
        use_agents: Whether to initialize the Gemini collaborators.
                    Set to False for testing without network access.

    Returns:
        A wired SecureFinApp with in-memory storage
    """
    configure_logging(get_settings().app.log_level)
    audit_logger = AuditLogger(InMemoryAuditStorage())
    advice_service: Optional[AdviceService] = None
    risk_service: Optional[FraudRiskService] = None

    if use_agents and validate_all_settings().get("gemini"):
        advice_service = AdviceAgent()
        risk_service = FraudRiskAgent()

    wallets = InMemoryWalletStore()
    processor = TransactionProcessor(
        wallets=wallets,
        risk_service=risk_service,
        audit_logger=audit_logger,
    )
    dashboard = DashboardQuery(
        advice_service=advice_service,
        audit_logger=audit_logger,
    )

    return SecureFinApp(
        wallets=wallets,
        processor=processor,
        dashboard=dashboard,
        audit_logger=audit_logger,
    )
