"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep session-lifetime in-memory storage for the demo
2. Swap in a persistent backend later without touching business logic
3. Use fakes in tests

The interface is intentionally simple: only the operations the auth flow,
the processor and the audit logger need.
"""

from abc import ABC, abstractmethod
from typing import Optional

from securefin.models.audit import AuditEvent
from securefin.wallet import Wallet


class WalletStoreInterface(ABC):
    """
    Registry of wallets keyed by mobile number.

    Wallets are never deleted; they live for the session.
    """

    @abstractmethod
    def add(self, wallet: Wallet) -> None:
        """
        Register a new wallet.

        Raises:
            DuplicateError: If a wallet already exists for the mobile
        """
        pass

    @abstractmethod
    def get(self, mobile: str) -> Optional[Wallet]:
        """Return the wallet for a mobile number, or None."""
        pass

    @abstractmethod
    def exists(self, mobile: str) -> bool:
        pass

    @abstractmethod
    def list_ids(self) -> list[str]:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one submit).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
