"""
In-Memory Storage Implementation

State lives for the lifetime of the process only; persistence across
restarts is out of scope. Both stores follow the abstract interfaces, so a
persistent backend can replace them without changing business logic.
"""

from typing import Optional

from securefin.models.audit import AuditEvent
from securefin.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    WalletStoreInterface,
)
from securefin.wallet import Wallet


class InMemoryWalletStore(WalletStoreInterface):

    def __init__(self):
        self._wallets: dict[str, Wallet] = {}

    def add(self, wallet: Wallet) -> None:
        mobile = wallet.account.id
        if mobile in self._wallets:
            raise DuplicateError(f"Wallet already exists for {mobile}")
        self._wallets[mobile] = wallet

    def get(self, mobile: str) -> Optional[Wallet]:
        return self._wallets.get(mobile)

    def exists(self, mobile: str) -> bool:
        return mobile in self._wallets

    def list_ids(self) -> list[str]:
        return list(self._wallets)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: str,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events[-limit:]))
