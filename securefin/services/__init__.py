"""Services package."""

from securefin.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryWalletStore,
    StorageError,
    WalletStoreInterface,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryWalletStore",
    "StorageError",
    "WalletStoreInterface",
]
