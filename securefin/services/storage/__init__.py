"""
Storage Services Package

Provides abstract interfaces and in-memory implementations for wallet and
audit storage.
"""

from securefin.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    StorageError,
    WalletStoreInterface,
)
from securefin.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryWalletStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "WalletStoreInterface",
    # Exceptions
    "DuplicateError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryWalletStore",
]
