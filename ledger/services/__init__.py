"""Services package."""

from ledger.services.persistence import SnapshotWriter
from ledger.services.storage import (
    CorruptSnapshotError,
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotStorageInterface,
    StorageError,
)

__all__ = [
    # Persistence
    "SnapshotWriter",
    # Storage services
    "CorruptSnapshotError",
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    "SnapshotStorageInterface",
    "StorageError",
]
