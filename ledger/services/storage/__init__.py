"""
Storage Services Package

Provides the abstract snapshot interface and its implementations.
The JSON file is the production backend; the in-memory one is for tests.
"""

from ledger.services.storage.interface import (
    CorruptSnapshotError,
    SnapshotStorageInterface,
    StorageError,
)
from ledger.services.storage.json_file import (
    JsonFileSnapshotStorage,
    decode_snapshot,
    encode_snapshot,
)
from ledger.services.storage.memory import InMemorySnapshotStorage

__all__ = [
    # Interface
    "SnapshotStorageInterface",
    # Exceptions
    "CorruptSnapshotError",
    "StorageError",
    # Implementations
    "InMemorySnapshotStorage",
    "JsonFileSnapshotStorage",
    # Codec
    "decode_snapshot",
    "encode_snapshot",
]
