"""
Abstract Snapshot Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON file for another backend later
2. Use in-memory storage for testing
3. Keep the engine decoupled from where bytes end up

The unit of storage is the whole ledger snapshot. There are no partial or
incremental writes: save() replaces everything, load() returns everything.
"""

from abc import ABC, abstractmethod

from ledger.models.entities import LedgerSnapshot


class SnapshotStorageInterface(ABC):
    """
    Abstract interface for ledger snapshot storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def load(self) -> LedgerSnapshot:
        """
        Load the full ledger snapshot.

        Returns:
            The stored snapshot, or an empty snapshot if nothing
            has been stored yet

        Raises:
            CorruptSnapshotError: If stored data cannot be decoded
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        """
        Replace the stored snapshot.

        Implementations must never leave a partially written snapshot
        behind: either the old or the new state is readable afterwards.

        Raises:
            StorageError: If the write fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptSnapshotError(StorageError):
    """Stored snapshot exists but cannot be decoded."""
    pass
