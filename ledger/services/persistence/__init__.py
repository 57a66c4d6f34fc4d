"""Background persistence package."""

from ledger.services.persistence.writer import SnapshotWriter

__all__ = ["SnapshotWriter"]
