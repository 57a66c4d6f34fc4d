"""
In-Memory Snapshot Storage

Keeps the last saved snapshot as encoded JSON text, so tests exercise the
same codec as the file storage without touching disk.
"""

from typing import Optional

from ledger.models.entities import LedgerSnapshot
from ledger.services.storage.interface import SnapshotStorageInterface
from ledger.services.storage.json_file import decode_snapshot, encode_snapshot


class InMemorySnapshotStorage(SnapshotStorageInterface):
    """Snapshot storage backed by a string."""

    def __init__(self, initial: Optional[LedgerSnapshot] = None):
        self._text: Optional[str] = encode_snapshot(initial) if initial is not None else None
        self.save_count = 0

    @property
    def text(self) -> Optional[str]:
        """Raw JSON of the last saved snapshot."""
        return self._text

    def load(self) -> LedgerSnapshot:
        if self._text is None:
            return LedgerSnapshot()
        return decode_snapshot(self._text)

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._text = encode_snapshot(snapshot)
        self.save_count += 1
