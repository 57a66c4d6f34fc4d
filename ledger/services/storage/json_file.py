"""
JSON File Snapshot Storage

DESIGN DECISION: A single indented JSON file is the storage backend because:
1. The user can read and diff their own data
2. No database setup required
3. A whole-file replace is trivially atomic with os.replace

TRADEOFFS:
- Every save rewrites the full file (fine for a personal ledger)
- No cross-process locking; one live instance per file is assumed
"""

import os
import tempfile
from pathlib import Path
from typing import Union

import structlog
from pydantic import ValidationError

from ledger.models.entities import LedgerSnapshot
from ledger.services.storage.interface import (
    CorruptSnapshotError,
    SnapshotStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


def encode_snapshot(snapshot: LedgerSnapshot) -> str:
    """Serialize a snapshot to its on-disk JSON text."""
    return snapshot.model_dump_json(indent=2)


def decode_snapshot(text: Union[str, bytes]) -> LedgerSnapshot:
    """
    Parse on-disk JSON text into a snapshot.

    Raises CorruptSnapshotError for anything that is not a valid snapshot.
    """
    try:
        return LedgerSnapshot.model_validate_json(text)
    except ValidationError as e:
        raise CorruptSnapshotError(
            f"Snapshot could not be decoded ({e.error_count()} errors)"
        ) from e
    except ValueError as e:
        raise CorruptSnapshotError(f"Snapshot could not be decoded: {e}") from e


class JsonFileSnapshotStorage(SnapshotStorageInterface):
    """
    Stores the ledger snapshot as one JSON file.

    Writes go to a temporary file next to the target which is then
    renamed over it, so readers only ever see a complete snapshot.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LedgerSnapshot:
        """Load the snapshot; a missing file is a fresh install."""
        try:
            data = self._path.read_bytes()
        except FileNotFoundError:
            logger.info("snapshot_missing", path=str(self._path))
            return LedgerSnapshot()
        except OSError as e:
            raise StorageError(f"Failed to read snapshot {self._path}: {e}") from e

        snapshot = decode_snapshot(data)
        logger.debug(
            "snapshot_loaded",
            path=str(self._path),
            transactions=len(snapshot.items),
        )
        return snapshot

    def save(self, snapshot: LedgerSnapshot) -> None:
        """Atomically replace the snapshot file."""
        payload = encode_snapshot(snapshot).encode("utf-8")
        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise StorageError(f"Failed to write snapshot {self._path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("snapshot_temp_cleanup_failed", path=tmp_name)

        logger.debug("snapshot_saved", path=str(self._path), size=len(payload))
