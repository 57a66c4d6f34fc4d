"""
Background Snapshot Writer

DESIGN DECISION: Persistence never blocks a mutation.
Each mutation hands the writer an immutable snapshot and returns.
A single worker thread writes snapshots one at a time.

Single-flight with coalescing:
- At most one write is in progress
- At most one snapshot is pending; a newer submit replaces it
- The latest submitted state is always the one that ends up on disk

Failures are logged and dropped. There is no retry and no re-queue;
the in-memory ledger stays the only copy of that change until the next
mutation submits a fresh snapshot.
"""

import threading
from typing import Optional

import structlog

from ledger.models.entities import LedgerSnapshot
from ledger.services.storage import SnapshotStorageInterface


logger = structlog.get_logger(__name__)


class SnapshotWriter:
    """
    Coalescing snapshot writer.

    With background=False every submit saves inline, using the same
    error policy. Useful for scripts and tests.
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        background: bool = True,
    ):
        self._storage = storage
        self._background = background
        self._cond = threading.Condition()
        self._pending: Optional[LedgerSnapshot] = None
        self._writing = False
        self._closed = False
        self._thread: Optional[threading.Thread] = None
        self.failures = 0

    @property
    def storage(self) -> SnapshotStorageInterface:
        return self._storage

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, snapshot: LedgerSnapshot) -> None:
        """
        Schedule a snapshot for writing. Returns immediately.

        Raises RuntimeError once the writer is closed.
        """
        if not self._background:
            if self._closed:
                raise RuntimeError("SnapshotWriter is closed")
            self._write(snapshot)
            return

        with self._cond:
            if self._closed:
                raise RuntimeError("SnapshotWriter is closed")
            if self._pending is not None:
                logger.debug("snapshot_coalesced")
            self._pending = snapshot
            self._ensure_worker()
            self._cond.notify_all()

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every submitted snapshot has been written (or failed).

        Returns False if the timeout expired first.
        """
        if not self._background:
            return True
        with self._cond:
            return self._cond.wait_for(
                lambda: self._pending is None and not self._writing,
                timeout=timeout,
            )

    def close(self, timeout: Optional[float] = None) -> bool:
        """Flush pending work and stop the worker thread."""
        flushed = self.flush(timeout)
        with self._cond:
            self._closed = True
            self._cond.notify_all()
            thread = self._thread
        if thread is not None:
            thread.join(timeout)
        if not flushed:
            logger.warning("snapshot_writer_closed_with_pending_write")
        return flushed

    def _ensure_worker(self) -> None:
        # Caller holds the condition lock
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._run,
                name="ledger-snapshot-writer",
                daemon=True,
            )
            self._thread.start()

    def _run(self) -> None:
        while True:
            with self._cond:
                while self._pending is None and not self._closed:
                    self._cond.wait()
                if self._pending is None:
                    return
                snapshot, self._pending = self._pending, None
                self._writing = True

            try:
                self._write(snapshot)
            finally:
                with self._cond:
                    self._writing = False
                    self._cond.notify_all()

    def _write(self, snapshot: LedgerSnapshot) -> None:
        try:
            self._storage.save(snapshot)
        except Exception as e:
            # Log failure but don't raise
            self.failures += 1
            logger.error(
                "snapshot_save_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        logger.debug("snapshot_written", transactions=len(snapshot.items))
