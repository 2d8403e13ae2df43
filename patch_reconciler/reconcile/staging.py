"""
Change staging — the queue of accepted-but-not-applied changes.

This is the only shared mutable state in a session.  Tool-call handlers
and user apply/clear actions may run on different threads, so every
access goes through one re-entrant lock.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager

from .changes import ChangeOperation

logger = logging.getLogger(__name__)


class ChangeStaging:
    """Thread-safe, append-only (until cleared) list of change operations."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._operations: list[ChangeOperation] = []
        self._revision = 0

    @contextmanager
    def transaction(self):
        """Hold the staging lock across a read, compute and stage sequence.

        No other thread can stage between the :meth:`preview` a request
        builds on and the :meth:`stage` of its result.
        """
        with self._lock:
            yield self

    @property
    def revision(self) -> int:
        """Counter bumped whenever the staged operations change."""
        with self._lock:
            return self._revision

    def stage(self, operation: ChangeOperation) -> None:
        with self._lock:
            self._operations.append(operation)
            self._revision += 1
            count = len(self._operations)
        logger.info(
            "[Staging] Queued %s change for %s (%d pending)",
            operation.kind, operation.file_name, count,
        )

    def operations(self) -> list[ChangeOperation]:
        """Snapshot of all staged operations in staging order."""
        with self._lock:
            return list(self._operations)

    def operations_for(self, file_name: str) -> list[ChangeOperation]:
        with self._lock:
            return [op for op in self._operations if op.file_name == file_name]

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._operations)

    def has_pending(self) -> bool:
        return self.pending_count > 0

    def files(self) -> list[str]:
        """Distinct file names with staged changes, sorted."""
        with self._lock:
            return sorted({op.file_name for op in self._operations})

    def clear(self) -> int:
        """Drop every staged change; returns how many there were.

        Clearing an empty staging area is a no-op.
        """
        with self._lock:
            count = len(self._operations)
            self._operations.clear()
            if count:
                self._revision += 1
        logger.info("[Staging] Cleared %d pending change(s)", count)
        return count

    def drain(self) -> list[ChangeOperation]:
        """Take all staged operations and leave the staging area empty."""
        with self._lock:
            taken = self._operations
            self._operations = []
            if taken:
                self._revision += 1
        logger.info("[Staging] Handing %d change(s) to the host", len(taken))
        return taken

    def summary(self) -> str:
        files = self.files()
        if not files:
            return "No file changes were queued."
        lines = ["The following changes are queued for review:"]
        lines.extend(f"- **Modify:** `{name}`" for name in files)
        return "\n".join(lines)

    def preview(self, file_name: str, current_text: str) -> str:
        """*current_text* with this file's staged changes applied in order.

        Raises :class:`~patch_reconciler.reconcile.changes.StaleChangeError`
        if a staged change no longer fits.
        """
        text = current_text
        for op in self.operations_for(file_name):
            text = op.apply_to(text)
        return text
