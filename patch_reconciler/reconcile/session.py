"""
Reconcile session — one staging area and one reconciler per editing
session, passed around explicitly instead of living in module globals.
"""

from __future__ import annotations

import logging

from ..config import ReconcileConfig
from .changes import ChangeOperation, ReconcileResult
from .documents import DocumentAccess, DocumentNotFoundError
from .orchestrator import PatchReconciler
from .staging import ChangeStaging

logger = logging.getLogger(__name__)


class ReconcileSession:
    """Entry point for a host tool layer."""

    def __init__(self, access: DocumentAccess, config: ReconcileConfig | None = None) -> None:
        self.access = access
        self.config = config if config is not None else ReconcileConfig.load()
        self.staging = ChangeStaging()
        self.reconciler = PatchReconciler(access, self.staging, self.config)

    def apply_patch(self, file_name: str, patch_text: str) -> ReconcileResult:
        return self.reconciler.add_changes_from_patch(file_name, patch_text)

    def apply_change(
        self,
        file_name: str,
        original_text: str,
        replacement_text: str,
        location_hint: str | None = None,
    ) -> ReconcileResult:
        return self.reconciler.add_point_edit(
            file_name, original_text, replacement_text, location_hint,
        )

    def pending_summary(self) -> str:
        return self.staging.summary()

    def pending_operations(self) -> list[ChangeOperation]:
        return self.staging.operations()

    def take_pending(self) -> list[ChangeOperation]:
        """Hand every staged change to the host for review and application."""
        return self.staging.drain()

    def clear(self) -> int:
        return self.staging.clear()

    def buffered_text(self, file_name: str) -> str | None:
        """Content of *file_name* as it will look once staged changes apply.

        None when the file cannot be found.
        """
        ref = self.access.find_file_by_name(file_name)
        if ref is None:
            return None
        try:
            current = self.access.get_text(ref)
        except DocumentNotFoundError:
            logger.debug("[Reconcile] %s vanished before it could be read", file_name)
            return None
        return self.staging.preview(ref.path, current)
