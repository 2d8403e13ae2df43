"""
patch_reconciler — fuzzy matching and reconciliation of model-proposed edits.

Public API for library usage::

    from patch_reconciler import FileSystemDocumentAccess, ReconcileSession

    session = ReconcileSession(FileSystemDocumentAccess("."))
    result = session.apply_patch("Foo.java", diff_text)
    if result.success:
        print(result.report)
"""

from .config import ReconcileConfig
from .reconcile import (
    ChangeOperation,
    ChangeStaging,
    InMemoryDocumentAccess,
    FileSystemDocumentAccess,
    PatchReconciler,
    ReconcileResult,
    ReconcileSession,
    ReconcileStatus,
)

__version__ = "0.1.0"

__all__ = [
    "ReconcileConfig",
    "ChangeOperation",
    "ChangeStaging",
    "InMemoryDocumentAccess",
    "FileSystemDocumentAccess",
    "PatchReconciler",
    "ReconcileResult",
    "ReconcileSession",
    "ReconcileStatus",
]
