"""Reconciliation of proposed edits against live documents."""

from .documents import (
    DocumentAccess, DocumentNotFoundError, DocumentSnapshot, FileRef,
    FileSystemDocumentAccess, InMemoryDocumentAccess,
    detect_line_delimiter, split_lines,
)
from .changes import (
    ChangeOperation, FormattedText, PatchFailureKind, ReconcileResult,
    ReconcileStatus, StaleChangeError,
)
from .formatting import (
    indent_depth, reformat_to_indent, remove_common_indentation, visual_column,
)
from .report import AffectedRange, affected_ranges, changed_lines_report
from .staging import ChangeStaging
from .orchestrator import LadderOutcome, PatchReconciler, parse_location_hint
from .session import ReconcileSession

__all__ = [
    "DocumentAccess", "DocumentNotFoundError", "DocumentSnapshot", "FileRef",
    "FileSystemDocumentAccess", "InMemoryDocumentAccess",
    "detect_line_delimiter", "split_lines",
    "ChangeOperation", "FormattedText", "PatchFailureKind", "ReconcileResult",
    "ReconcileStatus", "StaleChangeError",
    "indent_depth", "reformat_to_indent", "remove_common_indentation", "visual_column",
    "AffectedRange", "affected_ranges", "changed_lines_report",
    "ChangeStaging",
    "LadderOutcome", "PatchReconciler", "parse_location_hint",
    "ReconcileSession",
]
