"""
Change operations and reconciliation results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..matching.region import Region
from .documents import split_lines


class StaleChangeError(ValueError):
    """A staged change no longer matches the text it is applied to."""


class ReconcileStatus(Enum):
    STAGED = "staged"
    NOT_FOUND = "not_found"
    MALFORMED_PATCH = "malformed_patch"
    PATCH_CONFLICT = "patch_conflict"
    INVALID_REQUEST = "invalid_request"


class PatchFailureKind(Enum):
    OUT_OF_BOUNDS = "out_of_bounds"
    CONTENT_MISMATCH = "content_mismatch"


@dataclass(frozen=True)
class ChangeOperation:
    """One staged edit.

    Point edits carry the exact ``region`` of ``original_text``.  Patch
    edits replace the whole file: ``original_text`` is the full old
    content and ``start_line``/``end_line`` span it (1-based, inclusive;
    ``end_line < start_line`` encodes a pure insertion before
    ``start_line``).
    """
    file_name: str
    original_text: str
    replacement_text: str
    line_delimiter: str = "\n"
    location_hint: str | None = None
    start_line: int | None = None
    end_line: int | None = None
    region: Region | None = None
    kind: str = "point"

    @classmethod
    def point_edit(
        cls,
        file_name: str,
        original_text: str,
        replacement_text: str,
        region: Region,
        start_line: int,
        end_line: int,
        location_hint: str | None = None,
        line_delimiter: str = "\n",
    ) -> "ChangeOperation":
        return cls(
            file_name=file_name,
            original_text=original_text,
            replacement_text=replacement_text,
            line_delimiter=line_delimiter,
            location_hint=location_hint,
            start_line=start_line,
            end_line=end_line,
            region=region,
            kind="point",
        )

    @classmethod
    def whole_file(
        cls,
        file_name: str,
        original_text: str,
        replacement_text: str,
        line_delimiter: str = "\n",
    ) -> "ChangeOperation":
        return cls(
            file_name=file_name,
            original_text=original_text,
            replacement_text=replacement_text,
            line_delimiter=line_delimiter,
            start_line=1,
            end_line=len(split_lines(original_text)) if original_text else 0,
            kind="patch",
        )

    @property
    def is_insertion(self) -> bool:
        if self.start_line is not None and self.end_line is not None:
            return self.end_line < self.start_line
        return not self.original_text

    def apply_to(self, text: str) -> str:
        """Return *text* with this change applied.

        Raises :class:`StaleChangeError` if *text* no longer holds the
        original content where this change expects it.
        """
        if self.kind == "patch":
            if text != self.original_text:
                raise StaleChangeError(f"{self.file_name} changed since the patch was staged")
            return self.replacement_text

        region = self.region
        if region is None or region.end > len(text) or text[region.start:region.end] != self.original_text:
            raise StaleChangeError(
                f"{self.file_name} no longer contains the staged text at {region}"
            )
        return text[:region.start] + self.replacement_text + text[region.end:]


@dataclass(frozen=True)
class FormattedText:
    """Replacement text after best-effort reformatting."""
    text: str
    formatted: bool
    warning: str | None = None


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation request."""
    status: ReconcileStatus
    message: str
    operation: ChangeOperation | None = None
    preview: str | None = None
    report: str | None = None
    warnings: list[str] = field(default_factory=list)
    tier: str | None = None
    failure_kind: PatchFailureKind | None = None

    @property
    def success(self) -> bool:
        return self.status is ReconcileStatus.STAGED

    @classmethod
    def staged(cls, message: str, operation: ChangeOperation | None, **kwargs) -> "ReconcileResult":
        return cls(ReconcileStatus.STAGED, message, operation=operation, **kwargs)

    @classmethod
    def not_found(cls, message: str) -> "ReconcileResult":
        return cls(ReconcileStatus.NOT_FOUND, message)

    @classmethod
    def malformed(cls, message: str) -> "ReconcileResult":
        return cls(ReconcileStatus.MALFORMED_PATCH, message)

    @classmethod
    def conflict(cls, message: str, failure_kind: PatchFailureKind | None) -> "ReconcileResult":
        return cls(ReconcileStatus.PATCH_CONFLICT, message, failure_kind=failure_kind)

    @classmethod
    def invalid(cls, message: str) -> "ReconcileResult":
        return cls(ReconcileStatus.INVALID_REQUEST, message)
