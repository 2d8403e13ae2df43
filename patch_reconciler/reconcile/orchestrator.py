"""
Patch reconciler — turns a model's proposed edit into a staged change
that is valid against the live document.

Two request forms are handled:

* a unified diff for a named file, applied through an escalating
  fuzziness ladder and staged as one whole-file replacement;
* a point edit (original text, replacement text, optional line hint),
  resolved by literal search only.

Expected failures come back as :class:`ReconcileResult` values.  Only an
invalid region raises, and it does so before anything is staged.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Sequence

from ..config import ReconcileConfig
from ..diffing.fuzzy_line import FuzzyLine
from ..diffing.patch import Patch, PatchFailedError, PatchOutOfBoundsError
from ..diffing.line_diff import unified_diff_text
from ..diffing.unified_diff import parse_unified_diff
from ..matching.region import Region, RegionMatch
from ..matching.strategy import RegionLocator
from ..matching.tokenizer import profile_for_path
from ..metrics import log_reconcile_metric
from .changes import (
    ChangeOperation,
    PatchFailureKind,
    ReconcileResult,
    StaleChangeError,
)
from .documents import DocumentAccess, DocumentNotFoundError, DocumentSnapshot, FileRef
from .formatting import reformat_to_indent
from .report import changed_lines_report
from .staging import ChangeStaging

logger = logging.getLogger(__name__)

_LOCATION_HINT = re.compile(r"^\s*([lLcC])\s*(\d+)(?:\s*:\s*(\d+))?\s*$")

_PLACEHOLDER = ""

MALFORMED_PATCH_MESSAGE = (
    "The parser returned an empty patch. This is probably due to the patch "
    "content not being a valid unified diff.\n"
    "Here's an example:\n"
    "```diff\n"
    "--- /path/to/File.java\n"
    "+++ /path/to/File.java\n"
    "@@ -123,1 +123,2 @@\n"
    " some text\n"
    " \n"
    "-foo\n"
    "+bar\n"
    "+baz\n"
    "```\n"
)

PATCH_STAGED_MESSAGE = (
    "The patch was successfully validated and a change operation was queued "
    "to apply the patch after user review.\n"
)


def parse_location_hint(hint: str | None) -> tuple[int, int] | None:
    """Parse an ``l<start>:<end>`` line hint into 1-based inclusive lines.

    ``l<n>`` alone means a single line.  Character-offset hints
    (``c<start>:<end>``) are rejected.
    """
    if hint is None or not hint.strip():
        return None
    match = _LOCATION_HINT.match(hint)
    if not match:
        raise ValueError(f"Unrecognized location hint: {hint!r}")
    kind, start, end = match.group(1).lower(), int(match.group(2)), match.group(3)
    if kind == "c":
        raise ValueError(f"Character-offset location hints are not supported: {hint!r}")
    end_line = int(end) if end is not None else start
    if start < 1 or end_line < start:
        raise ValueError(f"Invalid line range in location hint: {hint!r}")
    return start, end_line


@dataclass
class LadderOutcome:
    """Result of running a patch through the fuzziness ladder."""
    lines: list | None = None
    tier: str | None = None
    attempts: list[str] = field(default_factory=list)
    failure_kind: PatchFailureKind | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.lines is not None


class PatchReconciler:
    """Reconcile proposed edits against documents and stage the results."""

    def __init__(
        self,
        access: DocumentAccess,
        staging: ChangeStaging | None = None,
        config: ReconcileConfig | None = None,
    ) -> None:
        self._access = access
        self._staging = staging if staging is not None else ChangeStaging()
        self._config = config if config is not None else ReconcileConfig()
        self._locator = RegionLocator(
            chunk_config=self._config.chunk_config(),
            alignment_config=self._config.alignment_config(),
            token_config=self._config.token_config(),
            min_alignment_score=self._config.MIN_ALIGNMENT_SCORE,
        )

    @property
    def staging(self) -> ChangeStaging:
        return self._staging

    # ------------------------------------------------------------------
    # Unified diff form
    # ------------------------------------------------------------------

    def add_changes_from_patch(self, file_name: str, patch_text: str) -> ReconcileResult:
        """Apply a unified diff to *file_name* and stage the outcome.

        Parameters
        ----------
        file_name:
            Name or path of the target file, resolved through document access.
        patch_text:
            Unified diff text as written by the model.

        Returns
        -------
        ReconcileResult
            STAGED with a whole-file :class:`ChangeOperation`, or one of
            INVALID_REQUEST, NOT_FOUND, MALFORMED_PATCH, PATCH_CONFLICT.
        """
        started = time.perf_counter()
        with self._staging.transaction():
            result = self._add_changes_from_patch(file_name, patch_text)
        self._record("patch", file_name, result, started)
        return result

    def _add_changes_from_patch(self, file_name: str, patch_text: str) -> ReconcileResult:
        if not file_name or not file_name.strip():
            return ReconcileResult.invalid("File name cannot be empty")
        if not patch_text or not patch_text.strip():
            return ReconcileResult.invalid("Patch content cannot be empty")

        revision = self._staging.revision
        snapshot, failure = self._open(file_name)
        if failure is not None:
            return failure

        doc_lines = snapshot.lines()
        patch = parse_unified_diff(patch_text)
        if patch.is_empty():
            logger.warning("[Reconcile] Empty patch for %s", file_name)
            return ReconcileResult.malformed(MALFORMED_PATCH_MESSAGE)

        # Hunk line numbers are 1-based; the placeholder keeps index 0 out of play.
        padded = [FuzzyLine(_PLACEHOLDER)] + [FuzzyLine(line) for line in doc_lines]
        outcome = self.apply_with_fuzzy_ladder(padded, patch, floor=1)
        if not outcome.success:
            logger.warning(
                "[Reconcile] Patch for %s failed at every tier (%s): %s",
                file_name, outcome.failure_kind.value, outcome.error,
            )
            return ReconcileResult.conflict(
                self._conflict_message(outcome), outcome.failure_kind,
            )

        patched_lines = [str(line) for line in outcome.lines[1:]]
        new_text = snapshot.line_delimiter.join(patched_lines)
        report = changed_lines_report(file_name, doc_lines, patched_lines)

        if new_text == snapshot.text:
            logger.info("[Reconcile] Patch for %s changes nothing", file_name)
            return ReconcileResult.staged(
                "The patch applies cleanly but does not change the file.",
                None, report=report, tier=outcome.tier,
            )

        operation = ChangeOperation.whole_file(
            snapshot.file.path, snapshot.text, new_text, snapshot.line_delimiter,
        )
        preview = unified_diff_text(snapshot.text, new_text, file_name)
        if self._staging.revision != revision:
            return self._superseded(file_name)
        self._staging.stage(operation)
        logger.info("[Reconcile] Staged patch for %s at tier %s", file_name, outcome.tier)
        return ReconcileResult.staged(
            PATCH_STAGED_MESSAGE + report,
            operation,
            preview=preview,
            report=report,
            tier=outcome.tier,
        )

    def apply_with_fuzzy_ladder(
        self,
        lines: Sequence,
        patch: Patch,
        floor: int = 0,
    ) -> LadderOutcome:
        """Try exact application, then each fuzz level of the ladder.

        Every tier starts from *lines* again; the first tier that
        succeeds is the result.  *floor* is the lowest index a fuzzy
        tier may move a delta to.
        """
        outcome = LadderOutcome()
        last_error: PatchFailedError | None = None

        tiers: list[tuple[str, int | None]] = [("exact", None)]
        tiers += [(f"fuzzy:{fuzz}", fuzz) for fuzz in self._config.FUZZ_LADDER]

        for tier, fuzz in tiers:
            outcome.attempts.append(tier)
            try:
                if fuzz is None:
                    result = patch.apply_to(lines)
                else:
                    result = patch.apply_fuzzy(lines, fuzz, floor=floor)
            except PatchFailedError as exc:
                logger.debug("[Reconcile] Tier %s failed: %s", tier, exc)
                last_error = exc
                continue
            outcome.lines = result
            outcome.tier = tier
            logger.debug("[Reconcile] Patch applied at tier %s", tier)
            return outcome

        if isinstance(last_error, PatchOutOfBoundsError):
            outcome.failure_kind = PatchFailureKind.OUT_OF_BOUNDS
        else:
            outcome.failure_kind = PatchFailureKind.CONTENT_MISMATCH
        outcome.error = str(last_error) if last_error is not None else "no tiers configured"
        return outcome

    @staticmethod
    def _conflict_message(outcome: LadderOutcome) -> str:
        if outcome.failure_kind is PatchFailureKind.OUT_OF_BOUNDS:
            return (
                "Patch validation failed: unified diff format expected.\n"
                "The hunk line numbers point outside the file "
                f"({outcome.error}). Check the `@@ -a,b +c,d @@` headers."
            )
        return (
            f"Patch cannot be applied: {outcome.error}. "
            "The proposed change no longer matches the file content."
        )

    # ------------------------------------------------------------------
    # Point edit form
    # ------------------------------------------------------------------

    def add_point_edit(
        self,
        file_name: str,
        original_text: str,
        replacement_text: str,
        location_hint: str | None = None,
    ) -> ReconcileResult:
        """Replace a literal occurrence of *original_text* and stage it.

        Only literal search is used.  Callers wanting a fuzzy match call
        :meth:`locate` themselves.  An empty *original_text* with a line
        hint inserts *replacement_text* at the start of the hinted line.
        """
        started = time.perf_counter()
        with self._staging.transaction():
            result = self._add_point_edit(file_name, original_text, replacement_text, location_hint)
        self._record("point", file_name, result, started)
        return result

    def _add_point_edit(
        self,
        file_name: str,
        original_text: str,
        replacement_text: str,
        location_hint: str | None,
    ) -> ReconcileResult:
        if not file_name or not file_name.strip():
            return ReconcileResult.invalid("File name cannot be empty")
        if original_text is None or replacement_text is None:
            return ReconcileResult.invalid("Original and replacement text are required")
        try:
            hint = parse_location_hint(location_hint)
        except ValueError as exc:
            return ReconcileResult.invalid(str(exc))
        if not original_text and hint is None:
            return ReconcileResult.invalid("Insertions need a line location hint")

        revision = self._staging.revision
        snapshot, failure = self._open(file_name)
        if failure is not None:
            return failure
        text = snapshot.text

        region = self._find_literal(snapshot, original_text, hint)
        if region is None:
            logger.warning("[Reconcile] Original text not found in %s", file_name)
            return ReconcileResult.not_found(
                f"The original text was not found in {file_name}. "
                "The model's proposed change no longer matches the file content."
            )
        region.validate_against(text)

        warnings: list[str] = []
        replacement = replacement_text
        if self._config.REFORMAT_REPLACEMENT:
            line_number = snapshot.line_at(region.start)
            line_start = snapshot.line_offset(line_number)
            formatted = reformat_to_indent(
                replacement_text,
                snapshot.lines()[line_number - 1],
                indent_width=self._config.INDENT_WIDTH,
                tab_width=self._config.TAB_WIDTH,
                use_tabs=self._config.USE_TABS,
                indent_first_line=region.start == line_start,
            )
            replacement = formatted.text
            if formatted.warning:
                warnings.append(formatted.warning)

        start_line = snapshot.line_at(region.start)
        body = original_text.rstrip("\r\n")
        end_line = snapshot.line_at(region.start + len(body)) if original_text else start_line - 1
        operation = ChangeOperation.point_edit(
            snapshot.file.path,
            original_text,
            replacement,
            region,
            start_line,
            end_line,
            location_hint=location_hint,
            line_delimiter=snapshot.line_delimiter,
        )
        new_text = operation.apply_to(text)
        preview = unified_diff_text(text, new_text, file_name)

        if self._staging.revision != revision:
            return self._superseded(file_name)
        self._staging.stage(operation)
        logger.info(
            "[Reconcile] Staged point edit for %s at [%d, %d)",
            file_name, region.start, region.end,
        )
        return ReconcileResult.staged(
            f"Change queued for {file_name} at lines {start_line}-{max(start_line, end_line)}.",
            operation,
            preview=preview,
            warnings=warnings,
            tier="literal",
        )

    @staticmethod
    def _find_literal(
        snapshot: DocumentSnapshot,
        needle: str,
        hint: tuple[int, int] | None,
    ) -> Region | None:
        text = snapshot.text
        if hint is not None and hint[0] <= snapshot.line_count():
            hinted = snapshot.line_offset(hint[0])
            if not needle:
                return Region(hinted, hinted)
            idx = text.find(needle, hinted)
            if idx != -1:
                return Region(idx, idx + len(needle))
        if not needle:
            return None
        idx = text.find(needle)
        if idx == -1:
            return None
        return Region(idx, idx + len(needle))

    # ------------------------------------------------------------------
    # Fuzzy lookup for callers
    # ------------------------------------------------------------------

    def locate(self, needle: str, file_name: str) -> RegionMatch | None:
        """Run the region finders for *needle* against *file_name*.

        The point-edit path never does this on its own.
        """
        snapshot, failure = self._open(file_name)
        if failure is not None:
            return None
        locator = self._locator.with_profile(profile_for_path(snapshot.file.path))
        match = locator.locate(needle, snapshot.text)
        if match is not None:
            match.region.validate_against(snapshot.text)
        return match

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open(self, file_name: str) -> tuple[DocumentSnapshot | None, ReconcileResult | None]:
        """Snapshot of *file_name* including changes already staged for it."""
        ref: FileRef | None = self._access.find_file_by_name(file_name)
        if ref is None:
            return None, ReconcileResult.not_found(f"File not found: {file_name}")
        try:
            base = DocumentSnapshot.from_access(self._access, ref)
        except DocumentNotFoundError:
            return None, ReconcileResult.not_found(f"File not found: {file_name}")
        try:
            buffered = self._staging.preview(ref.path, base.text)
        except StaleChangeError as exc:
            logger.warning("[Reconcile] %s", exc)
            return None, ReconcileResult.conflict(
                f"Changes already staged for {file_name} no longer match the file. "
                "Clear them before proposing new changes.",
                PatchFailureKind.CONTENT_MISMATCH,
            )
        if buffered == base.text:
            return base, None
        return DocumentSnapshot(ref, buffered, base.line_delimiter), None

    @staticmethod
    def _superseded(file_name: str) -> ReconcileResult:
        logger.warning("[Reconcile] Staged changes for %s moved while the request ran", file_name)
        return ReconcileResult.conflict(
            f"Other changes for {file_name} were staged while this request was processed. "
            "Propose the change again against the current content.",
            PatchFailureKind.CONTENT_MISMATCH,
        )

    def _record(self, kind: str, file_name: str, result: ReconcileResult, started: float) -> None:
        if not self._config.METRICS_ENABLED:
            return
        log_reconcile_metric(
            {
                "file": file_name,
                "kind": kind,
                "status": result.status.value,
                "tier": result.tier,
                "failure_kind": result.failure_kind.value if result.failure_kind else None,
                "warnings": len(result.warnings),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
            self._config.METRICS_DIR,
        )
