"""
Document access — how the reconciler reads the files it edits.

The reconciler only ever reads through :class:`DocumentAccess`; staged
changes are handed back to the caller, never written here.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class DocumentNotFoundError(LookupError):
    """Raised by document access when a file disappears between lookup and read."""


@dataclass(frozen=True)
class FileRef:
    """A resolved file: the name the caller asked for and where it lives."""
    name: str
    path: str


@runtime_checkable
class DocumentAccess(Protocol):
    def find_file_by_name(self, name: str) -> FileRef | None: ...

    def get_text(self, ref: FileRef) -> str: ...

    def get_line_delimiter(self, ref: FileRef) -> str: ...


def detect_line_delimiter(text: str, default: str = "\n") -> str:
    """The first line break used in *text*, or *default* when it has none."""
    match = _LINE_BREAK.search(text)
    return match.group(0) if match else default


def split_lines(text: str) -> list[str]:
    """Split on any line break; a trailing break yields a trailing empty line."""
    return _LINE_BREAK.split(text)


@dataclass(frozen=True)
class DocumentSnapshot:
    """Immutable view of a file's content at reconciliation time."""
    file: FileRef
    text: str
    line_delimiter: str = "\n"

    @classmethod
    def from_access(cls, access: DocumentAccess, ref: FileRef) -> "DocumentSnapshot":
        return cls(ref, access.get_text(ref), access.get_line_delimiter(ref))

    def lines(self) -> list[str]:
        return split_lines(self.text)

    def line_count(self) -> int:
        return len(self.lines())

    def line_offset(self, line_number: int) -> int:
        """Character offset where 1-based *line_number* starts.

        ``line_count() + 1`` is accepted and means end of text.
        """
        if line_number < 1:
            raise ValueError(f"Line numbers are 1-based, got {line_number}")
        if line_number == 1:
            return 0
        for i, match in enumerate(_LINE_BREAK.finditer(self.text), start=2):
            if i == line_number:
                return match.end()
        if line_number == self.line_count() + 1:
            return len(self.text)
        raise ValueError(f"Line {line_number} is past the end of {self.file.name}")

    def line_at(self, offset: int) -> int:
        """1-based line containing character *offset*."""
        return 1 + len(_LINE_BREAK.findall(self.text, 0, offset))


# ------------------------------------------------------------------
# Implementations
# ------------------------------------------------------------------

class InMemoryDocumentAccess:
    """Documents held in a dict of path -> text.

    Lookup tries the exact path first, then a unique-or-first basename
    match, mirroring how a model usually names files.
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self._files: dict[str, str] = dict(files or {})

    def set_text(self, path: str, text: str) -> None:
        self._files[path] = text

    def find_file_by_name(self, name: str) -> FileRef | None:
        if name in self._files:
            return FileRef(name, name)
        wanted = os.path.basename(name.replace("\\", "/"))
        candidates = sorted(
            p for p in self._files if os.path.basename(p.replace("\\", "/")) == wanted
        )
        if not candidates:
            return None
        if len(candidates) > 1:
            logger.info(
                "[Documents] %d files named %s, using %s", len(candidates), wanted, candidates[0]
            )
        return FileRef(name, candidates[0])

    def get_text(self, ref: FileRef) -> str:
        try:
            return self._files[ref.path]
        except KeyError:
            raise DocumentNotFoundError(ref.path) from None

    def get_line_delimiter(self, ref: FileRef) -> str:
        return detect_line_delimiter(self.get_text(ref))


class FileSystemDocumentAccess:
    """Best-effort lookup of files under a project root."""

    def __init__(self, root: str = ".", encoding: str = "utf-8") -> None:
        self.root = os.path.abspath(root)
        self.encoding = encoding

    def find_file_by_name(self, name: str) -> FileRef | None:
        direct = os.path.join(self.root, name.lstrip("/\\"))
        if os.path.isfile(direct):
            return FileRef(name, direct)

        wanted = os.path.basename(name.replace("\\", "/"))
        matches: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            if wanted in filenames:
                matches.append(os.path.join(dirpath, wanted))
        if not matches:
            logger.debug("[Documents] %s not found under %s", name, self.root)
            return None
        if len(matches) > 1:
            logger.info("[Documents] %d files named %s, using %s", len(matches), wanted, matches[0])
        return FileRef(name, matches[0])

    def get_text(self, ref: FileRef) -> str:
        try:
            with open(ref.path, "r", encoding=self.encoding, errors="replace", newline="") as f:
                return f.read()
        except FileNotFoundError:
            raise DocumentNotFoundError(ref.path) from None

    def get_line_delimiter(self, ref: FileRef) -> str:
        return detect_line_delimiter(self.get_text(ref), default=os.linesep)
