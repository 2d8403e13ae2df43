"""Tests for document snapshots and document access."""

import pytest

from patch_reconciler.reconcile.documents import (
    DocumentAccess,
    DocumentNotFoundError,
    DocumentSnapshot,
    FileRef,
    FileSystemDocumentAccess,
    InMemoryDocumentAccess,
    detect_line_delimiter,
    split_lines,
)


def _snapshot(text: str) -> DocumentSnapshot:
    return DocumentSnapshot(FileRef("f.txt", "f.txt"), text, detect_line_delimiter(text))


class TestLineHelpers:
    def test_detect_delimiter(self):
        assert detect_line_delimiter("a\r\nb\n") == "\r\n"
        assert detect_line_delimiter("a\rb") == "\r"
        assert detect_line_delimiter("no breaks") == "\n"
        assert detect_line_delimiter("no breaks", default="\r\n") == "\r\n"

    def test_split_lines_keeps_trailing_empty_line(self):
        assert split_lines("a\nb\n") == ["a", "b", ""]
        assert split_lines("a\r\nb\rc") == ["a", "b", "c"]
        assert split_lines("") == [""]


class TestDocumentSnapshot:
    def test_line_offsets(self):
        snap = _snapshot("ab\ncd\r\nef")
        assert snap.line_offset(1) == 0
        assert snap.line_offset(2) == 3
        assert snap.line_offset(3) == 7
        assert snap.line_offset(4) == len(snap.text)

    def test_line_offset_out_of_range(self):
        snap = _snapshot("ab\ncd")
        with pytest.raises(ValueError):
            snap.line_offset(0)
        with pytest.raises(ValueError):
            snap.line_offset(4)

    def test_line_at(self):
        snap = _snapshot("ab\ncd\nef")
        assert snap.line_at(0) == 1
        assert snap.line_at(3) == 2
        assert snap.line_at(len(snap.text)) == 3

    def test_line_count(self):
        assert _snapshot("a\nb\n").line_count() == 3


class TestInMemoryDocumentAccess:
    def test_is_document_access(self):
        assert isinstance(InMemoryDocumentAccess(), DocumentAccess)

    def test_exact_path(self):
        access = InMemoryDocumentAccess({"src/Foo.java": "x"})
        ref = access.find_file_by_name("src/Foo.java")
        assert ref == FileRef("src/Foo.java", "src/Foo.java")
        assert access.get_text(ref) == "x"

    def test_basename_lookup_picks_first_sorted(self):
        access = InMemoryDocumentAccess({"b/Foo.java": "b", "a/Foo.java": "a"})
        ref = access.find_file_by_name("Foo.java")
        assert ref.path == "a/Foo.java"
        assert ref.name == "Foo.java"

    def test_missing_file(self):
        access = InMemoryDocumentAccess({"a.txt": ""})
        assert access.find_file_by_name("b.txt") is None
        with pytest.raises(DocumentNotFoundError):
            access.get_text(FileRef("b.txt", "b.txt"))

    def test_delimiter_follows_content(self):
        access = InMemoryDocumentAccess({"w.txt": "a\r\nb"})
        assert access.get_line_delimiter(FileRef("w.txt", "w.txt")) == "\r\n"


class TestFileSystemDocumentAccess:
    def test_direct_and_nested_lookup(self, tmp_path):
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        (nested / "mod.py").write_text("x = 1\n")
        access = FileSystemDocumentAccess(str(tmp_path))

        direct = access.find_file_by_name("src/pkg/mod.py")
        by_name = access.find_file_by_name("mod.py")
        assert direct is not None and by_name is not None
        assert access.get_text(by_name) == "x = 1\n"

    def test_hidden_directories_skipped(self, tmp_path):
        hidden = tmp_path / ".git"
        hidden.mkdir()
        (hidden / "config").write_text("secret")
        assert FileSystemDocumentAccess(str(tmp_path)).find_file_by_name("config") is None

    def test_line_endings_preserved(self, tmp_path):
        (tmp_path / "win.txt").write_bytes(b"a\r\nb\r\n")
        access = FileSystemDocumentAccess(str(tmp_path))
        ref = access.find_file_by_name("win.txt")
        assert access.get_text(ref) == "a\r\nb\r\n"
        assert access.get_line_delimiter(ref) == "\r\n"

    def test_file_removed_after_lookup(self, tmp_path):
        target = tmp_path / "gone.txt"
        target.write_text("bye")
        access = FileSystemDocumentAccess(str(tmp_path))
        ref = access.find_file_by_name("gone.txt")
        target.unlink()
        with pytest.raises(DocumentNotFoundError):
            access.get_text(ref)
