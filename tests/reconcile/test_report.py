"""Tests for the changed-lines report."""

from patch_reconciler.reconcile.report import (
    REPORT_PREFIX,
    AffectedRange,
    affected_ranges,
    changed_lines_report,
    render_range,
)


def _numbered(n):
    return [f"line {i}" for i in range(1, n + 1)]


class TestAffectedRanges:
    def test_single_change_with_context(self):
        original = ["foo();", "bar();", ""]
        patched = ["foo();", "bar(1);", ""]
        assert affected_ranges(original, patched) == [AffectedRange(1, 3, (2,))]

    def test_context_clamped_inside_file(self):
        original = _numbered(20)
        patched = list(original)
        patched[9] = "changed"
        assert affected_ranges(original, patched) == [AffectedRange(7, 13, (10,))]

    def test_nearby_changes_merge(self):
        original = _numbered(30)
        patched = list(original)
        patched[4] = "five"
        patched[9] = "ten"
        ranges = affected_ranges(original, patched)
        assert len(ranges) == 1
        assert ranges[0].changed_lines == (5, 10)
        assert (ranges[0].start_line, ranges[0].end_line) == (2, 13)

    def test_distant_changes_stay_apart(self):
        original = _numbered(40)
        patched = list(original)
        patched[1] = "two"
        patched[35] = "thirty-six"
        ranges = affected_ranges(original, patched)
        assert [r.changed_lines for r in ranges] == [(2,), (36,)]

    def test_large_change_gets_proportional_context(self):
        original = _numbered(100)
        patched = original[:40] + [f"new {i}" for i in range(40)] + original[80:]
        (affected,) = affected_ranges(original, patched)
        assert affected.start_line == 41 - 4
        assert affected.end_line == 80 + 4

    def test_no_changes(self):
        assert affected_ranges(["a"], ["a"]) == []


class TestRender:
    def test_render_range(self):
        block = render_range("Foo.java", ["foo();", "bar(1);", ""], AffectedRange(1, 3, (2,)))
        assert block == "```Foo.java lines 1 to 3\n1: foo();\n2: bar(1);\n3: \n```\n"

    def test_line_numbers_right_aligned(self):
        lines = _numbered(12)
        block = render_range("f", lines, AffectedRange(8, 12))
        assert " 9: line 9" in block
        assert "12: line 12" in block

    def test_report_prefix(self):
        report = changed_lines_report("Foo.java", ["a", "b"], ["a", "c"])
        assert report.startswith(REPORT_PREFIX)
        assert "```Foo.java lines 1 to 2" in report
