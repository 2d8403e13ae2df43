"""Tests for whitespace normalization and offset mapping."""

import pytest

from patch_reconciler.matching.normalizer import (
    map_to_original,
    normalize,
    normalize_whitespace,
)


SAMPLES = [
    "",
    "plain",
    "a  b\t\tc\n\nd",
    "   leading and trailing   ",
    "int x =\r\n    1;\n\n\treturn x;",
    "\n\n\n",
]


class TestNormalizeWhitespace:
    def test_collapses_runs(self):
        assert normalize_whitespace("a  b\t\n c") == "a b c"

    def test_trim_is_optional(self):
        assert normalize_whitespace("  x  ") == " x "
        assert normalize_whitespace("  x  ", trim=True) == "x"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_idempotent(self, text):
        once = normalize_whitespace(text)
        assert normalize_whitespace(once) == once


class TestMapToOriginal:
    def test_zero_maps_to_zero(self):
        assert map_to_original("   abc", 0) == 0

    def test_non_whitespace_is_one_to_one(self):
        assert map_to_original("abcdef", 3) == 3

    def test_whitespace_run_counts_as_one_unit(self):
        original = "a    b"
        # normalized "a b": offset 2 is the 'b'
        assert map_to_original(original, 2) == 5
        assert original[map_to_original(original, 2)] == "b"

    def test_offset_after_run_skips_whole_run(self):
        original = "x\n\n\n  y"
        assert map_to_original(original, 2) == original.index("y")

    def test_past_end_clamps_to_length(self):
        assert map_to_original("ab", 10) == 2

    @pytest.mark.parametrize("text", SAMPLES)
    def test_monotonic(self, text):
        normalized = normalize_whitespace(text)
        mapped = [map_to_original(text, k) for k in range(len(normalized) + 1)]
        assert mapped == sorted(mapped)


class TestNormalizedText:
    def test_map_back_without_trim(self):
        norm = normalize("foo   bar")
        idx = norm.text.index("bar")
        assert norm.map_back(idx) == 6

    def test_map_back_with_leading_trim(self):
        original = "   foo bar"
        norm = normalize(original, trim=True)
        assert norm.text == "foo bar"
        assert norm.leading_trim == 1
        assert norm.map_back(0) == 3
        assert original[norm.map_back(4):].startswith("bar")

    def test_length_is_normalized_length(self):
        assert len(normalize("a   b")) == 3

    @pytest.mark.parametrize("text", SAMPLES)
    def test_map_back_monotonic(self, text):
        norm = normalize(text, trim=True)
        mapped = [norm.map_back(k) for k in range(len(norm) + 1)]
        assert mapped == sorted(mapped)
