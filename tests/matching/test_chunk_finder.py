"""Tests for the chunk finder and its similarity helpers."""

from patch_reconciler.matching.chunk_finder import (
    ChunkConfig,
    ChunkFinder,
    approximate_similarity,
    lcs_length,
    similarity,
    split_into_chunks,
)
from patch_reconciler.matching.region import Region


HAYSTACK = """\
public class Accounts {
    private final Map<String, Account> byId = new HashMap<>();

    public Account open(String owner, long deposit) {
        Account account = new Account(nextId(), owner);
        account.credit(deposit);
        byId.put(account.id(), account);
        return account;
    }

    public void close(String id) {
        Account account = byId.remove(id);
        if (account != null) {
            account.freeze();
        }
    }
}
"""

OPEN_METHOD = """\
public Account open(String owner, long deposit) {
        Account account = new Account(nextId(), owner);
        account.credit(deposit);
        byId.put(account.id(), account);
        return account;
    }"""


class TestLcs:
    def test_known_values(self):
        assert lcs_length("ABCBDAB", "BDCABA") == 4
        assert lcs_length("abc", "abc") == 3
        assert lcs_length("abc", "xyz") == 0
        assert lcs_length("", "abc") == 0

    def test_symmetric(self):
        assert lcs_length("kitten", "sitting") == lcs_length("sitting", "kitten")

    def test_similarity_uses_lcs_for_short_inputs(self):
        assert similarity("abcd", "dcba") == lcs_length("abcd", "dcba") == 1


class TestFrequencyApproximation:
    """The proxy used above 1000 characters ignores character order."""

    def test_anagram_scores_as_identical(self):
        a = "abc" * 400
        b = "a" * 400 + "b" * 400 + "c" * 400
        assert approximate_similarity(a, b) == len(a)
        assert lcs_length(a, b) < 0.7 * len(a)

    def test_similarity_switches_to_proxy_over_limit(self):
        a = "abc" * 400
        b = "a" * 400 + "b" * 400 + "c" * 400
        assert similarity(a, b) == len(a)

    def test_non_ascii_is_ignored_by_proxy(self):
        assert approximate_similarity("ééé", "ééé") == 0


class TestSplitIntoChunks:
    def test_paragraphs_become_chunks(self):
        text = "\n\n".join(["first paragraph is long enough"] * 3 + ["tiny"])
        chunks = split_into_chunks(text)
        assert chunks == ["first paragraph is long enough"] * 3

    def test_long_paragraph_split_on_statements(self):
        config = ChunkConfig(max_chunk_size=60, min_chunk_size=5)
        text = "int alpha = 1; int beta = 2; { call(alpha, beta); } int gamma = 3;"
        chunks = split_into_chunks(text, config)
        assert "int alpha = 1;" in chunks
        assert "int gamma = 3;" in chunks

    def test_few_chunks_regroup_by_lines(self):
        chunks = split_into_chunks(OPEN_METHOD)
        assert len(chunks) >= 3
        assert all(chunk == chunk.strip() for chunk in chunks)


class TestChunkFinder:
    def test_exact_substring_round_trip(self):
        finder = ChunkFinder()
        region = finder.find_matching_region(OPEN_METHOD, HAYSTACK)
        start = HAYSTACK.index(OPEN_METHOD)
        assert region == Region(start, start + len(OPEN_METHOD))

    def test_whitespace_drift_still_matches(self):
        drifted = OPEN_METHOD.replace("        ", "\t").replace(", ", ",   ")
        region = ChunkFinder().find_matching_region(drifted, HAYSTACK)
        start = HAYSTACK.index(OPEN_METHOD)
        assert region is not None
        assert region.contains(Region(start + 10, start + len(OPEN_METHOD) - 10))

    def test_unrelated_needle_not_found(self):
        needle = "SELECT name, email FROM customers WHERE active = 1 ORDER BY name;"
        assert ChunkFinder().find_matching_region(needle, HAYSTACK) is None

    def test_blank_needle(self):
        assert ChunkFinder().find_matching_region("   \n", HAYSTACK) is None

    def test_found_ratio_reported(self):
        match = ChunkFinder().find_match(OPEN_METHOD, HAYSTACK)
        assert match.chunks_found == match.chunks_total
        assert match.found_ratio == 1.0

    def test_all_regions_sorted_and_inside_union(self):
        finder = ChunkFinder()
        union = finder.find_matching_region(OPEN_METHOD, HAYSTACK)
        regions = finder.find_all_matching_regions(OPEN_METHOD, HAYSTACK)
        assert regions == sorted(regions, key=lambda r: (r.start, r.end))
        assert all(union.contains(r) for r in regions)

    def test_large_haystack_searched_in_sections(self):
        filler = "// padding line that does not matter at all\n" * 200
        big = filler + HAYSTACK + filler
        finder = ChunkFinder(ChunkConfig(max_search_text_length=len(big) // 2))
        region = finder.find_matching_region(OPEN_METHOD, big)
        start = big.index(OPEN_METHOD)
        assert region == Region(start, start + len(OPEN_METHOD))


class TestFuzzyChunkPosition:
    CHUNK = "Account account = new Account(nextId(), owner);"

    def test_typo_found_near_true_position(self):
        typo = self.CHUNK.replace("nextId", "nextID")
        region = ChunkFinder().find_chunk_position(typo, HAYSTACK)
        true_start = HAYSTACK.index(self.CHUNK)
        assert region is not None
        assert region.start < true_start + len(self.CHUNK)
        assert region.end > true_start
        assert abs(region.start - true_start) <= 25

    def test_threshold_is_tunable(self):
        typo = self.CHUNK.replace("nextId", "nextID")
        strict = ChunkFinder(ChunkConfig(similarity_threshold=0.99))
        assert strict.find_chunk_position(typo, HAYSTACK) is None

    def test_dissimilar_chunk_rejected(self):
        region = ChunkFinder().find_chunk_position(
            "SELECT * FROM LEDGER WHERE BALANCE < 0;", HAYSTACK,
        )
        assert region is None
