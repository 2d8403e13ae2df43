"""Tests for the regex tokenizer and token filtering."""

from patch_reconciler.matching.tokenizer import (
    C_LIKE,
    GENERAL_TEXT,
    PYTHON,
    TokenFilterConfig,
    TokenType,
    describe_tokens,
    filter_tokens,
    profile_for_language,
    profile_for_path,
    tokenize,
)


JAVA_SNIPPET = """\
public int add(int a, int b) {
    // sum them
    return a + b; /* done */
}
"""


def _types(tokens):
    return [t.type for t in tokens if t.type is not TokenType.WHITESPACE]


class TestTokenize:
    def test_tokens_cover_text_contiguously(self):
        tokens = tokenize(JAVA_SNIPPET, C_LIKE)
        assert "".join(t.value for t in tokens) == JAVA_SNIPPET
        for prev, cur in zip(tokens, tokens[1:]):
            assert prev.end == cur.start

    def test_offsets_point_into_original(self):
        for token in tokenize(JAVA_SNIPPET, C_LIKE):
            assert JAVA_SNIPPET[token.start:token.end] == token.value

    def test_keywords_vs_identifiers(self):
        tokens = filter_tokens(tokenize("return total;", C_LIKE))
        assert [(t.value, t.type) for t in tokens] == [
            ("return", TokenType.KEYWORD),
            ("total", TokenType.IDENTIFIER),
            (";", TokenType.PUNCTUATION),
        ]

    def test_line_comment_stops_at_end_of_line(self):
        tokens = filter_tokens(tokenize("x = 1; // note\ny = 2;", C_LIKE))
        comments = [t for t in tokens if t.type is TokenType.COMMENT]
        assert [c.value for c in comments] == ["// note"]
        assert any(t.value == "y" for t in tokens)

    def test_block_comment_spans_lines(self):
        tokens = tokenize("/* a\n b */x", C_LIKE)
        assert tokens[0].type is TokenType.COMMENT
        assert tokens[0].value == "/* a\n b */"

    def test_comment_beats_operator(self):
        tokens = tokenize("a // b", C_LIKE)
        assert tokens[-1].type is TokenType.COMMENT

    def test_string_forms(self):
        text = '"a\\"b" \'c\' `tpl` """doc"""'
        strings = [t.value for t in tokenize(text, C_LIKE) if t.type is TokenType.STRING]
        assert strings == ['"a\\"b"', "'c'", "`tpl`", '"""doc"""']

    def test_numbers(self):
        tokens = filter_tokens(tokenize("0xFF 3.14 1e10 42L", C_LIKE))
        assert all(t.type is TokenType.NUMBER for t in tokens)
        assert len(tokens) == 4

    def test_multi_char_operator_before_single(self):
        tokens = filter_tokens(tokenize("a >= b", C_LIKE))
        assert tokens[1].value == ">="
        assert tokens[1].type is TokenType.OPERATOR

    def test_python_profile(self):
        tokens = filter_tokens(tokenize("def f(x):  # hi\n    return f'{x}'", PYTHON))
        kinds = {t.value: t.type for t in tokens}
        assert kinds["def"] is TokenType.KEYWORD
        assert kinds["# hi"] is TokenType.COMMENT
        assert kinds["f'{x}'"] is TokenType.STRING

    def test_general_text_fallback(self):
        tokens = tokenize("hello  world\n", GENERAL_TEXT)
        assert [t.type for t in tokens] == [
            TokenType.WORD, TokenType.WHITESPACE, TokenType.WORD, TokenType.WHITESPACE,
        ]

    def test_unmatched_character_becomes_single_token(self):
        tokens = tokenize("a \\ b", C_LIKE)
        assert "".join(t.value for t in tokens) == "a \\ b"
        assert any(t.value == "\\" for t in tokens)

    def test_stray_symbols_are_operators(self):
        tokens = filter_tokens(tokenize("#define X \\ it's", C_LIKE))
        kinds = {t.value: t.type for t in tokens}
        assert kinds["#"] is TokenType.OPERATOR
        assert kinds["\\"] is TokenType.OPERATOR
        assert kinds["'"] is TokenType.OPERATOR
        assert kinds["define"] is TokenType.IDENTIFIER

    def test_uncovered_characters_classified_by_kind(self):
        kinds = {t.value: t.type for t in filter_tokens(tokenize("x € é", C_LIKE))}
        assert kinds["€"] is TokenType.OPERATOR
        assert kinds["é"] is TokenType.IDENTIFIER


class TestFilterTokens:
    def test_whitespace_always_dropped(self):
        tokens = filter_tokens(tokenize("a   b", GENERAL_TEXT))
        assert [t.value for t in tokens] == ["a", "b"]

    def test_ignore_comments_and_strings(self):
        config = TokenFilterConfig(ignore_comments=True, ignore_string_literals=True)
        tokens = filter_tokens(tokenize('x = "s"; // c', C_LIKE), config)
        assert [t.value for t in tokens] == ["x", "=", ";"]

    def test_case_insensitive_lowercases_values_only(self):
        config = TokenFilterConfig(case_sensitive=False)
        tokens = filter_tokens(tokenize("Foo", C_LIKE), config)
        assert tokens[0].value == "foo"
        assert (tokens[0].start, tokens[0].end) == (0, 3)


class TestProfiles:
    def test_profile_for_language(self):
        assert profile_for_language("Java") is C_LIKE
        assert profile_for_language("python") is PYTHON
        assert profile_for_language("cobol") is GENERAL_TEXT
        assert profile_for_language(None) is GENERAL_TEXT

    def test_profile_for_path(self):
        assert profile_for_path("src/Main.java") is C_LIKE
        assert profile_for_path("pkg/mod.py") is PYTHON
        assert profile_for_path("README.md") is GENERAL_TEXT

    def test_describe_tokens(self):
        info = describe_tokens("int x;", C_LIKE)
        assert info["language"] == "c_like"
        assert info["total_tokens"] == 4
        assert info["filtered_tokens"] == 3
        assert info["tokens"][0] == "int (KEYWORD)"
