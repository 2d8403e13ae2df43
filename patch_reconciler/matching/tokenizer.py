"""
Tokenizer — splits source text into typed tokens using a pluggable,
regex-based language profile.

No grammar is parsed; a profile only knows how comments, string literals,
numbers and keywords look.  Text in an unknown language falls back to a
plain word/whitespace split.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from enum import Enum


class TokenType(Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    OPERATOR = "operator"
    PUNCTUATION = "punctuation"
    NUMBER = "number"
    STRING = "string"
    COMMENT = "comment"
    WHITESPACE = "whitespace"
    WORD = "word"


@dataclass(frozen=True)
class Token:
    """A token with its ``[start, end)`` span in the original text."""
    value: str
    start: int
    end: int
    type: TokenType

    def __str__(self) -> str:
        return f"{self.type.name}[{self.start}:{self.end}]={self.value!r}"


# ---------------------------------------------------------------------------
# Shared token fragments
# ---------------------------------------------------------------------------

_MULTI_OPERATORS = (
    r"\+\+|--|\+=|-=|\*=|/=|%=|&=|\|=|\^=|<<=|>>=|>>>|==|!=|<=|>=|&&|\|\||"
    r"<<|>>|->|::|\?\?"
)
_PUNCTUATION = r"[{}\[\]();,.]"
_IDENTIFIER = r"[a-zA-Z_$][a-zA-Z0-9_$]*"
_SINGLE_OPERATOR = r"[+\-*/%&|^~!<>=?:@#'`\\]"
_WHITESPACE = r"\s+"

# Group name -> token type, in classification precedence order.
_GROUP_TYPES = (
    ("comment", TokenType.COMMENT),
    ("string", TokenType.STRING),
    ("number", TokenType.NUMBER),
    ("operator", TokenType.OPERATOR),
    ("punctuation", TokenType.PUNCTUATION),
    ("identifier", TokenType.IDENTIFIER),
    ("singleop", TokenType.OPERATOR),
    ("whitespace", TokenType.WHITESPACE),
)


@dataclass(frozen=True)
class LanguageProfile:
    """Keyword set plus regex fragments for one family of languages.

    A profile without patterns (``comment_pattern is None``) is the
    generic text profile.
    """
    name: str
    keywords: frozenset[str] = frozenset()
    comment_pattern: str | None = None
    string_pattern: str | None = None
    number_pattern: str | None = None
    token_pattern: re.Pattern | None = field(
        default=None, init=False, repr=False, compare=False,
    )

    def __post_init__(self) -> None:
        if self.comment_pattern is None:
            return
        pattern = re.compile(
            f"(?P<comment>{self.comment_pattern})"
            f"|(?P<string>{self.string_pattern})"
            f"|(?P<number>{self.number_pattern})"
            f"|(?P<operator>{_MULTI_OPERATORS})"
            f"|(?P<punctuation>{_PUNCTUATION})"
            f"|(?P<identifier>{_IDENTIFIER})"
            f"|(?P<singleop>{_SINGLE_OPERATOR})"
            f"|(?P<whitespace>{_WHITESPACE})",
            re.MULTILINE | re.DOTALL,
        )
        object.__setattr__(self, "token_pattern", pattern)

    @property
    def is_generic(self) -> bool:
        return self.token_pattern is None


_C_LIKE_KEYWORDS = frozenset({
    "abstract", "auto", "break", "case", "catch", "char", "class", "const",
    "continue", "default", "delete", "do", "double", "else", "enum",
    "extern", "false", "final", "finally", "float", "for", "function",
    "goto", "if", "import", "in", "inline", "instanceof", "int",
    "interface", "let", "long", "namespace", "new", "null", "package",
    "private", "protected", "public", "return", "short", "signed", "sizeof",
    "static", "struct", "super", "switch", "template", "this", "throw",
    "throws", "true", "try", "typedef", "typeof", "union", "unsigned",
    "var", "void", "volatile", "while", "with",
})

_PYTHON_KEYWORDS = frozenset({
    "False", "None", "True", "and", "as", "assert", "async", "await",
    "break", "class", "continue", "def", "del", "elif", "else", "except",
    "finally", "for", "from", "global", "if", "import", "in", "is",
    "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
})

# `.*?$` with MULTILINE stops a line comment at the end of its line even
# though DOTALL is on for block comments.
C_LIKE = LanguageProfile(
    name="c_like",
    keywords=_C_LIKE_KEYWORDS,
    comment_pattern=r"//.*?$|/\*.*?\*/",
    string_pattern=(
        r'""".*?"""|' r"'''.*?'''|"
        r"`(?:[^`\\]|\\.)*`|"
        r'"(?:[^"\\\n]|\\.)*"|'
        r"'(?:[^'\\\n]|\\.)*'"
    ),
    number_pattern=(
        r"0[xX][0-9a-fA-F]+[lLuU]*|"
        r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?[fFdDlLuU]*"
    ),
)

PYTHON = LanguageProfile(
    name="python",
    keywords=_PYTHON_KEYWORDS,
    comment_pattern=r"#.*?$",
    string_pattern=(
        r'(?:[rRbBuUfF]{1,2})?""".*?"""|'
        r"(?:[rRbBuUfF]{1,2})?'''.*?'''|"
        r'(?:[rRbBuUfF]{1,2})?"(?:[^"\\\n]|\\.)*"|'
        r"(?:[rRbBuUfF]{1,2})?'(?:[^'\\\n]|\\.)*'"
    ),
    number_pattern=(
        r"0[xX][0-9a-fA-F_]+|0[oO][0-7_]+|0[bB][01_]+|"
        r"\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?[jJ]?"
    ),
)

GENERAL_TEXT = LanguageProfile(name="general_text")

_PROFILES: dict[str, LanguageProfile] = {
    "c_like": C_LIKE,
    "java": C_LIKE,
    "c": C_LIKE,
    "cpp": C_LIKE,
    "csharp": C_LIKE,
    "javascript": C_LIKE,
    "typescript": C_LIKE,
    "go": C_LIKE,
    "rust": C_LIKE,
    "kotlin": C_LIKE,
    "swift": C_LIKE,
    "scala": C_LIKE,
    "php": C_LIKE,
    "python": PYTHON,
    "general_text": GENERAL_TEXT,
}

_EXT_TO_LANG = {
    ".py": "python", ".pyi": "python",
    ".js": "javascript", ".mjs": "javascript", ".cjs": "javascript",
    ".jsx": "javascript", ".ts": "typescript", ".tsx": "typescript",
    ".java": "java", ".kt": "kotlin", ".scala": "scala",
    ".go": "go", ".rs": "rust", ".swift": "swift", ".php": "php",
    ".c": "c", ".h": "c", ".cpp": "cpp", ".hpp": "cpp", ".cc": "cpp",
    ".cs": "csharp",
}


def profile_for_language(language: str | None) -> LanguageProfile:
    """Return the profile for a language name; unknown names get GENERAL_TEXT."""
    if not language:
        return GENERAL_TEXT
    return _PROFILES.get(language.lower(), GENERAL_TEXT)


def profile_for_path(path: str) -> LanguageProfile:
    """Pick a profile from a file's extension."""
    ext = os.path.splitext(path)[1].lower()
    return profile_for_language(_EXT_TO_LANG.get(ext))


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

_GENERAL_PATTERN = re.compile(r"\S+|\s+")


def tokenize(text: str, profile: LanguageProfile = GENERAL_TEXT) -> list[Token]:
    """Split *text* into tokens covering every character, in order."""
    if profile.is_generic:
        return _tokenize_general(text)

    tokens: list[Token] = []
    pos = 0
    length = len(text)
    while pos < length:
        m = profile.token_pattern.match(text, pos)
        if m is None or m.end() == pos:
            # A character no rule covers, e.g. a non-ASCII letter or symbol.
            kind = TokenType.IDENTIFIER if text[pos].isalnum() else TokenType.OPERATOR
            tokens.append(Token(text[pos], pos, pos + 1, kind))
            pos += 1
            continue
        tokens.append(Token(m.group(), m.start(), m.end(), _classify(m, profile)))
        pos = m.end()
    return tokens


def _tokenize_general(text: str) -> list[Token]:
    tokens: list[Token] = []
    for m in _GENERAL_PATTERN.finditer(text):
        value = m.group()
        kind = TokenType.WHITESPACE if value[0].isspace() else TokenType.WORD
        tokens.append(Token(value, m.start(), m.end(), kind))
    return tokens


def _classify(match: re.Match, profile: LanguageProfile) -> TokenType:
    group = match.lastgroup
    for name, kind in _GROUP_TYPES:
        if name == group:
            if kind is TokenType.IDENTIFIER and match.group() in profile.keywords:
                return TokenType.KEYWORD
            return kind
    return TokenType.IDENTIFIER


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TokenFilterConfig:
    ignore_comments: bool = False
    ignore_string_literals: bool = False
    case_sensitive: bool = True


def filter_tokens(
    tokens: list[Token],
    config: TokenFilterConfig | None = None,
) -> list[Token]:
    """Drop whitespace (always) and comments/strings (when configured).

    When matching is case-insensitive the surviving values are lower-cased;
    offsets are left untouched.
    """
    config = config or TokenFilterConfig()
    result: list[Token] = []
    for token in tokens:
        if token.type is TokenType.WHITESPACE:
            continue
        if token.type is TokenType.COMMENT and config.ignore_comments:
            continue
        if token.type is TokenType.STRING and config.ignore_string_literals:
            continue
        if not config.case_sensitive:
            token = Token(token.value.lower(), token.start, token.end, token.type)
        result.append(token)
    return result


def describe_tokens(
    text: str,
    profile: LanguageProfile = GENERAL_TEXT,
    config: TokenFilterConfig | None = None,
) -> dict:
    """Debug summary of how *text* tokenizes under *profile*."""
    tokens = tokenize(text, profile)
    filtered = filter_tokens(tokens, config)
    return {
        "language": profile.name,
        "total_tokens": len(tokens),
        "filtered_tokens": len(filtered),
        "tokens": [f"{t.value} ({t.type.name})" for t in filtered],
    }
