"""C/C++ scanner producing the normalized token stream the parser consumes.

Identifiers and literals collapse to generic markers so that renaming a
variable or changing a constant never changes the token stream. Keywords,
operators and delimiters are kept verbatim, and so is any character outside
the C alphabet (`@`, `$`, backtick) so that the parser rejects it.
Whitespace, comments and preprocessor lines are dropped.
"""

from __future__ import annotations

import re
from typing import List

# ---------------------------------------------------------------------------
# Token alphabet
# ---------------------------------------------------------------------------
IDENTIFIER = "IDENTIFIER"
NUMBER_LITERAL = "NUMBER_LITERAL"
STRING_LITERAL = "STRING_LITERAL"
CHAR_LITERAL = "CHAR_LITERAL"
END_OF_FILE = "END_OF_FILE"

KEYWORDS = frozenset({
    "alignas", "alignof", "and", "and_eq", "asm", "auto", "bitand", "bitor",
    "bool", "break", "case", "catch", "char", "char8_t", "char16_t", "char32_t",
    "class", "compl", "concept", "const", "consteval", "constexpr", "constinit",
    "const_cast", "continue", "co_await", "co_return", "co_yield", "decltype",
    "default", "delete", "do", "double", "dynamic_cast", "else", "enum",
    "explicit", "export", "extern", "false", "float", "for", "friend", "goto",
    "if", "inline", "int", "long", "mutable", "namespace", "new", "noexcept",
    "not", "not_eq", "nullptr", "operator", "or", "or_eq", "private",
    "protected", "public", "register", "reinterpret_cast", "requires",
    "return", "short", "signed", "sizeof", "static", "static_assert",
    "static_cast", "struct", "switch", "template", "this", "thread_local",
    "throw", "true", "try", "typedef", "typeid", "typename", "union",
    "unsigned", "using", "virtual", "void", "volatile", "wchar_t", "while",
    "xor", "xor_eq",
})

# Keywords that can name a type on their own; `const` is handled by the parser.
TYPE_KEYWORDS = frozenset({
    "auto", "bool", "char", "char8_t", "char16_t", "char32_t", "double", "float",
    "int", "long", "short", "signed", "unsigned", "void", "wchar_t",
})

# Longest first so the alternation always prefers the longest match.
MULTI_CHAR_OPERATORS = (
    "<<=", ">>=",
    "==", "!=", "<=", ">=", "&&", "||", "++", "--", "<<", ">>", "->", "::",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=",
)
SINGLE_CHAR_OPERATORS = "+-*/%=<>!&|^~(){}[];,.:?"

TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<line_comment>//[^\n]*)
    | (?P<block_comment>/\*.*?(?:\*/|\Z))
    | (?P<preprocessor>\#[^\n]*)
    | (?P<word>[A-Za-z_][A-Za-z_0-9]*)
    | (?P<number>0[xX][0-9A-Fa-f]+[uUlL]*|\d+(?:\.\d*)?(?:[eE][+-]?\d+)?[uUlLfF]*)
    | (?P<string>"(?:\\.|[^"\\])*"?)
    | (?P<char>'(?:\\.|[^'\\])*'?)
    | (?P<operator>"""
    + "|".join(re.escape(op) for op in MULTI_CHAR_OPERATORS)
    + "|["
    + re.escape(SINGLE_CHAR_OPERATORS)
    + r"""])
    | (?P<unknown>.)
    """,
    re.VERBOSE | re.DOTALL,
)

_SKIPPED = {"space", "line_comment", "block_comment", "preprocessor"}
_MARKERS = {"number": NUMBER_LITERAL, "string": STRING_LITERAL, "char": CHAR_LITERAL}


def normalize_word(word: str) -> str:
    return word if word in KEYWORDS else IDENTIFIER


def tokenize(source: str) -> List[str]:
    """Scan ``source`` into normalized tokens (no trailing END_OF_FILE)."""
    tokens: List[str] = []
    for match in TOKEN_RE.finditer(source):
        group = match.lastgroup
        if group in _SKIPPED:
            continue
        if group == "word":
            tokens.append(normalize_word(match.group()))
        elif group in _MARKERS:
            tokens.append(_MARKERS[group])
        else:
            tokens.append(match.group())
    return tokens


def is_type_start(token: str) -> bool:
    """Tokens that may begin a type name: a builtin type keyword or an identifier."""
    return token == IDENTIFIER or token in TYPE_KEYWORDS
