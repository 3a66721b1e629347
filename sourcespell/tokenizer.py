"""
Word Tokenizer
==============
Splits a text fragment into natural-language word tokens with spans.

Features:
- Unicode space, symbol and punctuation word boundaries
- Apostrophes inside words are kept (don't, it's)
- Exponent signs in numerals are kept (1e-10)
- Escape sequences are skipped according to the quoting context
"""

import unicodedata
from dataclasses import dataclass
from typing import Iterator

__version__ = "1.0.0"

# Escapes that are always word boundaries.
SINGLE_ESCAPES = frozenset('abfnrtv\\\'"')

# Hex escape prefix to number of hex digits.
HEX_ESCAPES = {'x': 2, 'u': 4, 'U': 8}

HEX_DIGITS = frozenset('0123456789abcdefABCDEF')
OCTAL_DIGITS = frozenset('01234567')

# Suffixes removed from a word before lookup.
WORD_SUFFIXES = ("'s", "'d", "'ed", "'th")


@dataclass(frozen=True)
class Token:
    """A word and its half-open [pos, end) span in the scanned text."""
    text: str
    pos: int
    end: int


def is_hex(s: str) -> bool:
    """Return whether every character of s is a hex digit."""
    return all(c in HEX_DIGITS for c in s)


def scan_words(text: str, double_quoted: bool = False) -> Iterator[Token]:
    """
    Yield the words of text in order.

    Args:
        text: Text to scan
        double_quoted: True when text has already been unquoted so that
            hex and octal escapes were resolved to characters; their
            literal spelling is then kept as word text.

    Yields:
        Non-empty Tokens with text == text[pos:end]
    """
    start = None
    prev = ''
    i = 0
    n = len(text)
    while i < n:
        width = _splitter_width(text, i, prev, double_quoted)
        if width:
            if start is not None:
                yield Token(text[start:i], start, i)
                start = None
        else:
            width = 1
            if start is None:
                start = i
        prev = text[i]
        i += width
    if start is not None:
        yield Token(text[start:], start, n)


def _splitter_width(text: str, i: int, prev: str, double_quoted: bool) -> int:
    """Return the number of characters at text[i] that split words, or 0."""
    curr = text[i]
    nxt = text[i + 1] if i + 1 < len(text) else ''

    if curr.isspace() or _is_symbol(curr) or _is_word_split_punct(prev, curr, nxt):
        return 1

    # Escape sequences.
    if curr != '\\' or not nxt:
        return 0
    if nxt in SINGLE_ESCAPES:
        return 2
    if nxt in HEX_ESCAPES:
        digits = text[i + 2:i + 2 + HEX_ESCAPES[nxt]]
        if len(digits) != HEX_ESCAPES[nxt] or not is_hex(digits):
            return 0
        return 0 if double_quoted else 2 + len(digits)
    if nxt in OCTAL_DIGITS:
        digits = text[i + 1:i + 4]
        if len(digits) != 3 or not all(c in OCTAL_DIGITS for c in digits):
            return 0
        return 0 if double_quoted else 4
    return 0


def _is_symbol(c: str) -> bool:
    return unicodedata.category(c).startswith('S')


def _is_punct(c: str) -> bool:
    return unicodedata.category(c).startswith('P')


def _is_word_split_punct(prev: str, curr: str, nxt: str) -> bool:
    return (curr != '_' and curr != '\\' and _is_punct(curr)
            and not _is_apostrophe(prev, curr, nxt)
            and not _is_exponent_sign(prev, curr, nxt))


def _is_apostrophe(prev: str, curr: str, nxt: str) -> bool:
    # Only an apostrophe between letters is part of a word.
    return curr == "'" and prev.isalpha() and nxt.isalpha()


def _is_exponent_sign(prev: str, curr: str, nxt: str) -> bool:
    return curr == '-' and prev in ('e', 'E') and nxt.isdigit()


def strip_suffix(word: str) -> str:
    """Remove one possessive or verbal suffix such as 's or 'ed."""
    for suffix in WORD_SUFFIXES:
        if word.endswith(suffix):
            return word[:-len(suffix)]
    return word


def strip_underscores(word: str) -> str:
    """Remove emphasis underscores such as in _word_."""
    return word.strip('_')
