"""
Word Acceptance Heuristics
==========================
Cheap predicates that accept a word without a dictionary lookup.

Each heuristic answers is_acceptable(word, partial), where partial is
True when the word is a piece of a larger word that has been split.
Heuristics only ever accept; the chain accepts when any member does.
"""

import io
import re
import tokenize
from abc import ABC, abstractmethod
from typing import List, Sequence

from .config import CheckerConfig
from .config_logging import ConfigurationError
from .tokenizer import is_hex

__version__ = "1.0.0"

# Units accepted after a numeral. Suffixes overlap, so all are tried.
KNOWN_UNITS = (
    "k", "M", "x",
    "Kb", "kb", "Mb", "Gb", "Tb",
    "KB", "kB", "MB", "GB", "TB",
    "Kib", "kib", "Mib", "Gib", "Tib",
    "KiB", "kiB", "MiB", "GiB", "TiB",
    "Å", "nm", "µm", "mm", "cm", "m", "km",
    "ns", "µs", "us", "ms", "s", "min", "hr",
    "Hz",
)

FLOAT_PATTERN = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')

_IGNORED_TOKEN_TYPES = frozenset((
    tokenize.NEWLINE, tokenize.NL, tokenize.ENDMARKER,
    tokenize.INDENT, tokenize.DEDENT,
))


class Heuristic(ABC):
    """Base class for word acceptance heuristics."""

    @abstractmethod
    def is_acceptable(self, word: str, partial: bool) -> bool:
        """Return whether word is acceptable without a dictionary lookup."""


class WordLength(Heuristic):
    """Accepts words longer than a maximum length; 0 disables."""

    def __init__(self, max_len: int):
        self.max_len = max_len

    def is_acceptable(self, word: str, partial: bool) -> bool:
        return self.max_len > 0 and len(word) > self.max_len


class NakedHex(Heuristic):
    """
    Accepts hex numbers written without a prefix.

    The minimum length prevents accidental acceptance of short misspelled
    words that only use hex digits ("bead", "face"). A minimum of 0
    disables the heuristic.
    """

    def __init__(self, min_len: int):
        self.min_len = min_len

    def is_acceptable(self, word: str, partial: bool) -> bool:
        return self.min_len != 0 and len(word) >= self.min_len and is_hex(word)


class HexRune(Heuristic):
    """Accepts \\xHH, \\uHHHH, \\UHHHHHHHH and \\NNN octal escape literals."""

    def is_acceptable(self, word: str, partial: bool) -> bool:
        if len(word) < 2 or word[0] != '\\':
            return False
        kind = word[1]
        if kind == 'x':
            return len(word) == 4 and is_hex(word[2:])
        if kind == 'u':
            return len(word) == 6 and is_hex(word[2:])
        if kind == 'U':
            return len(word) == 10 and is_hex(word[2:])
        return len(word) <= 4 and all('0' <= c <= '7' for c in word[1:])


class Unit(Heuristic):
    """
    Accepts quantities with a unit such as 100MB or 3.5ms.

    Naked units are left to the dictionary. Partial words are never units
    since they were directly adjacent to other characters.
    """

    def is_acceptable(self, word: str, partial: bool) -> bool:
        if partial:
            return False
        for unit in KNOWN_UNITS:
            if word.endswith(unit) and FLOAT_PATTERN.fullmatch(word[:-len(unit)]):
                return True
        return False


class AllUpper(Heuristic):
    """
    Accepts all-uppercase words.

    Digits and underscores count as uppercase, and a final 's' is allowed
    for plurals of initialisms (URLs, APIs).
    """

    def is_acceptable(self, word: str, partial: bool) -> bool:
        if word.endswith('s'):
            word = word[:-1]
        return all(c.isupper() or c.isdigit() or c == '_' for c in word)


class SingleRune(Heuristic):
    """Accepts single-character words."""

    def is_acceptable(self, word: str, partial: bool) -> bool:
        return len(word) == 1


class SyntaxNumber(Heuristic):
    """Accepts Python numeric literals: 0x1F, 1_000, 1e-10, 3j."""

    def is_acceptable(self, word: str, partial: bool) -> bool:
        if not word or not (word[0].isdigit() or word[0] == '.'):
            return False
        try:
            tokens = [
                t for t in tokenize.generate_tokens(io.StringIO(word).readline)
                if t.type not in _IGNORED_TOKEN_TYPES
            ]
        except (tokenize.TokenError, SyntaxError):
            return False
        return len(tokens) == 1 and tokens[0].type == tokenize.NUMBER and tokens[0].string == word


class Patterns(Heuristic):
    """Accepts words fully matching any of a set of regular expressions."""

    def __init__(self, patterns: Sequence[str]):
        self.patterns = []
        for p in patterns:
            try:
                self.patterns.append(re.compile(p))
            except re.error as e:
                raise ConfigurationError(f"invalid pattern {p!r}: {e}", option='patterns')

    def is_acceptable(self, word: str, partial: bool) -> bool:
        return any(p.fullmatch(word) for p in self.patterns)


def build_heuristics(config: CheckerConfig) -> List[Heuristic]:
    """Build the heuristic chain for a configuration, cheapest first."""
    chain: List[Heuristic] = [
        WordLength(config.max_word_len),
        NakedHex(config.min_naked_hex),
        HexRune(),
        Unit(),
    ]
    if config.ignore_upper:
        chain.append(AllUpper())
    if config.ignore_single:
        chain.append(SingleRune())
    if config.ignore_numbers:
        chain.append(SyntaxNumber())
    if config.patterns:
        chain.append(Patterns(config.patterns))
    return chain


def any_acceptable(chain: Sequence[Heuristic], word: str, partial: bool) -> bool:
    """Return whether any heuristic in chain accepts word."""
    return any(h.is_acceptable(word, partial) for h in chain)
