"""
Entropy Filter
==============
Skips text whose byte distribution is atypical of natural language.

This is an experimental heuristic: base64 blobs and hex dumps have a
higher entropy than prose, long runs of a few repeated characters a
lower one.
"""

import math
from collections import Counter

from .config import EntropyFilterConfig

__version__ = "1.0.0"


def entropy(text: str, printable: bool) -> float:
    """
    Return the Shannon entropy in bits of the UTF-8 bytes of text.

    If printable is True, all non-printable bytes are counted as a single
    symbol. This is used for text where escapes were resolved to raw bytes.
    """
    data = text.encode('utf-8', errors='surrogateescape')
    if not data:
        return 0.0
    counts = Counter(data)
    if printable:
        grouped = Counter()
        for b, n in counts.items():
            grouped[b if _is_printable(b) else -1] += n
        counts = grouped

    total = len(data)
    e = 0.0
    for n in counts.values():
        p = n / total
        e -= p * math.log2(p)
    return e


def _is_printable(b: int) -> bool:
    # Bytes >= 0x80 are parts of multibyte runes.
    return 0x20 <= b < 0x7f or b >= 0x80 or b in (0x09, 0x0a, 0x0d)


def expected_entropy(n: int, s: int) -> float:
    """Return the entropy of n letters chosen uniformly from s letters."""
    n = min(n, s)
    if n < 2:
        return 0.0
    return math.log2(n)


def unexpected_entropy(text: str, printable: bool, config: EntropyFilterConfig) -> bool:
    """Return whether text falls outside the accepted entropy range."""
    if not config.filter or len(text) < config.min_len_filtered:
        return False
    e = entropy(text, printable)
    low = expected_entropy(len(text), config.accept.low)
    high = expected_entropy(len(text), config.accept.high)
    return e < low or high < e
