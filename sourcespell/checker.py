"""
Spelling Checker
================
Decides, word by word, whether the words of a fragment are correct.

A word is accepted when a heuristic accepts it or the dictionary knows
it. Otherwise a word that differs from a dictionary suggestion only by
case is rejected as a case mismatch, and any other word is split on
camel case (or underscores) and accepted only if every piece is. Pieces
are never split again.
"""

from typing import List, Optional, Sequence

from .config import CheckerConfig
from .config_logging import get_logger
from .diff import ChangeFilter
from .dictionary import DictionaryBase
from .entropy import unexpected_entropy
from .heuristics import any_acceptable, build_heuristics
from .report import CASE_MISMATCH, MISSPELLED, Misspelled, Misspelling
from .source import COMMENT, EMBEDDED, Fragment
from .tokenizer import Token, scan_words, strip_suffix, strip_underscores
from .urls import UrlChecker, find_urls, mask_flags, mask_urls

__version__ = "1.0.0"

logger = get_logger(__name__)


def split_camel(word: str) -> List[str]:
    """
    Split word on camel case, digit and underscore boundaries.

    An uppercase run is kept together, except for its last letter when
    that starts a capitalised word: HTTPServer splits to HTTP, Server.
    """
    parts = []
    current = ''
    for i, c in enumerate(word):
        if c == '_':
            if current:
                parts.append(current)
                current = ''
            continue
        if current and _is_camel_boundary(word, i):
            parts.append(current)
            current = ''
        current += c
    if current:
        parts.append(current)
    return parts


def _is_camel_boundary(word: str, i: int) -> bool:
    prev, curr = word[i - 1], word[i]
    nxt = word[i + 1] if i + 1 < len(word) else ''
    if prev.isdigit() != curr.isdigit():
        return True
    if prev.islower() and curr.isupper():
        return True
    return prev.isupper() and curr.isupper() and nxt.islower()


def split_underscore(word: str) -> List[str]:
    return [part for part in word.split('_') if part]


class Checker:
    """
    Checks fragments against a dictionary and collects misspellings.

    The dictionary is only read during checking, apart from the
    misspellings it records.
    """

    def __init__(
        self,
        dictionary: DictionaryBase,
        config: Optional[CheckerConfig] = None,
        change_filter: Optional[ChangeFilter] = None,
        url_checker: Optional[UrlChecker] = None
    ):
        self.dictionary = dictionary
        self.config = config or CheckerConfig()
        self.change_filter = change_filter or ChangeFilter()
        self.url_checker = url_checker
        self.heuristics = build_heuristics(self.config)
        self.misspellings: List[Misspelling] = []

    def is_correct(self, word: str, partial: bool = False) -> bool:
        """Return whether word is acceptable."""
        return self.check_word(word, partial) is None

    def check_word(self, word: str, partial: bool = False) -> Optional[str]:
        """
        Check a word.

        Args:
            word: Word to check
            partial: True when word is a piece of a split word

        Returns:
            None if the word is acceptable, otherwise the rejection note
        """
        if not word:
            return None
        if any_acceptable(self.heuristics, word, partial):
            return None
        if self.dictionary.is_correct(word):
            return None
        if partial:
            self.dictionary.note_misspelling(word)
            return MISSPELLED
        if self.case_fold_match(word):
            self.dictionary.note_misspelling(word)
            return CASE_MISMATCH

        if self.config.camel:
            fragments = split_camel(word)
        else:
            fragments = split_underscore(word)
        for frag in fragments:
            if self.check_word(frag, True) is not None:
                return MISSPELLED
        return None

    def case_fold_match(self, word: str) -> bool:
        """
        Return whether a suggestion for word matches it under case folding.

        This catches identifiers written with the wrong case in comments.
        """
        folded = word.casefold()
        return any(s.casefold() == folded for s in self.dictionary.suggest(word))

    def check(self, fragment: Fragment) -> Optional[Misspelling]:
        """
        Check a fragment, recording a Misspelling if any word is rejected.

        Returns:
            The recorded Misspelling or None
        """
        if not fragment.text or not self.change_filter.file_is_in_change(fragment.start):
            return None
        if fragment.kind != COMMENT and fragment.kind != EMBEDDED and unexpected_entropy(
                fragment.text, fragment.double_quoted, self.config.entropy_filter):
            logger.debug("Skipping fragment with unexpected entropy", path=fragment.start.path,
                         line=fragment.start.line)
            return None

        words: List[Misspelled] = []
        text = fragment.text

        if self.url_checker is not None:
            for match in find_urls(text):
                pos = fragment.position_of(match.start())
                if not self._in_change(pos):
                    continue
                reason = self.url_checker.check(match.group())
                if reason is not None:
                    words.append(Misspelled(
                        match.group(), Token(match.group(), match.start(), match.end()),
                        note=f"unreachable ({reason})", suggest=False, position=pos,
                    ))

        if self.config.mask_urls or self.url_checker is not None:
            text = mask_urls(text)
        if self.config.mask_flags:
            text = mask_flags(text)

        for token in scan_words(text, fragment.double_quoted):
            pos = fragment.position_of(token.pos)
            if not self._in_change(pos):
                continue
            word = strip_suffix(token.text)
            note = self.check_word(strip_underscores(word))
            if note is not None:
                words.append(Misspelled(word, token, note=note, position=pos))

        if not words:
            return None
        words.sort(key=lambda w: w.span.pos)
        m = self._misspelling(fragment, words)
        self.misspellings.append(m)
        return m

    def _in_change(self, pos) -> bool:
        # Positions without lines can only be filtered by file.
        return not pos.is_valid or self.change_filter.is_in_change(pos)

    def check_comments(self, comments: Sequence[Fragment]):
        """
        Check the comment blocks of a file in order.

        Comment blocks on lines adjacent to a block with misspellings are
        recorded without words so that the report shows their context.
        """
        for i, fragment in enumerate(comments):
            if self.check(fragment) is None:
                continue
            if i > 0 and fragment.start.line - comments[i - 1].end.line <= 1:
                self.misspellings.append(self._misspelling(comments[i - 1], []))
            if i + 1 < len(comments) and comments[i + 1].start.line - fragment.end.line <= 1:
                self.misspellings.append(self._misspelling(comments[i + 1], []))

    def check_all(self, fragments: Sequence[Fragment]):
        for fragment in fragments:
            self.check(fragment)

    @staticmethod
    def _misspelling(fragment: Fragment, words: List[Misspelled]) -> Misspelling:
        return Misspelling(
            text=fragment.text,
            kind=fragment.kind,
            start=fragment.start,
            end=fragment.end,
            words=words,
            generated=fragment.generated,
            block=fragment.is_block,
        )
