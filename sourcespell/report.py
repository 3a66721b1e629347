"""
Misspelling Report
==================
Collects misspellings per fragment and renders the final report.

Misspellings are sorted by file and offset, and misspellings on adjacent
lines are grouped into chunks so that comment blocks read as one unit.
Each rejected word is printed as

    path:line:col: "word" is <note> in <kind>

optionally followed by suggestions and by the fragment text with the
rejected words highlighted.
"""

import json
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, TextIO

from .config import CheckerConfig, SuggestMode
from .dictionary import DictionaryBase
from .position import Position
from .tokenizer import Token

__version__ = "1.0.0"

MISSPELLED = "misspelled"
CASE_MISMATCH = "misspelled (case mismatch)"

# ANSI decorations.
WARN_STYLE = "\x1b[3;1;31m"     # italic bold red
SUGGEST_STYLE = "\x1b[3;1;32m"  # italic bold green
RESET_STYLE = "\x1b[0m"


@dataclass
class Misspelled:
    """A rejected word, its token span in the fragment and a note."""
    word: str
    span: Token
    note: str = MISSPELLED
    suggest: bool = True
    position: Optional[Position] = None


@dataclass
class Misspelling:
    """The misspelled words of one fragment, with the fragment for context."""
    text: str
    kind: str
    start: Position
    end: Position
    words: List[Misspelled] = field(default_factory=list)
    generated: bool = False
    block: bool = False

    def adjacent(self, prev: 'Misspelling') -> bool:
        """Return whether the receiver is on a line adjacent to prev."""
        return self.start.path == prev.start.path and self.start.line - prev.end.line <= 1


def chunk_misspellings(misspellings: Sequence[Misspelling]) -> List[List[Misspelling]]:
    """Sort misspellings by file and offset and group adjacent ones."""
    ordered = sorted(misspellings, key=lambda m: (m.start.path, m.start.offset, not m.words))
    chunks: List[List[Misspelling]] = []
    for m in ordered:
        if chunks and m.adjacent(chunks[-1][-1]):
            chunks[-1].append(m)
        else:
            chunks.append([m])
    return chunks


def indent_level(text: str, block: bool) -> int:
    """
    Return the indent of a block string, taken from its closing line.

    Returns zero if text is not a block.
    """
    if not block:
        return 0
    last_line = text.rsplit('\n', 1)[-1]
    return len(last_line) - len(last_line.lstrip(' \t'))


def adjust_indents(text: str, block: bool = False) -> str:
    """Indent every line of text by a single tab, removing the block indent."""
    indent = indent_level(text, block)
    out = []
    for i, line in enumerate(text.split('\n')):
        if not line.strip():
            continue
        if i != 0 and indent:
            stripped = line.lstrip(' \t')
            line = line[min(indent, len(line) - len(stripped)):]
        out.append(f"\t{line}\n")
    return ''.join(out)


class Reporter:
    """
    Renders misspellings.

    Suggestions follow the configured policy: never, once for the first
    occurrence of a word, each for the first occurrence in every chunk,
    or always.
    """

    def __init__(self, dictionary: DictionaryBase, config: CheckerConfig,
                 stream: Optional[TextIO] = None, color: bool = False):
        self.dictionary = dictionary
        self.config = config
        self.stream = stream or sys.stdout
        self.color = color
        self.suggested: Dict[str, List[str]] = {}

    def warn(self, text: str) -> str:
        if not self.color:
            return text
        return f"{WARN_STYLE}{text}{RESET_STYLE}"

    def decorate_suggestion(self, text: str) -> str:
        if not (self.color and self.config.show):
            return text
        return f"{SUGGEST_STYLE}{text}{RESET_STYLE}"

    def report(self, misspellings: Sequence[Misspelling]) -> int:
        """
        Write the report.

        Returns:
            Number of reported words
        """
        reported = 0
        for chunk in chunk_misspellings(misspellings):
            seen_in_chunk: Set[str] = set()
            for m in chunk:
                for w in m.words:
                    self.stream.write(self.format_word(m, w, seen_in_chunk) + "\n")
                    reported += 1
            if self.config.show:
                self.stream.write(self.render_chunk(chunk))
        return reported

    def format_word(self, m: Misspelling, w: Misspelled, seen_in_chunk: Set[str]) -> str:
        pos = w.position or m.start
        line = f"{pos}: {json.dumps(w.word, ensure_ascii=False)} is {w.note} in {m.kind}"
        if m.generated:
            line += " (generated file)"
        if w.suggest:
            suggestions = self.suggestions(w.word, seen_in_chunk)
            if suggestions:
                line += " (suggest: " + ", ".join(self.decorate_suggestion(s) for s in suggestions) + ")"
        return line

    def suggestions(self, word: str, seen_in_chunk: Set[str]) -> List[str]:
        """Return the suggestions to print for word under the policy."""
        mode = self.config.suggest
        if mode == SuggestMode.NEVER:
            return []
        if mode == SuggestMode.ONCE:
            if word in self.suggested:
                return []
            # Mark as suggested.
            self.suggested[word] = []
            return self.dictionary.suggest(word)
        if mode == SuggestMode.EACH:
            if word in seen_in_chunk:
                return []
            seen_in_chunk.add(word)
        if word not in self.suggested:
            self.suggested[word] = self.dictionary.suggest(word)
        return self.suggested[word]

    def render_chunk(self, chunk: Sequence[Misspelling]) -> str:
        """Return the chunk text with rejected words highlighted."""
        out = []
        for i, m in enumerate(chunk):
            if not m.words:
                if i == 0 or m.text != chunk[i - 1].text:
                    out.append(adjust_indents(m.text, m.block))
                continue
            parts = []
            last = 0
            for w in sorted(m.words, key=lambda w: w.span.pos):
                pos, end = w.span.pos, w.span.end
                if pos < last:
                    continue
                parts.append(m.text[last:pos])
                word_end = min(pos + len(w.word), end)
                parts.append(self.warn(m.text[pos:word_end]))
                parts.append(m.text[word_end:end])
                last = end
            parts.append(m.text[last:])
            out.append(adjust_indents(''.join(parts), m.block))
        return ''.join(out)
