"""
Source Vocabulary
=================
Harvests words from source code that are correct by construction:
identifiers, note author names and tool directive words.

These are added to the dictionary before checking so that comments can
refer to names used in the code.
"""

import ast
import re
import tokenize
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from .config_logging import DictionaryError, get_logger
from .dictionary import DictionaryBase
from .source import Fragment, SourceFile
from .tokenizer import scan_words, strip_underscores

__version__ = "1.0.0"

# MARKER(uid), MARKER at least 2 chars, uid at least 1 char.
NOTE_MARKER_PATTERN = re.compile(r'^[ \t]*([A-Z][A-Z]+)\(([^)]+)\):?')

DIRECTIVE_PATTERN = re.compile(
    r'^#[ \t]*(?:type|noqa|pylint|pragma|fmt|isort|mypy|ruff|flake8|nosec|pyright|coding)\b.*'
    r'|^#!.*'
    r'|^#.*?-\*-.*-\*-'
)

logger = get_logger(__name__)


class _IdentifierCollector(ast.NodeVisitor):
    """Collects (name, countable) pairs; class names are countable."""

    def __init__(self):
        self.names: List[Tuple[str, bool]] = []

    def _add(self, name: Optional[str], countable: bool = False):
        if name:
            self.names.append((name, countable))

    def visit_Name(self, node):
        self._add(node.id)

    def visit_FunctionDef(self, node):
        self._add(node.name)
        self.generic_visit(node)

    visit_AsyncFunctionDef = visit_FunctionDef

    def visit_ClassDef(self, node):
        self._add(node.name, countable=True)
        self.generic_visit(node)

    def visit_arg(self, node):
        self._add(node.arg)
        self.generic_visit(node)

    def visit_Attribute(self, node):
        self._add(node.attr)
        self.generic_visit(node)

    def visit_keyword(self, node):
        self._add(node.arg)
        self.generic_visit(node)

    def visit_alias(self, node):
        for part in node.name.split('.'):
            self._add(part)
        self._add(node.asname)

    def visit_ImportFrom(self, node):
        for part in (node.module or '').split('.'):
            self._add(part)
        self.generic_visit(node)

    def visit_Global(self, node):
        for name in node.names:
            self._add(name)

    visit_Nonlocal = visit_Global


def identifiers(source: SourceFile) -> List[Tuple[str, bool]]:
    """Return the identifiers of a source file with their countability."""
    collector = _IdentifierCollector()
    collector.visit(source.tree)
    return collector.names


def module_words(path: Path, root: Optional[Path] = None) -> List[str]:
    """Return the package and module names making up a file's module path."""
    path = Path(path)
    if root is not None:
        try:
            path = path.resolve().relative_to(Path(root).resolve())
        except ValueError:
            pass
    parts = list(path.with_suffix('').parts)
    return [p for p in parts if p not in ('', '.', '..', path.anchor)]


def add_identifiers(dictionary: DictionaryBase, sources: Iterable[SourceFile],
                    root: Optional[Path] = None):
    """
    Add identifier names of the sources to the dictionary.

    Raises:
        DictionaryError: If any identifier could not be added; all
            additions are attempted first
    """
    failed = 0
    for source in sources:
        for word in module_words(Path(source.path), root):
            if not dictionary.add_unknown(strip_underscores(word)):
                failed += 1
        for name, countable in identifiers(source):
            if not dictionary.add_unknown(strip_underscores(name), countable):
                failed += 1
    if failed:
        raise DictionaryError(f"missed adding {failed} identifiers")


def directive_words(source: SourceFile) -> List[str]:
    """Return the words of tool directive comments such as "# noqa: E501"."""
    words = []
    for tok in source.tokens:
        if tok.type == tokenize.COMMENT and DIRECTIVE_PATTERN.match(tok.string):
            words.extend(t.text for t in scan_words(tok.string[1:]))
    return words


def note_authors(comments: Iterable[Fragment]) -> Set[str]:
    """
    Return the words of note author names in comment blocks.

    A note starts at the beginning of a comment line with "MARKER(uid):"
    and runs until the next note or the end of the block, for example
    "# TODO(alice): fix this". Notes without a body are ignored.
    """
    authors: Set[str] = set()
    for fragment in comments:
        lines = fragment.text.split('\n')
        starts = [i for i, line in enumerate(lines) if NOTE_MARKER_PATTERN.match(line)]
        for n, i in enumerate(starts):
            end = starts[n + 1] if n + 1 < len(starts) else len(lines)
            text = '\n'.join(lines[i:end])
            m = NOTE_MARKER_PATTERN.match(text)
            if text[m.end():].strip():
                authors.update(t.text for t in scan_words(m.group(2)))
    return authors


def add_source_words(dictionary: DictionaryBase, source: SourceFile, comments: Iterable[Fragment]):
    """
    Add directive words and note authors of a file to the dictionary.

    Raises:
        DictionaryError: If any word could not be added; all additions
            are attempted first
    """
    failed = 0
    for word in directive_words(source):
        if not dictionary.add_unknown(word):
            failed += 1
    for word in note_authors(comments):
        if not dictionary.add(word):
            failed += 1
    if failed:
        raise DictionaryError(f"missed adding {failed} words of {source.path}")
