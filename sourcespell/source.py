"""
Source Fragment Extraction
==========================
Reads Python source files and yields the text fragments to spell check.

Features:
- Comment blocks from the tokenizer, grouped across consecutive lines
- Docstrings and string literals from the syntax tree
- f-string literal parts
- Generated file detection
"""

import ast
import io
import re
import tokenize
import unicodedata
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from .config_logging import SourceError, get_logger
from .position import Position

__version__ = "1.0.0"

# Fragment kinds.
COMMENT = "comment"
DOCSTRING = "docstring"
STRING = "string"
EMBEDDED = "embedded file"

GENERATED_PATTERN = re.compile(r'^\s*Code generated .* DO NOT EDIT\.$|@generated')
CODING_PATTERN = re.compile(r'^[ \t\f]*#.*?coding[:=][ \t]*[-\w.]+')

_NON_CODE_TOKENS = frozenset((
    tokenize.COMMENT, tokenize.NL, tokenize.NEWLINE, tokenize.INDENT,
    tokenize.DEDENT, tokenize.ENCODING, tokenize.ENDMARKER,
))

_SIMPLE_ESCAPES = {
    '\\': '\\', "'": "'", '"': '"', 'a': '\a', 'b': '\b',
    'f': '\f', 'n': '\n', 'r': '\r', 't': '\t', 'v': '\v',
}
_OCTAL_DIGITS = frozenset('01234567')
_HEX_ESCAPE_DIGITS = {'x': 2, 'u': 4, 'U': 8}

logger = get_logger(__name__)


@dataclass(frozen=True)
class Fragment:
    """
    A unit of text to check: a comment block, a string or an embedded file.

    char_positions holds the (offset, line, column) of each character of
    text when it was decoded from a single literal. Otherwise line_columns
    holds the 1-based column of the first character of each line of text
    when the text maps line for line onto the file. When both are None,
    word positions are approximated from the start position.
    """
    text: str
    kind: str
    start: Position
    end: Position
    generated: bool = False
    double_quoted: bool = False
    line_columns: Optional[Tuple[int, ...]] = None
    char_positions: Optional[Tuple[Tuple[int, int, int], ...]] = None

    @property
    def is_block(self) -> bool:
        """Whether this is a multi-line string indented by its closing line."""
        return self.kind in (DOCSTRING, STRING) and '\n' in self.text

    def position_of(self, index: int) -> Position:
        """Return the file position of text[index]."""
        start = self.start
        offset = start.offset + index
        if not start.is_valid:
            return Position(start.path, offset)
        if self.char_positions is not None:
            if index >= len(self.char_positions):
                return self.end
            return Position(start.path, *self.char_positions[index])
        if self.line_columns is None:
            return Position(start.path, offset, start.line, start.column + index)
        line_index = self.text.count('\n', 0, index)
        line_start = self.text.rfind('\n', 0, index) + 1
        if line_index >= len(self.line_columns):
            return Position(start.path, offset, start.line, start.column)
        column = self.line_columns[line_index] + index - line_start
        return Position(start.path, offset, start.line + line_index, column)


def decode_literal(segment: str) -> Optional[Tuple[str, List[int]]]:
    """
    Decode the source of one string literal.

    Replacement fields of f-strings become a single space.

    Returns:
        The decoded text and the index in segment of each of its
        characters, or None if segment is not exactly one literal
    """
    prefix_len = len(segment) - len(segment.lstrip('rRbBuUfF'))
    prefix = segment[:prefix_len].lower()
    raw = 'r' in prefix
    fstring = 'f' in prefix
    quote = segment[prefix_len:prefix_len + 3]
    if quote not in ('"""', "'''"):
        quote = segment[prefix_len:prefix_len + 1]
    if quote not in ('"', "'", '"""', "'''") or len(segment) < prefix_len + 2 * len(quote) \
            or not segment.endswith(quote):
        return None

    chars: List[str] = []
    indices: List[int] = []
    i = prefix_len + len(quote)
    body_end = len(segment) - len(quote)
    while i < body_end:
        c = segment[i]
        if c == '\\':
            if i + 1 >= body_end:
                return None
            nxt = segment[i + 1]
            if raw:
                chars.append(c)
                indices.append(i)
                i += 1
                if nxt == '\\' or nxt in '\'"':
                    chars.append(nxt)
                    indices.append(i)
                    i += 1
                continue
            width = _escape_width(segment, i, body_end)
            if width is None:
                return None
            if width:
                decoded = _decode_escape(segment[i:i + width])
                if decoded is None:
                    return None
                if decoded:
                    chars.append(decoded)
                    indices.append(i)
                i += width
                continue
            # Unrecognized escapes keep their backslash.
            chars.append(c)
            indices.append(i)
            i += 1
            continue
        if segment.startswith(quote, i):
            # Implicitly concatenated literals.
            return None
        if fstring and c in '{}':
            if segment[i + 1:i + 2] == c:
                chars.append(c)
                indices.append(i)
                i += 2
                continue
            if c == '}':
                return None
            depth = 1
            j = i + 1
            while j < body_end and depth:
                if segment[j] == '{':
                    depth += 1
                elif segment[j] == '}':
                    depth -= 1
                j += 1
            if depth:
                return None
            chars.append(' ')
            indices.append(i)
            i = j
            continue
        chars.append(c)
        indices.append(i)
        i += 1
    return ''.join(chars), indices


def _escape_width(segment: str, i: int, end: int) -> Optional[int]:
    """Return the length of the escape sequence at segment[i], 0 if unrecognized."""
    nxt = segment[i + 1]
    if nxt == '\r' and segment[i + 2:i + 3] == '\n':
        return 3
    if nxt in _SIMPLE_ESCAPES or nxt in '\n\r':
        return 2
    if nxt in _OCTAL_DIGITS:
        j = i + 1
        while j < min(i + 4, end) and segment[j] in _OCTAL_DIGITS:
            j += 1
        return j - i
    if nxt in _HEX_ESCAPE_DIGITS:
        return 2 + _HEX_ESCAPE_DIGITS[nxt]
    if nxt == 'N' and segment[i + 2:i + 3] == '{':
        close = segment.find('}', i + 3, end)
        return None if close < 0 else close + 1 - i
    return 0


def _decode_escape(escape: str) -> Optional[str]:
    kind = escape[1]
    if kind in '\r\n':
        # Line continuation.
        return ''
    if kind in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[kind]
    if kind in _OCTAL_DIGITS:
        return chr(int(escape[1:], 8))
    try:
        if kind == 'N':
            return unicodedata.lookup(escape[3:-1])
        return chr(int(escape[2:], 16))
    except (KeyError, ValueError):
        return None


class SourceFile:
    """A Python source file and its token and syntax views."""

    def __init__(self, path: str, text: str):
        self.path = path
        self.text = text
        # Lines end at \n, \r\n or \r only, as for tokenize and ast.
        self.lines = io.StringIO(text, newline='').readlines()
        self._line_starts = [0]
        for line in self.lines:
            self._line_starts.append(self._line_starts[-1] + len(line))
        self._tokens: Optional[List[tokenize.TokenInfo]] = None
        self._tree: Optional[ast.Module] = None

    @classmethod
    def load(cls, path) -> 'SourceFile':
        """
        Read a source file honoring its coding declaration.

        Raises:
            SourceError: If the file cannot be read or decoded
        """
        try:
            with tokenize.open(path) as f:
                text = f.read()
        except (OSError, SyntaxError, UnicodeDecodeError) as e:
            raise SourceError(f"could not read {path}: {e}", path=str(path))
        return cls(str(path), text)

    @property
    def tokens(self) -> List[tokenize.TokenInfo]:
        if self._tokens is None:
            try:
                self._tokens = list(tokenize.generate_tokens(io.StringIO(self.text).readline))
            except (tokenize.TokenError, SyntaxError) as e:
                raise SourceError(f"could not tokenize {self.path}: {e}", path=self.path)
        return self._tokens

    @property
    def tree(self) -> ast.Module:
        if self._tree is None:
            try:
                self._tree = ast.parse(self.text, filename=self.path)
            except (SyntaxError, ValueError) as e:
                raise SourceError(f"could not parse {self.path}: {e}", path=self.path)
        return self._tree

    def position(self, line: int, column: int) -> Position:
        """Return the position of a 1-based line and 0-based character column."""
        index = min(line - 1, len(self._line_starts) - 1)
        return Position(self.path, self._line_starts[index] + column, line, column + 1)

    def _char_column(self, line: int, byte_column: int) -> int:
        """Convert a UTF-8 byte column from the syntax tree to a character column."""
        if line - 1 >= len(self.lines):
            return byte_column
        encoded = self.lines[line - 1].encode('utf-8')
        return len(encoded[:byte_column].decode('utf-8', errors='ignore'))

    @property
    def is_generated(self) -> bool:
        """Whether a comment before the first code token marks the file as generated."""
        for tok in self.tokens:
            if tok.type == tokenize.COMMENT:
                if GENERATED_PATTERN.search(tok.string[1:]):
                    return True
            elif tok.type not in _NON_CODE_TOKENS:
                return False
        return False

    def comment_blocks(self) -> List[Fragment]:
        """
        Return comment blocks in file order.

        Consecutive comment lines with no code between them form one block.
        The shebang and coding declaration lines are not included.
        """
        generated = self.is_generated
        blocks: List[Fragment] = []
        group: List[tokenize.TokenInfo] = []
        code_seen = False

        def flush():
            if group:
                blocks.append(self._comment_fragment(group, generated))
                group.clear()

        for tok in self.tokens:
            if tok.type == tokenize.COMMENT:
                row = tok.start[0]
                if row <= 2 and (tok.string.startswith('#!') and row == 1
                                 or CODING_PATTERN.match(tok.string)):
                    continue
                if group and (code_seen or row - group[-1].start[0] > 1):
                    flush()
                group.append(tok)
                code_seen = False
            elif tok.type not in _NON_CODE_TOKENS:
                code_seen = True
        flush()
        return blocks

    def _comment_fragment(self, group: List[tokenize.TokenInfo], generated: bool) -> Fragment:
        first, last = group[0], group[-1]
        text = '\n'.join(tok.string[1:] for tok in group)
        # Columns of the character following each '#'.
        columns = tuple(tok.start[1] + 2 for tok in group)
        start = self.position(first.start[0], first.start[1])
        end = self.position(last.end[0], last.end[1])
        return Fragment(text, COMMENT, start, end, generated=generated, line_columns=columns)

    def string_fragments(self, docstrings: bool = True, strings: bool = False) -> List[Fragment]:
        """Return docstring and string literal fragments in file order."""
        if not (docstrings or strings):
            return []
        collector = _StringCollector(self, docstrings, strings)
        collector.visit(self.tree)
        return sorted(collector.fragments, key=lambda f: f.start.offset)


class _StringCollector(ast.NodeVisitor):
    """Collects string literal fragments from a syntax tree."""

    def __init__(self, source: SourceFile, docstrings: bool, strings: bool):
        self.source = source
        self.docstrings = docstrings
        self.strings = strings
        self.generated = source.is_generated
        self.fragments: List[Fragment] = []
        self._docstring_nodes = set()

    def _note_docstring(self, node):
        body = getattr(node, 'body', None)
        if body and isinstance(body[0], ast.Expr):
            value = body[0].value
            if isinstance(value, ast.Constant) and isinstance(value.value, str):
                self._docstring_nodes.add(id(value))

    def visit_Module(self, node):
        self._note_docstring(node)
        self.generic_visit(node)

    def visit_ClassDef(self, node):
        self._note_docstring(node)
        self.generic_visit(node)

    def visit_FunctionDef(self, node):
        self._note_docstring(node)
        self.generic_visit(node)

    visit_AsyncFunctionDef = visit_FunctionDef

    def visit_Constant(self, node):
        if not isinstance(node.value, str):
            return
        if id(node) in self._docstring_nodes:
            if self.docstrings:
                self._add(node, node.value, DOCSTRING)
        elif self.strings:
            self._add(node, node.value, STRING)

    def visit_JoinedStr(self, node):
        if not self.strings:
            return
        # Replaced fields are blanked so that words do not run together.
        text = ''.join(
            part.value if isinstance(part, ast.Constant) and isinstance(part.value, str) else ' '
            for part in node.values
        )
        self._add(node, text, STRING)

    def _add(self, node, text: str, kind: str):
        if not text.strip():
            return
        source = self.source
        segment = ast.get_source_segment(source.text, node) or ''
        prefix_len = len(segment) - len(segment.lstrip('rRbBuUfF'))
        raw = 'r' in segment[:prefix_len].lower()
        quote_len = 3 if segment[prefix_len:prefix_len + 3] in ('"""', "'''") else 1

        start_column = source._char_column(node.lineno, node.col_offset)
        end_column = source._char_column(node.end_lineno, node.end_col_offset)
        start = source.position(node.lineno, start_column)
        end = source.position(node.end_lineno, end_column)

        columns = None
        char_positions = None
        decoded = decode_literal(segment)
        if decoded is not None and decoded[0] == text:
            positions = segment_positions(start, segment)
            char_positions = tuple(positions[i] for i in decoded[1])
        elif text.count('\n') == node.end_lineno - node.lineno:
            first = start_column + prefix_len + quote_len + 1
            columns = (first,) + (1,) * text.count('\n')

        self.fragments.append(Fragment(
            text, kind, start, end,
            generated=self.generated,
            double_quoted=not raw,
            line_columns=columns,
            char_positions=char_positions,
        ))


def segment_positions(start: Position, segment: str) -> List[Tuple[int, int, int]]:
    """Return the (offset, line, column) of each character of a source segment at start."""
    positions = []
    line, column = start.line, start.column
    for i, c in enumerate(segment):
        positions.append((start.offset + i, line, column))
        if c == '\n' or c == '\r' and segment[i + 1:i + 2] != '\n':
            line += 1
            column = 1
        else:
            column += 1
    return positions


def load_fragments(path, docstrings: bool = True, strings: bool = False) -> Tuple[SourceFile, List[Fragment], List[Fragment]]:
    """
    Load a source file and extract its fragments.

    Returns:
        The source file, its comment blocks and its string fragments
    """
    source = SourceFile.load(path)
    comments = source.comment_blocks()
    string_fragments = source.string_fragments(docstrings, strings)
    logger.debug("Extracted fragments", path=str(path),
                 comments=len(comments), strings=len(string_fragments))
    return source, comments, string_fragments


def find_python_files(paths: List[Path]) -> List[Path]:
    """Return the Python files named by or found under paths, sorted."""
    skip_dirs = {'__pycache__', 'node_modules', 'venv', '.venv', 'env', 'build', 'dist'}
    files = []
    for path in paths:
        path = Path(path)
        if path.is_file():
            files.append(path)
            continue
        for candidate in path.rglob('*.py'):
            parts = candidate.relative_to(path).parts[:-1]
            if any(p in skip_dirs or p.startswith('.') for p in parts):
                continue
            files.append(candidate)
    return sorted(set(files))
