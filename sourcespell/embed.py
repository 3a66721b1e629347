"""
Embedded Files
==============
Loads text assets shipped with the code (README, data and template
files) as fragments.

Data that does not look like text keeps no line structure, so words in
it are reported by offset only.
"""

import fnmatch
from pathlib import Path
from typing import Iterable, List

from .config import CheckerConfig
from .config_logging import SourceError, get_logger
from .entropy import unexpected_entropy
from .position import Position
from .source import EMBEDDED, Fragment

__version__ = "1.0.0"

# Bytes never found in ASCII/UTF-8 text: C0 controls minus
# BEL BS TAB LF VT FF CR ESC, and DEL.
NEVER_IN_TEXT = frozenset(
    list(range(0x00, 0x07)) + list(range(0x0e, 0x1b)) + list(range(0x1c, 0x20)) + [0x7f]
)

logger = get_logger(__name__)


def load_embedded(path, config: CheckerConfig) -> Fragment:
    """
    Read the file at path as an embedded file fragment.

    If the data is not valid UTF-8, contains bytes never found in text,
    or has lines longer than the configured maximum, the fragment has no
    line positions. Data with unexpected entropy is blanked.

    Raises:
        SourceError: If the file cannot be read
    """
    path = str(path)
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise SourceError(f"could not read {path}: {e}", path=path)

    text = data.decode('utf-8', errors='replace')
    if unexpected_entropy(text, False, config.entropy_filter):
        logger.debug("Skipping embedded file with unexpected entropy", path=path)
        return Fragment('', EMBEDDED, Position(path, 0), Position(path, 0))

    has_lines = _is_text(data, config.max_embedded_line_len)
    if not has_lines:
        return Fragment(text, EMBEDDED, Position(path, 0), Position(path, len(text)))

    line_count = text.count('\n') + 1
    last_line = text.rsplit('\n', 1)[-1]
    return Fragment(
        text, EMBEDDED,
        Position(path, 0, 1, 1),
        Position(path, len(text), line_count, len(last_line) + 1),
        line_columns=(1,) * line_count,
    )


def _is_text(data: bytes, max_line_len: int) -> bool:
    try:
        data.decode('utf-8')
    except UnicodeDecodeError:
        return False
    if any(b in NEVER_IN_TEXT for b in data):
        return False
    return all(len(line) <= max_line_len for line in data.split(b'\n'))


def find_embedded_files(paths: Iterable[Path], patterns: List[str]) -> List[Path]:
    """Return files under paths whose names match any of the glob patterns."""
    files = set()
    for path in paths:
        path = Path(path)
        candidates = [path] if path.is_file() else path.rglob('*')
        for candidate in candidates:
            if not candidate.is_file():
                continue
            if path.is_dir():
                parts = candidate.relative_to(path).parts[:-1]
                if any(p.startswith('.') or p == '__pycache__' for p in parts):
                    continue
            if any(fnmatch.fnmatch(candidate.name, p) for p in patterns):
                files.add(candidate)
    return sorted(files)
