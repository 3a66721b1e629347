"""
Diff Scope Filter
=================
Restricts checking to lines added or changed since a git reference.

Unified diff text is parsed into per-file inclusive line ranges. Only
"+++ b/<path>" and "@@ -a,b +c,d @@" lines are consumed; everything else
in the diff is ignored.
"""

import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config_logging import ConfigurationError, DiffParseError, SourceSpellError, get_logger
from .position import Position, rel_path

__version__ = "1.0.0"

FILE_ADDITION_PREFIX = "+++ b/"
HUNK_PREFIX = "@@ "
DELETION_SUFFIX = ",0"

logger = get_logger(__name__)


@dataclass(frozen=True)
class LineRange:
    """An inclusive range of lines in a file, [start, end]."""
    start: int
    end: int

    def __contains__(self, line: int) -> bool:
        return self.start <= line <= self.end


class ChangeFilter:
    """
    Filter excluding words that are not in a set of code changes.

    A filter constructed without ranges is unscoped and includes
    everything. A filter built from a diff includes only the recorded
    lines, so an empty diff includes nothing.
    """

    def __init__(self, ranges: Optional[Dict[str, List[LineRange]]] = None):
        self._ranges = None if ranges is None else {k: tuple(v) for k, v in ranges.items()}

    def is_in_change(self, pos: Position) -> bool:
        """Return whether pos is in a changed line range."""
        if self._ranges is None:
            return True
        lines = self._ranges.get(rel_path(pos.path))
        if lines is None:
            return False
        return any(pos.line in r for r in lines)

    def file_is_in_change(self, pos: Position) -> bool:
        """Return whether the file holding pos has any change."""
        if self._ranges is None:
            return True
        return rel_path(pos.path) in self._ranges


def parse_additions(diff_text: str) -> Dict[str, List[LineRange]]:
    """
    Return the line additions described by unified diff text.

    Args:
        diff_text: Output of a unified diff

    Returns:
        Mapping of path to the added line ranges in that file

    Raises:
        DiffParseError: If a hunk header is malformed
    """
    additions: Dict[str, List[LineRange]] = {}
    path = None
    for line in diff_text.splitlines():
        if line.startswith(FILE_ADDITION_PREFIX):
            path = line[len(FILE_ADDITION_PREFIX):]
        elif line.startswith(HUNK_PREFIX):
            fields = line.split(' ', 3)
            if len(fields) < 3 or not fields[2].startswith('+'):
                raise DiffParseError(f"malformed diff line: {line}", line=line)
            hunk = fields[2][1:]
            if hunk.endswith(DELETION_SUFFIX):
                continue
            count = 1
            if ',' in hunk:
                hunk, _, count_text = hunk.partition(',')
                try:
                    count = int(count_text)
                except ValueError:
                    raise DiffParseError(f"could not parse line range end: {line}", line=line)
            try:
                start = int(hunk)
            except ValueError:
                raise DiffParseError(f"could not parse line range start: {line}", line=line)
            additions.setdefault(path, []).append(LineRange(start, start + count - 1))
    return additions


def git_additions_since(ref: str, context: int = 0) -> ChangeFilter:
    """
    Build a change filter from the working tree changes since ref.

    Args:
        ref: A git reference; commit ranges are not allowed
        context: Number of lines of context to include around each hunk

    Raises:
        ConfigurationError: If ref is a commit range
        SourceSpellError: If git fails
        DiffParseError: If the diff cannot be parsed
    """
    if '..' in ref:
        raise ConfigurationError(f"invalid reference {ref!r}: commit ranges are not supported",
                                 option='since')
    cmd = ['git', 'diff', f'-U{context}', ref]
    logger.debug("Running git diff", command=' '.join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise SourceSpellError(f"could not run git: {e}", code="GIT_ERROR")
    if result.returncode != 0:
        raise SourceSpellError(f"git diff failed: {result.stderr.strip()}", code="GIT_ERROR",
                               details={'returncode': result.returncode})
    return ChangeFilter(parse_additions(result.stdout))
