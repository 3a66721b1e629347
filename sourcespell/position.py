"""
Source Positions
================
File positions shared by the fragment sources, the diff filter and the
reporter.
"""

import os
from dataclasses import dataclass
from pathlib import Path

__version__ = "1.0.0"


@dataclass(frozen=True)
class Position:
    """
    A position in a file.

    Offsets index the file text. Line and column are 1-based; a line of
    0 marks a position in data without line structure, where only the
    offset is meaningful.
    """
    path: str
    offset: int
    line: int = 0
    column: int = 0

    @property
    def is_valid(self) -> bool:
        return self.line > 0

    def __str__(self) -> str:
        if self.is_valid:
            return f"{rel_path(self.path)}:{self.line}:{self.column}"
        return f"{rel_path(self.path)}:@{self.offset}"


def rel_path(path: str) -> str:
    """Return path relative to the working directory in POSIX form if possible."""
    try:
        rel = os.path.relpath(path)
    except ValueError:
        # Different drive on Windows.
        return Path(path).as_posix()
    return Path(rel).as_posix()
