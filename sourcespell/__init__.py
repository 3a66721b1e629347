"""
sourcespell
===========
Version: 1.0.0

Spell checker for Python source code comments, docstrings and strings.

Words are checked against a composite dictionary built from a hunspell
dictionary (via PyEnchant), project word lists, identifiers found in the
code, license texts and git authors:
- Heuristics accept numbers, units, hex values and acronyms
- Compound identifiers are split on camel case and underscores
- Checking can be restricted to lines changed since a git reference
"""

__version__ = "1.0.0"

from .config_logging import (  # noqa: E402
    ConfigurationError,
    DictionaryError,
    DiffParseError,
    SourceError,
    SourceSpellError,
)

__all__ = [
    '__version__',
    'ConfigurationError',
    'DictionaryError',
    'DiffParseError',
    'SourceError',
    'SourceSpellError',
]
