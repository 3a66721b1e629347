"""
License Words
=============
Adds the words of project license files to the dictionary, so that
license headers copied into comments are not reported.
"""

from pathlib import Path

from .dictionary import DictionaryBase
from .config_logging import DictionaryError, get_logger
from .tokenizer import scan_words

__version__ = "1.0.0"

LICENSE_CANDIDATES = (
    "COPYING",
    "LICENCE",
    "LICENSE",
    "LICENSE-2.0",
    "LICENCE-2.0",
    "LICENSE-APACHE",
    "LICENCE-APACHE",
    "LICENSE-APACHE-2.0",
    "LICENCE-APACHE-2.0",
    "LICENSE-MIT",
    "LICENCE-MIT",
    "MIT-LICENSE",
    "MIT-LICENCE",
    "MIT_LICENSE",
    "MIT_LICENCE",
    "UNLICENSE",
    "UNLICENCE",
)

_CANDIDATE_NAMES = frozenset(name.lower() for name in LICENSE_CANDIDATES)

logger = get_logger(__name__)


def quietly(word: str) -> str:
    """Return word lower cased if it is all upper case."""
    if all(c.isupper() for c in word):
        return word.lower()
    return word


def is_license_file(path: Path) -> bool:
    name = path.name.lower()
    return name in _CANDIDATE_NAMES or path.stem.lower() in _CANDIDATE_NAMES


def read_licenses(dictionary: DictionaryBase, root: Path) -> int:
    """
    Add words from the license files directly under root.

    Returns:
        Number of words added

    Raises:
        DictionaryError: If any word could not be added
    """
    root = Path(root)
    if not root.is_dir():
        return 0
    added = failed = 0
    for path in sorted(root.iterdir()):
        if not path.is_file() or not is_license_file(path):
            continue
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            text = f.read()
        for token in scan_words(text):
            word = quietly(token.text)
            if dictionary.is_correct(word):
                continue
            if dictionary.add(word):
                added += 1
            else:
                failed += 1
        logger.debug("Read license words", path=str(path))
    if failed:
        raise DictionaryError(f"missed adding {failed} license words")
    return added
