"""
Git Log Words
=============
Adds author names and email addresses from the git history to the
dictionary.
"""

import subprocess

from .dictionary import DictionaryBase
from .config_logging import DictionaryError, get_logger
from .tokenizer import scan_words

__version__ = "1.0.0"

logger = get_logger(__name__)


def read_git_log(dictionary: DictionaryBase, cwd=None) -> int:
    """
    Add the words of git log author names and emails.

    Git failures are logged and ignored, as the directory may not be a
    repository.

    Returns:
        Number of words added

    Raises:
        DictionaryError: If any word could not be added
    """
    cmd = ['git', 'log', '--format=%an %ae']
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
    except OSError as e:
        logger.info("Could not run git log", error=str(e))
        return 0
    if result.returncode != 0:
        logger.info("git log failed", returncode=result.returncode, stderr=result.stderr.strip())
        return 0

    added = failed = 0
    for token in scan_words(result.stdout):
        if dictionary.is_correct(token.text):
            continue
        if dictionary.add(token.text):
            added += 1
        else:
            failed += 1
    if failed:
        raise DictionaryError(f"missed adding {failed} git author words")
    return added
