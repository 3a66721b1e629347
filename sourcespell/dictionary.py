"""
Spelling Dictionary
===================
Composite spelling dictionary built on PyEnchant.

Features:
- Hunspell/Myspell dictionaries located through configurable paths
- Session additions for known words, identifiers and project word lists
- Misspelling accumulation for writing project word lists
- ".words" word list parsing (hunspell .dic format)

Requires: pip install pyenchant
Note: the enchant C library and a hunspell dictionary must be installed
"""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .config_logging import DictionaryError, get_logger
from .known_words import known_words
from .urls import URL_PATTERN

__version__ = "1.0.0"

WORDS_FILE_NAME = ".words"

logger = get_logger(__name__)


def plural_forms(word: str) -> List[str]:
    """Return the regular English plural of a countable word."""
    if not word or not word[-1].isalpha():
        return []
    if word.endswith(('s', 'x', 'z', 'ch', 'sh')):
        return [word + 'es']
    if word.endswith('y') and len(word) > 1 and word[-2].lower() not in 'aeiou':
        return [word[:-1] + 'ies']
    return [word + 's']


class DictionaryBase(ABC):
    """
    Spelling dictionary that can record misspelled words.

    Words are only ever added, so acceptance grows monotonically as
    collaborators populate the dictionary during setup.
    """

    def __init__(self, record_misspelled: bool = False):
        # Number of misspellings found.
        self.misspellings = 0
        # Misspelled words found during the check, without leading
        # and trailing underscores. None unless a word list was requested.
        self.misspelled: Optional[Set[str]] = set() if record_misspelled else None
        # URLs omitted from reachability checks.
        self.ignored_urls: Set[str] = set()

    @abstractmethod
    def is_correct(self, word: str) -> bool:
        """Return whether word is correctly spelled."""

    @abstractmethod
    def suggest(self, word: str) -> List[str]:
        """Return suggested spellings for word, best first."""

    @abstractmethod
    def add(self, word: str) -> bool:
        """Add word to the dictionary, returning False on failure."""

    def add_with_affix(self, word: str, countable: bool = False) -> bool:
        """Add word and, if countable, its plural."""
        ok = self.add(word)
        if countable:
            for form in plural_forms(word):
                ok = self.add(form) and ok
        return ok

    def add_unknown(self, word: str, countable: bool = False) -> bool:
        """Add word unless it is already correct."""
        if not word or self.is_correct(word):
            # Assume the dictionary has the correct plurality rules.
            return True
        return self.add_with_affix(word, countable)

    def note_misspelling(self, word: str):
        """Record word as a misspelling."""
        self.misspellings += 1
        if self.misspelled is not None:
            self.misspelled.add(word)

    def write_misspellings(self, path: Path, roots: Iterable[Path] = (), update: bool = False):
        """
        Write the recorded misspellings as a word list.

        Args:
            path: Destination file
            roots: Project roots whose word lists are carried over on update
            update: Merge words from the existing root word lists
        """
        words = set(self.misspelled or ())
        if update:
            for root in roots:
                old = Path(root) / WORDS_FILE_NAME
                if not old.exists():
                    continue
                try:
                    with open(old, 'r', encoding='utf-8') as f:
                        for i, line in enumerate(f):
                            line = line.strip()
                            if i == 0 or not line:
                                continue
                            words.add(line)
                except OSError as e:
                    raise DictionaryError(f"failed to open {old}: {e}", path=str(old))

        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(f"{len(words)}\n")
                for word in sorted(words):
                    f.write(f"{word}\n")
        except OSError as e:
            raise DictionaryError(f"failed to write misspellings file: {e}", path=str(path))
        logger.info("Wrote misspellings", path=str(path), count=len(words))


class EnchantDictionary(DictionaryBase):
    """
    Dictionary backed by a PyEnchant spelling dictionary.

    Additions are made to the enchant session and are not persisted.
    """

    INTEGRATION_NAME = "PyEnchant"

    def __init__(
        self,
        lang: str = 'en_US',
        dict_paths: Optional[List[str]] = None,
        record_misspelled: bool = False
    ):
        """
        Initialize the dictionary.

        Args:
            lang: Dictionary language tag
            dict_paths: Directories searched for hunspell dictionaries
            record_misspelled: Whether to keep the misspelled word set

        Raises:
            DictionaryError: If pyenchant or the dictionary is unavailable
        """
        super().__init__(record_misspelled)
        self.lang = lang
        self.dict_paths = list(dict_paths or [])
        self.source: Optional[str] = None

        self._dict = None
        self._errors: tuple = (ValueError,)
        self._initialize()

    def _initialize(self):
        """Locate and open the enchant dictionary."""
        if not self.lang:
            raise DictionaryError("missing dictionary language")
        try:
            import enchant
            from enchant.errors import Error as EnchantError
        except ImportError as e:
            raise DictionaryError(f"pyenchant not installed: {e}")
        self._errors = (ValueError, EnchantError)

        for path in self.dict_paths:
            path = os.path.expanduser(path)
            if not os.path.isdir(path):
                continue
            broker = enchant.Broker()
            try:
                broker.set_param('enchant.myspell.dictionary.path', path)
            except AttributeError:
                # Parameters are not supported by enchant 2.
                logger.debug("Dictionary path not supported by enchant", path=path)
                break
            if broker.dict_exists(self.lang):
                self._dict = broker.request_dict(self.lang)
                self.source = path
                break

        if self._dict is None:
            try:
                self._dict = enchant.Dict(self.lang)
            except EnchantError as e:
                paths = os.pathsep.join(self.dict_paths)
                raise DictionaryError(f"no {self.lang} dictionary found in: {paths}: {e}")
            self.source = 'default'
        logger.debug("Opened dictionary", integration=self.INTEGRATION_NAME,
                     lang=self.lang, source=self.source)

    def is_correct(self, word: str) -> bool:
        if not word:
            return True
        try:
            return self._dict.check(word)
        except self._errors:
            return False

    def suggest(self, word: str) -> List[str]:
        if not word:
            return []
        try:
            return self._dict.suggest(word)
        except self._errors:
            return []

    def add(self, word: str) -> bool:
        if not word:
            return False
        try:
            self._dict.add_to_session(word)
        except self._errors as e:
            logger.debug("Could not add word", word=word, error=str(e))
            return False
        return True


class Librarian:
    """
    Collates word lists before they are added to a dictionary.

    Entries are "word" or "word/AFFIXES". Affix codes for the same word
    are merged. Entries with more than one "/" are URLs to be ignored by
    the URL checker, or invalid.
    """

    def __init__(self):
        self.rules: Dict[str, str] = {}
        self.urls: Set[str] = set()

    def add_word(self, entry: str):
        """
        Add a word list entry.

        Raises:
            DictionaryError: If the entry is invalid
        """
        parts = entry.split('/')
        word = parts[0]
        if not word:
            return
        if len(parts) == 1:
            affix = ''
        elif len(parts) == 2:
            affix = parts[1]
        elif URL_PATTERN.search(entry):
            self.urls.add(entry)
            return
        else:
            raise DictionaryError(f"invalid dictionary entry {entry!r}")
        self.rules[word] = merge_rules(self.rules.get(word, ''), affix)

    def add_words(self, entries: Iterable[str]):
        for entry in entries:
            self.add_word(entry)

    def add_dictionary(self, path: Path):
        """
        Add the entries of a word list file, skipping its count line.

        Raises:
            FileNotFoundError: If path does not exist
            DictionaryError: If an entry is invalid
        """
        with open(path, 'r', encoding='utf-8') as f:
            for i, line in enumerate(f):
                if i == 0:
                    # Word count hint.
                    continue
                try:
                    self.add_word(line.strip())
                except DictionaryError as e:
                    raise DictionaryError(f"{e.message} at {path}:{i + 1}", path=str(path), line=i + 1)
        logger.debug("Loaded word list", path=str(path))

    def populate(self, dictionary: DictionaryBase) -> int:
        """
        Add all collated words to dictionary.

        Words with affix codes are treated as countable.

        Returns:
            Number of words that could not be added
        """
        failed = 0
        for word in sorted(self.rules):
            if not dictionary.add_unknown(word, countable=bool(self.rules[word])):
                failed += 1
        dictionary.ignored_urls.update(self.urls)
        return failed


def merge_rules(a: str, b: str) -> str:
    """Merge two sets of affix codes into a sorted, de-duplicated set."""
    if not a:
        return b
    if not b:
        return a
    return ''.join(sorted(set(a) | set(b)))


def build_dictionary(
    lang: str,
    dict_paths: List[str],
    roots: Iterable[Path] = (),
    load_word_lists: bool = True,
    record_misspelled: bool = False,
    dictionary: Optional[DictionaryBase] = None
) -> DictionaryBase:
    """
    Build the base dictionary with known words and project word lists.

    Args:
        lang: Dictionary language tag
        dict_paths: Directories searched for hunspell dictionaries
        roots: Project roots that may hold ".words" files
        load_word_lists: Whether to load the root word lists
        record_misspelled: Whether to keep the misspelled word set
        dictionary: Dictionary to populate instead of opening one

    Raises:
        DictionaryError: If a dictionary or word list cannot be loaded
    """
    if dictionary is None:
        dictionary = EnchantDictionary(lang, dict_paths, record_misspelled)

    librarian = Librarian()
    try:
        librarian.add_words(known_words())
    except DictionaryError as e:
        raise DictionaryError(f"{e.message} in internal dictionary")

    if load_word_lists:
        for root in roots:
            path = Path(root) / WORDS_FILE_NAME
            try:
                librarian.add_dictionary(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise DictionaryError(f"failed to read {path}: {e}", path=str(path))

    failed = librarian.populate(dictionary)
    if failed:
        raise DictionaryError(f"missed adding {failed} words to the dictionary")
    return dictionary
