"""
Test Doubles
============
In-memory spelling dictionary so that tests do not need enchant or a
system hunspell dictionary.
"""

from typing import Dict, Iterable, List, Optional

from sourcespell.dictionary import DictionaryBase


class FakeDictionary(DictionaryBase):
    """
    Dictionary over a set of words.

    Like hunspell, a capitalized word is correct when its lower case
    form is known.
    """

    def __init__(self, words: Iterable[str] = (),
                 suggestions: Optional[Dict[str, List[str]]] = None,
                 record_misspelled: bool = False):
        super().__init__(record_misspelled)
        self.words = set(words)
        self.suggestions = dict(suggestions or {})
        self.suggest_calls: List[str] = []

    def is_correct(self, word: str) -> bool:
        if not word or word in self.words:
            return True
        return word[0].isupper() and (word[0].lower() + word[1:]) in self.words

    def suggest(self, word: str) -> List[str]:
        self.suggest_calls.append(word)
        return list(self.suggestions.get(word, []))

    def add(self, word: str) -> bool:
        if not word:
            return False
        self.words.add(word)
        return True
