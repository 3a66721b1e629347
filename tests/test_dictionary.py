"""
Tests for the Spelling Dictionary
=================================
Word lists, misspelling files and the PyEnchant backend.
"""

import pytest

from sourcespell.config_logging import DictionaryError
from sourcespell.dictionary import (
    EnchantDictionary, Librarian, build_dictionary, merge_rules, plural_forms,
)
from tests.fakes import FakeDictionary


class TestPluralForms:
    """Tests for plural_forms."""

    @pytest.mark.parametrize("word,plural", [
        ("cat", "cats"), ("box", "boxes"), ("match", "matches"),
        ("city", "cities"), ("day", "days"), ("Widget", "Widgets"),
    ])
    def test_regular_plurals(self, word, plural):
        """Test regular English plurals."""
        assert plural_forms(word) == [plural]

    def test_no_plural(self):
        """Test words not ending in a letter."""
        assert plural_forms("x86") == []
        assert plural_forms("") == []


class TestDictionaryBase:
    """Tests for the shared dictionary behavior."""

    def test_add_unknown(self):
        """Test that known words are not added again."""
        d = FakeDictionary({"widget"})
        assert d.add_unknown("Widget")
        assert d.words == {"widget"}
        assert d.add_unknown("Gadget", countable=True)
        assert {"Gadget", "Gadgets"} <= d.words

    def test_note_misspelling(self):
        """Test counting and recording misspellings."""
        d = FakeDictionary(record_misspelled=True)
        d.note_misspelling("zorp")
        d.note_misspelling("zorp")
        assert d.misspellings == 2
        assert d.misspelled == {"zorp"}

        unrecorded = FakeDictionary()
        unrecorded.note_misspelling("zorp")
        assert unrecorded.misspellings == 1
        assert unrecorded.misspelled is None

    def test_write_misspellings(self, tmp_path):
        """Test the word list format."""
        d = FakeDictionary(record_misspelled=True)
        for word in ("errah", "Speeling", "errah"):
            d.note_misspelling(word)
        out = tmp_path / "out.words"
        d.write_misspellings(out)
        assert out.read_text() == "2\nSpeeling\nerrah\n"

    def test_update_misspellings(self, tmp_path):
        """Test merging with the existing root word list."""
        (tmp_path / ".words").write_text("2\nfoo\nbar\n")
        d = FakeDictionary(record_misspelled=True)
        d.note_misspelling("zorp")
        out = tmp_path / "out.words"
        d.write_misspellings(out, [tmp_path], update=True)
        assert out.read_text() == "3\nbar\nfoo\nzorp\n"

    def test_write_failure(self, tmp_path):
        """Test an unwritable destination."""
        d = FakeDictionary(record_misspelled=True)
        with pytest.raises(DictionaryError):
            d.write_misspellings(tmp_path / "missing" / "out.words")


class TestLibrarian:
    """Tests for word list collation."""

    def test_affixes_merged(self):
        """Test that affix codes of repeated words are merged."""
        lib = Librarian()
        lib.add_words(["widget/S", "widget/M", "plain", "widget/S"])
        assert lib.rules == {"widget": "MS", "plain": ""}

    def test_url_entries(self):
        """Test that URL entries are kept for the URL checker."""
        lib = Librarian()
        lib.add_word("https://example.com/a/b")
        assert lib.urls == {"https://example.com/a/b"}
        assert lib.rules == {}

    def test_invalid_entry(self):
        """Test an entry with too many slashes."""
        with pytest.raises(DictionaryError, match="invalid dictionary entry"):
            Librarian().add_word("a/b/c")

    def test_add_dictionary(self, tmp_path):
        """Test reading a word list file, skipping its count line."""
        path = tmp_path / ".words"
        path.write_text("99\nwidget/S\n\ngizmo\n")
        lib = Librarian()
        lib.add_dictionary(path)
        assert lib.rules == {"widget": "S", "gizmo": ""}

    def test_add_dictionary_error_location(self, tmp_path):
        """Test that entry errors name the file and line."""
        path = tmp_path / ".words"
        path.write_text("3\nfoo\nbar\nbad/x/y\n")
        with pytest.raises(DictionaryError) as exc_info:
            Librarian().add_dictionary(path)
        assert exc_info.value.message.endswith(f"at {path}:4")

    def test_populate(self):
        """Test adding collated words to a dictionary."""
        lib = Librarian()
        lib.add_words(["widget/S", "known", "https://example.com/a/b"])
        d = FakeDictionary({"known"})
        assert lib.populate(d) == 0
        assert {"widget", "widgets", "known"} <= d.words
        assert d.ignored_urls == {"https://example.com/a/b"}

    def test_merge_rules(self):
        """Test affix code merging."""
        assert merge_rules("", "S") == "S"
        assert merge_rules("S", "") == "S"
        assert merge_rules("SM", "MD") == "DMS"


class TestBuildDictionary:
    """Tests for build_dictionary."""

    def test_known_words_and_word_list(self, tmp_path):
        """Test that known words and root word lists are loaded."""
        (tmp_path / ".words").write_text("1\nzorp\n")
        d = build_dictionary("en_US", [], roots=[tmp_path], dictionary=FakeDictionary())
        assert d.is_correct("pytest")
        assert d.is_correct("isinstance")
        assert d.is_correct("zorp")

    def test_word_lists_skipped(self, tmp_path):
        """Test that root word lists can be left out."""
        (tmp_path / ".words").write_text("1\nzorp\n")
        d = build_dictionary("en_US", [], roots=[tmp_path], load_word_lists=False,
                             dictionary=FakeDictionary())
        assert not d.is_correct("zorp")

    def test_missing_word_list(self, tmp_path):
        """Test roots without a word list."""
        d = build_dictionary("en_US", [], roots=[tmp_path], dictionary=FakeDictionary())
        assert d.is_correct("pytest")

    def test_invalid_word_list(self, tmp_path):
        """Test that a bad word list fails the build."""
        (tmp_path / ".words").write_text("1\na/b/c\n")
        with pytest.raises(DictionaryError):
            build_dictionary("en_US", [], roots=[tmp_path], dictionary=FakeDictionary())


class TestEnchantDictionary:
    """Tests for the PyEnchant backend."""

    def test_missing_language(self):
        """Test that a language is required."""
        with pytest.raises(DictionaryError, match="missing dictionary language"):
            EnchantDictionary(lang="")

    def test_check_and_add(self):
        """Test lookups and session additions with an installed dictionary."""
        pytest.importorskip("enchant")
        try:
            d = EnchantDictionary("en_US", ["/usr/share/hunspell"])
        except DictionaryError:
            pytest.skip("en_US dictionary not available")

        assert d.is_correct("spelling")
        assert d.is_correct("")
        assert not d.is_correct("zorpified")
        assert d.add("zorpified")
        assert d.is_correct("zorpified")
        assert not d.add("")
        assert isinstance(d.suggest("speling"), list)
