"""
Tests for Embedded Files
========================
"""

import pytest

from sourcespell.config import CheckerConfig, EntropyFilterConfig, IntRange
from sourcespell.config_logging import SourceError
from sourcespell.embed import find_embedded_files, load_embedded
from sourcespell.source import EMBEDDED


class TestLoadEmbedded:
    """Tests for load_embedded."""

    def test_text_file(self, tmp_path):
        """Test a text file keeps its line structure."""
        path = tmp_path / "README.txt"
        path.write_text("Hello wrold\nsecond line\n")
        fragment = load_embedded(path, CheckerConfig())
        assert fragment.kind == EMBEDDED
        assert fragment.text == "Hello wrold\nsecond line\n"
        assert fragment.start.is_valid
        pos = fragment.position_of(fragment.text.index("line"))
        assert (pos.line, pos.column) == (2, 8)

    def test_binary_data(self, tmp_path):
        """Test that data with control bytes has offsets only."""
        path = tmp_path / "data.txt"
        path.write_bytes(b"Hello\x00wrold")
        fragment = load_embedded(path, CheckerConfig())
        assert not fragment.start.is_valid
        assert fragment.position_of(6).offset == 6
        assert not fragment.position_of(6).is_valid

    def test_long_lines(self, tmp_path):
        """Test that over-long lines drop the line structure."""
        path = tmp_path / "min.txt"
        path.write_text("word " * 10)
        config = CheckerConfig(max_embedded_line_len=20)
        assert not load_embedded(path, config).start.is_valid

    def test_unexpected_entropy(self, tmp_path):
        """Test that high entropy data is blanked."""
        path = tmp_path / "blob.txt"
        path.write_text("0123456789abcdef" * 4)
        config = CheckerConfig(entropy_filter=EntropyFilterConfig(
            filter=True, min_len_filtered=16, accept=IntRange(2, 4)))
        assert load_embedded(path, config).text == ""

    def test_missing_file(self, tmp_path):
        """Test that unreadable files raise SourceError."""
        with pytest.raises(SourceError):
            load_embedded(tmp_path / "missing.txt", CheckerConfig())


class TestFindEmbeddedFiles:
    """Tests for find_embedded_files."""

    def test_patterns(self, tmp_path):
        """Test pattern matching and hidden directories."""
        for name in ("README.md", "docs/guide.rst", "data.bin", ".git/notes.txt", "code.py"):
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("text\n")
        found = find_embedded_files([tmp_path], ["*.md", "*.rst", "*.txt"])
        assert found == [tmp_path / "README.md", tmp_path / "docs" / "guide.rst"]
