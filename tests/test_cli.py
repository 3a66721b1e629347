"""
Tests for the Command Line
==========================
End-to-end runs over temporary projects with an in-memory dictionary.
"""

import io
import json
import os
import subprocess
from pathlib import Path

import pytest

from sourcespell import cli, diff
from sourcespell.cli import apply_args, build_parser, find_project_root, main, run, use_color
from sourcespell.config import CONFIG_FILE_NAME, CheckerConfig, SuggestMode
from sourcespell.config_logging import DictionaryError
from tests.fakes import FakeDictionary

QUIET = ["--no-config", "--no-read-git-log", "--no-read-licenses", "--no-show", "--color", "never"]


@pytest.fixture
def project(tmp_path, monkeypatch):
    for var in list(os.environ):
        if var.startswith('SOURCESPELL_'):
            monkeypatch.delenv(var)
    root = tmp_path.resolve()
    (root / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
    monkeypatch.chdir(root)
    return root


def check(argv, dictionary):
    stdout = io.StringIO()
    status = run(build_parser().parse_args(argv), stdout=stdout, dictionary=dictionary)
    return status, stdout.getvalue()


class TestRun:
    """Tests for complete runs."""

    def test_misspellings_reported(self, project):
        """Test that misspelled comment words are reported with exit status 8."""
        (project / "mod.py").write_text("# Speeling errah here.\nx = 1\n")
        status, out = check(QUIET, FakeDictionary({"here"}))
        assert status == 8
        assert out == (
            'mod.py:1:3: "Speeling" is misspelled in comment\n'
            'mod.py:1:12: "errah" is misspelled in comment\n'
        )

    def test_clean_project(self, project):
        """Test a project without misspellings."""
        (project / "mod.py").write_text('"""Everything here."""\n# Everything here.\n')
        status, out = check(QUIET, FakeDictionary({"everything", "here"}))
        assert status == 0
        assert out == ""

    def test_identifiers_accepted(self, project):
        """Test that names used in the code are correct in comments."""
        (project / "mod.py").write_text("# Call frobnicate here.\ndef frobnicate():\n    pass\n")
        status, _ = check(QUIET, FakeDictionary({"call", "here"}))
        assert status == 0
        status, _ = check(QUIET + ["--no-ignore-idents"], FakeDictionary({"call", "here"}))
        assert status == 8

    def test_word_list_loaded(self, project):
        """Test that the project word list is used."""
        (project / "mod.py").write_text("# Speeling here.\n")
        (project / ".words").write_text("1\nSpeeling\n")
        status, _ = check(QUIET, FakeDictionary({"here"}))
        assert status == 0

    def test_strings(self, project):
        """Test that string literals are checked on request."""
        (project / "mod.py").write_text('x = "a strng"\n')
        status, _ = check(QUIET, FakeDictionary())
        assert status == 0
        status, out = check(QUIET + ["--check-strings"], FakeDictionary())
        assert status == 8
        assert out == 'mod.py:1:8: "strng" is misspelled in string\n'

    def test_embedded(self, project):
        """Test that text files are checked on request."""
        (project / "README.md").write_text("Helo world\n")
        status, out = check(QUIET + ["--check-embedded"], FakeDictionary({"world"}))
        assert status == 8
        assert out == 'README.md:1:1: "Helo" is misspelled in embedded file\n'

    def test_show_and_suggest(self, project):
        """Test context display and suggestions."""
        (project / "mod.py").write_text("# Speeling here.\n")
        dictionary = FakeDictionary({"here"}, suggestions={"Speeling": ["Spelling"]})
        argv = ["--no-config", "--no-read-git-log", "--color", "never", "--suggest", "once"]
        status, out = check(argv, dictionary)
        assert status == 8
        assert out == (
            'mod.py:1:3: "Speeling" is misspelled in comment (suggest: Spelling)\n'
            '\t Speeling here.\n'
        )

    def test_misspellings_file(self, project):
        """Test writing the misspellings word list."""
        (project / "mod.py").write_text("# Speeling errah.\n")
        out_file = project / "found.words"
        status, _ = check(QUIET + ["--misspellings", str(out_file)],
                          FakeDictionary(record_misspelled=True))
        assert status == 8
        assert out_file.read_text() == "2\nSpeeling\nerrah\n"

    def test_update_dict(self, project):
        """Test merging misspellings into the existing word list."""
        (project / "mod.py").write_text("# Speeling errah.\n")
        (project / ".words").write_text("1\nerrah\n")
        out_file = project / "found.words"
        status, _ = check(QUIET + ["--misspellings", str(out_file), "--update-dict"],
                          FakeDictionary(record_misspelled=True))
        assert status == 8
        assert out_file.read_text() == "2\nSpeeling\nerrah\n"

    def test_since(self, project, monkeypatch):
        """Test that only changed lines are checked."""
        (project / "mod.py").write_text("# Speeling here\n# errah here\n")

        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 0, stdout="+++ b/mod.py\n@@ -2 +2 @@\n", stderr="")

        monkeypatch.setattr(diff.subprocess, "run", fake_run)
        status, out = check(QUIET + ["--since", "HEAD"], FakeDictionary({"here"}))
        assert status == 8
        assert out == 'mod.py:2:3: "errah" is misspelled in comment\n'

    def test_write_config(self, project):
        """Test writing the effective configuration."""
        status, out = check(["--write-config", "--check-strings", "--suggest", "each"],
                            FakeDictionary())
        assert status == 0
        data = json.loads((project / CONFIG_FILE_NAME).read_text())
        assert data['check_strings'] is True
        assert data['suggest'] == "each"

    def test_config_file_used(self, project):
        """Test that the project config file applies."""
        (project / CONFIG_FILE_NAME).write_text('{"check_strings": true, "read_git_log": false}')
        (project / "mod.py").write_text('x = "a strng"\n')
        status, _ = check(["--no-show"], FakeDictionary())
        assert status == 8


class TestMain:
    """Tests for main and exit statuses."""

    def test_invocation_error(self, project, capsys):
        """Test that commit ranges are invocation errors."""
        assert main(["--since", "main..feature", "--no-config"]) == 2
        assert "sourcespell: invalid reference" in capsys.readouterr().err

    def test_sourcespell_error(self, project, monkeypatch, capsys):
        """Test that checker errors exit with their status."""
        def failing_run(args):
            raise DictionaryError("no en_US dictionary found")

        monkeypatch.setattr(cli, "run", failing_run)
        assert main([]) == 1
        assert "sourcespell: no en_US dictionary found" in capsys.readouterr().err

    def test_internal_error(self, project, monkeypatch):
        """Test that unexpected exceptions exit with status 1."""
        def failing_run(args):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "run", failing_run)
        assert main([]) == 1

    def test_version(self, capsys):
        """Test the version flag."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "sourcespell 1.0.0" in capsys.readouterr().out


class TestHelpers:
    """Tests for argument and environment helpers."""

    def test_apply_args(self):
        """Test that given flags override the configuration."""
        args = build_parser().parse_args([
            "--check-strings", "--no-camel", "--suggest", "each",
            "--pattern", "x+", "--pattern", "y", "--dict-paths", os.pathsep.join(["/a", "/b"]),
        ])
        config = CheckerConfig()
        apply_args(config, args)
        assert config.check_strings
        assert not config.camel
        assert config.suggest == SuggestMode.EACH
        assert config.patterns == ["x+", "y"]
        assert config.dict_paths == ["/a", "/b"]
        assert config.check_docstrings

    def test_find_project_root(self, tmp_path):
        """Test the closest directory with a project marker."""
        root = tmp_path.resolve()
        (root / "setup.py").write_text("")
        nested = root / "pkg" / "sub"
        nested.mkdir(parents=True)
        (nested / "m.py").write_text("")
        assert find_project_root(nested / "m.py") == root
        assert find_project_root(Path(root)) == root

    def test_use_color(self):
        """Test the color setting."""
        assert use_color("always", io.StringIO())
        assert not use_color("never", io.StringIO())
        assert not use_color("auto", io.StringIO())
