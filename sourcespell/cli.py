"""
sourcespell Command Line
========================
Reports misspellings in Python source comments, docstrings and strings.

usage: sourcespell [options] [paths ...]

The position of each misspelled word is printed. With --show, the
complete comment or string is printed with misspelled words highlighted.

If files named ".words" exist at the project root, they are loaded as
word lists unless --misspellings is given without --update-dict. A
".words" file has a numeric word count hint on its first line followed
by one word per line; --misspellings writes files in this format.

Exit status bits: 1 internal error, 2 invocation error, 8 misspellings.
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .checker import Checker
from .config import CONFIG_FILE_NAME, CheckerConfig, SuggestMode, load_config, save_config
from .config_logging import (
    EXIT_INTERNAL_ERROR, EXIT_SPELLING_ERROR, EXIT_SUCCESS,
    SourceSpellError, get_logger,
)
from .dictionary import build_dictionary
from .diff import git_additions_since
from .embed import find_embedded_files, load_embedded
from .git_log import read_git_log
from .idents import add_identifiers, add_source_words
from .licenses import read_licenses
from .report import Reporter
from .source import find_python_files, load_fragments
from .urls import UrlChecker

ROOT_MARKERS = ('pyproject.toml', 'setup.py', 'setup.cfg', '.git')

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sourcespell',
        description='Report misspellings in Python source comments and strings.',
    )
    parser.add_argument('paths', nargs='*', default=['.'], help='Files or directories to check')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    parser.add_argument('--config', dest='use_config', action=argparse.BooleanOptionalAction,
                        default=True, help=f'Read {CONFIG_FILE_NAME} from the project root')
    parser.add_argument('--write-config', action='store_true',
                        help='Write the effective configuration to the project root and exit')
    parser.add_argument('--since', type=str, help='Only check lines changed since this git reference')
    parser.add_argument('--diff-context', type=int, help='Lines of context around changes to check')
    parser.add_argument('--misspellings', type=str, help='File to write a word list of misspellings')
    parser.add_argument('--update-dict', action='store_true',
                        help='Merge misspellings with the existing .words file')

    parser.add_argument('--lang', type=str, help='Dictionary language (default en_US)')
    parser.add_argument('--dict-paths', type=str,
                        help='Path list of directories containing hunspell dictionaries')
    parser.add_argument('--suggest', type=str, choices=[m.value for m in SuggestMode],
                        help='When to make suggestions for misspellings')
    parser.add_argument('--max-word-len', type=int, help='Ignore words longer than this (0 is no limit)')
    parser.add_argument('--min-naked-hex', type=int,
                        help='Length to recognize hex-digit words as numbers (0 is never ignore)')
    parser.add_argument('--pattern', dest='patterns', action='append',
                        help='Regular expression for acceptable words (repeatable)')
    parser.add_argument('--color', choices=['auto', 'always', 'never'], help='Highlight output')

    flags = {
        'show': 'Print comments or strings with misspellings',
        'check-strings': 'Check string literals',
        'check-docstrings': 'Check docstrings',
        'check-embedded': 'Check text files next to the code',
        'ignore-idents': 'Ignore words matching identifiers',
        'ignore-upper': 'Ignore all-uppercase words',
        'ignore-single': 'Ignore single letter words',
        'ignore-numbers': 'Ignore Python number literals',
        'read-licenses': 'Ignore words found in license files',
        'read-git-log': 'Ignore author names and emails found in git log',
        'mask-flags': 'Ignore words with a leading dash',
        'mask-urls': 'Mask URLs before checking',
        'check-urls': 'Check that URLs are reachable',
        'camel': 'Split words on camel case',
    }
    for flag, help_text in flags.items():
        parser.add_argument(f'--{flag}', action=argparse.BooleanOptionalAction, default=None,
                            help=help_text)
    return parser


def apply_args(config: CheckerConfig, args: argparse.Namespace):
    """Apply command-line overrides to config."""
    overrides = {
        'lang': args.lang,
        'suggest': SuggestMode(args.suggest) if args.suggest else None,
        'max_word_len': args.max_word_len,
        'min_naked_hex': args.min_naked_hex,
        'patterns': args.patterns,
        'color': args.color,
        'diff_context': args.diff_context,
        'dict_paths': args.dict_paths.split(os.pathsep) if args.dict_paths else None,
        'show': args.show,
        'check_strings': args.check_strings,
        'check_docstrings': args.check_docstrings,
        'check_embedded': args.check_embedded,
        'ignore_idents': args.ignore_idents,
        'ignore_upper': args.ignore_upper,
        'ignore_single': args.ignore_single,
        'ignore_numbers': args.ignore_numbers,
        'read_licenses': args.read_licenses,
        'read_git_log': args.read_git_log,
        'mask_flags': args.mask_flags,
        'mask_urls': args.mask_urls,
        'check_urls': args.check_urls,
        'camel': args.camel,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)


def find_project_root(start: Path) -> Path:
    """Return the closest directory at or above start holding a project marker."""
    start = Path(start).resolve()
    if start.is_file():
        start = start.parent
    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in ROOT_MARKERS):
            return directory
    return start


def use_color(setting: str, stream) -> bool:
    if setting == 'always':
        return True
    if setting == 'never':
        return False
    return hasattr(stream, 'isatty') and stream.isatty()


def run(args: argparse.Namespace, stdout=None, dictionary=None) -> int:
    """
    Run a check.

    Args:
        args: Parsed command-line arguments
        stdout: Stream for the report
        dictionary: Dictionary to populate instead of opening one

    Returns:
        The exit status
    """
    stdout = stdout or sys.stdout
    paths = [Path(p) for p in args.paths]
    root = find_project_root(paths[0])

    config = load_config(root, use_file=args.use_config)
    apply_args(config, args)
    if args.write_config:
        save_config(config, root / CONFIG_FILE_NAME)
        return EXIT_SUCCESS

    change_filter = None
    if args.since:
        with logger.log_operation("git diff", ref=args.since):
            change_filter = git_additions_since(args.since, config.diff_context)

    with logger.log_operation("load sources"):
        loaded = [load_fragments(p, config.check_docstrings, config.check_strings)
                  for p in find_python_files(paths)]

    with logger.log_operation("build dictionary", lang=config.lang):
        dictionary = build_dictionary(
            config.lang, config.dict_paths,
            roots=[root],
            load_word_lists=not args.misspellings or args.update_dict,
            record_misspelled=bool(args.misspellings),
            dictionary=dictionary,
        )
        if config.ignore_idents:
            add_identifiers(dictionary, [source for source, _, _ in loaded], root)
        for source, comments, _ in loaded:
            add_source_words(dictionary, source, comments)
        if config.read_licenses:
            read_licenses(dictionary, root)
        if config.read_git_log:
            read_git_log(dictionary, cwd=root)

    url_checker = None
    if config.check_urls:
        url_checker = UrlChecker(config.url_timeout, dictionary.ignored_urls)

    checker = Checker(dictionary, config, change_filter, url_checker)
    with logger.log_operation("check", files=len(loaded)):
        for _, comments, strings in loaded:
            checker.check_comments(comments)
            checker.check_all(strings)
        if config.check_embedded:
            for path in find_embedded_files(paths, config.embedded_patterns):
                checker.check(load_embedded(path, config))

    reporter = Reporter(dictionary, config, stdout, color=use_color(config.color, stdout))
    reported = reporter.report(checker.misspellings)

    if args.misspellings:
        dictionary.write_misspellings(Path(args.misspellings), [root], args.update_dict)

    return EXIT_SPELLING_ERROR if reported else EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except SourceSpellError as e:
        print(f"sourcespell: {e.message}", file=sys.stderr)
        logger.debug("Run failed", code=e.code, details=e.details)
        return e.exit_status
    except Exception as e:
        logger.exception(f"Unexpected error: {type(e).__name__}: {e}")
        return EXIT_INTERNAL_ERROR
