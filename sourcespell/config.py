"""
sourcespell Configuration Module
================================
Centralized configuration for the checker.

Configuration can be set via:
1. Config file (.sourcespell.json at the project root)
2. Environment variables (SOURCESPELL_CHECK_STRINGS=true)
3. Command-line flags (applied by the cli module)

Later sources override earlier ones. All settings have defaults that
check comments and docstrings only.
"""

import os
import json
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict

from .config_logging import ConfigurationError, get_logger

__version__ = "1.0.0"

CONFIG_FILE_NAME = ".sourcespell.json"

# Directories searched for Hunspell/Myspell dictionaries, in order.
DEFAULT_DICT_PATHS = [
    "/usr/share/hunspell",
    "/usr/local/share/hunspell",
    "/usr/share/myspell",
    "/usr/share/myspell/dicts",
    "/Library/Spelling",
    "~/Library/Spelling",
]

logger = get_logger(__name__)


class SuggestMode(Enum):
    """When to offer spelling suggestions."""
    NEVER = "never"
    ONCE = "once"      # First instance of a word in the run
    EACH = "each"      # First instance of a word in each chunk
    ALWAYS = "always"  # Every instance

    @classmethod
    def parse(cls, value: str) -> 'SuggestMode':
        try:
            return cls(value.lower())
        except ValueError:
            raise ConfigurationError(
                f'invalid suggest value {value!r}: valid options are '
                f'"never", "once", "each" and "always"',
                option='suggest',
            )


@dataclass
class IntRange:
    """An int interval."""
    low: int = 14
    high: int = 20


@dataclass
class EntropyFilterConfig:
    """Entropy filter configuration (experimental)."""
    filter: bool = False
    # Shortest text length considered by the filter.
    min_len_filtered: int = 16
    # Range of effective alphabet sizes acceptable as text that may
    # contain words needing spell checking.
    accept: IntRange = field(default_factory=IntRange)


@dataclass
class CheckerConfig:
    """Master checker configuration."""
    # Dictionary options
    ignore_idents: bool = True
    lang: str = "en_US"
    dict_paths: List[str] = field(default_factory=lambda: list(DEFAULT_DICT_PATHS))

    # Checker options
    show: bool = True
    check_strings: bool = False
    check_docstrings: bool = True
    check_embedded: bool = False
    embedded_patterns: List[str] = field(default_factory=lambda: ["*.txt", "*.md", "*.rst"])
    max_embedded_line_len: int = 1024
    ignore_upper: bool = True
    ignore_single: bool = True
    ignore_numbers: bool = True
    read_licenses: bool = True
    read_git_log: bool = True
    mask_flags: bool = False
    mask_urls: bool = True
    check_urls: bool = False
    url_timeout: Optional[float] = None
    camel: bool = True
    max_word_len: int = 40
    min_naked_hex: int = 8
    patterns: List[str] = field(default_factory=list)
    suggest: SuggestMode = SuggestMode.NEVER
    diff_context: int = 0
    color: str = "auto"  # auto, always, never

    entropy_filter: EntropyFilterConfig = field(default_factory=EntropyFilterConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data = asdict(self)
        data['suggest'] = self.suggest.value
        return data


def load_config(root: Optional[Path] = None, use_file: bool = True) -> CheckerConfig:
    """
    Load configuration from file and environment.

    Args:
        root: Project root holding the config file (default: current directory)
        use_file: Whether to read the config file at all

    Returns:
        The populated CheckerConfig

    Raises:
        ConfigurationError: If the file or an environment value is invalid
    """
    config = CheckerConfig()

    if use_file:
        path = Path(root or '.') / CONFIG_FILE_NAME
        if path.exists():
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
            except (json.JSONDecodeError, OSError) as e:
                raise ConfigurationError(f"could not load config file {path}: {e}", option='config')
            if not isinstance(file_config, dict):
                raise ConfigurationError(f"config file {path} must hold a JSON object", option='config')
            _apply_dict_to_config(config, file_config)
            logger.debug("Loaded config file", path=str(path))

    _apply_env_to_config(config)

    return config


def _apply_dict_to_config(config: CheckerConfig, data: Dict[str, Any]):
    """Apply dictionary values to config object."""
    for key, value in data.items():
        if key == 'entropy_filter' and isinstance(value, dict):
            section = config.entropy_filter
            for sub_key, sub_value in value.items():
                if sub_key == 'accept' and isinstance(sub_value, dict):
                    for bound, number in sub_value.items():
                        if hasattr(section.accept, bound):
                            setattr(section.accept, bound, int(number))
                elif hasattr(section, sub_key):
                    setattr(section, sub_key, sub_value)
                else:
                    logger.warning("Ignoring unknown config key", key=f"entropy_filter.{sub_key}")
        elif key == 'suggest':
            config.suggest = SuggestMode.parse(str(value))
        elif hasattr(config, key):
            setattr(config, key, value)
        else:
            logger.warning("Ignoring unknown config key", key=key)


def _apply_env_to_config(config: CheckerConfig):
    """Apply environment variables to config."""
    env_mappings = {
        'SOURCESPELL_LANG': ('lang', str),
        'SOURCESPELL_DICT_PATHS': ('dict_paths', _parse_path_list),
        'SOURCESPELL_IGNORE_IDENTS': ('ignore_idents', _parse_bool),
        'SOURCESPELL_SHOW': ('show', _parse_bool),
        'SOURCESPELL_CHECK_STRINGS': ('check_strings', _parse_bool),
        'SOURCESPELL_CHECK_DOCSTRINGS': ('check_docstrings', _parse_bool),
        'SOURCESPELL_CHECK_EMBEDDED': ('check_embedded', _parse_bool),
        'SOURCESPELL_READ_LICENSES': ('read_licenses', _parse_bool),
        'SOURCESPELL_READ_GIT_LOG': ('read_git_log', _parse_bool),
        'SOURCESPELL_CHECK_URLS': ('check_urls', _parse_bool),
        'SOURCESPELL_CAMEL': ('camel', _parse_bool),
        'SOURCESPELL_MAX_WORD_LEN': ('max_word_len', int),
        'SOURCESPELL_MIN_NAKED_HEX': ('min_naked_hex', int),
        'SOURCESPELL_SUGGEST': ('suggest', SuggestMode.parse),
        'SOURCESPELL_COLOR': ('color', str),
    }

    for env_var, (key, converter) in env_mappings.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                setattr(config, key, converter(value))
            except ValueError as e:
                raise ConfigurationError(f"invalid environment value {env_var}={value}: {e}", option=key)


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ('true', '1', 'yes', 'on')


def _parse_path_list(value: str) -> List[str]:
    return [p for p in value.split(os.pathsep) if p]


def save_config(config: CheckerConfig, path: Optional[Path] = None):
    """Save configuration to file."""
    path = Path(path or CONFIG_FILE_NAME)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)
        f.write('\n')
