"""
URL Handling
============
Masks URLs before tokenizing and optionally checks that they are reachable.

Features:
- URL detection for scheme://host/path and mailto: forms
- Length-preserving masking so that word offsets are unchanged
- HEAD request reachability checks with per-run caching
"""

import re
from typing import Dict, Iterable, Iterator, Optional

import requests

from .config_logging import get_logger

__version__ = "1.0.0"

USER_AGENT = 'sourcespell/1.0 URLCheck'

URL_PATTERN = re.compile(
    r'(?:\b[a-zA-Z][a-zA-Z0-9+.-]*://|\bmailto:)'
    r'[^\s<>"\'`]*[^\s<>"\'`.,;:!?)\]}]'
)

FLAG_PATTERN = re.compile(r'(?<![\w-])--?[a-zA-Z][\w-]*')

logger = get_logger(__name__)


def find_urls(text: str) -> Iterator[re.Match]:
    """Yield URL matches in text."""
    return URL_PATTERN.finditer(text)


def mask_urls(text: str) -> str:
    """Replace URLs in text with spaces of the same length."""
    return URL_PATTERN.sub(lambda m: ' ' * len(m.group()), text)


def mask_flags(text: str) -> str:
    """Replace command-line flags such as --verbose with spaces."""
    return FLAG_PATTERN.sub(lambda m: ' ' * len(m.group()), text)


class UrlChecker:
    """
    Checks URL reachability with HTTP HEAD requests.

    Each URL is requested at most once per run and never retried. URLs in
    the ignored set are not requested.
    """

    def __init__(self, timeout: Optional[float] = None, ignored: Iterable[str] = ()):
        self.timeout = timeout
        self.ignored = set(ignored)
        self._cache: Dict[str, Optional[str]] = {}

    def check(self, url: str) -> Optional[str]:
        """
        Check a URL.

        Returns:
            None if the URL is reachable or ignored, otherwise the reason
        """
        if url in self.ignored or not url.lower().startswith(('http://', 'https://')):
            return None
        if url in self._cache:
            return self._cache[url]

        reason = None
        try:
            response = requests.head(
                url,
                allow_redirects=True,
                timeout=self.timeout,
                headers={'User-Agent': USER_AGENT}
            )
            if not 200 <= response.status_code < 400:
                reason = f"{response.status_code} {response.reason or ''}".strip()
        except requests.RequestException as e:
            reason = str(e)

        if reason is not None:
            logger.info("URL unreachable", url=url, reason=reason)
        self._cache[url] = reason
        return reason
