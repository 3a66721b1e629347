"""
Known Words
===========
Commonly encountered words that may not be in user dictionaries.
"""

import builtins
import keyword

__version__ = "1.0.0"

COMMON_WORDS = [
    "python", "pythonic", "cpython", "pypy", "pypi",

    # Dunder and special names (underscores are stripped before lookup)
    "init", "repr", "str", "eq", "ne", "lt", "le", "gt", "ge", "hash",
    "len", "iter", "getattr", "setattr", "delattr", "getitem", "setitem",
    "delitem", "enter", "exit", "aenter", "aexit", "dict", "slots",
    "qualname", "annotations", "kwargs", "args", "kwarg", "arg",

    # Standard types and modules
    "bool", "int", "float", "complex", "bytes", "bytearray", "frozenset",
    "tuple", "namedtuple", "dataclass", "dataclasses", "enum", "typing",
    "asyncio", "itertools", "functools", "os", "sys", "subprocess",
    "stdin", "stdout", "stderr", "utf", "ascii", "unicode",

    # Commonly used words
    "async", "await", "boolean", "booleans", "codec", "codecs", "config",
    "configs", "dedent", "deserialize", "endian", "env", "hostname", "http",
    "https", "iterable", "iterables", "iterator", "iterators", "json",
    "localhost", "lookup", "lookups", "metadata", "mutex", "NaN", "NaNs",
    "namespace", "namespaces", "param", "params", "pytest", "regex",
    "regexes", "regexp", "rpc", "runtime", "serializer", "subclass",
    "subclasses", "symlink", "symlinks", "stdlib", "tokenize", "tokenizer",
    "toolchain", "toolchains", "toml", "tuples", "unicode", "url", "urls",
    "uuid", "virtualenv", "venv", "yaml",

    # Tool directives
    "noqa", "mypy", "pylint", "isort", "pragma", "nocover", "fmt", "ruff",

    # Platforms
    "aarch64", "amd64", "arm64", "darwin", "freebsd", "linux", "macos",
    "netbsd", "openbsd", "posix", "wasm", "win32", "windows", "x86",

    # Common hosters
    "bitbucket", "github", "gitlab", "sourcehut", "sr", "ht",
]


def known_words():
    """Return the built-in word list, including keywords and builtins."""
    words = list(COMMON_WORDS)
    words.extend(keyword.kwlist)
    words.extend(name for name in dir(builtins) if not name.startswith('_'))
    return words
