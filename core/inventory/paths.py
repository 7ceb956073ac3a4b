"""
Path canonicalization.

Canonical paths are absolute and lexically cleaned. Symlinks are not
resolved and the path does not need to exist.
"""

import os
from typing import Optional, Protocol

from ..errors import PathRequiredError


class PathCanonicalizer(Protocol):
    def canonicalize(self, path: str) -> str:
        ...


def normalize_selector(selector: Optional[str]) -> str:
    """Trim surrounding whitespace from a selector"""
    return (selector or "").strip()


def canonicalize(
    path: Optional[str],
    cwd: Optional[str] = None,
    error: type = PathRequiredError
) -> str:
    """
    Turn a path string into an absolute, cleaned path.

    Args:
        path: Raw path, relative or absolute
        cwd: Directory relative paths are resolved against (process cwd by default)
        error: InputRequiredError subclass raised for empty input

    Returns:
        Absolute path with `.` and `..` segments removed lexically
    """
    cleaned = normalize_selector(path)
    if not cleaned:
        raise error()

    if not os.path.isabs(cleaned):
        cleaned = os.path.join(cwd or os.getcwd(), cleaned)
    return os.path.normpath(cleaned)


class AbsPathCanonicalizer:
    """Canonicalizer against a fixed or the current working directory"""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    def canonicalize(self, path: str) -> str:
        return canonicalize(path, cwd=self.cwd)


__all__ = [
    "PathCanonicalizer",
    "AbsPathCanonicalizer",
    "canonicalize",
    "normalize_selector",
]
