"""Include/exclude filters for file paths and class names.

Pattern syntax:
- "+Glob" includes, "-Glob" excludes; no sign means include
- Glob wildcards: "*" (any run of characters), "?" (one character)
- Matching is case-insensitive and covers the whole name

An element is included if it matches at least one include pattern (or no
include pattern is configured) and matches no exclude pattern.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable

from reportgen.core.errors import ConfigError

__all__ = ["DefaultFilter"]


class DefaultFilter:
    """Glob-based Filter implementation."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._includes: list[str] = []
        self._excludes: list[str] = []
        for pattern in patterns:
            stripped = pattern.strip()
            if stripped.startswith("-"):
                target = self._excludes
                stripped = stripped[1:]
            else:
                target = self._includes
                stripped = stripped.removeprefix("+")
            if not stripped:
                raise ConfigError.invalid_value("filter", pattern, "empty filter pattern")
            target.append(stripped.lower())

    def is_included(self, name: str) -> bool:
        lowered = name.lower()
        if self._includes and not any(fnmatch.fnmatchcase(lowered, p) for p in self._includes):
            return False
        return not any(fnmatch.fnmatchcase(lowered, p) for p in self._excludes)

    def __repr__(self) -> str:
        return f"DefaultFilter(includes={self._includes!r}, excludes={self._excludes!r})"
