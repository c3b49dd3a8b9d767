"""Shared utilities for the resource toolkit."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

T = TypeVar("T")


def dedupe(values: Iterable[str]) -> list[str]:
    """Return unique values in original order."""
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        unique.append(value)
    return unique


def partition(size: int, items: Sequence[T]) -> list[list[T]]:
    """Split items into consecutive groups of at most ``size`` elements.

    Args:
        size: Maximum group size, must be positive.
        items: Items to split. Order is preserved across groups.

    Returns:
        List of groups; empty when there are no items.
    """
    if size <= 0:
        msg = "Group size must be > 0"
        raise ValueError(msg)
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a regex with ``pathlib`` semantics.

    ``*`` and ``?`` stay within one path segment; ``**/`` matches zero or more
    directories.
    """
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:[^/]*/)*")
            index += 3
            continue
        if pattern.startswith("**", index):
            parts.append(".*")
            index += 2
            continue
        char = pattern[index]
        index += 1
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[" and "]" in pattern[index + 1 :]:
            end = pattern.index("]", index + 1)
            body = pattern[index:end].replace("\\", "\\\\")
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append(f"[{body}]")
            index = end + 1
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts) + r"\Z")


def match_glob(paths: Iterable[str], pattern: str) -> list[str]:
    """Return the paths matching a glob pattern, in input order.

    Matching follows ``pathlib.Path.glob``, so a pattern that selects a file on
    disk also selects the member added for it. Patterns without a slash match
    against the path basename as well.
    """
    regex = _glob_regex(pattern)
    matches: list[str] = []
    for path in paths:
        if regex.match(path):
            matches.append(path)
        elif "/" not in pattern and regex.match(path.rsplit("/", 1)[-1]):
            matches.append(path)
    return matches


def is_exclusion(pattern: str) -> bool:
    """Return True for ``!``-prefixed exclusion patterns."""
    return pattern.startswith("!")
