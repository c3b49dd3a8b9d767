"""Ordered delivery list of resource paths."""

from __future__ import annotations

from typing import TYPE_CHECKING

from resource_toolkit.resources.errors import UnmatchedPatternError
from resource_toolkit.resources.resource import normalize_path
from resource_toolkit.utils import dedupe

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from resource_toolkit.resources.resource_set import ResourceSet


class LoadPath:
    """De-duplicated, ordered list of member paths of a resource set."""

    def __init__(self, resource_set: ResourceSet) -> None:
        self._resource_set = resource_set
        self._paths: list[str] = []

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_path(path) in self._paths

    def _expand(self, paths: Iterable[str] | str) -> list[str]:
        specifiers = [paths] if isinstance(paths, str) else list(paths)
        expanded: list[str] = []
        unmatched: list[str] = []
        for specifier in specifiers:
            matches = self._resource_set.match_paths([specifier])
            if not matches:
                unmatched.append(specifier)
            expanded.extend(normalize_path(match) for match in matches)
        if unmatched:
            msg = "'" + "', '".join(unmatched) + "' is not a resource in the load path's set"
            raise UnmatchedPatternError(msg, unmatched)
        return dedupe(expanded)

    def append(self, paths: Iterable[str] | str) -> None:
        """Append member paths (globs allowed) not already on the load path."""
        for path in self._expand(paths):
            if path not in self._paths:
                self._paths.append(path)

    def prepend(self, paths: Iterable[str] | str) -> None:
        """Prepend member paths (globs allowed), keeping their given order."""
        new_paths = [path for path in self._expand(paths) if path not in self._paths]
        self._paths[:0] = new_paths

    def remove(self, path: str) -> bool:
        """Remove a path; returns False when it was not on the load path."""
        normalized = normalize_path(path)
        if normalized not in self._paths:
            return False
        self._paths.remove(normalized)
        return True

    def clear(self) -> None:
        self._paths.clear()

    def paths(self) -> list[str]:
        """Return a copy of the ordered paths."""
        return list(self._paths)
