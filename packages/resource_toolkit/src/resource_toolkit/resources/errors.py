"""Resource set errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ResourceError(Exception):
    """Base class for resource set failures."""


class InvalidResourceError(ResourceError):
    """Raised for a malformed resource specification."""


class UnmatchedPatternError(ResourceError):
    """Raised when path patterns match no files or resources."""

    def __init__(self, message: str, patterns: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.patterns = list(patterns)


class ResourceResolutionError(ResourceError):
    """Raised when resolving files or globs fails."""


class CombineError(ResourceError):
    """Raised when a combined resource cannot be built."""

    def __init__(self, message: str, missing: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)
