"""Resolve path patterns against a resource set's root directory."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from resource_toolkit.resources.errors import ResourceResolutionError, UnmatchedPatternError
from resource_toolkit.resources.resource import Resource, create, is_qualified, normalize_path
from resource_toolkit.utils import dedupe, is_exclusion, match_glob

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from resource_toolkit.resources.resource_set import ResourceSet

logger = logging.getLogger(__name__)


def _glob_files(root: Path, pattern: str) -> list[str]:
    relative = pattern.lstrip("/")
    if not relative:
        return []
    try:
        candidates = sorted(root.glob(relative))
    except (ValueError, NotImplementedError) as exc:
        msg = f"Invalid pattern '{pattern}': {exc}"
        raise ResourceResolutionError(msg) from exc
    paths: list[str] = []
    for candidate in candidates:
        if not candidate.is_file():
            continue
        try:
            relative_path = candidate.resolve().relative_to(root.resolve())
        except ValueError:
            logger.debug("Skipping %s outside of %s", candidate, root)
            continue
        paths.append(normalize_path(relative_path.as_posix()))
    return paths


async def resolve_paths(
    resource_set: ResourceSet, patterns: Iterable[str], *, strict: bool = False
) -> list[str]:
    """Expand path specifiers to concrete resource paths.

    Member paths and qualified URLs pass through untouched; other patterns are
    globbed against ``resource_set.root_path``. ``!``-prefixed patterns remove
    earlier matches.

    Args:
        resource_set: Set whose root directory and members are consulted.
        patterns: Globs, member paths or qualified URLs.
        strict: Raise when a non-exclusion pattern matches nothing.

    Returns:
        De-duplicated paths in pattern order.

    Raises:
        UnmatchedPatternError: In strict mode, naming every unmatched pattern.
        ResourceResolutionError: If a pattern cannot be globbed.
    """
    patterns = list(patterns)
    root = Path(resource_set.root_path)
    matches: list[str] = []
    unmatched: list[str] = []
    for pattern in patterns:
        if is_exclusion(pattern):
            excluded = set(match_glob(matches, normalize_path(pattern[1:])))
            matches = [path for path in matches if path not in excluded]
            continue
        if is_qualified(pattern) or resource_set.get(pattern) is not None:
            matches.append(normalize_path(pattern))
            continue
        found = await asyncio.to_thread(_glob_files, root, pattern)
        if not found:
            unmatched.append(pattern)
        matches.extend(found)

    if strict and unmatched:
        msg = "'" + "', '".join(unmatched) + "' matched no files"
        raise UnmatchedPatternError(msg, unmatched)
    resolved = dedupe(matches)
    logger.debug("Resolved %d pattern(s) to %d path(s)", len(patterns), len(resolved))
    return resolved


def _read_file(file_path: Path) -> tuple[str | bytes, float, int]:
    stat = file_path.stat()
    raw = file_path.read_bytes()
    try:
        content: str | bytes = raw.decode("utf-8")
    except UnicodeDecodeError:
        content = raw
    return content, stat.st_mtime, stat.st_size


async def prepare_resource(
    root_path: str, file_path: str, props: Mapping[str, Any] | None = None
) -> Resource:
    """Read a file below ``root_path`` into a resource.

    The resource path defaults to the normalized file path; ``props`` may override
    it along with headers, etag and encoding.
    """
    props = dict(props or {})
    props.pop("file", None)
    full_path = Path(root_path) / file_path.lstrip("/")
    try:
        content, mtime, size = await asyncio.to_thread(_read_file, full_path)
    except OSError as exc:
        msg = f"Failed reading {full_path}: {exc.strerror or exc}"
        raise ResourceResolutionError(msg) from exc

    path = props.pop("path", None) or normalize_path(file_path)
    props["content"] = content
    props.setdefault("etag", hashlib.sha1(f"{path}:{mtime}:{size}".encode()).hexdigest())  # noqa: S324
    logger.debug("Read %s (%d bytes) as %s", full_path, size, path)
    return create(path, props)
