"""Resource set: asynchronous aggregation of resources for delivery.

Add-operations are scheduled on the running event loop as soon as they are
called and tracked as outstanding work, so callers may issue many of them
without awaiting each other. Operations that need a complete collection
(serialization, combination) first wait for that work to converge.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from resource_toolkit.config import Settings, load_settings
from resource_toolkit.resources import combiner, file_resolver
from resource_toolkit.resources import resource as bresource
from resource_toolkit.resources.errors import (
    InvalidResourceError,
    ResourceError,
    ResourceResolutionError,
    UnmatchedPatternError,
)
from resource_toolkit.resources.load_path import LoadPath
from resource_toolkit.resources.models import CacheManifest, ResourceSetPayload, SerializedResource
from resource_toolkit.resources.pending import PendingWork, converge
from resource_toolkit.utils import is_exclusion, match_glob, partition

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from resource_toolkit.resources.resource import Processor, Resource

logger = logging.getLogger(__name__)

CONTENT_SOURCES = ("backend", "file", "combine", "content")

ResourceSpec = Any


def _resolved(value: Any) -> asyncio.Future[Any]:
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


def _rejected(error: BaseException) -> asyncio.Future[Any]:
    future = asyncio.get_running_loop().create_future()
    future.set_exception(error)
    return future


def validate(resource: ResourceSpec) -> InvalidResourceError | None:
    """Validate a resource specification.

    Returns:
        An ``InvalidResourceError`` describing the problem, or ``None`` when valid.
    """
    if bresource.is_resource(resource):
        return None
    if not resource or not isinstance(resource, Mapping):
        return InvalidResourceError(
            "Resource must be a string, a resource object or an object of resource properties"
        )
    if sum(1 for key in CONTENT_SOURCES if resource.get(key)) > 1:
        return InvalidResourceError("Resource can only have one of content, file, backend, combine")
    path = resource.get("path")
    if not path:
        return InvalidResourceError(
            f"Resource must have path {json.dumps(dict(resource), default=str)}"
        )
    if not resource.get("combine") and not resource.get("file") and not bresource.is_qualified(path):
        return bresource.validate(resource)
    return None


async def _serialize_resource(resource: Resource, cache: Mapping[str, Sequence[Any]]) -> dict:
    include_content = not resource.combine and resource.etag not in cache.get(resource.path, [])
    serialized = await resource.serialize(include_content=include_content)
    if resource.combine:
        serialized.pop("content", None)
        serialized["combine"] = list(resource.combine)
    return serialized


class ResourceSet:
    """Ordered, path-addressed collection of resources rooted at a directory."""

    def __init__(self, root_path: str | None = None, *, settings: Settings | None = None) -> None:
        self._settings = settings or load_settings()
        self._root_path = root_path or self._settings.root_path or os.getcwd()
        self._resources: list[Resource] = []
        self._index: dict[str, int] = {}
        self._processors: list[Processor] = []
        self._pending = PendingWork()
        self.load_path = LoadPath(self)

    @property
    def root_path(self) -> str:
        return self._root_path

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def pending(self) -> PendingWork:
        return self._pending

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources))

    def __getitem__(self, index: int) -> Resource:
        return self._resources[index]

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def __repr__(self) -> str:
        return f"ResourceSet(root_path={self._root_path!r}, resources={len(self)})"

    def paths(self) -> list[str]:
        """Return member paths in collection order."""
        return [resource.path for resource in self._resources]

    def filter(self, predicate: Callable[[Resource], bool]) -> list[Resource]:
        return [resource for resource in self._resources if predicate(resource)]

    # ------------------------------------------------------------------
    # Identity and collection management
    # ------------------------------------------------------------------

    def add(self, resource: Resource | Mapping[str, Any]) -> Resource:
        """Insert or overwrite a resource synchronously.

        Overwriting keeps the original position in the collection. Registered
        processors are attached to the stored resource.
        """
        if not bresource.is_resource(resource):
            resource = bresource.create(resource["path"], resource)
        index = self._index.get(resource.path)
        if index is None:
            self._index[resource.path] = len(self._resources)
            self._resources.append(resource)
            logger.debug("Added %s at index %d", resource.path, len(self._resources) - 1)
        else:
            self._resources[index] = resource
            logger.debug("Replaced %s at index %d", resource.path, index)
        for processor in self._processors:
            resource.add_processor(processor)
        return resource

    def get(self, path: str) -> Resource | None:
        """Return the resource at ``path`` (normalized), or ``None``."""
        index = self._index.get(bresource.normalize_path(path))
        return None if index is None else self._resources[index]

    def remove(self, path: str) -> bool:
        """Remove the resource at ``path`` and evict it from the load path.

        Returns:
            True when a resource was removed, False if none existed at the path.
        """
        normalized = bresource.normalize_path(path)
        index = self._index.pop(normalized, None)
        if index is None:
            return False
        del self._resources[index]
        for position in range(index, len(self._resources)):
            self._index[self._resources[position].path] = position
        self.load_path.remove(normalized)
        logger.debug("Removed %s from index %d", normalized, index)
        return True

    def _restore_order(self, paths: Sequence[str]) -> None:
        positions = {bresource.normalize_path(path): index for index, path in enumerate(paths)}
        self._resources.sort(key=lambda resource: positions.get(resource.path, len(positions)))
        self._index = {resource.path: index for index, resource in enumerate(self._resources)}

    # ------------------------------------------------------------------
    # Asynchronous additions
    # ------------------------------------------------------------------

    def add_resources(self, resources: Iterable[ResourceSpec]) -> asyncio.Future[list[Any]]:
        """Add strings, resource objects and property mappings together.

        Plain strings are batched into a single glob addition; qualified strings
        and objects are added individually. The returned future fails if any
        addition fails.
        """
        globs: list[str] = []
        others: list[ResourceSpec] = []
        for item in resources:
            if isinstance(item, str) and not bresource.is_qualified(item):
                globs.append(item)
            else:
                others.append(item)

        futures: list[asyncio.Future[Any]] = []
        if globs:
            futures.append(self.add_glob_resources(globs))
        futures.extend(self.add_resource(item) for item in others)
        return asyncio.gather(*futures)

    def add_resource(self, resource: ResourceSpec) -> asyncio.Future[Any]:
        """Add a single resource.

        ``resource`` may be a ``Resource``, a string, or a mapping of properties
        accepted by ``resource.create``, plus:

        - ``path``: path of the resource
        - ``file``: file (relative to the root path) to read the content from
        - ``combine``: member paths whose content is concatenated

        Non-qualified strings are treated as glob patterns. The returned future
        fails with ``InvalidResourceError`` for invalid specifications.
        """
        if isinstance(resource, str):
            if bresource.is_qualified(resource):
                return self.add_resource({"path": resource})
            return self.add_glob_resources([resource])
        err = validate(resource)
        if err is not None:
            return _rejected(err)
        if bresource.is_resource(resource):
            return _resolved(self.add(resource))
        if resource.get("file"):
            return self.add_file_resource(resource["file"], resource)
        if resource.get("combine"):
            return self.add_combined_resource(resource["combine"], resource)
        try:
            return _resolved(self.add(resource))
        except ResourceError as exc:
            return _rejected(exc)

    def add_glob_resources(self, patterns: Sequence[str]) -> asyncio.Task[list[Resource]]:
        """Add every file matching the glob patterns, relative to the root path."""
        patterns = list(patterns)
        return self._pending.spawn(self._add_glob_resources(patterns), label="glob")

    async def _add_glob_resources(self, patterns: list[str]) -> list[Resource]:
        try:
            paths = await file_resolver.resolve_paths(self, patterns, strict=False)
        except ResourceError as exc:
            msg = f"Failed adding {', '.join(patterns)}: {exc}"
            raise ResourceResolutionError(msg) from exc
        if not paths:
            msg = "'" + ", ".join(patterns) + "' matched no files"
            raise UnmatchedPatternError(msg, [p for p in patterns if not is_exclusion(p)])
        return await self.add_file_resources(paths)

    def add_file_resources(
        self, paths: Iterable[str] | None, props: Mapping[str, Any] | None = None
    ) -> asyncio.Future[list[Resource]]:
        """Add each path as a file resource."""
        return asyncio.gather(*(self.add_file_resource(path, props) for path in paths or []))

    def add_file_resource(
        self, path: str, props: Mapping[str, Any] | None = None
    ) -> asyncio.Task[Resource]:
        """Add a file from disk; ``props`` may set path, headers, etag and so on."""
        return self._pending.spawn(self._add_file_resource(path, dict(props or {})), label="file")

    async def _add_file_resource(self, path: str, props: dict[str, Any]) -> Resource:
        resource = await file_resolver.prepare_resource(self._root_path, path, props)
        return self.add(resource)

    def add_combined_resource(
        self, sources: Sequence[str], options: Mapping[str, Any] | None = None
    ) -> asyncio.Task[Resource]:
        """Add a resource combining other members' content.

        The combination is attempted once the additions already in flight have
        settled; it fails if any member is still missing then.
        """
        sources = list(sources)
        seq = self._pending.registered
        return self._pending.spawn(
            self._add_combined_resource(sources, dict(options or {}), seq),
            label="combine",
            barrier=True,
        )

    async def _add_combined_resource(
        self, sources: list[str], options: dict[str, Any], seq: int
    ) -> Resource:
        await converge(self._pending, before=seq, tolerate_failures=True)
        combined = await combiner.prepare_resource(self, sources, options)
        resource = self.add(combined)
        resource.combine = [bresource.normalize_path(source) for source in sources]
        logger.debug("Combined %d resource(s) into %s", len(sources), resource.path)
        return resource

    async def when_all_added(self) -> ResourceSet:
        """Wait until no addition is in flight, including ones spawned while waiting.

        Raises:
            Exception: The failure of any addition awaited along the way.
        """
        await converge(self._pending)
        return self

    # ------------------------------------------------------------------
    # Processing and caching
    # ------------------------------------------------------------------

    def add_processor(self, processor: Processor) -> None:
        """Attach a processor to all existing and future resources."""
        self._processors.append(processor)
        for resource in self._resources:
            resource.add_processor(processor)

    async def process(self, manifest: CacheManifest | None = None) -> CacheManifest:
        """Process resources whose etag is not already known by ``manifest``.

        Returns:
            Cache manifest of the processed set.
        """
        manifest = manifest or {}
        stale = [
            resource
            for resource in self._resources
            if resource.etag not in manifest.get(resource.path, [])
        ]
        await asyncio.gather(*(resource.process() for resource in stale))
        logger.debug("Processed %d of %d resource(s)", len(stale), len(self))
        return self.cache_manifest()

    def cache_manifest(self) -> CacheManifest:
        """Map every member path to its current etag."""
        return {resource.path: [resource.etag] for resource in self._resources}

    async def serialize(self, cached: CacheManifest | None = None) -> dict[str, Any]:
        """Serialize the fully resolved set for transmission.

        Content is omitted for resources whose etag is listed in ``cached``.
        Resources are serialized in groups; each group concurrently, the groups
        one after another.
        """
        await self.when_all_added()
        cache = cached or {}
        serialized: list[dict[str, Any]] = []
        groups = partition(self._settings.serialize_group_size, list(self._resources))
        for group in groups:
            serialized.extend(
                await asyncio.gather(*(_serialize_resource(resource, cache) for resource in group))
            )
        payload = ResourceSetPayload(
            resources=[SerializedResource.model_validate(item) for item in serialized],
            load_path=self.load_path.paths(),
        )
        logger.info(
            "Serialized %d resource(s) in %d group(s)", len(serialized), len(groups)
        )
        return payload.to_wire()

    # ------------------------------------------------------------------
    # Composition and load path
    # ------------------------------------------------------------------

    def concat(self, *others: ResourceSet) -> ResourceSet:
        """Merge this set with others into a new set rooted at this set's root."""
        merged = ResourceSet(self._root_path, settings=self._settings)
        for resource_set in (self, *others):
            for resource in resource_set:
                merged.add(resource)
            merged.load_path.append(resource_set.load_path.paths())
        return merged

    def match_paths(self, patterns: Iterable[str]) -> list[str]:
        """Expand patterns against member paths; exact member paths pass unchanged."""
        all_paths = self.paths()
        matches: list[str] = []
        for pattern in patterns:
            if self.get(pattern) is not None:
                matches.append(pattern)
            else:
                matches.extend(match_glob(all_paths, bresource.normalize_path(pattern)))
        return matches

    def _unmatched_patterns(self, patterns: Iterable[str]) -> list[str]:
        all_paths = self.paths()
        return [
            pattern
            for pattern in patterns
            if not is_exclusion(pattern)
            and not match_glob(all_paths, bresource.normalize_path(pattern))
        ]

    async def _resolve_and_add_missing(self, patterns: list[str]) -> list[str]:
        if not patterns:
            return []
        try:
            matches = await file_resolver.resolve_paths(self, patterns, strict=False)
        except ResourceError as exc:
            msg = f"Failed loading {', '.join(patterns)}: {exc}"
            raise ResourceResolutionError(msg) from exc

        missing = [path for path in matches if self.get(path) is None]
        await self.add_file_resources(missing)

        unmatched = self._unmatched_patterns(patterns)
        if unmatched:
            msg = (
                "Failed loading configuration: '"
                + "', '".join(unmatched)
                + "' matched no files or resources"
            )
            raise UnmatchedPatternError(msg, unmatched)
        return matches

    def append_load(self, paths: Iterable[str] | str) -> asyncio.Task[LoadPath]:
        """Add paths to the end of the load path, adding missing resources first."""
        patterns = [paths] if isinstance(paths, str) else list(paths)
        return self._pending.spawn(self._update_load(patterns, prepend=False), label="load")

    def prepend_load(self, paths: Iterable[str] | str) -> asyncio.Task[LoadPath]:
        """Add paths to the start of the load path, adding missing resources first."""
        patterns = [paths] if isinstance(paths, str) else list(paths)
        return self._pending.spawn(self._update_load(patterns, prepend=True), label="load")

    async def _update_load(self, patterns: list[str], *, prepend: bool) -> LoadPath:
        matches = await self._resolve_and_add_missing(patterns)
        if prepend:
            self.load_path.prepend(matches)
        else:
            self.load_path.append(matches)
        return self.load_path


async def _add_resource_with_alternatives(
    resource_set: ResourceSet, item: SerializedResource
) -> Resource:
    resource = await resource_set.add_resource(item.to_spec())
    for alternative in item.alternatives or []:
        resource.add_alternative(alternative.model_dump(by_alias=True, exclude_none=True))
    return resource


async def deserialize(
    data: Mapping[str, Any] | None,
    root_path: str | None = None,
    *,
    settings: Settings | None = None,
) -> ResourceSet:
    """Rebuild a resource set from the output of ``ResourceSet.serialize``.

    Raises:
        pydantic.ValidationError: If ``data`` is not a resource set payload.
        ResourceError: If any resource or load path entry cannot be restored.
    """
    payload = ResourceSetPayload.model_validate(data or {})
    resource_set = ResourceSet(root_path, settings=settings)
    await asyncio.gather(
        *(_add_resource_with_alternatives(resource_set, item) for item in payload.resources)
    )
    resource_set._restore_order([item.path for item in payload.resources])  # noqa: SLF001
    resource_set.load_path.append(payload.load_path)
    logger.info(
        "Deserialized %d resource(s), load path of %d",
        len(resource_set),
        len(resource_set.load_path),
    )
    return resource_set
