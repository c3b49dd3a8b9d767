"""Build resources whose content concatenates other members of a set."""

from __future__ import annotations

import asyncio
import hashlib
from typing import TYPE_CHECKING, Any

from resource_toolkit.resources.errors import CombineError, InvalidResourceError
from resource_toolkit.resources.resource import RESOURCE_PROPERTIES, Resource, normalize_path

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from resource_toolkit.resources.resource_set import ResourceSet


def _join(parts: Sequence[str | bytes], separator: str) -> str | bytes:
    if any(isinstance(part, bytes) for part in parts):
        encoded = [part.encode("utf-8") if isinstance(part, str) else part for part in parts]
        return separator.encode("utf-8").join(encoded)
    return separator.join(parts)  # type: ignore[arg-type]


class CombinedResource(Resource):
    """Resource whose content and etag follow the current members of a set.

    Members are looked up by path on every access, so a member replaced in the
    set after the combination is reflected.
    """

    def __init__(self, resource_set: ResourceSet, path: str, **kwargs: Any) -> None:
        self._resource_set = resource_set
        self._fixed_etag: str | None = None
        super().__init__(path, content=self._combined_content, **kwargs)

    @property
    def etag(self) -> str | None:
        if self._fixed_etag is not None:
            return self._fixed_etag
        members = (self._resource_set.get(path) for path in self.combine or [])
        joined = "".join(str(member.etag if member else None) for member in members)
        return hashlib.sha1(joined.encode("utf-8")).hexdigest()  # noqa: S324

    @etag.setter
    def etag(self, value: str | None) -> None:
        self._fixed_etag = value

    def _members(self) -> list[Resource]:
        members = []
        for path in self.combine or []:
            member = self._resource_set.get(path)
            if member is None:
                msg = f"Cannot build combined resource {self.path}: {path} is not a resource"
                raise CombineError(msg, [path])
            members.append(member)
        return members

    async def _combined_content(self) -> str | bytes:
        members = self._members()
        contents = await asyncio.gather(*(member.content() for member in members))
        return _join(contents, self._resource_set.settings.combine_separator)


async def prepare_resource(
    resource_set: ResourceSet, sources: Sequence[str], options: Mapping[str, Any] | None = None
) -> CombinedResource:
    """Create a combined resource from member paths of ``resource_set``.

    Content is produced lazily, so processors registered on members after the
    combination are still reflected.

    Raises:
        InvalidResourceError: If no path is given for the combined resource.
        CombineError: If any member path is not part of the set.
    """
    options = dict(options or {})
    path = options.get("path")
    if not path:
        msg = "Combined resource must have a path"
        raise InvalidResourceError(msg)

    paths = [normalize_path(source) for source in sources]
    missing = [source for source, member in zip(sources, paths) if resource_set.get(member) is None]
    if missing:
        msg = f"Cannot build combined resource {path}: " + ", ".join(
            f"{source} is not a resource" for source in missing
        )
        raise CombineError(msg, missing)

    kwargs = {
        key: options[key]
        for key in RESOURCE_PROPERTIES
        if key not in {"content", "combine", "encoding"} and options.get(key) is not None
    }
    return CombinedResource(resource_set, path, combine=list(paths), **kwargs)
