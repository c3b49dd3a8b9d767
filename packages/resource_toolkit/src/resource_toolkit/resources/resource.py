"""Addressable, cacheable content units."""

from __future__ import annotations

import base64
import hashlib
import inspect
import mimetypes
import re
from typing import TYPE_CHECKING, Any

from resource_toolkit.resources.errors import InvalidResourceError, ResourceError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    Content = str | bytes
    Processor = Callable[["Resource", Content], Content | Awaitable[Content]]

_QUALIFIED_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_UNSET: Any = object()

RESOURCE_PROPERTIES = ("content", "etag", "headers", "encoding", "backend", "combine")


def is_qualified(path: str) -> bool:
    """Return True when the path is a self-describing URL rather than a local path."""
    return bool(_QUALIFIED_RE.match(path))


def normalize_path(path: str) -> str:
    """Normalize a resource path to its leading-slash form.

    ``normalize_path("foo//bar.js/") == "/foo/bar.js"``. Qualified paths are returned
    unchanged.
    """
    if is_qualified(path):
        return path
    normalized = re.sub(r"/+", "/", "/" + path.replace("\\", "/"))
    if len(normalized) > 1:
        normalized = normalized.rstrip("/")
    return normalized


def _digest(*parts: str | bytes) -> str:
    sha = hashlib.sha1()  # noqa: S324 - etags are cache keys, not security tokens
    for part in parts:
        sha.update(part.encode("utf-8") if isinstance(part, str) else part)
    return sha.hexdigest()


def _encode(content: Content) -> tuple[str, str]:
    if isinstance(content, bytes):
        return base64.b64encode(content).decode("ascii"), "base64"
    return content, "utf-8"


class Resource:
    """A unit of content served at a normalized path."""

    def __init__(
        self,
        path: str,
        *,
        content: Content | Callable[[], Any] | None = None,
        etag: str | None = None,
        headers: Mapping[str, str] | None = None,
        encoding: str | None = None,
        backend: str | None = None,
        combine: list[str] | None = None,
    ) -> None:
        if isinstance(content, str) and encoding == "base64":
            content = base64.b64decode(content)
        self._path = normalize_path(path)
        self._content = content
        self._headers = dict(headers or {})
        self._processors: list[Processor] = []
        self._processed: Any = _UNSET
        self.alternatives: list[dict[str, str]] = []
        self.backend = backend
        self.combine = list(combine) if combine else None
        if isinstance(content, bytes):
            self.encoding = "base64"
        else:
            self.encoding = encoding or "utf-8"
        if etag is None and isinstance(content, (str, bytes)):
            etag = _digest(content)
        self.etag = etag

    @property
    def path(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"Resource(path={self._path!r}, etag={self.etag!r})"

    def headers(self) -> dict[str, str]:
        """Return response headers: a guessed Content-Type merged with custom headers."""
        base: dict[str, str] = {}
        mime_type, _ = mimetypes.guess_type(self._path)
        if mime_type:
            base["Content-Type"] = mime_type
        return {**base, **self._headers}

    def add_processor(self, processor: Processor) -> None:
        """Register a content processor; processors run in registration order."""
        if processor in self._processors:
            return
        self._processors.append(processor)
        self._processed = _UNSET

    def add_alternative(self, props: Mapping[str, Any]) -> None:
        """Register an alternative representation keyed by mime type."""
        mime_type = props.get("mimeType") or props.get("mime_type")
        if not mime_type:
            msg = f"Alternative for {self._path} must have a mime type"
            raise InvalidResourceError(msg)
        alternative = {"mimeType": mime_type}
        content = props.get("content")
        if isinstance(content, str) and props.get("encoding") == "base64":
            content = base64.b64decode(content)
        if content is not None:
            alternative["content"], alternative["encoding"] = _encode(content)
        self.alternatives.append(alternative)

    async def _raw_content(self) -> Content:
        content = self._content
        if callable(content):
            content = content()
            if inspect.isawaitable(content):
                content = await content
        if content is None:
            if self.backend:
                msg = f"Resource {self._path} is proxied to {self.backend} and has no content"
            else:
                msg = f"Resource {self._path} has no content (cached placeholder)"
            raise ResourceError(msg)
        return content

    async def content(self) -> Content:
        """Return the processed content; processor output is memoized."""
        if self._processed is not _UNSET:
            return self._processed
        content = await self._raw_content()
        if not self._processors:
            return content
        for processor in self._processors:
            result = processor(self, content)
            content = await result if inspect.isawaitable(result) else result
        self._processed = content
        return content

    async def process(self) -> Resource:
        """Run all processors against the current content."""
        self._processed = _UNSET
        await self.content()
        return self

    async def serialize(self, *, include_content: bool = True) -> dict[str, Any]:
        """Serialize to a wire dict, optionally omitting content."""
        data: dict[str, Any] = {
            "path": self._path,
            "etag": self.etag,
            "encoding": self.encoding,
            "headers": self.headers(),
        }
        if self.backend:
            data["backend"] = self.backend
        elif include_content and self._content is not None:
            data["content"], data["encoding"] = _encode(await self.content())
        if self.alternatives:
            data["alternatives"] = [dict(alt) for alt in self.alternatives]
        return data


def is_resource(value: object) -> bool:
    return isinstance(value, Resource)


def validate(props: Mapping[str, Any]) -> InvalidResourceError | None:
    """Check that plain resource properties carry something to serve."""
    if any(props.get(key) is not None for key in ("content", "backend", "etag")):
        return None
    msg = f"No content: Resource {props.get('path')} has no content, backend or etag"
    return InvalidResourceError(msg)


def create(path: str, props: Mapping[str, Any] | None = None) -> Resource:
    """Create a resource from a property mapping.

    Raises:
        InvalidResourceError: If the properties are not servable.
    """
    props = dict(props or {})
    props.setdefault("path", path)
    if props.get("combine") is None and not is_qualified(path):
        err = validate(props)
        if err is not None:
            raise err
    kwargs = {key: props[key] for key in RESOURCE_PROPERTIES if props.get(key) is not None}
    return Resource(path, **kwargs)
