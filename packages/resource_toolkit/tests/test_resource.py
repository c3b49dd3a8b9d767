"""Tests for individual resources."""

import pytest
from resource_toolkit.resources import InvalidResourceError, Resource, ResourceError
from resource_toolkit.resources.resource import create, is_qualified, normalize_path, validate


def test_normalize_path_adds_leading_slash_and_collapses() -> None:
    assert normalize_path("foo.js") == "/foo.js"
    assert normalize_path("/lib//foo.js/") == "/lib/foo.js"
    assert normalize_path("lib\\foo.js") == "/lib/foo.js"
    assert normalize_path("/") == "/"


def test_qualified_paths_are_left_alone() -> None:
    assert is_qualified("http://cdn.example.com/jquery.js")
    assert not is_qualified("/lib/jquery.js")
    assert normalize_path("https://cdn.example.com//x.js") == "https://cdn.example.com//x.js"


def test_validate_requires_content_backend_or_etag() -> None:
    assert validate({"path": "/a.js", "content": ""}) is None
    assert validate({"path": "/a.js", "etag": "abc"}) is None
    err = validate({"path": "/a.js"})
    assert isinstance(err, InvalidResourceError)
    assert "No content" in str(err)


def test_create_raises_for_empty_resource() -> None:
    with pytest.raises(InvalidResourceError):
        create("/a.js", {})


def test_etag_defaults_to_content_digest() -> None:
    one = Resource("/a.js", content="var a;")
    two = Resource("/b.js", content="var a;")
    three = Resource("/c.js", content="var c;")
    assert one.etag == two.etag
    assert one.etag != three.etag
    assert Resource("/d.js", content="x", etag="fixed").etag == "fixed"


def test_headers_merge_guessed_content_type() -> None:
    resource = Resource("/a.js", content="", headers={"X-Extra": "1"})
    headers = resource.headers()
    assert headers["X-Extra"] == "1"
    assert "javascript" in headers["Content-Type"]


@pytest.mark.asyncio
async def test_content_runs_processors_in_order() -> None:
    resource = Resource("/a.js", content="a")
    resource.add_processor(lambda res, content: content + "1")

    async def append_two(res: Resource, content: str) -> str:
        return content + "2"

    resource.add_processor(append_two)
    assert await resource.content() == "a12"


@pytest.mark.asyncio
async def test_lazy_content_is_awaited() -> None:
    async def produce() -> str:
        return "lazy"

    resource = Resource("/lazy.txt", content=produce)
    assert resource.etag is None
    assert await resource.content() == "lazy"


@pytest.mark.asyncio
async def test_cached_placeholder_has_no_content() -> None:
    resource = create("/a.js", {"etag": "abc"})
    with pytest.raises(ResourceError, match="no content"):
        await resource.content()
    serialized = await resource.serialize()
    assert "content" not in serialized
    assert serialized["etag"] == "abc"


@pytest.mark.asyncio
async def test_serialize_encodes_binary_content_as_base64() -> None:
    resource = Resource("/img.png", content=b"\x89PNG")
    serialized = await resource.serialize()
    assert serialized["encoding"] == "base64"

    restored = create("/img.png", serialized)
    assert await restored.content() == b"\x89PNG"
    assert restored.etag == resource.etag


@pytest.mark.asyncio
async def test_serialize_can_omit_content() -> None:
    resource = Resource("/a.js", content="var a;")
    serialized = await resource.serialize(include_content=False)
    assert "content" not in serialized
    assert serialized["path"] == "/a.js"


@pytest.mark.asyncio
async def test_alternatives_are_serialized() -> None:
    resource = Resource("/doc.html", content="<p>hi</p>")
    resource.add_alternative({"mimeType": "text/plain", "content": "hi"})
    serialized = await resource.serialize()
    assert serialized["alternatives"] == [
        {"mimeType": "text/plain", "content": "hi", "encoding": "utf-8"}
    ]
    with pytest.raises(InvalidResourceError):
        resource.add_alternative({"content": "no mime"})


@pytest.mark.asyncio
async def test_backend_resource_serializes_without_content() -> None:
    resource = create("/api", {"backend": "http://localhost:8000/api"})
    serialized = await resource.serialize()
    assert serialized["backend"] == "http://localhost:8000/api"
    assert "content" not in serialized
