from __future__ import annotations

from pathlib import Path

import pytest
from resource_toolkit.resources import (
    ResourceResolutionError,
    ResourceSet,
    UnmatchedPatternError,
)
from resource_toolkit.resources.file_resolver import prepare_resource, resolve_paths


def _write(path: Path, content: str | bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


@pytest.mark.asyncio
async def test_resolve_paths_globs_files_relative_to_root(tmp_path: Path) -> None:
    _write(tmp_path / "lib" / "b.js", "b")
    _write(tmp_path / "lib" / "a.js", "a")
    _write(tmp_path / "lib" / "nested" / "c.js", "c")
    rs = ResourceSet()

    assert await resolve_paths(rs, ["lib/*.js"]) == ["/lib/a.js", "/lib/b.js"]
    assert await resolve_paths(rs, ["/lib/**/*.js"]) == [
        "/lib/a.js",
        "/lib/b.js",
        "/lib/nested/c.js",
    ]


@pytest.mark.asyncio
async def test_resolve_paths_passes_members_and_qualified_through() -> None:
    rs = ResourceSet()
    rs.add({"path": "/virtual.js", "content": "v"})

    paths = await resolve_paths(rs, ["virtual.js", "http://cdn.example.com/x.js", "virtual.js"])

    assert paths == ["/virtual.js", "http://cdn.example.com/x.js"]


@pytest.mark.asyncio
async def test_resolve_paths_strict_names_unmatched(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "a")
    rs = ResourceSet()

    assert await resolve_paths(rs, ["a.js", "b/*.js"]) == ["/a.js"]
    with pytest.raises(UnmatchedPatternError) as excinfo:
        await resolve_paths(rs, ["a.js", "b/*.js", "!c.js"], strict=True)
    assert excinfo.value.patterns == ["b/*.js"]


@pytest.mark.asyncio
async def test_prepare_resource_reads_text_and_binary(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "var a;")
    _write(tmp_path / "logo.png", b"\x89PNG\xff")

    text = await prepare_resource(str(tmp_path), "a.js")
    binary = await prepare_resource(str(tmp_path), "/logo.png", {"path": "/img/logo.png"})

    assert text.path == "/a.js"
    assert await text.content() == "var a;"
    assert text.etag
    assert binary.path == "/img/logo.png"
    assert binary.encoding == "base64"
    assert await binary.content() == b"\x89PNG\xff"


@pytest.mark.asyncio
async def test_prepare_resource_keeps_given_etag(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "var a;")
    resource = await prepare_resource(str(tmp_path), "a.js", {"etag": "pinned"})
    assert resource.etag == "pinned"


@pytest.mark.asyncio
async def test_prepare_resource_fails_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ResourceResolutionError, match="Failed reading"):
        await prepare_resource(str(tmp_path), "missing.js")
