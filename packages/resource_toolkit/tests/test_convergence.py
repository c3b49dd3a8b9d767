"""Tests for outstanding-work tracking and convergence waiting."""

from __future__ import annotations

import asyncio

import pytest
from resource_toolkit.resources import PendingWork, ResourceSet, converge


@pytest.mark.asyncio
async def test_converge_returns_immediately_without_work() -> None:
    await asyncio.wait_for(converge(PendingWork()), timeout=1)


@pytest.mark.asyncio
async def test_converge_waits_for_cascading_work() -> None:
    pending = PendingWork()
    finished: list[str] = []

    async def leaf(name: str) -> None:
        await asyncio.sleep(0.01)
        finished.append(name)

    async def spawner(depth: int) -> None:
        await asyncio.sleep(0)
        if depth:
            pending.spawn(spawner(depth - 1))
        pending.spawn(leaf(f"leaf-{depth}"))

    pending.spawn(spawner(3))
    await converge(pending)

    assert sorted(finished) == ["leaf-0", "leaf-1", "leaf-2", "leaf-3"]
    assert len(pending) == 0
    assert pending.registered == 8


@pytest.mark.asyncio
async def test_converge_short_circuits_on_failure() -> None:
    pending = PendingWork()
    release = asyncio.Event()

    async def fail() -> None:
        raise RuntimeError("boom")

    async def blocked() -> None:
        await release.wait()

    slow = pending.spawn(blocked())
    pending.spawn(fail())

    with pytest.raises(RuntimeError, match="boom"):
        await asyncio.wait_for(converge(pending), timeout=1)
    assert not slow.done()

    release.set()
    await slow


@pytest.mark.asyncio
async def test_converge_can_tolerate_failures() -> None:
    pending = PendingWork()

    async def fail() -> None:
        raise RuntimeError("boom")

    pending.spawn(fail())
    await converge(pending, tolerate_failures=True)
    assert len(pending) == 0


@pytest.mark.asyncio
async def test_in_flight_skips_later_barriers() -> None:
    pending = PendingWork()
    release = asyncio.Event()

    async def wait() -> None:
        await release.wait()

    pending.spawn(wait(), label="file")
    pending.spawn(wait(), label="combine", barrier=True)
    pending.spawn(wait(), label="combine", barrier=True)

    assert len(pending.in_flight()) == 3
    assert len(pending.in_flight(before=1)) == 1
    assert len(pending.in_flight(before=2)) == 2

    release.set()
    await converge(pending)


@pytest.mark.asyncio
async def test_when_all_added_returns_the_set() -> None:
    rs = ResourceSet()
    rs.add_combined_resource(["/a.js"], {"path": "/all.js"})
    rs.add({"path": "/a.js", "content": "a"})

    assert await rs.when_all_added() is rs
    assert rs.get("/all.js") is not None
