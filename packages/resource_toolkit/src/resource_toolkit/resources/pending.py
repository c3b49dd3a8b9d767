"""Outstanding-work tracking and convergence waiting for resource sets."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingEntry:
    """Registration record for one scheduled add-operation."""

    seq: int
    label: str
    barrier: bool


class PendingWork:
    """Set of in-flight add-operations owned by a single resource set.

    ``registered`` only ever grows; settled tasks are dropped from the set.
    Barrier tasks (combine attempts) wait for earlier work themselves and are
    skipped when a later barrier converges, so barriers never wait on each other
    in a cycle.
    """

    def __init__(self) -> None:
        self._tasks: dict[asyncio.Future[Any], PendingEntry] = {}
        self._registered = 0

    @property
    def registered(self) -> int:
        return self._registered

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(
        self, coro: Coroutine[Any, Any, Any], *, label: str = "add", barrier: bool = False
    ) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running loop and track it until it settles."""
        task = asyncio.get_running_loop().create_task(coro)
        self.track(task, label=label, barrier=barrier)
        return task

    def track(
        self, future: asyncio.Future[Any], *, label: str = "add", barrier: bool = False
    ) -> int:
        """Register an already scheduled future; returns its sequence number."""
        seq = self._registered
        self._registered += 1
        self._tasks[future] = PendingEntry(seq=seq, label=label, barrier=barrier)
        future.add_done_callback(self._settled)
        return seq

    def in_flight(self, *, before: int | None = None) -> list[asyncio.Future[Any]]:
        """Return unsettled futures, skipping barriers registered at or after ``before``."""
        return [
            future
            for future, entry in self._tasks.items()
            if not future.done()
            and not (before is not None and entry.barrier and entry.seq >= before)
        ]

    def _settled(self, future: asyncio.Future[Any]) -> None:
        entry = self._tasks.pop(future, None)
        if future.cancelled():
            return
        # Retrieve the exception so unobserved failures are not reported twice.
        exc = future.exception()
        if exc is not None and entry is not None:
            logger.debug("Pending %s #%d failed: %s", entry.label, entry.seq, exc)


async def converge(
    pending: PendingWork, *, before: int | None = None, tolerate_failures: bool = False
) -> None:
    """Wait until no add-operation is in flight and no new one was registered meanwhile.

    Args:
        pending: Outstanding work of the resource set.
        before: Sequence number of the calling barrier task, if any.
        tolerate_failures: Keep waiting through failed operations instead of raising.

    Raises:
        Exception: The first failure among awaited operations, unless tolerated.
    """
    rounds = 0
    while True:
        registered = pending.registered
        in_flight = pending.in_flight(before=before)
        if in_flight:
            rounds += 1
            return_when = asyncio.ALL_COMPLETED if tolerate_failures else asyncio.FIRST_EXCEPTION
            done, _ = await asyncio.wait(in_flight, return_when=return_when)
            if not tolerate_failures:
                for future in done:
                    if not future.cancelled() and future.exception() is not None:
                        raise future.exception()
        if pending.registered == registered and not pending.in_flight(before=before):
            logger.debug("Converged after %d round(s)", rounds)
            return
