"""Concurrent fan-out over a mapping of keyed jobs.

Every job is started (``tg.start_soon``) before any of them is awaited,
and the call returns only once all of them settled. If one job raises,
anyio cancels its siblings and the first leaf exception is re-raised
unwrapped, so callers catch ``NavigationError`` rather than an
``ExceptionGroup``.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import anyio

type Job = Callable[[], Awaitable[Any]]


async def fan_out[K](jobs: Mapping[K, Job]) -> dict[K, Any]:
    """Run all *jobs* concurrently and collect their results by key."""
    if not jobs:
        return {}

    results: dict[K, Any] = {}

    async def _run(key: K, job: Job) -> None:
        results[key] = await job()

    try:
        async with anyio.create_task_group() as tg:
            for key, job in jobs.items():
                tg.start_soon(_run, key, job)
    except BaseExceptionGroup as group:
        leaf = first_leaf(group)
        raise leaf from leaf.__cause__

    return results


def first_leaf(group: BaseExceptionGroup) -> BaseException:
    """Return the first non-group exception inside a (nested) group."""
    exc: BaseException = group
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc
