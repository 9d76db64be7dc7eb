"""Bounded fan-out for independent, read-only store calls."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def gather_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    max_concurrency: int,
) -> list[R]:
    """Run ``func`` over ``items`` with at most ``max_concurrency`` in flight.

    Results come back in the order of ``items`` regardless of completion
    order.  The first failure propagates.
    """
    if not items:
        return []
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def _run_one(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(_run_one(item) for item in items)))
