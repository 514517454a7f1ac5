"""
SecScan Batch Runner

Files are processed in fixed-size groups: the members of a group run
concurrently, groups run one after another.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

BATCH_SIZE = 10


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = BATCH_SIZE,
) -> list[R]:
    """
    Run worker over items, at most batch_size at a time.

    Results come back in the order of items, not completion order.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: list[R] = []
    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
    return results
