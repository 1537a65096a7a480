"""Thread pool helpers for blocking HTTP and RPC calls."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")


def fetch_executor(max_workers: int) -> ThreadPoolExecutor:
    """Pool with one worker per concurrent fetch of an aggregation cycle.

    Fetch deadlines start before a worker is assigned, so no fetch may
    queue behind another.
    """
    return ThreadPoolExecutor(
        max_workers=max(max_workers, 1), thread_name_prefix="treasury-fetch"
    )


async def run_blocking(
    executor: Executor | None, fn: Callable[..., T], /, *args: Any, **kwargs: Any
) -> T:
    """Run ``fn`` on ``executor`` (the loop's default pool when None)."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        executor, functools.partial(fn, *args, **kwargs)
    )
