"""Core utility functions."""

import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_or_cancel(*awaitables: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently; on the first failure cancel the rest.

    ``asyncio.gather`` leaves sibling tasks running when one raises. Here a
    failure (or cancellation of the caller) cancels every unfinished sibling
    before the exception propagates, so abandoned fetches stop making
    requests.

    Args:
        *awaitables: Coroutines or futures to run

    Returns:
        Results in argument order

    Raises:
        Exception: The first exception raised by any awaitable
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Let cancelled siblings unwind before re-raising
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
