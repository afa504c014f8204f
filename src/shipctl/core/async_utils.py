"""Async helpers for bridging build coroutines into Click commands."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


async def run_with_timeout(
    coro: Awaitable[T],
    timeout: float | None,
    timeout_message: str = "Operation timed out",
) -> T:
    """Run a coroutine with a timeout.

    On expiry the coroutine is cancelled, which terminates any build
    subprocess it is waiting on.

    Args:
        coro: Coroutine to run
        timeout: Timeout in seconds, or None for no limit
        timeout_message: Message for timeout error

    Returns:
        Result of the coroutine

    Raises:
        TimeoutError: If the operation times out
    """
    from shipctl.core.exceptions import TimeoutError

    if timeout is None:
        return await coro

    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        raise TimeoutError(timeout_message, timeout_seconds=int(timeout))


def run_sync(coro: Awaitable[T]) -> T:
    """Run an async function synchronously.

    This is useful for integrating async code with Click commands.

    Args:
        coro: Coroutine to run

    Returns:
        Result of the coroutine
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        # Already inside an event loop, run on a fresh one in a worker thread
        import concurrent.futures

        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    else:
        return asyncio.run(coro)
