import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from storefront_qa.exceptions import WaitTimeoutError

Condition = Callable[[], Awaitable[Any]]


async def wait_until(
    condition: Condition,
    timeout: float,
    interval: float,
    description: str = "condition",
    url: Optional[str] = None,
) -> Any:
    """Poll ``condition`` until it returns a truthy value.

    Args:
        condition: async callable evaluated on every attempt.
        timeout: overall bound in seconds.
        interval: pause between attempts in seconds.
        description: used in the timeout message.
        url: page location recorded on the raised error.

    Returns:
        The first truthy value returned by ``condition``.

    Raises:
        WaitTimeoutError: if the bound is exhausted.
    """
    deadline = time.monotonic() + timeout
    while True:
        value = await condition()
        if value:
            return value
        if time.monotonic() >= deadline:
            raise WaitTimeoutError(f"Timed out after {timeout:.1f}s waiting for {description}", url=url)
        await asyncio.sleep(interval)


async def wait_quietly(condition: Condition, timeout: float, interval: float, description: str = "condition") -> Any:
    """Best-effort variant of :func:`wait_until`, returns None on timeout."""
    try:
        return await wait_until(condition, timeout, interval, description)
    except WaitTimeoutError:
        logging.debug(f"Gave up waiting for {description} after {timeout:.1f}s")
        return None


async def poll(condition: Condition, attempts: int, interval: float) -> Any:
    """Evaluate ``condition`` at most ``attempts`` times, returning the first
    truthy value or the last value seen."""
    value = None
    for attempt in range(attempts):
        value = await condition()
        if value:
            return value
        if attempt < attempts - 1:
            await asyncio.sleep(interval)
    return value
