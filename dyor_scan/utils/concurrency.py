"""Fan-out helpers for unreliable sources: settle-all gathering and mirror racing."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> list[T | None]:
    """Await every awaitable; a failure becomes ``None`` in its slot.

    Never short-circuits: one branch raising does not cancel or hide the others.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    settled: list[T | None] = []
    for result in results:
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.warning("Fan-out branch failed: %s", result)
            settled.append(None)
        else:
            settled.append(result)
    return settled


def _drain(task: asyncio.Task) -> None:
    # Retrieve the outcome of a losing mirror so asyncio does not warn about it.
    if not task.cancelled():
        task.exception()


async def race_first_valid(
    factories: Sequence[Callable[[], Awaitable[T | None]]],
    is_valid: Callable[[T], bool] = lambda _: True,
) -> T | None:
    """Run all factories concurrently and return the first valid result.

    Losing tasks are left running; their results are discarded. Returns
    ``None`` when every factory raises, returns ``None`` or fails validation.
    """
    if not factories:
        return None

    tasks = [asyncio.ensure_future(factory()) for factory in factories]
    for task in tasks:
        task.add_done_callback(_drain)

    for next_done in asyncio.as_completed(tasks):
        try:
            result = await next_done
        except Exception as exc:
            logger.debug("Mirror failed: %s", exc)
            continue
        if result is not None and is_valid(result):
            return result

    return None
