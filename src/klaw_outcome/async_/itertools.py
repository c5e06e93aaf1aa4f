"""Sequential combination of pending Results.

Unlike a gather, these await each input strictly in the supplied order,
so side effects and the order of collected failures are deterministic.

Examples:
    >>> async def example():
    ...     result = await combine_async([fetch(1), fetch(2)])
    ...     assert result == Ok([2, 4])
"""

from __future__ import annotations

from collections.abc import AsyncIterable, Awaitable, Iterable
from typing import Any, TypeVar

from klaw_outcome.async_.result import ResultTask
from klaw_outcome.result import Err, Ok, Result, combine

__all__ = ['combine_async', 'combine_unit_async']

T = TypeVar('T')

PendingResults = Iterable[Awaitable[Result[T]] | Result[T]] | AsyncIterable[Result[T]]


async def _gather_in_order(results: PendingResults[T]) -> list[Result[T]]:
    collected: list[Result[T]] = []
    if isinstance(results, AsyncIterable):
        async for result in results:
            collected.append(result)
        return collected
    for pending in results:
        # Plain Results are accepted next to awaitables.
        collected.append(pending if isinstance(pending, Ok | Err) else await pending)
    return collected


def combine_async(results: PendingResults[T]) -> ResultTask[list[T]]:
    """Await each input in order, then combine like ``combine``.

    Args:
        results: Awaitables of Results (coroutines, tasks, ResultTasks),
            plain Results, or an async iterable of Results.

    Returns:
        ResultTask of ``Ok(list)`` or of an AggregateFailure holding every
        failure in encounter order.
    """

    async def _combined() -> Result[list[T]]:
        return combine(await _gather_in_order(results))

    return ResultTask(_combined())


def combine_unit_async(results: PendingResults[Any]) -> ResultTask[None]:
    """Like ``combine_async`` but produce the unit Result on success."""
    return combine_async(results).to_unit()
