"""anyio integration for re-awaitable values.

Coroutine objects can only be awaited once. SharedAwaitable wraps any
awaitable and memoises its outcome so it can be awaited any number of
times, by any number of concurrent consumers.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Generator
from typing import Any, Generic, TypeVar

import anyio
import anyio.lowlevel

__all__ = ['SharedAwaitable']

T = TypeVar('T')


def _running_on_asyncio() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class SharedAwaitable(Generic[T]):
    """An awaitable that runs its source at most once and replays the outcome.

    On asyncio the source is started once as its own task and every awaiter
    waits on it through ``asyncio.shield``: a cancelled awaiter leaves the
    source running and later awaiters still get its outcome. On other anyio
    backends the first awaiter drives the source inside a shielded cancel
    scope and sees its own cancellation once the source has settled.

    Concurrent awaiters are serialised with an anyio.Lock and observe the
    same value (or the same exception). Cancellation is never memoised.

    Examples:
        >>> shared = SharedAwaitable(fetch())
        >>> await shared
        42
        >>> await shared  # no second fetch
        42
    """

    __slots__ = ('_source', '_task', '_lock', '_done', '_value', '_error')

    def __init__(self, source: Awaitable[T]) -> None:
        self._source = source
        self._task: asyncio.Future[T] | None = None
        self._lock = anyio.Lock()
        self._done = False
        self._value: T | None = None
        self._error: Exception | None = None

    def is_done(self) -> bool:
        """Check if the outcome has been memoised."""
        return self._done

    async def _settle(self) -> None:
        try:
            if _running_on_asyncio():
                if self._task is None:
                    self._task = asyncio.ensure_future(self._source)
                self._value = await asyncio.shield(self._task)
            else:
                with anyio.CancelScope(shield=True):
                    self._value = await self._source
        except Exception as exc:
            self._error = exc
        self._done = True

    async def get(self) -> T:
        """Await the source once and return its memoised outcome."""
        if not self._done:
            async with self._lock:
                if not self._done:
                    await self._settle()
            # A shielded run defers the awaiter's own cancellation until now.
            await anyio.lowlevel.checkpoint_if_cancelled()
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def __await__(self) -> Generator[Any, Any, T]:
        return self.get().__await__()
