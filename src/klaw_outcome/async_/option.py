"""MaybeTask: the Maybe algebra over a pending Maybe."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Generator
from typing import Any, Generic, TypeVar

from klaw_outcome._internal.sync import SharedAwaitable
from klaw_outcome.async_.result import ResultTask, _call
from klaw_outcome.failures import Failure
from klaw_outcome.option import Maybe, Nothing, NothingType, Some, from_optional
from klaw_outcome.result import Result

__all__ = ['MaybeTask']

T = TypeVar('T')
U = TypeVar('U')


class MaybeTask(Generic[T]):
    """Async-aware Maybe wrapper.

    Same rules as ResultTask: one await of the wrapped value per
    combinator, callbacks may be sync or async, single-shot over a
    coroutine unless ``shared()``.

    Example:
        ```python
        async def find_user(name: str) -> Maybe[User]:
            ...

        email = await (
            MaybeTask(find_user('ada'))
            .filter(lambda user: user.verified)
            .map(lambda user: user.email)
            .value_or('unknown')
        )
        ```
    """

    __slots__ = ('_awaitable',)

    def __init__(self, awaitable: Awaitable[Maybe[T]]) -> None:
        self._awaitable = awaitable

    def __await__(self) -> Generator[Any, Any, Maybe[T]]:
        return self._awaitable.__await__()

    def __repr__(self) -> str:
        return f'MaybeTask({self._awaitable!r})'

    @classmethod
    def from_maybe(cls, maybe: Maybe[T]) -> MaybeTask[T]:
        async def _maybe() -> Maybe[T]:
            return maybe

        return cls(_maybe())

    @classmethod
    def from_optional(cls, value: T | None) -> MaybeTask[T]:
        return cls.from_maybe(from_optional(value))

    @classmethod
    def nothing(cls) -> MaybeTask[Any]:
        return cls.from_maybe(Nothing)

    def shared(self) -> MaybeTask[T]:
        """Return a re-awaitable MaybeTask that runs the source at most once."""
        if isinstance(self._awaitable, SharedAwaitable):
            return self
        return MaybeTask(SharedAwaitable(self._awaitable))

    def _then(self, step: Callable[[Maybe[T]], Awaitable[Maybe[U]]]) -> MaybeTask[U]:
        async def _step() -> Maybe[U]:
            return await step(await self._awaitable)

        return MaybeTask(_step())

    def map(self, f: Callable[[T], Any]) -> MaybeTask[U]:
        async def _step(maybe: Maybe[T]) -> Maybe[U]:
            if isinstance(maybe, NothingType):
                return maybe
            return from_optional(await _call(f, maybe.value))

        return self._then(_step)

    def filter(self, predicate: Callable[[T], Any]) -> MaybeTask[T]:
        async def _step(maybe: Maybe[T]) -> Maybe[T]:
            if isinstance(maybe, Some) and not await _call(predicate, maybe.value):
                return Nothing
            return maybe

        return self._then(_step)

    def bind(self, f: Callable[[T], Any]) -> MaybeTask[U]:
        """Chain a function returning a Maybe, an awaitable Maybe or a MaybeTask."""

        async def _step(maybe: Maybe[T]) -> Maybe[U]:
            if isinstance(maybe, NothingType):
                return maybe
            return await _call(f, maybe.value)

        return self._then(_step)

    def or_else(self, other: Maybe[T] | Callable[[], Any]) -> MaybeTask[T]:
        async def _step(maybe: Maybe[T]) -> Maybe[T]:
            if isinstance(maybe, Some):
                return maybe
            if isinstance(other, Some | NothingType):
                return other
            return await _call(other)

        return self._then(_step)

    def tap(self, action: Callable[[T], Any]) -> MaybeTask[T]:
        async def _step(maybe: Maybe[T]) -> Maybe[T]:
            if isinstance(maybe, Some):
                await _call(action, maybe.value)
            return maybe

        return self._then(_step)

    def if_some(self, action: Callable[[T], Any]) -> MaybeTask[T]:
        return self.tap(action)

    def if_none(self, action: Callable[[], Any]) -> MaybeTask[T]:
        async def _step(maybe: Maybe[T]) -> Maybe[T]:
            if isinstance(maybe, NothingType):
                await _call(action)
            return maybe

        return self._then(_step)

    def to_result(self, error: Failure | Callable[[], Any] | str) -> ResultTask[T]:
        """Convert to a ResultTask; a failure factory is only called for Nothing."""

        async def _result() -> Result[T]:
            maybe = await self._awaitable
            if isinstance(maybe, Some) or isinstance(error, Failure | str):
                return maybe.to_result(error)
            reason = await _call(error)
            return maybe.to_result(reason)

        return ResultTask(_result())

    # --- terminal operations ---

    async def is_some(self) -> bool:
        return (await self._awaitable).is_some()

    async def is_none(self) -> bool:
        return (await self._awaitable).is_none()

    async def match(self, some: Callable[[T], Any], none: Callable[[], Any]) -> Any:
        maybe = await self._awaitable
        if isinstance(maybe, Some):
            return await _call(some, maybe.value)
        return await _call(none)

    async def value_or(self, default: T) -> T:
        return (await self._awaitable).value_or(default)

    async def value_or_else(self, f: Callable[[], Any]) -> T:
        maybe = await self._awaitable
        if isinstance(maybe, Some):
            return maybe.value
        return await _call(f)

    async def value_or_default(self) -> T | None:
        return (await self._awaitable).value_or_default()

    async def to_optional(self) -> T | None:
        return (await self._awaitable).to_optional()
