"""ResultTask: the Result algebra over a pending Result.

ResultTask wraps an ``Awaitable[Result[T]]`` and exposes the same
combinators as Ok/Err. Each combinator awaits the wrapped value exactly
once, applies the synchronous rule, and awaits the callback's return value
when it is awaitable. Nothing runs concurrently and nothing runs until the
chain is awaited.

Example:
    ```python
    async def fetch_user(user_id: int) -> Result[User]:
        ...

    result = await (
        ResultTask(fetch_user(1))
        .with_metadata('traceId', trace_id)
        .ensure(lambda user: user.active, 'inactive user')
        .bind(load_profile)  # sync or async
        .map(render)
    )
    ```
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Generator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from klaw_outcome._config import get_config
from klaw_outcome._internal.sync import SharedAwaitable
from klaw_outcome.failures import Failure
from klaw_outcome.metadata import Metadata, MetadataBuilder
from klaw_outcome.result import Err, Ok, Result, _captured, failure, success

if TYPE_CHECKING:
    from klaw_outcome.async_.option import MaybeTask
    from klaw_outcome.option import Maybe

__all__ = ['ResultTask']

T = TypeVar('T')
U = TypeVar('U')


async def _call(f: Callable[..., Any], *args: Any) -> Any:
    outcome = f(*args)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


class ResultTask(Generic[T]):
    """Async-aware Result wrapper for composing pending Result operations.

    Combinators return a new ResultTask; terminal operations (``match``,
    ``value_or``...) are coroutines.

    Note:
        A ResultTask wrapping a coroutine object is single-shot: awaiting it
        twice raises RuntimeError. Wrap an ``asyncio.Task`` or call
        ``shared()`` for a re-awaitable ResultTask.

    Attributes:
        _awaitable: The underlying awaitable that produces a Result.

    Example:
        ```python
        async def main():
            result = await ResultTask.from_value(5).map(lambda x: x * 2)
            assert result == Ok(10)
        ```
    """

    __slots__ = ('_awaitable',)

    def __init__(self, awaitable: Awaitable[Result[T]]) -> None:
        self._awaitable = awaitable

    def __await__(self) -> Generator[Any, Any, Result[T]]:
        return self._awaitable.__await__()

    def __repr__(self) -> str:
        return f'ResultTask({self._awaitable!r})'

    @classmethod
    def from_result(cls, result: Result[T]) -> ResultTask[T]:
        """Lift a synchronous Result."""

        async def _result() -> Result[T]:
            return result

        return cls(_result())

    @classmethod
    def from_value(cls, value: T = None, metadata: Any = None) -> ResultTask[T]:
        return cls.from_result(success(value, metadata))

    @classmethod
    def from_failure(cls, *errors: Failure | BaseException | str, metadata: Any = None) -> ResultTask[Any]:
        """Lift a failure, accepting everything ``failure()`` accepts."""
        return cls.from_result(failure(*errors, metadata=metadata))

    def shared(self) -> ResultTask[T]:
        """Return a re-awaitable ResultTask that runs the source at most once."""
        if isinstance(self._awaitable, SharedAwaitable):
            return self
        return ResultTask(SharedAwaitable(self._awaitable))

    def _then(self, step: Callable[[Result[T]], Awaitable[Result[U]]]) -> ResultTask[U]:
        async def _step() -> Result[U]:
            return await step(await self._awaitable)

        return ResultTask(_step())

    def _sync(self, step: Callable[[Result[T]], Result[U]]) -> ResultTask[U]:
        async def _step(result: Result[T]) -> Result[U]:
            return step(result)

        return self._then(_step)

    # --- metadata ---

    def with_metadata(self, *sources: Any, **entries: Any) -> ResultTask[T]:
        return self._sync(lambda result: result.with_metadata(*sources, **entries))

    def with_metadata_from(self, configure: Callable[[MetadataBuilder], Any]) -> ResultTask[T]:
        return self._sync(lambda result: result.with_metadata_from(configure))

    def to_unit(self) -> ResultTask[None]:
        return self._sync(lambda result: result.to_unit())

    # --- success branch ---

    def map(self, f: Callable[[T], U | Awaitable[U]], copy_metadata: bool = True) -> ResultTask[U]:
        """Apply a sync or async function to the value.

        Example:
            ```python
            async def double(x: int) -> int:
                return x * 2

            assert await ResultTask.from_value(5).map(double) == Ok(10)
            ```
        """

        async def _step(result: Result[T]) -> Result[U]:
            if isinstance(result, Err):
                return result.map(f, copy_metadata)
            value = await _call(f, result.value)
            return result.map(lambda _: value, copy_metadata)

        return self._then(_step)

    def bind(self, f: Callable[[T], Any], copy_metadata: bool = True) -> ResultTask[U]:
        """Chain a function returning a Result, an awaitable Result, or a ResultTask."""

        async def _step(result: Result[T]) -> Result[U]:
            if isinstance(result, Err):
                return result.bind(f, copy_metadata)
            outcome = await _call(f, result.value)
            return result.bind(lambda _: outcome, copy_metadata)

        return self._then(_step)

    def then(self, f: Callable[[T], Any], copy_metadata: bool = True) -> ResultTask[T]:
        """Run a side check that keeps the original value when it passes."""

        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Err):
                return result
            outcome = await _call(f, result.value)
            return result.then(lambda _: outcome, copy_metadata)

        return self._then(_step)

    def tap(self, action: Callable[[T], Any]) -> ResultTask[T]:
        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Ok):
                await _call(action, result.value)
            return result

        return self._then(_step)

    def tap_if(self, condition: bool | Callable[[T], Any], action: Callable[[T], Any]) -> ResultTask[T]:
        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Ok):
                holds = await _call(condition, result.value) if callable(condition) else condition
                if holds:
                    await _call(action, result.value)
            return result

        return self._then(_step)

    def if_success(self, action: Callable[[T], Any]) -> ResultTask[T]:
        return self.tap(action)

    def ensure(
        self,
        predicate: Callable[[T], Any],
        error: Failure | Callable[[T], Any] | str,
    ) -> ResultTask[T]:
        """Fail with ``error`` unless ``predicate(value)`` holds.

        Both the predicate and an error factory may be async.
        """

        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Err) or await _call(predicate, result.value):
                return result
            reason = error if isinstance(error, Failure | str) else await _call(error, result.value)
            return result.ensure(lambda _: False, reason)

        return self._then(_step)

    def as_(self, value: U, copy_metadata: bool = True) -> ResultTask[U]:
        return self._sync(lambda result: result.as_(value, copy_metadata))

    def flatten(self, copy_metadata: bool = True) -> ResultTask[Any]:
        """Unwrap a nested Result. The inner value may also be awaitable."""

        async def _step(result: Result[T]) -> Result[Any]:
            if isinstance(result, Err):
                return result
            inner = result.value
            if inspect.isawaitable(inner):
                inner = await inner
            return Ok(inner, result.metadata).flatten(copy_metadata)

        return self._then(_step)

    def try_(self, f: Callable[[T], Any], copy_metadata: bool = True) -> ResultTask[Any]:
        """Run a sync or async function, capturing its exception as a failure."""

        async def _step(result: Result[T]) -> Result[Any]:
            if isinstance(result, Err):
                return result
            try:
                outcome = await _call(f, result.value)
            except get_config().capture as exc:
                return _captured(exc, result.metadata if copy_metadata else Metadata.EMPTY, 'try_async')
            return result.try_(lambda _: outcome, copy_metadata)

        return self._then(_step)

    # --- failure branch ---

    def tap_error(self, action: Callable[[Failure], Any]) -> ResultTask[T]:
        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Err):
                await _call(action, result.error)
            return result

        return self._then(_step)

    def if_failure(self, action: Callable[[Failure], Any]) -> ResultTask[T]:
        return self.tap_error(action)

    def tap_both(self, on_success: Callable[[T], Any], on_failure: Callable[[Failure], Any]) -> ResultTask[T]:
        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Ok):
                await _call(on_success, result.value)
            else:
                await _call(on_failure, result.error)
            return result

        return self._then(_step)

    def recover(self, fallback: Any) -> ResultTask[Any]:
        """Turn a failure into a success. ``fallback`` may be a value or a (async) function."""

        async def _step(result: Result[T]) -> Result[Any]:
            if isinstance(result, Ok):
                return result
            value = await _call(fallback, result.error) if callable(fallback) else fallback
            return result.recover(lambda _: value)

        return self._then(_step)

    def recover_with(self, f: Callable[[Failure], Any]) -> ResultTask[Any]:
        async def _step(result: Result[T]) -> Result[Any]:
            if isinstance(result, Ok):
                return result
            outcome = await _call(f, result.error)
            return result.recover_with(lambda _: outcome)

        return self._then(_step)

    def compensate(self, rollback: Callable[[Failure], Any]) -> ResultTask[T]:
        """Run a (async) rollback for a failure; see ``Err.compensate``."""

        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Ok):
                return result
            outcome = await _call(rollback, result.error)
            return result.compensate(lambda _: outcome)

        return self._then(_step)

    def map_error(self, f: Callable[[Failure], Any]) -> ResultTask[T]:
        async def _step(result: Result[T]) -> Result[T]:
            if isinstance(result, Ok):
                return result
            mapped = await _call(f, result.error)
            return result.map_error(lambda _: mapped)

        return self._then(_step)

    def append_error(self, suffix: str) -> ResultTask[T]:
        return self._sync(lambda result: result.append_error(suffix))

    def prepend_error(self, prefix: str) -> ResultTask[T]:
        return self._sync(lambda result: result.prepend_error(prefix))

    def to_maybe(self) -> MaybeTask[T]:
        from klaw_outcome.async_.option import MaybeTask

        async def _maybe() -> Maybe[T]:
            return (await self._awaitable).to_maybe()

        return MaybeTask(_maybe())

    # --- terminal operations ---

    async def is_success(self) -> bool:
        return (await self._awaitable).is_success()

    async def is_faulted(self) -> bool:
        return (await self._awaitable).is_faulted()

    async def match(self, success: Callable[[T], Any], failure: Callable[[Failure], Any]) -> Any:
        """Await the Result and evaluate exactly one (sync or async) branch."""
        result = await self._awaitable
        if isinstance(result, Ok):
            return await _call(success, result.value)
        return await _call(failure, result.error)

    async def match_error(
        self,
        kind: type[Failure],
        on_match: Callable[[Any], Any],
        on_else: Callable[[], Any],
    ) -> Any:
        found = (await self._awaitable).get_error(kind)
        if found is None:
            return await _call(on_else)
        return await _call(on_match, found)

    async def get_error(self, kind: type[Failure]) -> Failure | None:
        return (await self._awaitable).get_error(kind)

    async def has_error(self, kind: type[Failure]) -> bool:
        return (await self._awaitable).has_error(kind)

    async def has_exception(self, kind: type[BaseException]) -> bool:
        return (await self._awaitable).has_exception(kind)

    async def value_or(self, default: Any) -> Any:
        return (await self._awaitable).value_or(default)

    async def value_or_else(self, f: Callable[[Failure], Any]) -> Any:
        result = await self._awaitable
        if isinstance(result, Ok):
            return result.value
        return await _call(f, result.error)

    async def value_or_default(self) -> T | None:
        return (await self._awaitable).value_or_default()

    async def value_or_throw(self, exception_factory: Callable[[Failure], BaseException] | None = None) -> T:
        return (await self._awaitable).value_or_throw(exception_factory)

    async def throw_if_failed(self) -> Result[T]:
        return (await self._awaitable).throw_if_failed()

    async def to_optional(self) -> T | None:
        return (await self._awaitable).to_optional()
