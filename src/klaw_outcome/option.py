"""Maybe type: Some[T] | Nothing for optional values."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeAlias, TypeVar

import msgspec

if TYPE_CHECKING:
    from klaw_outcome.failures import Failure
    from klaw_outcome.result import Err, Ok

__all__ = ['Maybe', 'Nothing', 'NothingType', 'Some', 'from_optional', 'none', 'some']

T = TypeVar('T')
U = TypeVar('U')


async def _run(action: Callable[..., Any], *args: Any) -> None:
    outcome = action(*args)
    if inspect.isawaitable(outcome):
        await outcome


class Some(msgspec.Struct, Generic[T], frozen=True, gc=False):
    """Some variant of Maybe containing a value of type T.

    Absence is structural: ``Some(None)`` is rejected, use ``Nothing``.

    Examples:
        >>> Some(42).map(lambda x: x * 2)
        Some(value=84)
        >>> Some(42).filter(lambda x: x > 100)
        Nothing
    """

    value: T

    def __post_init__(self) -> None:
        if self.value is None:
            raise ValueError('Some() requires a value, use Nothing for absence')

    def is_some(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Return the contained value."""
        return self.value

    def if_some(self, action: Callable[[T], Any]) -> Some[T]:
        """Run ``action(value)`` and return self."""
        action(self.value)
        return self

    def if_none(self, _action: Callable[[], Any]) -> Some[T]:
        return self

    async def if_some_async(self, action: Callable[[T], Any]) -> Some[T]:
        """Run ``action(value)``, awaiting it when it returns an awaitable."""
        await _run(action, self.value)
        return self

    async def if_none_async(self, _action: Callable[[], Any]) -> Some[T]:
        return self

    def match(self, some: Callable[[T], U], none: Callable[[], U]) -> U:
        """Evaluate exactly one branch: ``some(value)`` here."""
        return some(self.value)

    def map(self, f: Callable[[T], U]) -> Maybe[U]:
        """Apply a function to the contained value.

        A function returning None yields Nothing rather than ``Some(None)``.
        """
        return from_optional(f(self.value))

    def filter(self, predicate: Callable[[T], bool]) -> Maybe[T]:
        """Return self if the predicate holds, else Nothing."""
        if predicate(self.value):
            return self
        return Nothing

    def bind(self, f: Callable[[T], Maybe[U]]) -> Maybe[U]:
        """Apply a function that returns a Maybe, flattening one level."""
        return f(self.value)

    def or_else(self, _other: Maybe[T] | Callable[[], Maybe[T]]) -> Some[T]:
        return self

    def value_or(self, _default: T) -> T:
        return self.value

    def value_or_else(self, _f: Callable[[], T]) -> T:
        return self.value

    def value_or_default(self) -> T:
        return self.value

    def tap(self, action: Callable[[T], Any]) -> Some[T]:
        """Run a side effect on the value without changing it."""
        action(self.value)
        return self

    def to_optional(self) -> T:
        return self.value

    def to_result(self, _error: Failure | Callable[[], Failure] | str) -> Ok[T]:
        """Convert to a successful Result holding the value."""
        from klaw_outcome.result import Ok

        return Ok(self.value)


class NothingType(msgspec.Struct, frozen=True, gc=False):
    """Nothing variant of Maybe representing absence of a value.

    This is a singleton in practice, use the ``Nothing`` constant instead of
    instantiating directly.

    Examples:
        >>> Nothing.value_or(0)
        0
        >>> Nothing.to_result('missing').is_faulted()
        True
    """

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raise an exception since this is Nothing.

        Raises:
            RuntimeError: Always, since Nothing has no value to unwrap.
        """
        raise RuntimeError('Called unwrap on Nothing')

    def if_some(self, _action: Callable[[Any], Any]) -> NothingType:
        return self

    def if_none(self, action: Callable[[], Any]) -> NothingType:
        """Run ``action()`` and return self."""
        action()
        return self

    async def if_some_async(self, _action: Callable[[Any], Any]) -> NothingType:
        return self

    async def if_none_async(self, action: Callable[[], Any]) -> NothingType:
        """Run ``action()``, awaiting it when it returns an awaitable."""
        await _run(action)
        return self

    def match(self, some: Callable[[Any], U], none: Callable[[], U]) -> U:
        return none()

    def map(self, _f: Callable[[Any], Any]) -> NothingType:
        return self

    def filter(self, _predicate: Callable[[Any], bool]) -> NothingType:
        return self

    def bind(self, _f: Callable[[Any], Maybe[Any]]) -> NothingType:
        return self

    def or_else(self, other: Maybe[T] | Callable[[], Maybe[T]]) -> Maybe[T]:
        """Return the alternative, calling it first when it is a factory."""
        if isinstance(other, Some | NothingType):
            return other
        return other()

    def value_or(self, default: T) -> T:
        return default

    def value_or_else(self, f: Callable[[], T]) -> T:
        return f()

    def value_or_default(self) -> None:
        return None

    def tap(self, _action: Callable[[Any], Any]) -> NothingType:
        return self

    def to_optional(self) -> None:
        return None

    def to_result(self, error: Failure | Callable[[], Failure] | str) -> Err:
        """Convert to a failed Result.

        Args:
            error: The failure, a zero-argument factory called only now, or
                a message.
        """
        from klaw_outcome.failures import Failure
        from klaw_outcome.result import failure

        if not isinstance(error, Failure | str) and callable(error):
            error = error()
        return failure(error)

    def __repr__(self) -> str:
        return 'Nothing'


Nothing: NothingType = NothingType()
"""Singleton instance representing the absence of a value."""

Maybe: TypeAlias = Some[T] | NothingType


def some(value: T) -> Some[T]:
    """Construct a Some. Raises ValueError for None."""
    return Some(value)


def none() -> NothingType:
    return Nothing


def from_optional(value: T | None) -> Maybe[T]:
    """Lift an optional value: None becomes Nothing, anything else Some."""
    if value is None:
        return Nothing
    return Some(value)
