"""Result type: Ok[T] | Err for explicit, metadata-carrying error handling.

A Result is either ``Ok(value)`` or ``Err(failure)``. Both variants carry a
``metadata`` bag (trace ids, timings, hints) that is independent of the
outcome and survives every combinator unless a caller opts out with
``copy_metadata=False``.

Example:
    ```python
    from klaw_outcome import success, failure

    result = (
        success(21)
        .with_metadata('traceId', 'abc')
        .map(lambda x: x * 2)
        .ensure(lambda x: x > 40, 'too small')
    )
    result
    # Success 42 meta=traceId:abc

    failure('boom').bind(lambda x: success(x + 1)).is_faulted()
    # True
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Generic, NoReturn, TypeAlias, TypeVar

import msgspec

from klaw_outcome._config import get_config
from klaw_outcome._logging import get_logger, trace
from klaw_outcome.failures import (
    AggregateFailure,
    ConflictFailure,
    ExceptionalFailure,
    Failure,
    NotFoundFailure,
    UnauthenticatedFailure,
    UnauthorizedFailure,
    ValidationFailure,
    wrap,
)
from klaw_outcome.metadata import Metadata, MetadataBuilder, MetadataSource

if TYPE_CHECKING:
    from klaw_outcome.option import Maybe

__all__ = [
    'Err',
    'Ok',
    'Result',
    'combine',
    'combine_unit',
    'fail_conflict',
    'fail_not_found',
    'fail_unauthenticated',
    'fail_unauthorized',
    'fail_validation',
    'failure',
    'success',
    'try_call',
]

T = TypeVar('T')
U = TypeVar('U')

log = get_logger(__name__)


def _as_metadata(source: MetadataSource | None) -> Metadata:
    if source is None:
        return Metadata.EMPTY
    if isinstance(source, Metadata):
        return source
    return Metadata(source)


def _metadata_args(args: tuple[Any, ...]) -> tuple[MetadataSource, ...]:
    # with_metadata('key', value) is the single-pair call form.
    if len(args) == 2 and isinstance(args[0], str):
        return ([(args[0], args[1])],)
    return args


def _carry(prior: Metadata, derived: Result[U], copy_metadata: bool) -> Result[U]:
    """Merge ``prior`` under the derived Result's own metadata."""
    if not isinstance(derived, Ok | Err):
        raise TypeError(f'Expected a Result, got {type(derived).__name__}')
    if not copy_metadata or not prior:
        return derived
    merged = prior.merge(derived.metadata)
    if merged == derived.metadata:
        return derived
    return msgspec.structs.replace(derived, metadata=merged)


def _failure_of(error: Failure | Callable[..., Failure] | str, *args: Any) -> Failure:
    if isinstance(error, Failure):
        return error
    if isinstance(error, str):
        return Failure(error)
    return error(*args)


def _find(error: Failure, kind: type[Failure]) -> Failure | None:
    if isinstance(error, kind):
        return error
    if isinstance(error, AggregateFailure):
        for member in error.errors:
            if isinstance(member, kind):
                return member
    return None


def _contains(error: Failure, test: Callable[[Failure], bool]) -> bool:
    if test(error):
        return True
    if isinstance(error, AggregateFailure):
        return any(_contains(member, test) for member in error.errors)
    return False


def _captured(exc: BaseException, metadata: Metadata, where: str) -> Err:
    trace(log, 'exception_captured', where=where, exc_type=type(exc).__name__, error=str(exc))
    return Err(wrap(exc), metadata)


class Ok(msgspec.Struct, Generic[T], frozen=True, gc=False):
    """Success variant of Result containing a value of type T.

    The unit (valueless) Result is ``Ok(None)``. Callbacks always receive
    the value, so unit callbacks receive None.

    Attributes:
        value: The successful result value.
        metadata: Side-channel context, never None.

    Examples:
        >>> Ok(42).map(lambda x: x * 2)
        Success 84
        >>> Ok(1).try_get_error()
        (True, None)
    """

    value: T
    metadata: Metadata = Metadata.EMPTY

    def __post_init__(self) -> None:
        if not isinstance(self.metadata, Metadata):
            msgspec.structs.force_setattr(self, 'metadata', _as_metadata(self.metadata))

    def is_success(self) -> bool:
        return True

    def is_faulted(self) -> bool:
        return False

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Raise since there is no failure.

        Raises:
            RuntimeError: Always.
        """
        raise RuntimeError(f'Called unwrap_err on Ok: {self.value!r}')

    def try_get_error(self) -> tuple[bool, None]:
        """Probe for an error: ``(True, None)`` means there is none."""
        return True, None

    def try_get_value(self) -> tuple[bool, T]:
        """Probe for the value: ``(True, value)``."""
        return True, self.value

    def try_get(self) -> tuple[bool, T, None]:
        return True, self.value, None

    def match(self, success: Callable[[T], U], failure: Callable[[Failure], U]) -> U:
        """Evaluate exactly one branch: ``success(value)`` here."""
        return success(self.value)

    def with_metadata(self, *sources: Any, **entries: Any) -> Ok[T]:
        """Return a copy with entries written on top of the current metadata.

        Accepts ``('key', value)``, mappings, Metadata, iterables of pairs
        and keyword entries. Later writes win, case-insensitively.
        """
        return msgspec.structs.replace(self, metadata=self.metadata.merge(*_metadata_args(sources), **entries))

    def with_metadata_from(self, configure: Callable[[MetadataBuilder], Any]) -> Ok[T]:
        """Return a copy whose metadata is rebuilt by ``configure(builder)``."""
        builder = MetadataBuilder(self.metadata)
        configure(builder)
        return msgspec.structs.replace(self, metadata=builder.build())

    def to_unit(self) -> Ok[None]:
        """Discard the value, keeping state and metadata."""
        return Ok(None, self.metadata)

    def map(self, f: Callable[[T], U], copy_metadata: bool = True) -> Ok[U]:
        """Apply a function to the contained value.

        Args:
            f: Function to apply to the Ok value.
            copy_metadata: Carry the current metadata onto the new Result.
        """
        return Ok(f(self.value), self.metadata if copy_metadata else Metadata.EMPTY)

    def bind(self, f: Callable[[T], Result[U]], copy_metadata: bool = True) -> Result[U]:
        """Apply a Result-returning function, merging metadata into its outcome.

        Metadata attached by ``f`` wins over the current metadata.
        """
        return _carry(self.metadata, f(self.value), copy_metadata)

    def then(self, f: Callable[[T], Result[Any]], copy_metadata: bool = True) -> Result[T]:
        """Run a side check, keeping the original value when it passes.

        If ``f`` fails its failure is propagated. If it succeeds the
        original value is kept and only ``f``'s metadata is taken over.
        """
        outcome = f(self.value)
        if isinstance(outcome, Err):
            return _carry(self.metadata, outcome, copy_metadata)
        if not isinstance(outcome, Ok):
            raise TypeError(f'Expected a Result, got {type(outcome).__name__}')
        if not outcome.metadata:
            return self
        return msgspec.structs.replace(self, metadata=self.metadata.merge(outcome.metadata))

    def tap(self, action: Callable[[T], Any]) -> Ok[T]:
        action(self.value)
        return self

    def tap_if(self, condition: bool | Callable[[T], bool], action: Callable[[T], Any]) -> Ok[T]:
        """Run ``action(value)`` when the condition (or ``condition(value)``) holds."""
        holds = condition(self.value) if callable(condition) else condition
        if holds:
            action(self.value)
        return self

    def tap_error(self, _action: Callable[[Failure], Any]) -> Ok[T]:
        return self

    def tap_both(self, on_success: Callable[[T], Any], on_failure: Callable[[Failure], Any]) -> Ok[T]:
        on_success(self.value)
        return self

    def ensure(
        self,
        predicate: Callable[[T], bool],
        error: Failure | Callable[[T], Failure] | str,
    ) -> Result[T]:
        """Fail with ``error`` unless ``predicate(value)`` holds.

        Args:
            predicate: Check applied to the value.
            error: A Failure, a factory called with the value, or a message.
        """
        if predicate(self.value):
            return self
        return Err(_failure_of(error, self.value), self.metadata)

    def recover(self, _fallback: U | Callable[[Failure], U]) -> Ok[T]:
        return self

    def recover_with(self, _f: Callable[[Failure], Result[T]]) -> Ok[T]:
        return self

    def compensate(self, _rollback: Callable[[Failure], Result[Any]]) -> Ok[T]:
        """Return self; the rollback only runs for failures."""
        return self

    def flatten(self, copy_metadata: bool = True) -> Result[Any]:
        """Unwrap a nested Result, merging this metadata into the inner one."""
        return _carry(self.metadata, self.value, copy_metadata)  # type: ignore[arg-type]

    def as_(self, value: U, copy_metadata: bool = True) -> Ok[U]:
        """Replace the value, keeping the success state."""
        return Ok(value, self.metadata if copy_metadata else Metadata.EMPTY)

    def value_or(self, _default: Any) -> T:
        return self.value

    def value_or_else(self, _f: Callable[[Failure], Any]) -> T:
        return self.value

    def value_or_default(self) -> T:
        return self.value

    def value_or_throw(self, _exception_factory: Callable[[Failure], BaseException] | None = None) -> T:
        return self.value

    def throw_if_failed(self) -> Ok[T]:
        return self

    def match_error(
        self,
        kind: type[Failure],
        on_match: Callable[[Any], U],
        on_else: Callable[[], U],
    ) -> U:
        return on_else()

    def get_error(self, _kind: type[Failure]) -> None:
        return None

    def has_error(self, _kind: type[Failure]) -> bool:
        return False

    def has_exception(self, _kind: type[BaseException]) -> bool:
        return False

    def map_error(self, _f: Callable[[Failure], Failure]) -> Ok[T]:
        return self

    def append_error(self, _suffix: str) -> Ok[T]:
        return self

    def prepend_error(self, _prefix: str) -> Ok[T]:
        return self

    def try_(self, f: Callable[[T], Any], copy_metadata: bool = True) -> Result[Any]:
        """Run ``f(value)``, turning a raised exception into a failure.

        This is the exception boundary of the algebra: exceptions of the
        configured capture types never escape. A Result returned by ``f``
        is merged like ``bind``; any other return value becomes ``Ok``.
        """
        metadata = self.metadata if copy_metadata else Metadata.EMPTY
        try:
            outcome = f(self.value)
        except get_config().capture as exc:
            return _captured(exc, metadata, 'try_')
        if isinstance(outcome, Ok | Err):
            return _carry(self.metadata, outcome, copy_metadata)
        return Ok(outcome, metadata)

    def if_success(self, action: Callable[[T], Any]) -> Ok[T]:
        action(self.value)
        return self

    def if_failure(self, _action: Callable[[Failure], Any]) -> Ok[T]:
        return self

    def to_optional(self) -> T:
        return self.value

    def to_maybe(self) -> Maybe[T]:
        """Convert to Maybe: Some(value), or Nothing for a None value."""
        from klaw_outcome.option import from_optional

        return from_optional(self.value)

    def __repr__(self) -> str:
        meta = self.metadata.to_string(get_config().repr_metadata_items)
        return f'Success {self.value!r}' + (f' meta={meta}' if meta else '')


class Err(msgspec.Struct, frozen=True, gc=False):
    """Failure variant of Result containing a Failure.

    Examples:
        >>> err = Err(Failure('boom'))
        >>> err.try_get_error()
        (False, Failure(code='ERROR', message='boom'))
        >>> err.value_or(0)
        0
    """

    error: Failure
    metadata: Metadata = Metadata.EMPTY

    def __post_init__(self) -> None:
        if not isinstance(self.error, Failure):
            raise TypeError(f'Err requires a Failure, got {type(self.error).__name__}; use failure(...)')
        if not isinstance(self.metadata, Metadata):
            msgspec.structs.force_setattr(self, 'metadata', _as_metadata(self.metadata))

    def is_success(self) -> bool:
        return False

    def is_faulted(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raise since there is no value.

        Raises:
            RuntimeError: Always, chained from the failure's exception.
        """
        raise RuntimeError(f'Called unwrap on Err: {self.error!r}') from self.error.to_exception()

    def unwrap_err(self) -> Failure:
        return self.error

    def try_get_error(self) -> tuple[bool, Failure]:
        """Probe for an error: ``(False, failure)`` means there is one."""
        return False, self.error

    def try_get_value(self) -> tuple[bool, None]:
        return False, None

    def try_get(self) -> tuple[bool, None, Failure]:
        return False, None, self.error

    def match(self, success: Callable[[Any], U], failure: Callable[[Failure], U]) -> U:
        return failure(self.error)

    def with_metadata(self, *sources: Any, **entries: Any) -> Err:
        return msgspec.structs.replace(self, metadata=self.metadata.merge(*_metadata_args(sources), **entries))

    def with_metadata_from(self, configure: Callable[[MetadataBuilder], Any]) -> Err:
        builder = MetadataBuilder(self.metadata)
        configure(builder)
        return msgspec.structs.replace(self, metadata=builder.build())

    def to_unit(self) -> Err:
        return self

    def map(self, _f: Callable[[Any], Any], copy_metadata: bool = True) -> Err:
        return self if copy_metadata else Err(self.error)

    def bind(self, _f: Callable[[Any], Result[Any]], copy_metadata: bool = True) -> Err:
        return self if copy_metadata else Err(self.error)

    def then(self, _f: Callable[[Any], Result[Any]], copy_metadata: bool = True) -> Err:
        return self if copy_metadata else Err(self.error)

    def tap(self, _action: Callable[[Any], Any]) -> Err:
        return self

    def tap_if(self, condition: bool | Callable[[Failure], bool], action: Callable[[Failure], Any]) -> Err:
        """No-op: ``tap_if`` only fires on the success branch."""
        return self

    def tap_error(self, action: Callable[[Failure], Any]) -> Err:
        action(self.error)
        return self

    def tap_both(self, on_success: Callable[[Any], Any], on_failure: Callable[[Failure], Any]) -> Err:
        on_failure(self.error)
        return self

    def ensure(self, _predicate: Callable[[Any], bool], _error: Any) -> Err:
        return self

    def recover(self, fallback: U | Callable[[Failure], U]) -> Ok[U]:
        """Turn the failure into a success.

        Args:
            fallback: The replacement value, or a function of the failure
                producing it.
        """
        value = fallback(self.error) if callable(fallback) else fallback
        return Ok(value, self.metadata)

    def recover_with(self, f: Callable[[Failure], Result[U]]) -> Result[U]:
        """Replace the failure with the Result returned by ``f(failure)``."""
        return _carry(self.metadata, f(self.error), True)

    def compensate(self, rollback: Callable[[Failure], Result[Any]]) -> Err:
        """Run a rollback for the failure. The failure is never erased.

        If the rollback succeeds this Result is returned as is. If it fails
        the outcome is ``AggregateFailure(original, rollback_failure)``.
        """
        outcome = rollback(self.error)
        if not isinstance(outcome, Ok | Err):
            raise TypeError(f'Expected a Result, got {type(outcome).__name__}')
        if isinstance(outcome, Ok):
            return self
        trace(log, 'compensation_failed', error=self.error.message, rollback_error=outcome.error.message)
        return Err(AggregateFailure(self.error, outcome.error), self.metadata)

    def flatten(self, copy_metadata: bool = True) -> Err:
        return self

    def as_(self, _value: Any, copy_metadata: bool = True) -> Err:
        return self

    def value_or(self, default: T) -> T:
        return default

    def value_or_else(self, f: Callable[[Failure], T]) -> T:
        """Compute a fallback from the failure."""
        return f(self.error)

    def value_or_default(self) -> None:
        return None

    def value_or_throw(self, exception_factory: Callable[[Failure], BaseException] | None = None) -> NoReturn:
        """Raise ``exception_factory(failure)`` or the failure's canonical exception."""
        if exception_factory is not None:
            raise exception_factory(self.error)
        raise self.error.to_exception()

    def throw_if_failed(self) -> NoReturn:
        raise self.error.to_exception()

    def match_error(
        self,
        kind: type[Failure],
        on_match: Callable[[Any], U],
        on_else: Callable[[], U],
    ) -> U:
        """Call ``on_match`` with the first failure of ``kind``, else ``on_else()``.

        Only the failure itself and the direct members of an aggregate are
        inspected. Nested aggregates are not searched.
        """
        found = _find(self.error, kind)
        if found is None:
            return on_else()
        return on_match(found)

    def get_error(self, kind: type[Failure]) -> Failure | None:
        """Return the first failure of ``kind`` (one level deep) or None."""
        return _find(self.error, kind)

    def has_error(self, kind: type[Failure]) -> bool:
        """Return True if a failure of ``kind`` appears at any depth."""
        return _contains(self.error, lambda error: isinstance(error, kind))

    def has_exception(self, kind: type[BaseException]) -> bool:
        """Return True if an exception of ``kind`` backs a failure at any depth."""
        return _contains(
            self.error,
            lambda error: isinstance(error, ExceptionalFailure) and isinstance(error.exception, kind),
        )

    def map_error(self, f: Callable[[Failure], Failure]) -> Err:
        return Err(f(self.error), self.metadata)

    def append_error(self, suffix: str) -> Err:
        if not suffix:
            return self
        return Err(self.error.with_message(self.error.message + suffix), self.metadata)

    def prepend_error(self, prefix: str) -> Err:
        if not prefix:
            return self
        return Err(self.error.with_message(prefix + self.error.message), self.metadata)

    def try_(self, _f: Callable[[Any], Any], copy_metadata: bool = True) -> Err:
        return self

    def if_success(self, _action: Callable[[Any], Any]) -> Err:
        return self

    def if_failure(self, action: Callable[[Failure], Any]) -> Err:
        action(self.error)
        return self

    def to_optional(self) -> None:
        return None

    def to_maybe(self) -> Maybe[Any]:
        from klaw_outcome.option import Nothing

        return Nothing

    def __repr__(self) -> str:
        reasons = len(self.error.errors) if isinstance(self.error, AggregateFailure) else 1
        meta = self.metadata.to_string(get_config().repr_metadata_items)
        text = f'Failure({self.error.message}) code={self.error.code} reasons={reasons}'
        return text + (f' meta={meta}' if meta else '')


Result: TypeAlias = Ok[T] | Err


def success(value: T = None, metadata: MetadataSource | None = None) -> Ok[T]:
    """Build a successful Result. ``success()`` is the unit Result."""
    return Ok(value, _as_metadata(metadata))


def failure(
    *errors: Failure | BaseException | str,
    metadata: MetadataSource | None = None,
) -> Err:
    """Build a failed Result.

    Args:
        *errors: A Failure, an exception (wrapped into ExceptionalFailure),
            a message (wrapped around ``Exception(message)``), or several
            Failures (wrapped into an AggregateFailure, in order).
        metadata: Metadata to attach to the Result.

    Raises:
        TypeError: For any other input.
    """
    if len(errors) > 1:
        return Err(AggregateFailure(errors), _as_metadata(metadata))
    if not errors:
        raise TypeError('failure() requires a Failure, an exception or a message')
    error = errors[0]
    if isinstance(error, Failure):
        reason = error
    elif isinstance(error, BaseException):
        reason = wrap(error)
    elif isinstance(error, str):
        reason = ExceptionalFailure(Exception(error))
    else:
        raise TypeError(f'Cannot build a failure from {type(error).__name__}')
    return Err(reason, _as_metadata(metadata))


def combine(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Collect Results into one, keeping every failure.

    Failures are gathered into an AggregateFailure in encounter order and
    the success values are then discarded. Metadata of all inputs is merged
    in order.

    Examples:
        >>> combine([success(1), success(2)]).unwrap()
        [1, 2]
        >>> combine([failure(Failure('A')), success(2), failure(Failure('B'))]).error.errors
        (Failure(code='ERROR', message='A'), Failure(code='ERROR', message='B'))
    """
    errors: list[Failure] = []
    values: list[T] = []
    metadata = Metadata.EMPTY
    for result in results:
        metadata = metadata.merge(result.metadata) if result.metadata else metadata
        if isinstance(result, Err):
            errors.append(result.error)
        else:
            values.append(result.value)
    if errors:
        return Err(AggregateFailure(errors), metadata)
    return Ok(values, metadata)


def combine_unit(results: Iterable[Result[Any]]) -> Result[None]:
    """Like ``combine`` but produce the unit Result on success."""
    return combine(results).to_unit()


def try_call(f: Callable[..., Any], *args: Any, **kwargs: Any) -> Result[Any]:
    """Call ``f``, returning its value as Ok or its exception as a failure.

    A Result returned by ``f`` is passed through as is.
    """
    try:
        outcome = f(*args, **kwargs)
    except get_config().capture as exc:
        return _captured(exc, Metadata.EMPTY, 'try_call')
    if isinstance(outcome, Ok | Err):
        return outcome
    return Ok(outcome)


def fail_validation(
    failures: Iterable[str] | str,
    extra: MetadataSource | None = None,
    metadata: MetadataSource | None = None,
) -> Err:
    return Err(ValidationFailure(failures if isinstance(failures, str) else tuple(failures), extra), _as_metadata(metadata))


def fail_not_found(
    resource: str,
    identifier: Any,
    message: str | None = None,
    metadata: MetadataSource | None = None,
) -> Err:
    return Err(NotFoundFailure(resource, str(identifier), message), _as_metadata(metadata))


def fail_conflict(message: str, metadata: MetadataSource | None = None) -> Err:
    return Err(ConflictFailure(message), _as_metadata(metadata))


def fail_unauthorized(reason: str | None = None, metadata: MetadataSource | None = None) -> Err:
    return Err(UnauthorizedFailure(reason), _as_metadata(metadata))


def fail_unauthenticated(reason: str | None = None, metadata: MetadataSource | None = None) -> Err:
    return Err(UnauthenticatedFailure(reason), _as_metadata(metadata))
