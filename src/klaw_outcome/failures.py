"""Failure taxonomy: plain, aggregate and exception-backed failures.

Failures are values. They travel through the Err channel of a Result and
are only turned into raised exceptions on demand (``to_exception()``,
``value_or_throw()``, ``throw_if_failed()``).

- Failure: code + message + metadata
- AggregateFailure: ordered, non-empty sequence of Failures (itself a Failure)
- ExceptionalFailure: wraps a native exception

Example:
    ```python
    try:
        load()
    except OSError as exc:
        failure = wrap_and_prepend(exc, 'loading config: ')

    failure.code
    # 'EXCEPTION'
    failure.to_exception() is exc
    # True
    ```
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Sequence
from datetime import timedelta
from enum import StrEnum
from typing import Any, Self

from klaw_outcome.metadata import Metadata, MetadataSource

__all__ = [
    'AggregateFailure',
    'ConflictFailure',
    'ErrorCodes',
    'ExceptionalFailure',
    'Failure',
    'FunctionalError',
    'NotFoundFailure',
    'TimeoutFailure',
    'UnauthenticatedFailure',
    'UnauthorizedFailure',
    'ValidationFailure',
    'to_exception',
    'wrap',
    'wrap_and_prepend',
]


class ErrorCodes(StrEnum):
    """Well-known failure codes. Any other string is a valid code too."""

    ERROR = 'ERROR'
    EXCEPTION = 'EXCEPTION'
    AGGREGATE_ERROR = 'AGGREGATE_ERROR'
    VALIDATION = 'VALIDATION'
    NOT_FOUND = 'NOT_FOUND'
    CONFLICT = 'CONFLICT'
    UNAUTHORIZED = 'UNAUTHORIZED'
    UNAUTHENTICATED = 'UNAUTHENTICATED'
    TIMEOUT = 'TIMEOUT'


def _metadata(extra: MetadataSource | None, **entries: Any) -> Metadata:
    if extra is None and not entries:
        return Metadata.EMPTY
    return Metadata(extra or (), **entries)


class Failure:
    """A single reason why an operation failed.

    Attributes:
        code: Category discriminator, e.g. ``'ERROR'`` or ``'NOT_FOUND'``.
        message: Human readable description.
        metadata: Free-form data scoped to this failure. Distinct from the
            metadata bag attached to the Result carrying it.
    """

    __slots__ = ('_code', '_message', '_metadata')

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.ERROR,
        metadata: MetadataSource | None = None,
    ) -> None:
        self._message = message
        self._code = str(code)
        self._metadata = metadata if isinstance(metadata, Metadata) else _metadata(metadata)

    @property
    def code(self) -> str:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    @property
    def metadata(self) -> Metadata:
        return self._metadata

    def with_message(self, message: str) -> Self:
        """Return a copy of this failure with a different message.

        Code, metadata and every subclass attribute are kept.
        """
        clone = copy.copy(self)
        clone._message = message
        return clone

    def to_exception(self) -> BaseException:
        """Return the canonical exception for this failure."""
        return FunctionalError(self)

    def _identity(self) -> tuple[Any, ...]:
        return (self._code, self._message, self._metadata)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Failure):
            return NotImplemented
        return type(self) is type(other) and self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash((type(self), self._code, self._message))

    def __repr__(self) -> str:
        return f'{type(self).__name__}(code={self._code!r}, message={self._message!r})'

    def __str__(self) -> str:
        return f'[{self._code}] {self._message}'


class AggregateFailure(Failure):
    """Ordered collection of failures, itself a Failure.

    Order is the order in which the producing combinator met the failures
    (first-to-fail for ``combine``, original-then-rollback for
    ``compensate``). Nested aggregates are kept as they are.

    Args:
        *errors: The failures, or a single iterable of failures.

    Raises:
        ValueError: If no failure is given.
        TypeError: If a member is not a Failure.

    Example:
        ```python
        agg = AggregateFailure(Failure('A'), Failure('B'))
        [e.message for e in agg.errors]
        # ['A', 'B']
        ```
    """

    __slots__ = ('_errors',)

    def __init__(self, *errors: Failure | Iterable[Failure]) -> None:
        if len(errors) == 1 and not isinstance(errors[0], Failure):
            errors = tuple(errors[0])
        if not errors:
            raise ValueError('AggregateFailure requires at least one failure')
        for error in errors:
            if not isinstance(error, Failure):
                raise TypeError(f'AggregateFailure members must be Failure, got {type(error).__name__}')
        super().__init__('Multiple errors occurred', ErrorCodes.AGGREGATE_ERROR)
        self._errors: tuple[Failure, ...] = tuple(errors)  # type: ignore[arg-type]

    @property
    def errors(self) -> tuple[Failure, ...]:
        return self._errors

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self):
        return iter(self._errors)

    def to_exception(self) -> BaseException:
        """Return a group holding the canonical exception of every member."""
        return BaseExceptionGroup(self._message, [error.to_exception() for error in self._errors])

    def _identity(self) -> tuple[Any, ...]:
        return (*super()._identity(), self._errors)

    def __repr__(self) -> str:
        return f'AggregateFailure({len(self._errors)} errors: {list(self._errors)!r})'


class ExceptionalFailure(Failure):
    """Failure backed by a native exception.

    The message defaults to ``str(exception)`` (the exception class name
    when that is empty). Metadata is ``extra`` plus an ``exceptionType``
    entry holding the exception's qualified class name.
    """

    __slots__ = ('_exception', '_message_override', '_extra')

    def __init__(
        self,
        exception: BaseException,
        message_override: str | None = None,
        extra: MetadataSource | None = None,
    ) -> None:
        if not isinstance(exception, BaseException):
            raise TypeError(f'ExceptionalFailure wraps an exception, got {type(exception).__name__}')
        exc_type = type(exception)
        message = message_override if message_override is not None else str(exception) or exc_type.__name__
        super().__init__(
            message,
            ErrorCodes.EXCEPTION,
            _metadata(extra, exceptionType=f'{exc_type.__module__}.{exc_type.__qualname__}'),
        )
        self._exception = exception
        self._message_override = message_override
        self._extra = extra

    @property
    def exception(self) -> BaseException:
        return self._exception

    @property
    def message_override(self) -> str | None:
        return self._message_override

    @property
    def extra(self) -> MetadataSource | None:
        return self._extra

    def with_message(self, message: str) -> Self:
        """Return a copy with a different message, recorded as the override."""
        clone = super().with_message(message)
        clone._message_override = message
        return clone

    def to_exception(self) -> BaseException:
        return self._exception

    def _identity(self) -> tuple[Any, ...]:
        return (self._code, self._message, id(self._exception))

    def __repr__(self) -> str:
        return f'ExceptionalFailure({self._exception!r}, message={self._message!r})'


class ValidationFailure(Failure):
    """One or more validation messages.

    The message is the messages joined by ``'; '``, or
    ``'Validation failed.'`` when there are none.
    """

    __slots__ = ('_failures',)

    def __init__(self, failures: Sequence[str] | str, extra: MetadataSource | None = None) -> None:
        items = (failures,) if isinstance(failures, str) else tuple(failures)
        super().__init__(
            '; '.join(items) if items else 'Validation failed.',
            ErrorCodes.VALIDATION,
            _metadata(extra, failures=items),
        )
        self._failures = items

    @property
    def failures(self) -> tuple[str, ...]:
        return self._failures


class NotFoundFailure(Failure):
    """A resource lookup that found nothing."""

    __slots__ = ('_resource', '_identifier')

    def __init__(
        self,
        resource: str,
        identifier: str,
        message_override: str | None = None,
        extra: MetadataSource | None = None,
    ) -> None:
        super().__init__(
            message_override or f"Resource '{resource}' with id '{identifier}' was not found.",
            ErrorCodes.NOT_FOUND,
            _metadata(extra, resource=resource, identifier=identifier),
        )
        self._resource = resource
        self._identifier = identifier

    @property
    def resource(self) -> str:
        return self._resource

    @property
    def identifier(self) -> str:
        return self._identifier


class ConflictFailure(Failure):
    __slots__ = ()

    def __init__(self, message: str, extra: MetadataSource | None = None) -> None:
        super().__init__(message, ErrorCodes.CONFLICT, _metadata(extra))


class UnauthorizedFailure(Failure):
    __slots__ = ()

    def __init__(self, reason: str | None = None, extra: MetadataSource | None = None) -> None:
        message = reason if reason and not reason.isspace() else 'Unauthorized'
        super().__init__(message, ErrorCodes.UNAUTHORIZED, _metadata(extra))


class UnauthenticatedFailure(Failure):
    __slots__ = ()

    def __init__(self, reason: str | None = None, extra: MetadataSource | None = None) -> None:
        super().__init__(reason or 'Unauthenticated.', ErrorCodes.UNAUTHENTICATED, _metadata(extra))


def _ms(duration: timedelta) -> str:
    millis = duration / timedelta(milliseconds=1)
    return str(int(millis)) if millis.is_integer() else str(millis)


class TimeoutFailure(Failure):
    """An operation that ran past its configured timeout."""

    __slots__ = ('_configured', '_elapsed')

    def __init__(self, configured: timedelta, elapsed: timedelta) -> None:
        super().__init__(
            f'Operation exceeded timeout of {_ms(configured)}ms after {_ms(elapsed)}ms.',
            ErrorCodes.TIMEOUT,
        )
        self._configured = configured
        self._elapsed = elapsed

    @property
    def configured(self) -> timedelta:
        return self._configured

    @property
    def elapsed(self) -> timedelta:
        return self._elapsed


class FunctionalError(Exception):
    """Exception form of a plain Failure.

    Raised by ``value_or_throw()``/``throw_if_failed()`` for failures that
    are neither exception-backed nor aggregates.
    """

    def __init__(self, failure: Failure) -> None:
        self.failure = failure
        self.code = failure.code
        self.metadata = failure.metadata
        super().__init__(failure.message)

    def to_failure(self) -> Failure:
        """Return the failure this exception was raised for."""
        return self.failure


def to_exception(failure: Failure) -> BaseException:
    """Return the canonical exception for a failure.

    - ExceptionalFailure: the wrapped exception itself
    - AggregateFailure: an exception group of the members' exceptions
    - anything else: a FunctionalError carrying code, message and metadata
    """
    return failure.to_exception()


def wrap(
    exception: BaseException,
    message_override: str | None = None,
    extra: MetadataSource | None = None,
) -> ExceptionalFailure:
    """Wrap an exception into an ExceptionalFailure."""
    return ExceptionalFailure(exception, message_override, extra)


def wrap_and_prepend(
    exception: BaseException,
    context: str | None,
    message_override: str | None = None,
    extra: MetadataSource | None = None,
) -> ExceptionalFailure:
    """Wrap an exception, prefixing its message with ``context``.

    An empty or missing context behaves exactly like ``wrap``.
    """
    if not context:
        return wrap(exception, message_override, extra)
    base = message_override if message_override is not None else str(exception) or type(exception).__name__
    return ExceptionalFailure(exception, context + base, extra)
