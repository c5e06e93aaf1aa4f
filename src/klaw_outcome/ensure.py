"""Validators that turn a failed predicate into a ValidationFailure.

Each validator is ``result.ensure(...)`` with a canned message. When a
``field`` is given the message becomes ``'<field>: <message>'``. Failed
Results pass through untouched and the predicate is never evaluated.

Example:
    ```python
    from klaw_outcome import success
    from klaw_outcome.ensure import ensure_in_range, ensure_matches

    ensure_in_range(success(150), 0, 120, field='age').error.message
    # 'age: Value must be between 0 and 120.'

    ensure_matches(success('abc-1'), r'^[a-z]+-\\d$').is_success()
    # True
    ```
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sized
from typing import Any, TypeVar

from klaw_outcome.failures import Failure, ValidationFailure
from klaw_outcome.result import Result

__all__ = [
    'ensure_all',
    'ensure_any',
    'ensure_does_not_match',
    'ensure_greater_than',
    'ensure_in_range',
    'ensure_less_than',
    'ensure_matches',
    'ensure_none',
    'ensure_not_empty',
    'ensure_not_null',
]

T = TypeVar('T')

_MISSING = object()


def _validation(message: str, field: str | None) -> Failure:
    return ValidationFailure([message if field is None else f'{field}: {message}'])


def _check(
    result: Result[T],
    predicate: Callable[[T], bool],
    message: str,
    field: str | None,
) -> Result[T]:
    return result.ensure(predicate, lambda _: _validation(message, field))


def ensure_not_null(
    result: Result[T],
    selector: Callable[[T], Any],
    message: str,
    field: str | None = None,
) -> Result[T]:
    """Fail unless ``selector(value)`` is not None."""
    return _check(result, lambda value: selector(value) is not None, message, field)


def ensure_not_empty(
    result: Result[T],
    message: str | None = None,
    field: str | None = None,
) -> Result[T]:
    """Fail when the value is an empty string or an empty collection.

    Sized values are checked with ``len``. Other iterables are probed for
    a first item, so one-shot iterators lose that item.
    """

    def has_items(value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, Sized):
            return len(value) > 0
        return next(iter(value), _MISSING) is not _MISSING

    def empty(value: Any) -> Failure:
        if message is not None:
            return _validation(message, field)
        if value is None or isinstance(value, str):
            return _validation('Value must not be empty.', field)
        return _validation('Collection must not be empty.', field)

    return result.ensure(has_items, empty)


def ensure_all(
    result: Result[Iterable[T]],
    predicate: Callable[[T], bool],
    message: str | Callable[[Iterable[T]], Failure] | None = None,
    field: str | None = None,
) -> Result[Iterable[T]]:
    """Fail unless every item satisfies ``predicate``.

    Args:
        result: Result holding a collection.
        predicate: Check applied to each item.
        message: Message override, or a factory producing the failure from
            the collection (``field`` is then ignored).
        field: Field name prefixed to the message.
    """
    if callable(message):
        return result.ensure(lambda items: all(predicate(item) for item in items), message)
    return _check(
        result,
        lambda items: all(predicate(item) for item in items),
        message or 'All items must satisfy the validation condition.',
        field,
    )


def ensure_any(
    result: Result[Iterable[T]],
    predicate: Callable[[T], bool],
    message: str | Callable[[Iterable[T]], Failure] | None = None,
    field: str | None = None,
) -> Result[Iterable[T]]:
    """Fail unless at least one item satisfies ``predicate``."""
    if callable(message):
        return result.ensure(lambda items: any(predicate(item) for item in items), message)
    return _check(
        result,
        lambda items: any(predicate(item) for item in items),
        message or 'At least one item must satisfy the validation condition.',
        field,
    )


def ensure_none(
    result: Result[Iterable[T]],
    predicate: Callable[[T], bool],
    message: str | None = None,
    field: str | None = None,
) -> Result[Iterable[T]]:
    """Fail if any item satisfies ``predicate``."""
    return _check(
        result,
        lambda items: not any(predicate(item) for item in items),
        message or 'No items must satisfy the validation condition.',
        field,
    )


def ensure_in_range(
    result: Result[T],
    minimum: T,
    maximum: T,
    message: str | None = None,
    field: str | None = None,
) -> Result[T]:
    """Fail unless ``minimum <= value <= maximum``."""
    return _check(
        result,
        lambda value: minimum <= value <= maximum,
        message or f'Value must be between {minimum} and {maximum}.',
        field,
    )


def ensure_greater_than(
    result: Result[T],
    minimum: T,
    message: str | None = None,
    field: str | None = None,
) -> Result[T]:
    return _check(result, lambda value: value > minimum, message or f'Value must be greater than {minimum}.', field)


def ensure_less_than(
    result: Result[T],
    maximum: T,
    message: str | None = None,
    field: str | None = None,
) -> Result[T]:
    return _check(result, lambda value: value < maximum, message or f'Value must be less than {maximum}.', field)


def ensure_matches(
    result: Result[str],
    pattern: str | re.Pattern[str],
    message: str | None = None,
    field: str | None = None,
) -> Result[str]:
    """Fail unless the pattern is found in the value (``re.search``)."""
    regex = re.compile(pattern)
    return _check(
        result,
        lambda value: regex.search(value) is not None,
        message or f"Value must match pattern '{regex.pattern}'.",
        field,
    )


def ensure_does_not_match(
    result: Result[str],
    pattern: str | re.Pattern[str],
    message: str | None = None,
    field: str | None = None,
) -> Result[str]:
    regex = re.compile(pattern)
    return _check(
        result,
        lambda value: regex.search(value) is None,
        message or f"Value must not match pattern '{regex.pattern}'.",
        field,
    )
