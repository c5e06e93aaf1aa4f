"""safe_assert and assert_result utilities.

Provides assertion utilities that work with Result types:
- safe_assert: Always runs, even with python -O
- assert_result: Returns the unit Result based on a condition
"""

from __future__ import annotations

from collections.abc import Callable

from klaw_outcome.failures import Failure
from klaw_outcome.result import Result, failure, success

__all__ = ['assert_result', 'safe_assert']


def safe_assert(condition: bool, message: str = '') -> None:
    """Assert that works even in optimized mode (-O flag).

    Unlike the built-in assert, this always executes regardless of __debug__.

    Args:
        condition: The condition to check.
        message: Optional error message if assertion fails.

    Raises:
        AssertionError: If condition is False.

    Example:
        ```python
        safe_assert(1 + 1 == 2)  # passes
        safe_assert(False, 'This always fails')  # raises AssertionError
        ```
    """
    if not condition:
        raise AssertionError(message)


def assert_result(
    condition: bool,
    error: Failure | str | Callable[[], Failure | str],
) -> Result[None]:
    """Return ``success()`` if condition is True, else a failure.

    Useful to start a validation chain with ``then``/``bind``.

    Args:
        condition: The condition to check.
        error: A Failure, a message (becomes a plain Failure), or a
            zero-argument factory called only when the condition is False.

    Example:
        ```python
        assert_result(True, 'error')
        # Success None

        assert_result(False, 'validation failed').error.message
        # 'validation failed'

        def validate_user(name: str, age: int) -> Result[dict]:
            return (
                assert_result(len(name) > 0, 'name required')
                .then(lambda _: assert_result(age >= 0, 'age must be non-negative'))
                .as_({'name': name, 'age': age})
            )
        ```
    """
    if condition:
        return success()
    if not isinstance(error, Failure | str):
        error = error()
    if isinstance(error, str):
        error = Failure(error)
    return failure(error)
