"""@safe and @safe_async decorators: the Try boundary as a decorator."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar, overload

import wrapt

from klaw_outcome._config import get_config
from klaw_outcome._logging import get_logger, trace
from klaw_outcome.failures import wrap_and_prepend
from klaw_outcome.result import Err, Ok, Result

__all__ = ['safe', 'safe_async']

P = ParamSpec('P')
T = TypeVar('T')

log = get_logger(__name__)


def _lift(value: Any) -> Result[Any]:
    if isinstance(value, Ok | Err):
        return value
    return Ok(value)


def _caught(exc: BaseException, wrapped: Callable[..., Any], context: str | None) -> Err:
    trace(
        log,
        'exception_captured',
        where=getattr(wrapped, '__qualname__', repr(wrapped)),
        exc_type=type(exc).__name__,
        error=str(exc),
    )
    return Err(wrap_and_prepend(exc, context))


@overload
def safe(func: Callable[P, T]) -> Callable[P, Result[T]]: ...


@overload
def safe(
    func: None = None,
    *,
    exceptions: tuple[type[BaseException], ...] | None = None,
    context: str | None = None,
) -> Callable[[Callable[P, T]], Callable[P, Result[T]]]: ...


def safe(
    func: Callable[P, T] | None = None,
    *,
    exceptions: tuple[type[BaseException], ...] | None = None,
    context: str | None = None,
) -> Any:
    """Decorator that turns raised exceptions into failed Results.

    The wrapped function returns ``Ok(value)`` on success and
    ``Err(ExceptionalFailure)`` when it raises one of ``exceptions``.
    A Result returned by the function is passed through unchanged.

    Can be used with or without arguments:
        @safe
        def risky(): ...

        @safe(exceptions=(ValueError, TypeError), context='parsing: ')
        def specific(): ...

    Args:
        func: The function to wrap (when used without parentheses).
        exceptions: Exception types to catch. Defaults to
            ``get_config().capture``, read at call time.
        context: Text prefixed to the failure message.

    Example:
        ```python
        @safe
        def divide(a: int, b: int) -> float:
            return a / b
        divide(10, 2)
        # Success 5.0
        divide(10, 0).error.message
        # 'division by zero'
        ```
    """

    @wrapt.decorator
    def wrapper(
        wrapped: Callable[P, T],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Result[Any]:
        catch = exceptions if exceptions is not None else get_config().capture
        try:
            value = wrapped(*args, **kwargs)
        except catch as e:
            return _caught(e, wrapped, context)
        return _lift(value)

    if func is not None:
        return wrapper(func)
    return wrapper


@overload
def safe_async(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[Result[T]]]: ...


@overload
def safe_async(
    func: None = None,
    *,
    exceptions: tuple[type[BaseException], ...] | None = None,
    context: str | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[Result[T]]]]: ...


def safe_async(
    func: Callable[P, Awaitable[T]] | None = None,
    *,
    exceptions: tuple[type[BaseException], ...] | None = None,
    context: str | None = None,
) -> Any:
    """Async decorator that turns raised exceptions into failed Results.

    Same contract as ``@safe`` for coroutine functions. Cancellation is
    never captured unless ``exceptions`` names it explicitly.

    Example:
        ```python
        @safe_async(context='fetching profile: ')
        async def fetch(url: str) -> str:
            return await http_get(url)

        result = await ResultTask(fetch(url)).map(parse)
        ```
    """

    @wrapt.decorator
    async def wrapper(
        wrapped: Callable[P, Awaitable[T]],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Result[Any]:
        catch = exceptions if exceptions is not None else get_config().capture
        try:
            value = await wrapped(*args, **kwargs)
        except catch as e:
            return _caught(e, wrapped, context)
        return _lift(value)

    if func is not None:
        return wrapper(func)
    return wrapper
