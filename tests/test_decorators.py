"""Tests for decorators: @safe, @safe_async."""

import pytest

from klaw_outcome import Err, ExceptionalFailure, Failure, Ok, failure, init, safe, safe_async


class TestSafeDecorator:
    """Tests for @safe decorator."""

    def test_safe_returns_ok_on_success(self):
        """@safe wraps successful return in Ok."""

        @safe
        def divide(a: int, b: int) -> float:
            return a / b

        assert divide(10, 2) == Ok(5.0)

    def test_safe_returns_err_on_exception(self):
        """@safe catches exception and returns Err."""

        @safe
        def divide(a: int, b: int) -> float:
            return a / b

        result = divide(10, 0)
        assert isinstance(result, Err)
        assert isinstance(result.error, ExceptionalFailure)
        assert isinstance(result.error.exception, ZeroDivisionError)
        assert result.error.message == 'division by zero'

    def test_safe_with_exceptions_param(self):
        """@safe(exceptions=...) catches only specified exceptions."""

        @safe(exceptions=(ValueError,))
        def risky(x: int) -> int:
            if x < 0:
                raise ValueError('negative')
            if x == 0:
                raise TypeError('zero')
            return x

        assert risky(5) == Ok(5)
        assert isinstance(risky(-1).error.exception, ValueError)

        with pytest.raises(TypeError):
            risky(0)

    def test_safe_with_context(self):
        """context is prefixed to the failure message."""

        @safe(context='parsing: ')
        def parse(text: str) -> int:
            return int(text)

        assert parse('x').error.message.startswith('parsing: ')

    def test_safe_passes_results_through(self):
        """A returned Result is not wrapped again."""

        @safe
        def lookup(key: str):
            return failure(Failure(f'{key} missing'))

        assert lookup('a').error == Failure('a missing')

    def test_safe_uses_configured_capture(self):
        """Without exceptions=, the configured capture types apply at call time."""

        @safe
        def explode():
            raise KeyError('k')

        assert explode().is_faulted()
        init(capture=(ValueError,))
        with pytest.raises(KeyError):
            explode()

    def test_safe_preserves_function_name(self):
        """@safe preserves function metadata."""

        @safe
        def my_function():
            """My docstring."""
            return 1

        assert my_function.__name__ == 'my_function'
        assert my_function.__doc__ == 'My docstring.'

    def test_safe_on_method(self):
        """@safe works on methods."""

        class Parser:
            @safe
            def parse(self, text: str) -> int:
                return int(text)

        assert Parser().parse('3') == Ok(3)
        assert Parser().parse('x').is_faulted()


class TestSafeAsyncDecorator:
    """Tests for @safe_async decorator."""

    @pytest.mark.anyio
    async def test_returns_ok(self):
        @safe_async
        async def fetch(x: int) -> int:
            return x * 2

        assert await fetch(2) == Ok(4)

    @pytest.mark.anyio
    async def test_returns_err(self):
        @safe_async(context='fetching: ')
        async def fetch(x: int) -> int:
            raise ConnectionError('refused')

        result = await fetch(1)
        assert isinstance(result.error.exception, ConnectionError)
        assert result.error.message == 'fetching: refused'

    @pytest.mark.anyio
    async def test_narrow_exceptions(self):
        @safe_async(exceptions=(ValueError,))
        async def fetch() -> int:
            raise TypeError('nope')

        with pytest.raises(TypeError):
            await fetch()

    @pytest.mark.anyio
    async def test_passes_results_through(self):
        @safe_async
        async def fetch():
            return Ok(1, {'k': 'v'})

        assert (await fetch()).metadata['k'] == 'v'
