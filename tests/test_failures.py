"""Tests for the failure taxonomy and exception conversion."""

from datetime import timedelta

import pytest

from klaw_outcome import (
    AggregateFailure,
    ConflictFailure,
    ErrorCodes,
    ExceptionalFailure,
    Failure,
    FunctionalError,
    NotFoundFailure,
    TimeoutFailure,
    UnauthenticatedFailure,
    UnauthorizedFailure,
    ValidationFailure,
    to_exception,
    wrap,
    wrap_and_prepend,
)


class TestFailure:
    """Tests for the base Failure."""

    def test_defaults(self):
        """Failure defaults to the ERROR code and empty metadata."""
        error = Failure('boom')
        assert error.code == ErrorCodes.ERROR
        assert error.message == 'boom'
        assert len(error.metadata) == 0

    def test_custom_code_and_metadata(self):
        """Code and metadata are kept."""
        error = Failure('boom', 'CUSTOM', {'Field': 'name'})
        assert error.code == 'CUSTOM'
        assert error.metadata['field'] == 'name'

    def test_equality(self):
        """Failures compare by type, code, message and metadata."""
        assert Failure('a') == Failure('a')
        assert Failure('a') != Failure('b')
        assert Failure('a') != ConflictFailure('a')
        assert hash(Failure('a')) == hash(Failure('a'))

    def test_is_immutable(self):
        """Failure attributes are read-only."""
        error = Failure('boom')
        with pytest.raises(AttributeError):
            error.message = 'other'  # type: ignore[misc]

    def test_with_message_keeps_everything_else(self):
        """with_message replaces only the message."""
        error = NotFoundFailure('user', '7')
        renamed = error.with_message('gone')
        assert renamed.message == 'gone'
        assert renamed.code == ErrorCodes.NOT_FOUND
        assert renamed.resource == 'user'
        assert isinstance(renamed, NotFoundFailure)
        assert error.message != 'gone'

    def test_str(self):
        """str() shows code and message."""
        assert str(Failure('boom')) == '[ERROR] boom'


class TestAggregateFailure:
    """Tests for AggregateFailure."""

    def test_order_preserved(self):
        """Members keep the supplied order."""
        agg = AggregateFailure(Failure('A'), Failure('B'))
        assert [e.message for e in agg.errors] == ['A', 'B']
        assert agg.code == ErrorCodes.AGGREGATE_ERROR
        assert agg.message == 'Multiple errors occurred'

    def test_accepts_iterable(self):
        """A single iterable of failures is unpacked."""
        agg = AggregateFailure([Failure('A'), Failure('B')])
        assert len(agg) == 2

    def test_empty_rejected(self):
        """An aggregate needs at least one failure."""
        with pytest.raises(ValueError):
            AggregateFailure()
        with pytest.raises(ValueError):
            AggregateFailure([])

    def test_non_failure_rejected(self):
        """Members must be Failures."""
        with pytest.raises(TypeError):
            AggregateFailure(Failure('A'), 'B')  # type: ignore[arg-type]

    def test_nesting_preserved(self):
        """Nested aggregates are kept as they are."""
        inner = AggregateFailure(Failure('A'))
        outer = AggregateFailure(inner, Failure('B'))
        assert outer.errors[0] is inner


class TestExceptionalFailure:
    """Tests for exception-backed failures."""

    def test_wrap(self):
        """wrap keeps the exception and its message."""
        exc = ValueError('bad value')
        error = wrap(exc)
        assert isinstance(error, ExceptionalFailure)
        assert error.exception is exc
        assert error.code == ErrorCodes.EXCEPTION
        assert error.message == 'bad value'
        assert error.metadata['exceptionType'] == 'builtins.ValueError'

    def test_override_and_extra(self):
        """A message override and extra metadata are honoured."""
        error = wrap(KeyError('k'), 'lookup failed', {'table': 'users'})
        assert error.message == 'lookup failed'
        assert error.metadata['table'] == 'users'
        assert 'exceptionType' in error.metadata

    def test_empty_message_falls_back_to_type(self):
        """An exception without a message reports its class name."""
        assert wrap(RuntimeError()).message == 'RuntimeError'

    def test_wrap_and_prepend(self):
        """Context is prefixed to the message."""
        error = wrap_and_prepend(OSError('disk full'), 'saving: ')
        assert error.message == 'saving: disk full'

    @pytest.mark.parametrize('context', [None, ''])
    def test_wrap_and_prepend_without_context(self, context):
        """Empty context behaves like wrap."""
        assert wrap_and_prepend(OSError('disk full'), context).message == 'disk full'

    def test_with_message_updates_override(self):
        """A renamed exceptional failure reports the new message as its override."""
        exc = ValueError('x')
        renamed = wrap(exc).with_message('ctx: x')
        assert renamed.message == 'ctx: x'
        assert renamed.message_override == 'ctx: x'
        assert renamed.exception is exc

    def test_non_exception_rejected(self):
        """Only exceptions can be wrapped."""
        with pytest.raises(TypeError):
            ExceptionalFailure('not an exception')  # type: ignore[arg-type]


class TestDomainFailures:
    """Tests for the domain-specific failures."""

    def test_validation(self):
        """Validation messages are joined."""
        error = ValidationFailure(['name required', 'age invalid'])
        assert error.message == 'name required; age invalid'
        assert error.code == ErrorCodes.VALIDATION
        assert error.metadata['failures'] == ('name required', 'age invalid')

    def test_validation_empty(self):
        """An empty validation has a default message."""
        assert ValidationFailure([]).message == 'Validation failed.'

    def test_not_found(self):
        """NotFound builds its message from resource and id."""
        error = NotFoundFailure('user', '42')
        assert error.message == "Resource 'user' with id '42' was not found."
        assert error.metadata['resource'] == 'user'
        assert error.metadata['identifier'] == '42'

    def test_unauthorized_default(self):
        """Blank reasons fall back to the default message."""
        assert UnauthorizedFailure().message == 'Unauthorized'
        assert UnauthorizedFailure('   ').message == 'Unauthorized'
        assert UnauthorizedFailure('no access').message == 'no access'

    def test_unauthenticated_default(self):
        assert UnauthenticatedFailure().message == 'Unauthenticated.'
        assert UnauthenticatedFailure().code == ErrorCodes.UNAUTHENTICATED

    def test_conflict(self):
        assert ConflictFailure('version mismatch').code == ErrorCodes.CONFLICT

    def test_timeout(self):
        """Timeout reports both durations in milliseconds."""
        error = TimeoutFailure(timedelta(seconds=1), timedelta(milliseconds=1500))
        assert error.message == 'Operation exceeded timeout of 1000ms after 1500ms.'
        assert error.code == ErrorCodes.TIMEOUT


class TestToException:
    """Tests for canonical exception conversion."""

    def test_exceptional_returns_original(self):
        """Exception-backed failures unwrap to the original exception."""
        exc = ValueError('boom')
        assert to_exception(wrap(exc)) is exc

    def test_plain_failure(self):
        """Plain failures become FunctionalError."""
        exc = to_exception(Failure('boom', 'CUSTOM', {'k': 'v'}))
        assert isinstance(exc, FunctionalError)
        assert str(exc) == 'boom'
        assert exc.code == 'CUSTOM'
        assert exc.metadata['k'] == 'v'
        assert exc.to_failure() == Failure('boom', 'CUSTOM', {'k': 'v'})

    def test_aggregate_becomes_group(self):
        """Aggregates become an exception group of member exceptions."""
        inner = ValueError('a')
        exc = to_exception(AggregateFailure(wrap(inner), Failure('b')))
        assert isinstance(exc, ExceptionGroup)
        assert exc.exceptions[0] is inner
        assert isinstance(exc.exceptions[1], FunctionalError)

    def test_aggregate_with_base_exception(self):
        """Non-Exception members produce a BaseExceptionGroup."""
        exc = to_exception(AggregateFailure(wrap(KeyboardInterrupt())))
        assert isinstance(exc, BaseExceptionGroup)
        assert not isinstance(exc, ExceptionGroup)
