"""Tests for the ensure_* validators."""

import re

import pytest

from klaw_outcome import ConflictFailure, Failure, ValidationFailure, failure, success
from klaw_outcome.ensure import (
    ensure_all,
    ensure_any,
    ensure_does_not_match,
    ensure_greater_than,
    ensure_in_range,
    ensure_less_than,
    ensure_matches,
    ensure_none,
    ensure_not_empty,
    ensure_not_null,
)


class TestScalarValidators:
    """Tests for null, range and comparison validators."""

    def test_not_null(self):
        ok = success({'name': 'ada'})
        assert ensure_not_null(ok, lambda v: v.get('name'), 'name required') is ok
        result = ensure_not_null(ok, lambda v: v.get('email'), 'required', field='email')
        assert isinstance(result.error, ValidationFailure)
        assert result.error.failures == ('email: required',)

    def test_in_range(self):
        assert ensure_in_range(success(5), 0, 10).is_success()
        assert ensure_in_range(success(10), 0, 10).is_success()
        result = ensure_in_range(success(150), 0, 120, field='age')
        assert result.error.message == 'age: Value must be between 0 and 120.'

    def test_greater_and_less(self):
        assert ensure_greater_than(success(2), 1).is_success()
        assert ensure_greater_than(success(1), 1).error.message == 'Value must be greater than 1.'
        assert ensure_less_than(success(1), 2).is_success()
        assert ensure_less_than(success(2), 2, 'too big').error.message == 'too big'

    def test_metadata_kept(self):
        result = ensure_greater_than(success(0, metadata={'trace': 't'}), 1)
        assert result.metadata['trace'] == 't'

    def test_failures_pass_through(self):
        """Validators never evaluate on a failed Result."""
        err = failure(Failure('earlier'))
        assert ensure_in_range(err, 0, 1) is err
        assert ensure_not_null(err, lambda _: pytest.fail('evaluated'), 'x') is err


class TestEmptiness:
    """Tests for ensure_not_empty."""

    @pytest.mark.parametrize('value', ['x', [1], {'a': 1}, (0,)])
    def test_non_empty(self, value):
        assert ensure_not_empty(success(value)).is_success()

    def test_empty_string(self):
        assert ensure_not_empty(success('')).error.message == 'Value must not be empty.'

    def test_none(self):
        assert ensure_not_empty(success(None)).error.message == 'Value must not be empty.'

    def test_empty_collection(self):
        assert ensure_not_empty(success([])).error.message == 'Collection must not be empty.'

    def test_unsized_iterable(self):
        assert ensure_not_empty(success(iter([1]))).is_success()
        assert ensure_not_empty(success(iter([]))).is_faulted()

    def test_custom_message_and_field(self):
        result = ensure_not_empty(success([]), 'need tags', field='tags')
        assert result.error.message == 'tags: need tags'


class TestCollectionValidators:
    """Tests for ensure_all, ensure_any and ensure_none."""

    def test_all(self):
        assert ensure_all(success([2, 4]), lambda x: x % 2 == 0).is_success()
        result = ensure_all(success([2, 3]), lambda x: x % 2 == 0)
        assert result.error.message == 'All items must satisfy the validation condition.'

    def test_all_with_factory(self):
        result = ensure_all(success([2, 3]), lambda x: x % 2 == 0, lambda items: ConflictFailure(f'{items}'))
        assert result.error == ConflictFailure('[2, 3]')

    def test_any(self):
        assert ensure_any(success([1, 2]), lambda x: x > 1).is_success()
        assert ensure_any(success([]), lambda x: x > 1).is_faulted()

    def test_none(self):
        assert ensure_none(success([1, 2]), lambda x: x > 5).is_success()
        assert ensure_none(success([1, 6]), lambda x: x > 5, 'too big').error.message == 'too big'


class TestPatterns:
    """Tests for ensure_matches and ensure_does_not_match."""

    def test_matches(self):
        assert ensure_matches(success('abc-1'), r'^[a-z]+-\d$').is_success()
        result = ensure_matches(success('abc'), r'\d')
        assert result.error.message == "Value must match pattern '\\d'."

    def test_matches_searches(self):
        """Patterns are searched, not anchored."""
        assert ensure_matches(success('xx42yy'), r'\d+').is_success()

    def test_compiled_pattern(self):
        assert ensure_matches(success('ABC'), re.compile('abc', re.IGNORECASE)).is_success()

    def test_does_not_match(self):
        assert ensure_does_not_match(success('clean'), r'\s').is_success()
        result = ensure_does_not_match(success('has space'), r'\s', field='slug')
        assert result.error.message == "slug: Value must not match pattern '\\s'."
