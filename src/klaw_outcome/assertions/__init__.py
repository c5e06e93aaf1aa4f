"""Assertion utilities: safe_assert and assert_result."""

from klaw_outcome.assertions.safe import assert_result, safe_assert

__all__ = [
    'assert_result',
    'safe_assert',
]
