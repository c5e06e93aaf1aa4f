"""Pytest configuration and shared fixtures for klaw-outcome tests."""

import pytest


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return 'asyncio'


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test starts from default configuration and silent logging."""
    from klaw_outcome._config import reset_config
    from klaw_outcome._logging import clear_log_hooks, reset_logging

    reset_config()
    yield
    reset_config()
    reset_logging()
    clear_log_hooks()


@pytest.fixture
def sample_ok():
    """Sample Ok value carrying metadata."""
    from klaw_outcome import success

    return success(42, metadata={'traceId': 'abc'})


@pytest.fixture
def sample_err():
    """Sample Err value carrying metadata."""
    from klaw_outcome import Failure, failure

    return failure(Failure('test error'), metadata={'traceId': 'abc'})


@pytest.fixture
def sample_some():
    """Sample Some value for testing."""
    from klaw_outcome import Some

    return Some('hello')


@pytest.fixture
def sample_nothing():
    """Sample Nothing value for testing."""
    from klaw_outcome import Nothing

    return Nothing
