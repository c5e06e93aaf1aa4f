"""klaw-outcome: Maybe and Result types with metadata and structured failures.

Flat imports (preferred):
    from klaw_outcome import Result, Ok, Err, success, failure
    from klaw_outcome import Maybe, Some, Nothing, ResultTask, safe

Submodule imports (for organization):
    from klaw_outcome.failures import NotFoundFailure, wrap_and_prepend
    from klaw_outcome.ensure import ensure_in_range
    from klaw_outcome.async_ import ResultTask, combine_async
"""

# Metadata
from klaw_outcome.metadata import Metadata, MetadataBuilder

# Failures
from klaw_outcome.failures import (
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

# Types
from klaw_outcome.option import Maybe, Nothing, NothingType, Some, from_optional, none, some
from klaw_outcome.result import (
    Err,
    Ok,
    Result,
    combine,
    combine_unit,
    fail_conflict,
    fail_not_found,
    fail_unauthenticated,
    fail_unauthorized,
    fail_validation,
    failure,
    success,
    try_call,
)

# Decorators
from klaw_outcome.decorators import safe, safe_async

# Assertions
from klaw_outcome.assertions import assert_result, safe_assert

# Async
from klaw_outcome.async_ import MaybeTask, ResultTask, combine_async, combine_unit_async

# Configuration and logging
from klaw_outcome._config import OutcomeConfig, get_config, init
from klaw_outcome._logging import add_log_hook, clear_log_hooks, configure_logging, remove_log_hook

__all__ = [
    'AggregateFailure',
    'ConflictFailure',
    'Err',
    'ErrorCodes',
    'ExceptionalFailure',
    'Failure',
    'FunctionalError',
    'Maybe',
    'MaybeTask',
    'Metadata',
    'MetadataBuilder',
    'NotFoundFailure',
    'Nothing',
    'NothingType',
    'Ok',
    'OutcomeConfig',
    'Result',
    'ResultTask',
    'Some',
    'TimeoutFailure',
    'UnauthenticatedFailure',
    'UnauthorizedFailure',
    'ValidationFailure',
    'add_log_hook',
    'assert_result',
    'clear_log_hooks',
    'combine',
    'combine_async',
    'combine_unit',
    'combine_unit_async',
    'configure_logging',
    'fail_conflict',
    'fail_not_found',
    'fail_unauthenticated',
    'fail_unauthorized',
    'fail_validation',
    'failure',
    'from_optional',
    'get_config',
    'init',
    'none',
    'remove_log_hook',
    'safe',
    'safe_assert',
    'safe_async',
    'some',
    'success',
    'to_exception',
    'try_call',
    'wrap',
    'wrap_and_prepend',
]

__version__ = '0.1.0'
