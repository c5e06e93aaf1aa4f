"""Library configuration: OutcomeConfig and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from klaw_outcome._logging import configure_logging

__all__ = [
    'OutcomeConfig',
    'get_config',
    'init',
    'reset_config',
]

_TRUTHY = ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class OutcomeConfig:
    """Configuration for klaw-outcome.

    Attributes:
        log_level: Logging level (e.g., "DEBUG"). None = silent.
        json_logs: Render logs as JSON instead of console output.
        repr_metadata_items: Metadata entries shown by ``repr()`` of a Result.
        capture: Exception types turned into failures at the Try boundary
            (``try_``, ``try_call``, ``@safe``). Anything else propagates.
    """

    log_level: str | None = None
    json_logs: bool = True
    repr_metadata_items: int = 2
    capture: tuple[type[BaseException], ...] = (Exception,)


# Global configuration (set by init(), or lazily by get_config())
_config: OutcomeConfig | None = None


def _env_flag(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name, '').strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logging.warning("Invalid %s value '%s', ignoring", name, raw)
        return None


def init(
    log_level: str | None = None,
    json_logs: bool | None = None,
    repr_metadata_items: int | None = None,
    capture: tuple[type[BaseException], ...] | None = None,
) -> OutcomeConfig:
    """Initialize klaw-outcome with the specified configuration.

    Arguments left as None fall back to ``KLAW_OUTCOME_LOG_LEVEL``,
    ``KLAW_OUTCOME_JSON_LOGS`` and ``KLAW_OUTCOME_REPR_ITEMS``, then to the
    OutcomeConfig defaults.

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). None = silent.
        json_logs: Emit JSON logs rather than console output.
        repr_metadata_items: Metadata entries rendered by ``repr()``.
        capture: Exception types caught at the Try boundary.

    Returns:
        The OutcomeConfig that was set.

    Example:
        ```python
        from klaw_outcome import init

        init(log_level='DEBUG', json_logs=False)
        init(capture=(ValueError, KeyError))
        ```
    """
    global _config  # noqa: PLW0603

    if log_level is None:
        log_level = os.environ.get('KLAW_OUTCOME_LOG_LEVEL') or None
    if json_logs is None:
        json_logs = _env_flag('KLAW_OUTCOME_JSON_LOGS')
    if repr_metadata_items is None:
        repr_metadata_items = _env_int('KLAW_OUTCOME_REPR_ITEMS')
    if capture is not None:
        capture = tuple(capture)
        if not capture or not all(isinstance(kind, type) and issubclass(kind, BaseException) for kind in capture):
            msg = 'capture must be a non-empty tuple of exception types'
            raise TypeError(msg)

    defaults = OutcomeConfig()
    _config = OutcomeConfig(
        log_level=log_level,
        json_logs=defaults.json_logs if json_logs is None else json_logs,
        repr_metadata_items=defaults.repr_metadata_items if repr_metadata_items is None else repr_metadata_items,
        capture=defaults.capture if capture is None else capture,
    )

    # Configure logging if level specified
    if log_level is not None:
        configure_logging(log_level, json_output=_config.json_logs)

    return _config


def get_config() -> OutcomeConfig:
    """Get the current configuration, initializing defaults on first use.

    Example:
        ```python
        from klaw_outcome import init, get_config

        init(repr_metadata_items=5)
        get_config().repr_metadata_items  # 5
        ```
    """
    if _config is None:
        return init()
    return _config


def reset_config() -> None:
    """Forget the current configuration. The next get_config() re-reads the environment."""
    global _config  # noqa: PLW0603
    _config = None
