"""Core module exports."""

from udonlint.core.errors import (
    ConfigError,
    ErrorCode,
    InputError,
    InternalError,
    UdonLintError,
)
from udonlint.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from udonlint.core.progress import pluralize, progress, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InputError",
    "InternalError",
    "UdonLintError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "pluralize",
    "progress",
    "status",
]
