"""Logging helpers for CLI commands."""

import functools
import logging
import time
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

CLI_LOGGER_NAME = "chored.cli"


def get_cli_logger() -> logging.Logger:
    """Logger shared by CLI command modules."""
    return logging.getLogger(CLI_LOGGER_NAME)


def cli_command(name: str) -> Callable[[F], F]:
    """Log start and finish of a CLI command at DEBUG.

    Args:
        name: command name used in log messages
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_cli_logger()
            logger.debug("Command %s started", name)
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                logger.debug("Command %s finished in %.3fs", name, time.perf_counter() - start)

        return wrapper  # type: ignore[return-value]

    return decorator
