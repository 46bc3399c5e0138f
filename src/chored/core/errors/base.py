"""Base exception and exit-code registry.

Provides a centralized mapping from exception types to process exit codes,
so the CLI can turn any known failure into a consistent exit status.

Usage:
    from chored.core.errors.base import exit_code_for

    try:
        run_chore()
    except Exception as e:
        sys.exit(exit_code_for(e))
"""

from __future__ import annotations

from typing import Dict, Type


class ChoredError(Exception):
    """Base class for all errors raised by chored."""


ERROR_EXIT_CODES: Dict[Type[BaseException], int] = {}


def register_exit_code(exc_type: Type[BaseException], code: int) -> None:
    ERROR_EXIT_CODES[exc_type] = code


def exit_code_for(exc: BaseException) -> int:
    """Return the process exit status for ``exc``.

    Walks the exception's MRO so subclasses inherit their parent's code.
    Unknown exceptions exit with status 1.
    """
    for klass in type(exc).__mro__:
        code = ERROR_EXIT_CODES.get(klass)
        if code is not None:
            return code
    return 1
