"""Terminal output for CLI errors."""

import sys
import traceback
from typing import Optional, TextIO

import click


def _is_tty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def format_exception(exc: BaseException, color: bool) -> str:
    """Render ``exc`` with its traceback.

    With ``color``, everything up to and including the exception message
    is red and bold, and the stack frames that follow are dimmed.
    """
    text = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    if not color:
        return text

    header = "".join(traceback.format_exception_only(type(exc), exc))
    stack = "".join(traceback.format_tb(exc.__traceback__))
    return click.style(header, fg="red", bold=True) + click.style(stack, dim=True)


def print_exception(exc: BaseException, stream: Optional[TextIO] = None) -> None:
    """Print an uncaught exception to stderr, highlighted on a terminal."""
    out = stream if stream is not None else sys.stderr
    click.echo(format_exception(exc, color=_is_tty(out)), file=out, nl=False)
