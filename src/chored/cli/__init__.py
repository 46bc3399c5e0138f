"""Command-line interface for chored.

``chored [--task-root DIR] [MODULE] CHORE [OPTIONS]`` resolves a chore
and runs it. See :mod:`chored.cli.args` for the option grammar.
"""

from chored.cli.main import cli, main

__all__ = ["cli", "main"]
