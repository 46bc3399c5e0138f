"""chored CLI entry point."""

import asyncio
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from chored.cli.args import parse_args
from chored.cli.logging import cli_command, get_cli_logger
from chored.cli.output import print_exception
from chored.config import ChoredConfig, set_config
from chored.core.entrypoint import Resolver
from chored.core.errors import exit_code_for

logger = get_cli_logger()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_config(
    config_file: Optional[str],
    task_root: Optional[Path],
    log_level: Optional[str],
) -> ChoredConfig:
    """Build the process configuration, CLI flags taking priority."""
    config = ChoredConfig.from_env(config_file)
    if task_root is not None:
        config.task_root = task_root
    if log_level is not None:
        config.log_level = log_level.upper()
    set_config(config)
    config.setup_logging()
    return config


@click.command(
    "chored",
    context_settings={
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    },
    add_help_option=False,
)
@click.option(
    "--task-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory containing task modules (default: ./choredefs).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to a chored.toml configuration file.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level for chored's own messages.",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
@cli_command("chored")
def cli(
    ctx: click.Context,
    task_root: Optional[Path],
    config_file: Optional[str],
    log_level: Optional[str],
    args: Tuple[str, ...],
) -> None:
    """Run a chore: chored [MODULE] CHORE [OPTIONS]

    Use `chored --help` for the option syntax and `chored --list` to see
    available chores.
    """
    config = load_config(config_file, task_root, log_level)

    try:
        parsed = parse_args(args)
        resolver = Resolver(config.task_root)
        if parsed.action == "list":
            resolver.print_list(parsed.main)
        elif parsed.action == "help":
            resolver.print_help(parsed.main)
        else:
            asyncio.run(resolver.run(parsed.main, parsed.opts))
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        ctx.exit(130)
    except Exception as e:
        print_exception(e, sys.stderr)
        ctx.exit(exit_code_for(e))


def main() -> None:
    """Console script entry point."""
    cli(prog_name="chored")


if __name__ == "__main__":
    main()
