from pathlib import Path

import click

import chored
from chored.config import get_config


def about() -> None:
    """Show which chored is running and how it is configured."""
    config = get_config()
    click.echo(f"chored {chored.__version__}")
    click.echo(f"running from: {Path(chored.__file__).parent}")
    click.echo(f"task root: {config.task_root}")
    if config.loaded_files:
        click.echo("config files:")
        for path in config.loaded_files:
            click.echo(f"  {path}")


__all__ = ["about"]
