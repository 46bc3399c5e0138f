"""Shared fixtures for CLI tests."""

import pytest
from click.testing import CliRunner

HELLO_CHORES = '''\
import click


def default(name="world"):
    """Say hello."""
    click.echo(f"hello {name}")


async def build(release=False):
    click.echo(f"built release={release}")


def fail():
    raise RuntimeError("kaboom")
'''


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def task_root(tmp_path, monkeypatch):
    """A task root with a single ``hello`` module; cwd has no config file."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CHORED_CONFIG_FILE", raising=False)
    monkeypatch.delenv("CHORED_TASK_ROOT", raising=False)
    root = tmp_path / "choredefs"
    root.mkdir()
    (root / "hello.py").write_text(HELLO_CHORES)
    return root
