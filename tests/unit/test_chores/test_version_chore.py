"""Tests for the version chores."""

from unittest.mock import AsyncMock, patch

import pytest

from chored.chores import version as version_chores
from chored.chores.version import bump_version, choose_template, make
from chored.cli.args import parse_args
from chored.config import BumpSettings, ChoredConfig, set_config
from chored.core.entrypoint import option_kwargs
from chored.core.errors import ValidationError
from chored.core.github import RunEnv
from chored.core.versioning import DEFAULT_CONTEXT, BumpOptions, Context, DescribedVersion, VersionTemplate

PR_ENV = RunEnv(event="pull_request", pull_request_branch="feature", pull_request_target="v3.x")


def implicit(value):
    return AsyncMock(return_value=value)


@pytest.fixture
def engine():
    """Patch the bump engine; yields the Engine class mock."""
    with patch("chored.chores.version.Engine") as engine_cls:
        engine_cls.return_value.bump = AsyncMock(return_value=None)
        yield engine_cls


@pytest.fixture
def branch():
    with patch("chored.core.git.branch_name", AsyncMock(return_value="main")) as branch_name:
        yield branch_name


@pytest.fixture(autouse=True)
def config():
    config = ChoredConfig()
    set_config(config)
    return config


def bump_opts(engine):
    return engine.return_value.bump.await_args.args[0]


class TestChooseTemplate:
    @pytest.mark.asyncio
    async def test_explicit_wins(self):
        template = await choose_template("1.x", implicit("v2.x"), "3.x")
        assert template == VersionTemplate.parse("1.x")

    @pytest.mark.asyncio
    async def test_explicit_must_parse(self):
        with pytest.raises(ValidationError):
            await choose_template("main", implicit(None), None)

    @pytest.mark.asyncio
    async def test_implicit_when_it_parses(self):
        assert await choose_template(None, implicit("v2.x"), "3.x") == VersionTemplate.parse("2.x")

    @pytest.mark.asyncio
    async def test_non_template_branch_falls_through(self):
        assert await choose_template(None, implicit("main"), "3.x") == VersionTemplate.parse("3.x")

    @pytest.mark.asyncio
    async def test_unrestricted_fallback(self):
        assert await choose_template(None, implicit(None), None) == VersionTemplate.unrestricted(3)


class TestBumpVersion:
    """Option handling before the engine runs."""

    @pytest.mark.asyncio
    async def test_branch_template(self, engine, branch):
        branch.return_value = "v2.x"
        await bump_version({"component": "minor"}, run_env=RunEnv())
        assert engine.call_args.args[1] == DEFAULT_CONTEXT
        assert bump_opts(engine) == BumpOptions(version_template=VersionTemplate.parse("2.x"), index="minor")

    @pytest.mark.asyncio
    async def test_config_defaults(self, engine, branch, config):
        config.bump = BumpSettings(default_template="1.x.x", action="print", default_component="patch")
        await bump_version({}, run_env=RunEnv())
        assert bump_opts(engine) == BumpOptions(
            version_template=VersionTemplate.parse("1.x.x"), default_bump="patch", action="print"
        )

    @pytest.mark.asyncio
    async def test_numeric_component(self, engine, branch):
        await bump_version({"component": "3", "trigger": "commitMessage"}, run_env=RunEnv())
        opts = bump_opts(engine)
        assert (opts.index, opts.trigger) == (3, "commitMessage")

    @pytest.mark.asyncio
    async def test_pull_request_context(self, engine, branch):
        await bump_version({"action": "push"}, run_env=PR_ENV)
        assert engine.call_args.args[1] == Context(head_ref="origin/feature", merge_target_ref="origin/v3.x")
        opts = bump_opts(engine)
        assert opts.action == "tag"
        assert opts.version_template == VersionTemplate.parse("3.x")
        branch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_numeric_templates_from_command_line(self, engine, branch):
        parsed = parse_args(["release", "--version-template", "2", "--default-template", "3", "--action", "print"])
        assert parsed.opts["version_template"].value == 2
        await bump_version(option_kwargs(parsed.opts), run_env=RunEnv())
        assert bump_opts(engine).version_template == VersionTemplate.parse("2")

    @pytest.mark.asyncio
    async def test_numeric_default_template(self, engine, branch):
        await bump_version({"default_template": 3}, run_env=RunEnv())
        assert bump_opts(engine).version_template == VersionTemplate([3])

    @pytest.mark.asyncio
    async def test_unknown_option(self, engine):
        with pytest.raises(ValidationError, match="Unknown option"):
            await bump_version({"dry_run": True}, run_env=RunEnv())
        engine.assert_not_called()

    @pytest.mark.asyncio
    async def test_make_binds_defaults(self, engine, branch):
        chores = make({"default_template": "4.x", "action": "print"})
        await chores.bump(action="tag")
        opts = bump_opts(engine)
        assert (opts.version_template, opts.action) == (VersionTemplate.parse("4.x"), "tag")


class TestPrintVersion:
    @pytest.mark.asyncio
    async def test_prints_current_version(self, capsys):
        described = DescribedVersion(commit="abc1234", tag="v1.4.0", is_exact=True)
        with patch("chored.chores.version.describe_with_auto_deepen", AsyncMock(return_value=described)):
            await version_chores.print_version()
        assert capsys.readouterr().out == "1.4.0\n"

    @pytest.mark.asyncio
    async def test_no_version_exits(self):
        described = DescribedVersion(commit="abc1234")
        with patch("chored.chores.version.describe_with_auto_deepen", AsyncMock(return_value=described)):
            with pytest.raises(SystemExit) as exc:
                await version_chores.print_version()
        assert exc.value.code == 1

    def test_make_is_not_a_chore(self):
        assert make.is_chore is False
        chores = make()
        assert chores.default is chores.print_version
