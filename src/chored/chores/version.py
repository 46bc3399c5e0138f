"""
Version chores.

``print_version`` shows the version ``HEAD`` (or ``ref``) was released
as; ``bump`` computes the next version tag from git history and prints,
creates or pushes it.

Projects that want different defaults bind them with :func:`make`::

    # choredefs/version.py
    from chored.chores.version import make

    default = make({"default_template": "1.x.x", "action": "push"})

after which ``chored version bump`` uses those defaults.
"""

import logging
import sys
from types import SimpleNamespace
from typing import Any, Awaitable, Callable, Mapping, Optional

import click

from chored.config import get_config
from chored.core import git
from chored.core.cmd import SubprocessRunner
from chored.core.entrypoint import not_a_chore
from chored.core.errors import ValidationError
from chored.core.github.run_env import RunEnv
from chored.core.version import Version, parse_index
from chored.core.versioning import (
    DEFAULT_CONTEXT,
    BumpOptions,
    Context,
    Engine,
    VersionTemplate,
    describe_with_auto_deepen,
    parse_tag,
)

logger = logging.getLogger(__name__)

BUMP_OPTIONS = frozenset(
    {
        "version_template",
        "default_template",
        "component",
        "default_component",
        "action",
        "trigger",
    }
)


def _origin_ref_or_head(ref: Optional[str]) -> str:
    return "HEAD" if ref is None else f"origin/{ref}"


def _template_option(value: Any) -> Optional[str]:
    # terse CLI options turn "--version-template 2" into an int
    return None if value is None else str(value)


def _try_template(candidate: Optional[str]) -> Optional[VersionTemplate]:
    if candidate is None:
        return None
    template = VersionTemplate.parse_lax(candidate)
    if template is None:
        logger.info("Ignoring fallback version template: %s", candidate)
    return template


async def choose_template(
    explicit: Optional[str],
    implicit: Callable[[], Awaitable[Optional[str]]],
    default: Optional[str],
) -> VersionTemplate:
    """
    Pick the version template for a bump.

    In order: ``explicit`` (must parse), the implicit template (usually
    the branch name; ignored unless it parses), ``default`` (must parse),
    else an unrestricted three-part template.
    """
    if explicit is not None:
        return VersionTemplate.parse(explicit)
    return (
        _try_template(await implicit())
        or (VersionTemplate.parse(default) if default else None)
        or VersionTemplate.unrestricted(3)
    )


async def bump_version(opts: Mapping[str, Any], run_env: Optional[RunEnv] = None) -> Optional[Version]:
    unknown = set(opts) - BUMP_OPTIONS
    if unknown:
        raise ValidationError(f"Unknown option(s) for bump: {', '.join(sorted(unknown))}")

    settings = get_config().bump
    run_env = run_env or RunEnv.from_env()

    action = opts.get("action") or settings.action
    trigger = opts.get("trigger") or settings.trigger
    component = opts.get("component")
    default_component = opts.get("default_component") or settings.default_component

    ctx = DEFAULT_CONTEXT

    async def implicit_template() -> Optional[str]:
        return await git.branch_name()

    if run_env.is_pull_request:
        ctx = Context(
            head_ref=_origin_ref_or_head(run_env.pull_request_branch),
            merge_target_ref=_origin_ref_or_head(run_env.pull_request_target),
        )
        logger.info("GitHub context: %s", ctx)

        async def implicit_template() -> Optional[str]:
            return run_env.pushed_branch or run_env.pull_request_target or await git.branch_name()

        if action == "push":
            # never push from a pull request
            action = "tag"

    template = await choose_template(
        _template_option(opts.get("version_template")),
        implicit_template,
        _template_option(opts.get("default_template")) or settings.default_template,
    )

    bump_opts = BumpOptions(
        version_template=template,
        index=parse_index(component) if component is not None else None,
        default_bump=parse_index(default_component) if default_component is not None else None,
        action=action,
        trigger=trigger,
    )
    logger.info(
        "Computed bump options: template=%s action=%s trigger=%s",
        template.show(),
        bump_opts.action,
        bump_opts.trigger,
    )
    return await Engine(SubprocessRunner(), ctx).bump(bump_opts)


@not_a_chore
def make(defaults: Optional[Mapping[str, Any]] = None) -> SimpleNamespace:
    """Build ``print_version``/``bump`` chores bound to ``defaults``.

    The returned namespace is meant to be exported as ``default`` from a
    task module; ``default`` on it is ``print_version``.
    """
    bound = dict(defaults or {})

    async def print_version(ref: str = "HEAD") -> None:
        """Print the version ``ref`` was released as.

        Exits with status 1 when no version tag is reachable.
        """
        described = await describe_with_auto_deepen(SubprocessRunner(print_command=False), ref)
        if described.tag is None:
            logger.warning("No current version found")
            sys.exit(1)
        click.echo(parse_tag(described.tag).show())

    async def bump(**opts: Any) -> Optional[Version]:
        """Compute and print/tag/push the next version tag.

        The version template is the first available of:
         - version_template
         - the git branch name (only if it looks like a template, e.g. v2.x)
         - default_template
         - x.x.x

        Options:
          component: major | minor | patch | <int>
          default_component: major | minor | patch | <int>
          action: print | tag | push
          trigger: always | commitMessage
          version_template: string
          default_template: string

        On pull requests `push` is downgraded to `tag`.
        """
        return await bump_version({**bound, **opts})

    return SimpleNamespace(default=print_version, print_version=print_version, bump=bump)


_base = make()
print_version = _base.print_version
bump = _base.bump
default = _base.default

__all__ = ["bump", "default", "print_version"]
