"""Version bump engine.

Combines tag discovery (:mod:`.describe`), commit directives
(:mod:`.directive`) and templates (:mod:`.template`) to decide the next
version tag and apply it.

On pull requests GitHub checks out a synthetic merge commit as ``HEAD``.
That commit does not necessarily contain the target branch tip, so the
nearest tag is looked up from ``Context.merge_target_ref`` (the target
branch) while commit directives are read up to ``Context.head_ref`` (the
branch being merged). Outside of pull requests both are ``HEAD``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from chored.core.cmd import CmdRunner
from chored.core.errors import ValidationError
from chored.core.version import Index, Version
from chored.core.versioning.describe import describe_with_auto_deepen
from chored.core.versioning.directive import CommitDirective, parse_commit_lines
from chored.core.versioning.template import VersionTemplate, next_version

logger = logging.getLogger(__name__)

Action = Literal["print", "tag", "push"]
Trigger = Literal["always", "commitMessage"]

ACTIONS: tuple[str, ...] = ("print", "tag", "push")
TRIGGERS: tuple[str, ...] = ("always", "commitMessage")


@dataclass(frozen=True)
class Context:
    head_ref: str = "HEAD"
    merge_target_ref: str = "HEAD"


DEFAULT_CONTEXT = Context()


@dataclass
class BumpOptions:
    """Options for :meth:`Engine.bump`.

    Attributes:
        version_template: template constraining the next version
        index: component to bump, overriding any commit directive
        default_bump: component to bump when neither ``index`` nor a
            commit directive names one (ignored unless free)
        action: ``print`` only logs, ``tag`` creates the tag on ``HEAD``,
            ``push`` also pushes it to ``origin``
        trigger: ``always`` releases on every run; ``commitMessage`` only
            when a commit since the last tag carries a release directive
    """

    version_template: VersionTemplate = field(default_factory=lambda: VersionTemplate.unrestricted(3))
    index: Optional[Index] = None
    default_bump: Optional[Index] = None
    action: Action = "tag"
    trigger: Trigger = "always"

    def __post_init__(self) -> None:
        if self.action not in ACTIONS:
            raise ValidationError(f"Invalid action: {self.action!r} (expected one of {', '.join(ACTIONS)})")
        if self.trigger not in TRIGGERS:
            raise ValidationError(f"Invalid trigger: {self.trigger!r} (expected one of {', '.join(TRIGGERS)})")


def parse_tag(tag: str) -> Version:
    """Parse a version tag, tolerating a non-numeric suffix such as ``-rc1``."""
    version = Version.try_parse(tag) or Version.parse_lax(tag)
    if version is None:
        raise ValidationError(f"Invalid version tag: {tag}")
    return version


class Engine:
    def __init__(self, runner: CmdRunner, ctx: Context = DEFAULT_CONTEXT):
        self.runner = runner
        self.ctx = ctx

    async def bump(self, opts: BumpOptions) -> Optional[Version]:
        """
        Compute the next version and apply it if a release is due.

        Returns:
            The applied version, or None when ``HEAD`` is already tagged
            or ``trigger`` is ``commitMessage`` and no commit asked for a
            release.

        Raises:
            ValidationError: if the requested component is not free in
                the template
            SubprocessError: if tagging or pushing fails
        """
        current = await describe_with_auto_deepen(self.runner, self.ctx.merge_target_ref)

        current_version: Optional[Version] = None
        if current.tag is None:
            logger.info("No current version detected")
        else:
            try:
                current_version = parse_tag(current.tag)
            except ValidationError as e:
                raise ValidationError(
                    f"{e} (nearest tag to {self.ctx.merge_target_ref}; rename or delete it)"
                ) from e
            logger.info("Current version: %s (from tag %s)", current_version.show(), current.tag)
            if current.is_exact:
                logger.info("Commit is already tagged")
                if opts.action == "push":
                    await self.push(current.tag)
                return None

        directive = parse_commit_lines(await self.commit_lines_since(current.tag))
        logger.info("Commit directive: %s", directive)

        version = next_version(
            opts.version_template,
            current_version,
            index=opts.index if opts.index is not None else directive.index,
            default_bump=opts.default_bump,
        )

        if opts.trigger == "always" or directive.release:
            await self.apply_version(opts.action, version)
            return version
        logger.info("No version bump required")
        return None

    async def commit_lines_since(self, tag: Optional[str]) -> str:
        revisions = self.ctx.head_ref if tag is None else f"{tag}..{self.ctx.head_ref}"
        return await self.runner.run_output(["git", "log", "--format=format:%s", revisions, "--"])

    async def push(self, tag: str) -> None:
        logger.info("Pushing: %s", tag)
        await self.runner.run(["git", "push", "origin", "tag", tag])

    async def apply_version(self, action: Action, version: Version) -> None:
        tag = version.tag()
        if action == "print":
            logger.info("Calculated tag: %s", tag)
            return
        logger.info("Tagging: %s", tag)
        await self.runner.run(["git", "tag", tag, "HEAD"])
        if action == "push":
            await self.push(tag)
