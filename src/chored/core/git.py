"""Workspace helpers on top of the ``git`` CLI.

Used by self-updating chores to make sure an update starts from (and
leaves behind) a known workspace state, and to commit its result.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar, Union

from chored.core import cmd
from chored.core.errors import CleanWorkspaceError, SubprocessError

logger = logging.getLogger(__name__)

T = TypeVar("T")

PathLike = Union[str, Path]


@dataclass(frozen=True)
class Identity:
    name: str
    email: str

    def env(self) -> dict[str, str]:
        return {
            "GIT_AUTHOR_NAME": self.name,
            "GIT_AUTHOR_EMAIL": self.email,
            "GIT_COMMITTER_NAME": self.name,
            "GIT_COMMITTER_EMAIL": self.email,
        }


GITHUB_ACTIONS_BOT = Identity(
    name="github-actions[bot]",
    email="41898282+github-actions[bot]@users.noreply.github.com",
)


async def branch_name(git_dir: Optional[PathLike] = None) -> Optional[str]:
    """Current branch name, or None on a detached ``HEAD``."""
    name = await cmd.run_output(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=git_dir)
    return None if name in ("", "HEAD") else name


def _fail_unexpected_status(result: cmd.RunResult, argv: list[str]) -> SubprocessError:
    if result.stderr:
        logger.warning(result.stderr.rstrip())
    return SubprocessError(argv, result.returncode, output=result.output, stderr=result.stderr)


async def uncommitted_changes(
    git_dir: Optional[PathLike] = None,
    *,
    include_untracked: bool = False,
    color_diff: bool = True,
) -> Optional[str]:
    """
    Describe uncommitted changes in the workspace.

    Args:
        git_dir: repository to inspect (default: current directory)
        include_untracked: also report untracked, non-ignored files
        color_diff: ask git for a colored diff

    Returns:
        None for a clean workspace, otherwise the untracked-file listing
        or the diff against ``HEAD``
    """
    if include_untracked:
        argv = ["git", "ls-files", "--other", "--exclude-standard"]
        listing = await cmd.run(
            argv, allow_failure=True, print_command=False, cwd=git_dir, stdout="string", capture_stderr=True
        )
        if not listing.success:
            raise _fail_unexpected_status(listing, argv)
        untracked = (listing.output or "").rstrip("\n")
        if untracked:
            return re.sub(r"^", " - Untracked file: ", untracked, flags=re.MULTILINE)

    argv = ["git", "--no-pager", "diff", "--exit-code"]
    if color_diff:
        argv.append("--color=always")
    argv.append("HEAD")
    diff = await cmd.run(argv, allow_failure=True, print_command=False, cwd=git_dir, stdout="string", capture_stderr=True)
    if diff.returncode == 0:
        return None
    if diff.returncode == 1:
        return diff.output or ""
    raise _fail_unexpected_status(diff, argv)


async def require_clean(
    git_dir: Optional[PathLike] = None,
    *,
    include_untracked: bool = False,
    color_diff: bool = True,
    print_diff: bool = True,
    description: str = "",
) -> None:
    """Raise :class:`CleanWorkspaceError` if the workspace has changes."""
    diff = await uncommitted_changes(git_dir, include_untracked=include_untracked, color_diff=color_diff)
    if diff is not None:
        if print_diff:
            logger.warning(diff)
        raise CleanWorkspaceError(description, diff)


async def require_clean_around(
    action: Callable[[], Awaitable[T]],
    *,
    git_dir: Optional[PathLike] = None,
    include_untracked: bool = False,
    print_diff: bool = True,
    description: str = "action",
) -> T:
    """Run ``action``, requiring a clean workspace before and after it."""
    await require_clean(
        git_dir, include_untracked=include_untracked, print_diff=print_diff, description=f"before {description}"
    )
    result = await action()
    await require_clean(
        git_dir, include_untracked=include_untracked, print_diff=print_diff, description=f"after {description}"
    )
    return result


async def commit_all_changes(
    message: str,
    *,
    git_dir: Optional[PathLike] = None,
    include_untracked: bool = False,
    allow_empty: bool = False,
    identity: Optional[Identity] = None,
    amend: bool = False,
) -> None:
    if include_untracked:
        await cmd.run(["git", "add", "--all", "."], cwd=git_dir)
    argv = ["git", "commit"]
    if not include_untracked:
        argv.append("--all")
    if allow_empty:
        argv.append("--allow-empty")
    if amend:
        argv.append("--amend")
    argv.extend(["--message", message])
    await cmd.run(argv, cwd=git_dir, env=identity.env() if identity else None)


async def amend_all_changes(
    message: str,
    *,
    git_dir: Optional[PathLike] = None,
    include_untracked: bool = False,
    identity: Optional[Identity] = None,
) -> None:
    await commit_all_changes(
        message, git_dir=git_dir, include_untracked=include_untracked, identity=identity, amend=True
    )
