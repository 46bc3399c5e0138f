"""Self-updating chores.

:func:`self_update` runs an update function inside a clean workspace and
commits whatever it changed. A :class:`Handler` decides what happens
around the update and after a change; e.g. :func:`pull_request_handler`
force-pushes the commit to a branch and opens (or refreshes) a pull
request for it.

Example:
    handler = await pull_request_handler(PullRequestOptions(
        base_branch="main",
        branch_name="chored-update",
        github_token=token_from_env(),
        pr_title="Update dependencies",
        pr_body="Automated dependency update",
    ))
    await self_update(update=bump_deps, commit_message="Update deps", handler=handler)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol, Union

from chored.config import get_config
from chored.core import cmd, git
from chored.core.errors import ValidationError
from chored.core.github.api import GithubClient, client as github_client
from chored.core.github.run_env import Repository, RunEnv

logger = logging.getLogger(__name__)

Update = Callable[[], Awaitable[None]]
CommandRunner = Callable[[list[str]], Awaitable[object]]


class Handler(Protocol):
    async def wrap(self, fn: Update) -> None: ...

    async def on_change(self) -> None: ...


class NoopHandler:
    async def wrap(self, fn: Update) -> None:
        await fn()

    async def on_change(self) -> None:
        return None


NOOP_HANDLER = NoopHandler()


async def self_update(
    update: Update,
    commit_message: str,
    *,
    git_dir: Optional[Union[str, Path]] = None,
    handler: Optional[Handler] = None,
) -> bool:
    """
    Apply ``update`` and commit its changes.

    Args:
        update: coroutine function modifying the working tree
        commit_message: message for the commit holding the changes
        git_dir: repository to update (default: current directory)
        handler: wraps the update and reacts to a change

    Returns:
        True if the update changed anything (and a commit was made)

    Raises:
        CleanWorkspaceError: if the workspace is dirty before the update
    """
    handler = handler or NOOP_HANDLER
    await git.require_clean(git_dir, print_diff=False)

    await handler.wrap(update)

    changes = await git.uncommitted_changes(git_dir, include_untracked=True)
    if changes is None:
        logger.info("No changes detected after update")
        return False

    identity = git.GITHUB_ACTIONS_BOT if RunEnv.from_env().is_ci else None
    await git.commit_all_changes(commit_message, git_dir=git_dir, include_untracked=True, identity=identity)
    await handler.on_change()
    return True


async def _run_command(argv: list[str]) -> None:
    await cmd.run(argv)


@dataclass
class PushHandler:
    branch_name: Optional[str] = None
    remote: str = "origin"
    force_push: bool = False
    run_command: CommandRunner = _run_command

    async def wrap(self, fn: Update) -> None:
        await fn()

    async def on_change(self) -> None:
        branch = self.branch_name or await git.branch_name()
        if branch is None:
            raise ValidationError("Cannot push from a detached HEAD without an explicit branch name")
        argv = ["git", "push"]
        if self.force_push:
            argv.append("--force")
        argv.extend([self.remote, f"HEAD:refs/heads/{branch}"])
        await self.run_command(argv)


def push_handler(
    branch_name: Optional[str] = None,
    *,
    remote: str = "origin",
    force_push: bool = False,
) -> PushHandler:
    return PushHandler(branch_name=branch_name, remote=remote, force_push=force_push)


@dataclass
class PullRequestOptions:
    base_branch: str
    branch_name: str
    github_token: str
    pr_title: str
    pr_body: str
    remote: str = "origin"
    repository: Optional[Repository] = None


def error_body(message: str, body: str) -> str:
    return (
        "# Error:\n\n"
        f"An error occurred while generating this pull request:\n```\n{message}\n```\n\n"
        "You may need to re-run this action and fix the errors manually. "
        "This pull request is created for visibility, it may not have any useful changes.\n\n"
        "---\n\n" + body
    )


class PullRequestHandler:
    """Force-pushes the update to ``branch_name`` and opens or updates a PR.

    If the update itself fails, an empty commit is pushed instead and the
    PR is opened with an error banner so the failure is visible, then the
    error is re-raised.
    """

    def __init__(
        self,
        opts: PullRequestOptions,
        client: GithubClient,
        repository: Repository,
        *,
        run_env: Optional[RunEnv] = None,
        push: Optional[PushHandler] = None,
        run_command: CommandRunner = _run_command,
    ):
        self.client = client
        self.repository = repository
        self.run_command = run_command
        self.push = push or PushHandler(
            branch_name=opts.branch_name, remote=opts.remote, force_push=True, run_command=run_command
        )
        body = opts.pr_body
        run_env = run_env or RunEnv.from_env()
        if run_env.run_id:
            logs_repo = run_env.repository or repository
            body += (
                "\n\n---\n\n"
                "This PR was created from a workflow, [click here to view logs]("
                f"https://github.com/{logs_repo.owner}/{logs_repo.name}/actions/runs/{run_env.run_id})."
            )
        self.opts = replace(opts, pr_body=body)

    async def _create_or_update(self, title: str, body: str) -> None:
        await self.client.create_or_update_pull_request(
            owner=self.repository.owner,
            repo=self.repository.name,
            branch_name=self.opts.branch_name,
            base_branch=self.opts.base_branch,
            title=title,
            body=body,
        )

    async def wrap(self, fn: Update) -> None:
        try:
            await fn()
        except Exception as e:
            logger.exception("Error occurred while applying update")
            # A PR needs at least one commit on the branch.
            await self.run_command(["git", "commit", "--allow-empty", "--message", "empty commit"])
            await self.push.on_change()
            await self._create_or_update(
                self.opts.pr_title + " :no_entry_sign:",
                error_body(str(e), self.opts.pr_body),
            )
            raise

    async def on_change(self) -> None:
        await self.push.on_change()
        await self._create_or_update(self.opts.pr_title, self.opts.pr_body)


async def pull_request_handler(
    opts: PullRequestOptions,
    *,
    make_client: Optional[Callable[[str], GithubClient]] = None,
    run_env: Optional[RunEnv] = None,
) -> PullRequestHandler:
    """Build a :class:`PullRequestHandler`, validating the token up front."""
    run_env = run_env or RunEnv.from_env()
    repository = opts.repository or run_env.repository
    if repository is None:
        raise ValidationError("repository is required (set GITHUB_REPOSITORY or pass it explicitly)")
    if make_client is None:
        client = github_client(opts.github_token, get_config().github.graphql_url)
    else:
        client = make_client(opts.github_token)
    user = await client.authenticated_user()
    logger.debug("Authenticated to GitHub as %s", user.login)
    return PullRequestHandler(opts, client, repository, run_env=run_env)
