"""GitHub Actions run environment.

A snapshot of the default environment variables GitHub sets for workflow
runs. Nothing here talks to GitHub; any CI system exporting the same
variables is treated identically.

See https://docs.github.com/en/actions/learn-github-actions/variables#default-environment-variables
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from chored.core.errors import ValidationError


@dataclass(frozen=True)
class Repository:
    owner: str
    name: str

    def show(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repository(full: str) -> Repository:
    parts = full.split("/")
    if len(parts) != 2 or not all(parts):
        raise ValidationError(f"Invalid github repository: {full}")
    owner, name = parts
    return Repository(owner=owner, name=name)


@dataclass(frozen=True)
class RunEnv:
    """Immutable view of a workflow run's environment.

    Attributes:
        event: ``GITHUB_EVENT_NAME`` (e.g. ``push``, ``pull_request``)
        ref_type: ``GITHUB_REF_TYPE`` (``branch`` or ``tag``)
        ref_name: ``GITHUB_REF_NAME``, the branch or tag that triggered the run
        sha: ``GITHUB_SHA``
        pull_request_branch: ``GITHUB_HEAD_REF``, the PR's source branch
        pull_request_target: ``GITHUB_BASE_REF``, the PR's target branch
        repository: ``GITHUB_REPOSITORY`` as owner/name
        run_id: ``GITHUB_RUN_ID``
        is_ci: ``CI == "true"``
    """

    event: Optional[str] = None
    ref_type: Optional[str] = None
    ref_name: Optional[str] = None
    sha: Optional[str] = None
    pull_request_branch: Optional[str] = None
    pull_request_target: Optional[str] = None
    repository: Optional[Repository] = None
    run_id: Optional[str] = None
    is_ci: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RunEnv":
        env = os.environ if environ is None else environ

        def get(key: str) -> Optional[str]:
            return env.get(key) or None

        repo = get("GITHUB_REPOSITORY")
        return cls(
            event=get("GITHUB_EVENT_NAME"),
            ref_type=get("GITHUB_REF_TYPE"),
            ref_name=get("GITHUB_REF_NAME"),
            sha=get("GITHUB_SHA"),
            pull_request_branch=get("GITHUB_HEAD_REF"),
            pull_request_target=get("GITHUB_BASE_REF"),
            repository=parse_repository(repo) if repo else None,
            run_id=get("GITHUB_RUN_ID"),
            is_ci=get("CI") == "true",
        )

    @property
    def is_push(self) -> bool:
        return self.event == "push"

    @property
    def is_pull_request(self) -> bool:
        return self.event == "pull_request"

    @property
    def is_branch_push(self) -> bool:
        return self.is_push and self.ref_type == "branch"

    @property
    def is_tag_push(self) -> bool:
        return self.is_push and self.ref_type == "tag"

    @property
    def pushed_branch(self) -> Optional[str]:
        return self.ref_name if self.is_branch_push else None

    @property
    def pushed_tag(self) -> Optional[str]:
        return self.ref_name if self.is_tag_push else None
