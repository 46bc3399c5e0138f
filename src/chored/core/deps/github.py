"""GitHub-hosted dependencies.

Two URL shapes are recognised:

- raw files: ``https://raw.githubusercontent.com/<owner>/<repo>/<version>/<path>[#<spec>]``
- pip VCS requirements: ``git+https://github.com/<owner>/<repo>[.git]@<version>[#egg=<name>]``

The optional ``#<spec>`` on raw URLs is a ref filter: a wildcard such as
``v1.*`` picks the highest matching version tag, anything else names an
exact branch or tag. Without one, ``v*`` is used.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional

from chored.core import cmd
from chored.core.deps.source import BumpSpec, ImportSpec, OverrideFn
from chored.core.version import Version

logger = logging.getLogger(__name__)

DEFAULT_REF_FILTER = "v*"

_RAW_RE = re.compile(r"^(https://raw\.githubusercontent\.com)/([^/]+)/([^/]+)/([^/]+)/([^#]*)(?:#(.+))?$")
_PIP_RE = re.compile(r"^git\+https://github\.com/([^/]+)/([^/@]+?)(\.git)?@([^#]+)(#.*)?$")
_REF_PREFIX_RE = re.compile(r"^refs/[^/]+/")


def _add_spec(s: str, spec: Optional[str]) -> str:
    return f"{s}#{spec}" if spec else s


@dataclass(frozen=True)
class GithubRawImport:
    prefix: str
    owner: str
    repo: str
    version: str
    path: str
    spec: Optional[str] = None

    def show(self) -> str:
        return _add_spec(f"{self.prefix}/{self.owner}/{self.repo}/{self.version}/{self.path}", self.spec)

    def with_version(self, version: str) -> "GithubRawImport":
        return replace(self, version=version)

    def with_spec(self, spec: Optional[str]) -> "GithubRawImport":
        return replace(self, spec=spec)


@dataclass(frozen=True)
class GithubPipImport:
    owner: str
    repo: str
    version: str
    git_suffix: str = ""
    fragment: str = ""
    spec: Optional[str] = None

    def show(self) -> str:
        return f"git+https://github.com/{self.owner}/{self.repo}{self.git_suffix}@{self.version}{self.fragment}"

    def with_version(self, version: str) -> "GithubPipImport":
        return replace(self, version=version)

    def with_spec(self, spec: Optional[str]) -> "GithubPipImport":
        return replace(self, spec=spec)


@dataclass(frozen=True)
class Ref:
    name: str
    commit: str


def parse_ref(line: str) -> Ref:
    """Parse one ``git ls-remote`` line.

    Tags are assumed immutable, so their short name is used in place of
    the commit id.
    """
    commit, name = line.split("\t", 1)
    short_name = _REF_PREFIX_RE.sub("", name)
    if name.startswith("refs/tags/"):
        commit = short_name
    return Ref(name=short_name, commit=commit)


def is_wildcard(ref_filter: str) -> bool:
    return "*" in ref_filter


def select_ref(refs: list[Ref], spec: Optional[str], source: str = "") -> Optional[str]:
    """
    Pick the version to pin from ``git ls-remote`` refs.

    Args:
        refs: refs listed for the filter
        spec: the ref filter (None means :data:`DEFAULT_REF_FILTER`)
        source: repository description used in warnings

    Returns:
        The chosen ref's commit (or tag name), or None if nothing fits
    """
    ref_filter = spec or DEFAULT_REF_FILTER
    if not refs:
        logger.warning("No '%s' refs present in %s", ref_filter, source)
        return None

    if not is_wildcard(ref_filter):
        matching = [r for r in refs if r.name == spec]
        if not matching:
            logger.warning(
                "refs received from %s, but none matched '%s'. Returned refs: %s",
                source,
                spec,
                [r.name for r in refs],
            )
            return None
        if len(matching) > 1:
            logger.warning("%d matches for '%s' in %s", len(matching), spec, source)
        return matching[0].commit

    if len(refs) == 1:
        return refs[0].commit

    versions = [(v, ref) for ref in refs if (v := Version.parse_lax(ref.name) or Version.try_parse(ref.name))]
    if not versions:
        logger.warning("no versions found in refs: %s", [r.name for r in refs])
        return None
    logger.debug("[parsed versions]: %d %s", len(versions), source)
    return max(versions, key=lambda pair: pair[0])[1].commit


class GithubSpec:
    """Resolution target for a GitHub repository.

    Attributes:
        identity: cache key, ``github:<owner>/<repo>[#<spec>]``
        repo_url: URL listed with ``git ls-remote`` (overridable for tests)
    """

    def __init__(self, owner: str, repo: str, spec: Optional[str] = None):
        self.spec = spec
        self.repo_name = repo
        self.repo_path = f"{owner}/{repo}"
        self.identity = _add_spec(f"github:{self.repo_path}", spec)
        self.repo_url = f"https://github.com/{owner}/{repo}.git"

    def matches_spec(self, spec: BumpSpec) -> bool:
        name = spec.source_name
        if name.startswith("github:"):
            name = name[len("github:") :]
        return name in (self.repo_name, self.repo_path)

    def show(self, imp) -> str:
        return imp.show()

    def ls_remote_cmd(self) -> list[str]:
        ref_filter = self.spec or DEFAULT_REF_FILTER
        argv = ["git", "ls-remote", "--tags"]
        if not is_wildcard(ref_filter):
            # an exact ref may be a branch
            argv.append("--heads")
        argv.extend([self.repo_url, ref_filter])
        return argv

    async def resolve(self, verbose: bool = False) -> Optional[str]:
        refs: list[Ref] = []
        await cmd.run(
            self.ls_remote_cmd(),
            stdout=lambda line: refs.append(parse_ref(line)),
            print_command=verbose,
        )
        logger.debug("[refs]: %d %s", len(refs), self.repo_url)
        for ref in refs:
            logger.debug("[ref]: %s %s", ref.name, ref.commit)
        return select_ref(refs, self.spec, self.repo_path)


class GithubRawSource:
    @staticmethod
    def parse(url: str, override: OverrideFn) -> Optional[ImportSpec]:
        match = _RAW_RE.match(url)
        if match is None:
            return None
        prefix, owner, repo, version, path, spec = match.groups()
        probe = GithubSpec(owner, repo)
        imp = override(
            GithubRawImport(prefix=prefix, owner=owner, repo=repo, version=version, path=path, spec=spec or None),
            probe.matches_spec,
        )
        return ImportSpec(imp=imp, spec=GithubSpec(owner, repo, imp.spec))


class GithubPipSource:
    @staticmethod
    def parse(url: str, override: OverrideFn) -> Optional[ImportSpec]:
        match = _PIP_RE.match(url)
        if match is None:
            return None
        owner, repo, git_suffix, version, fragment = match.groups()
        probe = GithubSpec(owner, repo)
        imp = override(
            GithubPipImport(
                owner=owner, repo=repo, version=version, git_suffix=git_suffix or "", fragment=fragment or ""
            ),
            probe.matches_spec,
        )
        return ImportSpec(imp=imp, spec=GithubSpec(owner, repo, imp.spec))
