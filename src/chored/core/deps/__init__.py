"""Dependency URL bumping."""

from chored.core.deps.bump import (
    DEFAULT_EXTS,
    DEFAULT_SKIP,
    DEFAULT_SOURCES,
    BumpOptions,
    Bumper,
    bump,
    walk_paths,
    walk_roots,
)
from chored.core.deps.github import (
    GithubPipImport,
    GithubPipSource,
    GithubRawImport,
    GithubRawSource,
    GithubSpec,
)
from chored.core.deps.source import BumpSpec, ImportSpec, Source, parse_spec

__all__ = [
    "DEFAULT_EXTS",
    "DEFAULT_SKIP",
    "DEFAULT_SOURCES",
    "BumpOptions",
    "BumpSpec",
    "Bumper",
    "GithubPipImport",
    "GithubPipSource",
    "GithubRawImport",
    "GithubRawSource",
    "GithubSpec",
    "ImportSpec",
    "Source",
    "bump",
    "parse_spec",
    "walk_paths",
    "walk_roots",
]
