"""Dependency bump chore."""

import logging
from types import SimpleNamespace
from typing import Any, Mapping, Optional, Sequence

from chored.config import get_config
from chored.core.deps import BumpOptions, bump as bump_deps, parse_spec
from chored.core.entrypoint import Resolver, not_a_chore

logger = logging.getLogger(__name__)


def partition_args(args: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``args`` into (specs, roots); specs contain ``#``."""
    specs = [a for a in args if "#" in a]
    roots = [a for a in args if "#" not in a]
    return specs, roots


@not_a_chore
def make(defaults: Optional[Mapping[str, Any]] = None) -> SimpleNamespace:
    bound = dict(defaults or {})

    async def bump(
        args: Sequence[str] = (),
        post_chore: Optional[str] = None,
        exts: Optional[Sequence[str]] = None,
        skip: Optional[Sequence[str]] = None,
        verbose: bool = False,
    ) -> int:
        """Scan the current directory and bump remote dependency URLs.

        Options:
          args: files, directories or specs. Specs take the form
            "source#version", e.g. "owner/repo#v2*" (or "repo#v2*") bumps that
            repository to its newest v2 tag.
          post_chore: chore run after bumping (default from config,
            normally `render`); pass --no-post-chore to skip it
          exts: file extensions to scan
          skip: regexes for paths not to scan
          verbose: log every file and lookup
        """
        settings = get_config().deps
        specs, roots = partition_args(args)
        opts = BumpOptions(
            exts=exts or bound.get("exts") or settings.exts,
            skip=skip or bound.get("skip") or settings.skip,
            explicit_specs=[parse_spec(s) for s in specs],
            verbose=verbose,
        )
        changed = await bump_deps(roots, opts)

        chore = post_chore if post_chore is not None else bound.get("post_chore", settings.post_chore)
        if chore:
            logger.info("Running post chore: %s ...", chore)
            await Resolver(get_config().task_root).run([chore])
        return changed

    return SimpleNamespace(default=bump, bump=bump)


bump = make().bump

__all__ = ["bump"]
