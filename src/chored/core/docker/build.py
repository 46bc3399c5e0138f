"""Multi-stage docker builds with cache-friendly tagging.

A tag strategy names base tags (``latest``, a branch name, a version);
each build stage gets those tags with a per-stage suffix, and the same
suffixed tags are offered as ``--cache-from`` candidates. Builds set
``BUILDKIT_INLINE_CACHE=1`` so pushed images can seed the next build.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from chored.core import cmd
from chored.core.docker.image import Image, image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    name: str
    tag_suffix: Optional[str] = None


@dataclass(frozen=True)
class Spec:
    url: str
    stages: Sequence[Stage] = ()


@dataclass
class BuildInvocation:
    stage: Optional[str] = None
    dockerfile: Optional[str] = None
    root: Optional[str] = None
    push: bool = False
    cache_from: Sequence[Image] = field(default_factory=list)
    tags: Sequence[Image] = field(default_factory=list)


@dataclass
class TagStrategy:
    cache_from: Sequence[str] = field(default_factory=list)
    tags: Sequence[str] = field(default_factory=list)


@dataclass(frozen=True)
class ConcreteTags:
    cache_from: list[Image]
    tags: list[Image]


def build_command(opts: BuildInvocation) -> list[str]:
    argv = ["docker", "build", "-f", opts.dockerfile or "Dockerfile"]
    if opts.stage:
        argv.extend(["--target", opts.stage])
    for candidate in opts.cache_from:
        argv.extend(["--cache-from", candidate.show()])
    if opts.tags:
        argv.extend(["--tag", opts.tags[0].show()])
    argv.extend(["--build-arg", "BUILDKIT_INLINE_CACHE=1"])
    argv.append(opts.root or ".")
    return argv


async def build(opts: BuildInvocation) -> None:
    """Build one stage, add secondary tags, and push every tag if requested."""
    await cmd.run(build_command(opts))

    tags = list(opts.tags)
    # Secondary tags point at the image built under the first tag.
    for tag in tags[1:]:
        await cmd.run(["docker", "tag", tags[0].show(), tag.show()])

    if opts.push:
        for tag in tags:
            await cmd.run(["docker", "push", tag.show()])


def apply_tag_strategy(spec: Spec, strategy: TagStrategy, stage: Stage) -> ConcreteTags:
    suffix = stage.tag_suffix if stage.tag_suffix is not None else f"-{stage.name}"
    return ConcreteTags(
        cache_from=[image(spec.url, base + suffix) for base in strategy.cache_from],
        tags=[image(spec.url, base + suffix) for base in strategy.tags],
    )


async def build_all(
    spec: Spec,
    strategy: TagStrategy,
    *,
    dockerfile: Optional[str] = None,
    root: Optional[str] = None,
    push: bool = False,
) -> None:
    """Build every stage of ``spec`` in order."""
    for stage in spec.stages:
        concrete = apply_tag_strategy(spec, strategy, stage)
        logger.info("Building stage %s of %s", stage.name, spec.url)
        await build(
            BuildInvocation(
                stage=stage.name,
                dockerfile=dockerfile,
                root=root,
                push=push,
                cache_from=concrete.cache_from,
                tags=concrete.tags,
            )
        )
