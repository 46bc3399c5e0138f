"""Docker build orchestration and container runs."""

from chored.core.docker.build import (
    BuildInvocation,
    ConcreteTags,
    Spec,
    Stage,
    TagStrategy,
    apply_tag_strategy,
    build,
    build_all,
    build_command,
)
from chored.core.docker.image import Image, image
from chored.core.docker.run import BindMount, RunOptions, Volume, bind_volume, run, run_command

__all__ = [
    "BindMount",
    "BuildInvocation",
    "ConcreteTags",
    "Image",
    "RunOptions",
    "Spec",
    "Stage",
    "TagStrategy",
    "Volume",
    "apply_tag_strategy",
    "bind_volume",
    "build",
    "build_all",
    "build_command",
    "image",
    "run",
    "run_command",
]
