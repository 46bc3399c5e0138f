"""Running commands inside docker containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

from chored.core import cmd
from chored.core.docker.image import Image

MountType = Literal["bind", "volume", "tmpfs"]


@dataclass(frozen=True)
class BindMount:
    path: str
    container_path: Optional[str] = None


@dataclass(frozen=True)
class Volume:
    type: MountType
    source: Optional[str] = None
    destination: Optional[str] = None
    readonly: Optional[bool] = None

    def mount_string(self) -> str:
        """``key=value`` pairs sorted by key, unset keys omitted."""
        pairs = {
            "type": self.type,
            "source": self.source,
            "destination": self.destination,
            "readonly": None if self.readonly is None else str(self.readonly).lower(),
        }
        return ",".join(f"{k}={v}" for k, v in sorted(pairs.items()) if v is not None)


def bind_volume(mount: BindMount) -> Volume:
    return Volume(type="bind", source=mount.path, destination=mount.container_path or mount.path)


@dataclass
class RunOptions:
    image: Image
    tty: bool = False
    cmd: Sequence[str] = ()
    volumes: Sequence[Volume] = field(default_factory=list)
    work_dir: Optional[str] = None
    bind_mounts: Sequence[BindMount] = field(default_factory=list)


def run_command(opts: RunOptions) -> list[str]:
    argv = ["docker", "run", "--rm", "--interactive"]
    if opts.tty:
        argv.append("--tty")
    for volume in [*opts.volumes, *map(bind_volume, opts.bind_mounts)]:
        argv.extend(["--mount", volume.mount_string()])
    if opts.work_dir:
        argv.extend(["--workdir", opts.work_dir])
    argv.append(opts.image.show())
    argv.extend(opts.cmd)
    return argv


async def run(opts: RunOptions) -> None:
    await cmd.run(run_command(opts))
