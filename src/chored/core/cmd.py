"""
Subprocess execution for chores.

Every external command chored issues (``git``, ``docker``, test runners)
goes through this module so that commands are echoed consistently and a
nonzero exit becomes a :class:`~chored.core.errors.SubprocessError`.

Execution is asynchronous (``asyncio.create_subprocess_exec``) so that
composite chores can run several commands concurrently on one thread.

Stdout handling is selected per call:
- ``"inherit"``: stream straight to the parent's stdout (default)
- ``"string"``: capture and return as text
- ``"discard"``: drop it
- a callable: invoked once per output line (streaming)

Example:
    from chored.core.cmd import run, run_output

    await run(["git", "fetch", "--deepen", "100"])
    sha = await run_output(["git", "rev-parse", "HEAD"])
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Optional, Protocol, Sequence, Union

from chored.core.errors import SubprocessError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], object]
Stdout = Union[Literal["inherit", "string", "discard"], LineCallback]


@dataclass(frozen=True)
class RunResult:
    """Outcome of a finished process."""

    returncode: int
    output: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CmdRunner(Protocol):
    """Minimal command interface consumed by the version engines.

    Test doubles implement this protocol to script git responses.
    """

    async def run(self, cmd: Sequence[str]) -> None: ...

    async def run_output(self, cmd: Sequence[str], *, allow_failure: bool = False) -> str: ...

    async def exists(self, path: str) -> bool: ...


async def _pump_lines(stream: asyncio.StreamReader, callback: LineCallback) -> None:
    while True:
        line = await stream.readline()
        if not line:
            return
        callback(line.decode().rstrip("\n"))


async def run(
    cmd: Sequence[str],
    *,
    allow_failure: bool = False,
    print_command: bool = True,
    cwd: Optional[Union[str, Path]] = None,
    stdout: Stdout = "inherit",
    capture_stderr: bool = False,
    env: Optional[dict[str, str]] = None,
) -> RunResult:
    """
    Run ``cmd`` and wait for it to exit.

    Args:
        cmd: argv list; the first element is resolved on ``PATH``
        allow_failure: return the failing result instead of raising
        print_command: log the command line before running it
        cwd: working directory for the child
        stdout: stdout handling mode (see module docstring)
        capture_stderr: capture stderr for error reporting instead of
            letting it through to the terminal
        env: extra environment variables merged over ``os.environ``

    Returns:
        RunResult with ``output`` populated when ``stdout="string"``

    Raises:
        SubprocessError: if the command exits nonzero and
            ``allow_failure`` is False
    """
    argv = [str(part) for part in cmd]
    if print_command:
        logger.info("+ %s", shlex.join(argv))

    if stdout == "inherit":
        stdout_pipe = None
    elif stdout == "discard":
        stdout_pipe = asyncio.subprocess.DEVNULL
    else:
        stdout_pipe = asyncio.subprocess.PIPE

    child_env = None
    if env:
        child_env = {**os.environ, **env}

    proc = await asyncio.create_subprocess_exec(
        *argv,
        cwd=str(cwd) if cwd is not None else None,
        stdout=stdout_pipe,
        stderr=asyncio.subprocess.PIPE if capture_stderr else None,
        env=child_env,
    )

    output: Optional[str] = None
    stderr_text: Optional[str] = None
    if callable(stdout):
        assert proc.stdout is not None
        pumps = [_pump_lines(proc.stdout, stdout)]
        if proc.stderr is not None:
            pumps.append(proc.stderr.read())
        results = await asyncio.gather(*pumps)
        if proc.stderr is not None:
            stderr_text = results[1].decode()
        await proc.wait()
    else:
        out_bytes, err_bytes = await proc.communicate()
        if stdout == "string":
            output = (out_bytes or b"").decode()
        if err_bytes is not None:
            stderr_text = err_bytes.decode()

    result = RunResult(returncode=proc.returncode or 0, output=output, stderr=stderr_text)
    if not result.success and not allow_failure:
        raise SubprocessError(argv, result.returncode, output=output, stderr=stderr_text)
    return result


async def run_output(
    cmd: Sequence[str],
    *,
    allow_failure: bool = False,
    print_command: bool = False,
    cwd: Optional[Union[str, Path]] = None,
) -> str:
    """Run ``cmd`` and return its stdout without the trailing newline.

    When ``allow_failure`` is set and the command fails, returns ``""``.
    """
    result = await run(
        cmd,
        allow_failure=allow_failure,
        print_command=print_command,
        cwd=cwd,
        stdout="string",
        capture_stderr=True,
    )
    if not result.success:
        logger.debug("Ignoring failure of %s: %s", shlex.join(cmd), result.stderr)
        return ""
    return (result.output or "").rstrip("\n")


async def run_test(cmd: Sequence[str], *, cwd: Optional[Union[str, Path]] = None) -> bool:
    """Run ``cmd`` silently and report whether it succeeded."""
    result = await run(
        cmd,
        allow_failure=True,
        print_command=False,
        cwd=cwd,
        stdout="discard",
        capture_stderr=True,
    )
    return result.success


class SubprocessRunner:
    """:class:`CmdRunner` backed by real subprocesses.

    Paths passed to :meth:`exists` are interpreted relative to ``cwd``.
    """

    def __init__(self, cwd: Optional[Union[str, Path]] = None, *, print_command: bool = True):
        self.cwd = Path(cwd) if cwd is not None else None
        self.print_command = print_command

    async def run(self, cmd: Sequence[str]) -> None:
        await run(cmd, cwd=self.cwd, print_command=self.print_command)

    async def run_output(self, cmd: Sequence[str], *, allow_failure: bool = False) -> str:
        return await run_output(cmd, allow_failure=allow_failure, cwd=self.cwd)

    async def exists(self, path: str) -> bool:
        base = self.cwd if self.cwd is not None else Path.cwd()
        return (base / path).exists()
