"""Nearest-version-tag discovery via ``git describe``.

CI checkouts are frequently shallow, in which case the nearest version
tag may simply not have been fetched yet. :func:`describe_with_auto_deepen`
fetches history in steps of 100 commits (falling back to a full unshallow
on the last attempt) until ``git describe`` finds a tag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from chored.core.cmd import CmdRunner
from chored.core.errors import ValidationError

logger = logging.getLogger(__name__)

SHALLOW_MARKER = ".git/shallow"
DEEPEN_ATTEMPTS = 4
DEEPEN_DEPTH = 100


@dataclass(frozen=True)
class DescribedVersion:
    """Parsed ``git describe --long`` output.

    Attributes:
        commit: abbreviated commit id of the described ref
        tag: nearest matching tag, or None if no tag is reachable
        is_exact: whether the ref is the tagged commit itself
    """

    commit: str
    tag: Optional[str] = None
    is_exact: bool = False


def describe_cmd(ref: str) -> list[str]:
    # Require a digit after the `v` so unrelated tags (e.g. `vendor-x`) never match.
    match_flags: list[str] = []
    for n in range(10):
        match_flags.extend(["--match", f"v{n}*"])
    return ["git", "describe", "--tags", "--first-parent", *match_flags, "--always", "--long", ref]


def parse_describe(output: str) -> DescribedVersion:
    """Parse the output of :func:`describe_cmd`.

    ``abc1234`` means no tag is reachable; ``v1.3.0-3-gf32721e`` is
    tag ``v1.3.0``, 3 commits ahead, at commit ``f32721e``. Tags may
    themselves contain hyphens.

    Raises:
        ValidationError: for output with exactly one hyphen
    """
    parts = output.split("-")
    if len(parts) == 1:
        return DescribedVersion(commit=output, tag=None, is_exact=False)
    if len(parts) == 2:
        raise ValidationError(f"Unexpected `git describe` output: {output}")
    return DescribedVersion(
        commit=parts[-1][1:],
        tag="-".join(parts[:-2]),
        is_exact=parts[-2] == "0",
    )


async def describe(runner: CmdRunner, ref: str, *, allow_failure: bool = False) -> DescribedVersion:
    output = await runner.run_output(describe_cmd(ref), allow_failure=allow_failure)
    logger.info("Git describe output: %s", output)
    return parse_describe(output)


async def describe_with_auto_deepen(runner: CmdRunner, ref: str) -> DescribedVersion:
    """
    Describe ``ref``, fetching more history while a shallow clone has no tag.

    In a full clone this is a single ``git describe``. In a shallow clone
    (``.git/shallow`` exists) describe failures count as "no tag yet" and
    trigger up to three ``git fetch --deepen 100`` calls and then a final
    ``git fetch --unshallow --tags``, re-running describe after each.

    Args:
        runner: command runner used for every git invocation
        ref: ref to describe (the merge target on pull requests)

    Returns:
        The last describe result, which has ``tag=None`` if no version tag
        is reachable even with full history.
    """
    if not await runner.exists(SHALLOW_MARKER):
        return await describe(runner, ref)

    logger.info("Shallow repository detected")
    tries = DEEPEN_ATTEMPTS
    while True:
        result = await describe(runner, ref, allow_failure=True)
        if result.tag is not None or tries < 1:
            return result
        if tries == 1:
            cmd = ["git", "fetch", "--unshallow", "--tags"]
        else:
            cmd = ["git", "fetch", "--deepen", str(DEEPEN_DEPTH)]
        logger.info("Fetching more history ...")
        await runner.run(cmd)
        tries -= 1
