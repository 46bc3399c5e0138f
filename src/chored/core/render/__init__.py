"""Rendering of generated files.

:func:`render` writes a set of generated files and a ``.gitattributes``
listing them. Files that were generated by a previous run but are no
longer part of the set are deleted.

Example:
    from chored.core.render import JSONFile, YAMLFile, render

    await render([
        JSONFile("renovate.json", {"extends": ["config:base"]}),
        YAMLFile(".github/workflows/ci.yml", workflow),
    ])
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence, Union

from chored.core.errors import DuplicatePathError
from chored.core.render.file import (
    GENERATED_ATTR,
    MARKER,
    BaseFile,
    ExecutableFile,
    GitAttributes,
    HTMLFile,
    JSONFile,
    MarkdownFile,
    RawFile,
    TextFile,
    YAMLFile,
    generated_from_gitattributes,
    write_mode,
)

logger = logging.getLogger(__name__)

WRAPPER_SCRIPT_PATH = "chored"

_WRAPPER_SCRIPT = """#!/usr/bin/env sh
set -eu
exec "${PYTHON:-python3}" -m chored "$@"
"""


def wrapper_script(path: str = WRAPPER_SCRIPT_PATH, python: str = "python3") -> ExecutableFile:
    """Executable launcher so ``./chored <chore>`` works in the repository."""
    return ExecutableFile(path, _WRAPPER_SCRIPT.replace("python3", python))


_default_wrapper_script = wrapper_script


def _write(file: BaseFile, root: Path, use_temp: bool) -> None:
    dest = root / file.path
    dest.parent.mkdir(parents=True, exist_ok=True)
    contents = file.serialize()
    if use_temp:
        fd, tmp = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.")
        with os.fdopen(fd, "w") as f:
            f.write(contents)
        os.chmod(tmp, file.mode)
        os.replace(tmp, dest)
        return
    # Previously generated files are read-only.
    dest.unlink(missing_ok=True)
    dest.write_text(contents)
    os.chmod(dest, file.mode)


async def render(
    files: Sequence[BaseFile],
    *,
    gitattributes_extra: Sequence[str] = (),
    wrapper_script: Union[bool, BaseFile] = True,
    root: Union[str, Path] = ".",
) -> None:
    """
    Write ``files`` (plus ``.gitattributes``) under ``root``.

    Args:
        files: files to generate
        gitattributes_extra: extra lines appended to ``.gitattributes``
        wrapper_script: True to include the default ``chored`` launcher,
            False to skip it, or a custom file to use instead
        root: directory generated paths are relative to

    Raises:
        DuplicatePathError: if two files share a path
    """
    root = Path(root)
    files = list(files)
    if wrapper_script is True:
        files.append(_default_wrapper_script())
    elif wrapper_script is not False:
        files.append(wrapper_script)

    all_paths = sorted([f.path for f in files] + [GitAttributes.path])
    if len(set(all_paths)) != len(all_paths):
        raise DuplicatePathError(all_paths)

    attributes_file = GitAttributes(gitattributes_extra).derive(all_paths)

    previous_paths: list[str] = []
    try:
        previous_paths = generated_from_gitattributes((root / attributes_file.path).read_text())
    except FileNotFoundError:
        logger.warning(
            "Can't load state from %s; assuming this is the first file generation run", attributes_file.path
        )

    for stale in (p for p in previous_paths if p not in all_paths):
        logger.info("Removing stale generated file: %s", stale)
        (root / stale).unlink(missing_ok=True)

    # .gitattributes goes first so a failure part-way still records every path.
    await asyncio.to_thread(_write, attributes_file, root, True)
    for file in files:
        await asyncio.to_thread(_write, file, root, False)
    logger.info("Generated %d files", len(files) + 1)


__all__ = [
    "GENERATED_ATTR",
    "MARKER",
    "BaseFile",
    "ExecutableFile",
    "GitAttributes",
    "HTMLFile",
    "JSONFile",
    "MarkdownFile",
    "RawFile",
    "TextFile",
    "YAMLFile",
    "generated_from_gitattributes",
    "render",
    "wrapper_script",
    "write_mode",
]
