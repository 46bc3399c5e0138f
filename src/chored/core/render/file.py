"""Generated file definitions.

Each file knows its output path and how to serialize itself, including a
header marking it as generated (when the format allows comments). Nothing
here touches the filesystem; see :func:`chored.core.render.render`.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

import yaml

MARKER = "NOTE: This file is generated by chored"
GENERATED_ATTR = "chored-generated"


def render_header_lines(line_prefix: str, line_suffix: Optional[str] = None) -> list[str]:
    suffix = f" {line_suffix}" if line_suffix else ""
    return [f"{line_prefix} {MARKER}{suffix}", ""]


def join(lines: Sequence[str]) -> str:
    return "\n".join(lines)


def write_mode(read_only: bool = True, executable: bool = False) -> int:
    mode = 0o400
    if not read_only:
        mode |= 0o200
    if executable:
        mode |= 0o100
    return mode


class BaseFile:
    """A file to generate at ``path`` holding ``value``.

    Generated files are read-only unless ``read_only=False`` is passed.
    """

    executable: bool = False

    def __init__(self, path: str, value: Any, *, read_only: bool = True, executable: Optional[bool] = None):
        self.path = path
        self.value = value
        self.read_only = read_only
        if executable is not None:
            self.executable = executable

    def serialize(self) -> str:
        raise NotImplementedError

    @property
    def mode(self) -> int:
        return write_mode(self.read_only, self.executable)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path!r})"


class TextFile(BaseFile):
    header_line_prefix = "#"
    header_line_suffix: Optional[str] = None

    def serialize(self) -> str:
        header = render_header_lines(self.header_line_prefix, self.header_line_suffix)
        if self.value.startswith("#!"):
            lines = self.value.split("\n")
            lines[1:1] = header
        else:
            lines = header + [self.value]
        return join(lines)


class ExecutableFile(TextFile):
    executable = True


class HTMLFile(TextFile):
    header_line_prefix = "<!--"
    header_line_suffix = "-->"


MarkdownFile = HTMLFile


class JSONFile(BaseFile):
    def serialize(self) -> str:
        return json.dumps({"//": MARKER, **self.value}, indent=2)


class YAMLFile(BaseFile):
    def serialize(self) -> str:
        lines = render_header_lines("#")
        lines.append(yaml.safe_dump(self.value, sort_keys=False, default_flow_style=False))
        return join(lines)


class RawFile(BaseFile):
    def serialize(self) -> str:
        return self.value


class GitAttributes:
    """``.gitattributes`` marking every generated path.

    The ``chored-generated`` attribute is how the next render run finds
    files it generated previously (to delete stale ones).
    """

    path = ".gitattributes"

    def __init__(self, extra_lines: Sequence[str] = ()):
        self.extra_lines = list(extra_lines)

    def derive(self, paths: Sequence[str]) -> TextFile:
        lines = [f"{p} linguist-generated {GENERATED_ATTR}" for p in paths]
        return TextFile(self.path, join(lines + self.extra_lines))


def generated_from_gitattributes(contents: str) -> list[str]:
    """Paths carrying the ``chored-generated`` attribute."""
    paths = []
    for line in contents.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if GENERATED_ATTR in fields[1:]:
            paths.append(fields[0])
    return paths
