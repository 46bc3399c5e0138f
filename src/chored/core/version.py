"""Version values and component indexes.

A :class:`Version` is an immutable sequence of non-negative integers with
no fixed arity. Version tags are always rendered as ``v<parts>``, e.g.
``v1.2.3``.

Two parsers are provided:
- :meth:`Version.parse` is strict and accepts ``v?N(.N)*``
- :meth:`Version.parse_lax` accepts ``[prefix]N(.N)+[suffix]`` and drops
  the prefix and suffix, which is how version-ish ref names such as
  ``release-1.2.0rc1`` are read
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

from chored.core.errors import ValidationError

NamedIndex = Literal["major", "minor", "patch"]
Index = Union[NamedIndex, int]

NAMED_INDEXES: tuple[str, ...] = ("major", "minor", "patch")

_STRICT_RE = re.compile(r"^v?([0-9]+(?:\.[0-9]+)*)$")
_LAX_RE = re.compile(r"^([^0-9.]*)([0-9]+(?:\.[0-9]+)+)([^0-9.].*)?$")
_PART_RE = re.compile(r"^[0-9]+$")


def resolve_index(index: Index) -> int:
    """Map ``major``/``minor``/``patch`` to 0/1/2; ints pass through."""
    if isinstance(index, bool):
        raise ValidationError(f"Invalid version index: {index!r}")
    if isinstance(index, int):
        if index < 0:
            raise ValidationError(f"Invalid version index: {index}")
        return index
    try:
        return NAMED_INDEXES.index(index)
    except ValueError:
        raise ValidationError(
            f"Invalid version index: {index!r} (expected one of {', '.join(NAMED_INDEXES)} or an integer)"
        ) from None


def parse_index(value: Union[str, int]) -> Index:
    """Parse an index from user input (``"minor"``, ``"2"`` or ``2``)."""
    if isinstance(value, int):
        return value
    if _PART_RE.match(value):
        return int(value)
    resolve_index(value)  # type: ignore[arg-type]
    return value  # type: ignore[return-value]


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    parts: tuple[int, ...]

    def __init__(self, parts: Sequence[int]):
        object.__setattr__(self, "parts", tuple(int(p) for p in parts))

    @staticmethod
    def split(s: str) -> list[str]:
        """Split a version-like string into its components (leading ``v`` dropped)."""
        if s.startswith("v"):
            s = s[1:]
        return s.split(".")

    @staticmethod
    def parse_part(p: str) -> int:
        if not _PART_RE.match(p):
            raise ValidationError(f"Invalid version component: {p!r}")
        return int(p, 10)

    @classmethod
    def parse(cls, s: str) -> "Version":
        version = cls.try_parse(s)
        if version is None:
            raise ValidationError(f"Invalid version: {s!r}")
        return version

    @classmethod
    def try_parse(cls, s: str) -> Optional["Version"]:
        match = _STRICT_RE.match(s)
        if match is None:
            return None
        return cls([int(n, 10) for n in match.group(1).split(".")])

    @classmethod
    def parse_lax(cls, s: str) -> Optional["Version"]:
        match = _LAX_RE.match(s)
        if match is None:
            return None
        return cls([int(n, 10) for n in match.group(2).split(".")])

    @staticmethod
    def compare(a: "Version", b: "Version") -> int:
        """Three-way comparison over ``parts``.

        A component that is absent on one side sorts before a present one,
        whatever its value, so ``1`` < ``1.0`` and ``1`` < ``1.2.3``.
        """
        for i in range(max(len(a.parts), len(b.parts)) + 1):
            a_missing = i >= len(a.parts)
            b_missing = i >= len(b.parts)
            if a_missing and b_missing:
                return 0
            if a_missing:
                return -1
            if b_missing:
                return 1
            if a.parts[i] != b.parts[i]:
                return a.parts[i] - b.parts[i]
        return 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return Version.compare(self, other) < 0

    def show(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def tag(self) -> str:
        return "v" + self.show()

    def __str__(self) -> str:
        return self.show()
