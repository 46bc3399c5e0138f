"""Version templates and next-version computation.

A template constrains which components of a version may change. Each
part is a literal integer (pinned), ``x`` (free to bump) or ``-``
(unconstrained; initialised to 0 but never chosen for a bump).

Examples:
    ``x.x.x``   any of major/minor/patch may be bumped
    ``1.x.0``   major pinned to 1, patch pinned to 0, only minor moves
    ``2.x``     major pinned to 2, minor free, deeper parts appended freely
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from chored.core.errors import ValidationError
from chored.core.version import Index, Version, resolve_index

logger = logging.getLogger(__name__)

FREE = "x"
UNCONSTRAINED = "-"

TemplatePart = Union[int, str]


def _parse_template_part(p: str) -> TemplatePart:
    if p in (FREE, UNCONSTRAINED):
        return p
    return Version.parse_part(p)


class VersionTemplate:
    """Parsed version template.

    Attributes:
        parts: template parts in order
        minimal_index: index bumped when nothing else is requested; the
            last free index, or ``len(parts)`` when no part is free
    """

    def __init__(self, parts: Sequence[TemplatePart]):
        self.parts: tuple[TemplatePart, ...] = tuple(parts)
        self._first_free = self.parts.index(FREE) if FREE in self.parts else -1

        if self._first_free == -1:
            self._last_free = -1
            self.minimal_index = len(self.parts)
            return

        # Once a part is free, only free parts or literal zeros may follow.
        for part in self.parts[self._first_free :]:
            if part != FREE and part != 0:
                raise ValidationError(f"Invalid version template: {self.show()}")
        self._last_free = len(self.parts) - 1 - self.parts[::-1].index(FREE)
        self.minimal_index = self._last_free

    @classmethod
    def parse(cls, s: str) -> "VersionTemplate":
        try:
            return cls([_parse_template_part(p) for p in Version.split(s)])
        except ValidationError as e:
            if str(e).startswith("Invalid version template"):
                raise
            raise ValidationError(f"Invalid version template: {s}") from e

    @classmethod
    def parse_lax(cls, s: str) -> Optional["VersionTemplate"]:
        """Like :meth:`parse` but returns ``None`` for anything unparseable."""
        try:
            return cls.parse(s)
        except ValidationError:
            return None

    @classmethod
    def unrestricted(cls, length: int) -> "VersionTemplate":
        return cls([FREE] * length)

    def is_free(self, index: int) -> bool:
        if self._first_free == -1:
            return index >= len(self.parts)
        if self._last_free == len(self.parts) - 1:
            return index >= self._first_free
        return self._first_free <= index <= self._last_free

    def extend_to(self, length: int) -> "VersionTemplate":
        if length <= len(self.parts):
            return self
        return VersionTemplate(list(self.parts) + [FREE] * (length - len(self.parts)))

    def initial_version(self) -> Version:
        return Version([0 if isinstance(p, str) else p for p in self.parts])

    def show(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"VersionTemplate({self.show()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionTemplate):
            return NotImplemented
        return self.parts == other.parts

    def __hash__(self) -> int:
        return hash(self.parts)


def next_version(
    template: VersionTemplate,
    current: Optional[Version],
    *,
    index: Optional[Index] = None,
    default_bump: Optional[Index] = None,
) -> Version:
    """
    Compute the version following ``current`` under ``template``.

    Args:
        template: template constraining which components may change
        current: latest released version, or None if there is none yet
        index: component to bump; must be free in ``template``
        default_bump: preferred component when ``index`` is not given,
            used only if free in ``template``

    Returns:
        The next version. Components after the bumped one reset to 0, as
        does everything after a pinned component that moves forward.

    Raises:
        ValidationError: if ``index`` is not free in ``template``
    """
    if current is None:
        return template.initial_version()

    if index is not None:
        chosen = resolve_index(index)
        if not template.is_free(chosen):
            raise ValidationError(
                f"Requested index ({index}) is incompatible with version template: {template.show()}"
            )
    elif default_bump is not None and template.is_free(resolve_index(default_bump)):
        chosen = resolve_index(default_bump)
    else:
        chosen = template.minimal_index

    extended = template.extend_to(chosen + 1)
    incremented = False
    parts: list[int] = []
    for i, t in enumerate(extended.parts):
        v = current.parts[i] if i < len(current.parts) else 0
        part = 0 if incremented else v
        if i < chosen:
            if isinstance(t, int):
                part = t
                if t > v:
                    incremented = True
        elif i == chosen:
            part = 0 if incremented else v + 1
            incremented = True
        parts.append(part)

    result = Version(parts)
    logger.debug("next_version(%s, %s, index=%s) -> %s", template.show(), current.show(), chosen, result.show())
    return result
