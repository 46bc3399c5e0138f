"""Release directives embedded in commit subjects.

A commit subject may carry bracketed labels:
- ``[major]`` / ``[minor]`` / ``[patch]`` select the component to bump
- ``[minor-release]`` (etc.) selects a component and requests a release
- ``[release]`` requests a release with the default component
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from chored.core.version import NAMED_INDEXES, Index, resolve_index

_LABEL_RE = re.compile(r"\[\S+\]")
_RELEASE_SUFFIX = "-release"


@dataclass(frozen=True)
class CommitDirective:
    release: bool = False
    index: Optional[Index] = None


def _parse_label(label: str) -> CommitDirective:
    without_release = label[: -len(_RELEASE_SUFFIX)] if label.endswith(_RELEASE_SUFFIX) else label
    if without_release in NAMED_INDEXES:
        return CommitDirective(index=without_release, release=without_release != label)  # type: ignore[arg-type]
    return CommitDirective(index=None, release=label == "release")


def parse_commit_lines(commit_lines: str) -> CommitDirective:
    """Combine every label found in newline-joined commit subjects.

    ``release`` is set if any label requests it; ``index`` is the most
    significant component requested (major before minor before patch).
    """
    if not commit_lines:
        return CommitDirective()

    labels = [_parse_label(tag.strip()[1:-1]) for tag in _LABEL_RE.findall(commit_lines)]
    indexes = sorted((d.index for d in labels if d.index is not None), key=resolve_index)
    return CommitDirective(
        release=any(d.release for d in labels),
        index=indexes[0] if indexes else None,
    )
