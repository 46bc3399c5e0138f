"""Version template matching, tag discovery and the bump engine."""

from chored.core.versioning.describe import (
    DescribedVersion,
    describe_cmd,
    describe_with_auto_deepen,
    parse_describe,
)
from chored.core.versioning.directive import CommitDirective, parse_commit_lines
from chored.core.versioning.engine import (
    ACTIONS,
    DEFAULT_CONTEXT,
    TRIGGERS,
    Action,
    BumpOptions,
    Context,
    Engine,
    Trigger,
    parse_tag,
)
from chored.core.versioning.template import VersionTemplate, next_version

__all__ = [
    "ACTIONS",
    "Action",
    "BumpOptions",
    "CommitDirective",
    "Context",
    "DEFAULT_CONTEXT",
    "DescribedVersion",
    "Engine",
    "TRIGGERS",
    "Trigger",
    "VersionTemplate",
    "describe_cmd",
    "describe_with_auto_deepen",
    "next_version",
    "parse_commit_lines",
    "parse_describe",
    "parse_tag",
]
