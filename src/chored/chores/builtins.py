"""Fallback chores, searched after the task root.

Not every chore bundled with chored is exported here, only the common
ones. A task module defining the same name takes priority.
"""

from chored.chores.about import about
from chored.chores.deps import bump
from chored.chores.render import render
from chored.chores.version import bump as release
from chored.chores.version import print_version as version

__all__ = ["about", "bump", "release", "render", "version"]
