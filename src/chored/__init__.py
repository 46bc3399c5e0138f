"""chored: a task runner for project chores.

Chores are plain Python functions in ``./choredefs/*.py``, run with
``chored [MODULE] CHORE [OPTIONS]``. The library in :mod:`chored.core`
covers what chores typically need: running commands, computing version
tags from git history, bumping pinned dependency URLs, rendering
generated files, docker builds and self-updating pull requests.
"""

from chored.config.settings import _PACKAGE_VERSION

__version__ = _PACKAGE_VERSION
