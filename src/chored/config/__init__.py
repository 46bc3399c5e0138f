"""Configuration package for chored.

Sub-modules:
    parsing  – boolean/list parsing and enumeration normalization
    domains  – BumpSettings, DepsSettings, GithubSettings
    settings – ChoredConfig dataclass, get_config/set_config globals
    loader   – ChoredConfig loading mixin (_ChoredConfigLoader)
"""

from chored.config.domains import (  # noqa: F401
    DEFAULT_DEPS_EXTS,
    DEFAULT_DEPS_SKIP,
    BumpSettings,
    DepsSettings,
    GithubSettings,
)
from chored.config.parsing import _parse_bool, _parse_list  # noqa: F401
from chored.config.settings import (  # noqa: F401
    _PACKAGE_VERSION,
    DEFAULT_TASK_ROOT,
    ChoredConfig,
    get_config,
    set_config,
)
