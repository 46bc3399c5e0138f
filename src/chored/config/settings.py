"""ChoredConfig dataclass and global configuration state.

Loading logic lives in the ``_ChoredConfigLoader`` mixin (``loader.py``).
"""

import logging
import sys
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from pathlib import Path
from typing import List, Optional

from chored.config.domains import BumpSettings, DepsSettings, GithubSettings
from chored.config.loader import _ChoredConfigLoader

DEFAULT_TASK_ROOT = Path("choredefs")


def _get_version() -> str:
    """Package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("chored")
    except PackageNotFoundError:
        return "0.0.0"


_PACKAGE_VERSION = _get_version()


class _PlainFormatter(logging.Formatter):
    """Bare messages for INFO and below; level-prefixed above."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno > logging.INFO:
            return f"{record.levelname}: {message}"
        return message


@dataclass
class ChoredConfig(_ChoredConfigLoader):
    """Runtime configuration with support for env vars and TOML overrides."""

    # Task modules
    task_root: Path = field(default_factory=lambda: DEFAULT_TASK_ROOT)

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = False

    # Chore defaults
    bump: BumpSettings = field(default_factory=BumpSettings)
    deps: DepsSettings = field(default_factory=DepsSettings)

    # GitHub access
    github: GithubSettings = field(default_factory=GithubSettings)

    version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    loaded_files: List[Path] = field(default_factory=list, repr=False)

    def setup_logging(self) -> None:
        """Configure the ``chored`` logger based on settings.

        Replaces any handler installed by a previous call.
        """
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            formatter: logging.Formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = _PlainFormatter("%(message)s")

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("chored")
        for existing in list(root_logger.handlers):
            root_logger.removeHandler(existing)
        root_logger.setLevel(level)
        root_logger.addHandler(handler)
        root_logger.propagate = False


# Global configuration instance
_config: Optional[ChoredConfig] = None


def get_config() -> ChoredConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ChoredConfig.from_env()
    return _config


def set_config(config: Optional[ChoredConfig]) -> None:
    """Set (or with None, reset) the global configuration instance."""
    global _config
    _config = config
