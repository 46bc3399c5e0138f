"""ChoredConfig loading logic.

Provides ``_ChoredConfigLoader``, a mixin whose methods are inherited by
``ChoredConfig`` (defined in ``settings.py``), keeping that module to field
definitions and simple accessors.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, cast

from chored.config.domains import BumpSettings, DepsSettings, GithubSettings
from chored.config.parsing import _normalize_log_level, _parse_bool

if TYPE_CHECKING:
    from chored.config.settings import ChoredConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAMES = ("chored.toml", ".chored.toml")


class _ChoredConfigLoader:
    """Mixin providing config-loading methods for ``ChoredConfig``."""

    if TYPE_CHECKING:
        task_root: Path
        log_level: str
        structured_logging: bool
        bump: BumpSettings
        deps: DepsSettings
        github: GithubSettings
        loaded_files: list

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ChoredConfig":
        """
        Create configuration from environment variables and TOML files.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./chored.toml or ./.chored.toml)
        3. User TOML config (~/.chored.toml)
        4. XDG config (~/.config/chored/config.toml)
        5. Default values

        ``config_file`` (or ``$CHORED_CONFIG_FILE``) replaces the file
        lookup entirely.
        """
        config = cls()

        toml_path = config_file or os.environ.get("CHORED_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
            xdg_config = Path(xdg_config_home) / "chored" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)

            home_config = Path.home() / ".chored.toml"
            if home_config.exists():
                config._load_toml(home_config)

            for name in PROJECT_CONFIG_NAMES:
                project_config = Path(name)
                if project_config.exists():
                    config._load_toml(project_config)
                    break

        config._load_env()
        return cast("ChoredConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from a TOML file."""
        if not path.exists():
            logger.warning("Config file not found: %s", path)
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error("Error loading config file %s: %s", path, e)
            return

        self._apply_toml(data)
        self.loaded_files.append(path)
        logger.debug("Loaded config from %s", path)

    def _apply_toml(self, data: dict[str, Any]) -> None:
        if "tasks" in data:
            tasks = data["tasks"]
            if "root" in tasks:
                self.task_root = Path(tasks["root"]).expanduser()

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(log["level"])
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "bump" in data:
            self.bump = BumpSettings.from_toml_dict(data["bump"])

        if "deps" in data:
            self.deps = DepsSettings.from_toml_dict(data["deps"])

        if "github" in data:
            self.github = GithubSettings.from_toml_dict(data["github"])

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if task_root := os.environ.get("CHORED_TASK_ROOT"):
            self.task_root = Path(task_root)

        if level := os.environ.get("CHORED_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("CHORED_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if token_env := os.environ.get("CHORED_GITHUB_TOKEN_ENV"):
            self.github.token_env = token_env

        if graphql_url := os.environ.get("CHORED_GRAPHQL_URL"):
            self.github.graphql_url = graphql_url
