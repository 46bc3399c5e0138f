"""Domain-specific configuration dataclasses.

Small configuration classes for the version bump chore, dependency
bumping and GitHub access.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chored.config.parsing import _normalize_action, _normalize_trigger, _parse_list

DEFAULT_DEPS_EXTS = [".py", ".txt", ".toml", ".cfg", ".yml", ".yaml"]
DEFAULT_DEPS_SKIP = [r"^\..+", r"node_modules$", r"__pycache__$"]


@dataclass
class BumpSettings:
    """Defaults for the ``bump`` chore.

    Attributes:
        default_template: version template used when neither an explicit
            template nor the branch name provides one
        trigger: ``always`` or ``commitMessage``
        action: ``print``, ``tag`` or ``push``
        default_component: component bumped when nothing else is requested
    """

    default_template: Optional[str] = None
    trigger: str = "always"
    action: str = "tag"
    default_component: Optional[str] = None

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "BumpSettings":
        """Create settings from the ``[bump]`` table."""
        template = data.get("default_template")
        component = data.get("default_component")
        return cls(
            default_template=str(template) if template is not None else None,
            trigger=_normalize_trigger(data.get("trigger", "always")),
            action=_normalize_action(data.get("action", "tag")),
            default_component=str(component) if component is not None else None,
        )


@dataclass
class DepsSettings:
    """Defaults for the ``bump`` (dependencies) chore.

    Attributes:
        exts: file extensions scanned for remote URLs
        skip: regexes for paths (relative to each root) not to scan
        post_chore: chore run after bumping, or None
    """

    exts: List[str] = field(default_factory=lambda: list(DEFAULT_DEPS_EXTS))
    skip: List[str] = field(default_factory=lambda: list(DEFAULT_DEPS_SKIP))
    post_chore: Optional[str] = "render"

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "DepsSettings":
        """Create settings from the ``[deps]`` table.

        An empty ``post_chore`` disables it.
        """
        post_chore = data.get("post_chore", "render")
        return cls(
            exts=_parse_list(data.get("exts", DEFAULT_DEPS_EXTS)),
            skip=_parse_list(data.get("skip", DEFAULT_DEPS_SKIP)),
            post_chore=str(post_chore) if post_chore else None,
        )


@dataclass
class GithubSettings:
    token_env: str = "GITHUB_TOKEN"
    graphql_url: str = "https://api.github.com/graphql"

    @classmethod
    def from_toml_dict(cls, data: Dict[str, Any]) -> "GithubSettings":
        return cls(
            token_env=str(data.get("token_env", "GITHUB_TOKEN")),
            graphql_url=str(data.get("graphql_url", "https://api.github.com/graphql")),
        )
