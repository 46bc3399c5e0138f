"""Validation error classes.

Raised for malformed user input: version templates, index/template
mismatches, describe output, bump specs and CLI options.
"""

from typing import Optional

from chored.core.errors.base import ChoredError


class ValidationError(ChoredError, ValueError):
    """Raised when input cannot be parsed or violates a constraint."""


class MissingEnvironmentError(ValidationError):
    """Raised when a required environment variable is unset or empty."""

    def __init__(self, name: str, purpose: Optional[str] = None):
        self.name = name
        self.purpose = purpose
        message = f"Environment variable ${name} is not set"
        if purpose:
            message += f" (required for {purpose})"
        super().__init__(message)


class DuplicatePathError(ValidationError):
    """Raised when two rendered files share an output path."""

    def __init__(self, paths: list[str]):
        self.paths = list(paths)
        super().__init__(f"Duplicate path in {self.paths!r}")
