"""Unified error hierarchy for chored.

All custom exception classes are defined in domain-specific modules within
this package. This __init__.py re-exports everything for convenient access.

Usage:
    from chored.core.errors import ValidationError, NotFoundError
"""

# --- Base / Registry ---
from chored.core.errors.base import (
    ERROR_EXIT_CODES,
    ChoredError,
    exit_code_for,
    register_exit_code,
)

# --- Execution errors ---
from chored.core.errors.execution import (
    CleanWorkspaceError,
    NotFoundError,
    SubprocessError,
)

# --- GitHub errors ---
from chored.core.errors.github import GraphQLError

# --- Validation errors ---
from chored.core.errors.validation import (
    DuplicatePathError,
    MissingEnvironmentError,
    ValidationError,
)

register_exit_code(ChoredError, 1)
# Same status click uses for a bad invocation.
register_exit_code(ValidationError, 2)

__all__ = [
    "ERROR_EXIT_CODES",
    "ChoredError",
    "CleanWorkspaceError",
    "DuplicatePathError",
    "GraphQLError",
    "MissingEnvironmentError",
    "NotFoundError",
    "SubprocessError",
    "ValidationError",
    "exit_code_for",
    "register_exit_code",
]
