"""GitHub / GraphQL error classes."""

from typing import Any, Optional

from chored.core.errors.base import ChoredError


class GraphQLError(ChoredError):
    """Raised when a GraphQL request fails.

    Attributes:
        status_code: HTTP status, when the failure was at the HTTP layer
        errors: The ``errors`` array from the response body, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        errors: Optional[list[Any]] = None,
    ):
        self.status_code = status_code
        self.errors = errors or []
        super().__init__(message)
