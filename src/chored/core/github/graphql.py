"""Minimal async GraphQL client over httpx.

Set ``TRACE_GRAPHQL=1`` to log every query and response at INFO level.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

import httpx

from chored.core.errors import GraphQLError

logger = logging.getLogger(__name__)

R = TypeVar("R")

DEFAULT_TIMEOUT = 30.0


def _trace_level() -> int:
    return logging.INFO if os.environ.get("TRACE_GRAPHQL") == "1" else logging.DEBUG


@dataclass(frozen=True)
class Query(Generic[R]):
    """A GraphQL document plus a function extracting the result from ``data``."""

    query_text: str
    extract: Callable[[Any], R]


class GraphQLClient:
    def __init__(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._transport = transport

    async def execute(self, query: Query[R], variables: Optional[Mapping[str, Any]] = None) -> R:
        """
        POST ``query`` with ``variables`` and extract its result.

        Raises:
            GraphQLError: on a non-2xx response or when the response body
                carries an ``errors`` array
        """
        level = _trace_level()
        logger.log(level, "query: %s (%s)", query.query_text, self.url)
        headers = {**self.headers, "Content-Type": "application/json"}
        payload = {"query": query.query_text, "variables": dict(variables or {})}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.url, json=payload, headers=headers)

        if not response.is_success:
            raise GraphQLError(
                f"GraphQL query returned HTTP status {response.status_code} ({response.reason_phrase}):\n{query.query_text}",
                status_code=response.status_code,
            )
        body = response.json()
        logger.log(level, " => JSON %s", body)
        errors = body.get("errors")
        if errors:
            raise GraphQLError(
                f"GraphQL query returned errors:\n{json.dumps(errors, indent=2)}",
                status_code=response.status_code,
                errors=errors,
            )
        return query.extract(body.get("data"))
