"""Concurrent execution helpers for composite chores.

Composite chores (``ci``, ``precommit`` and the like) start several
independent chores at once and join them all. Side effects of chores
that have already started are not rolled back when a sibling fails.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class GatherResult:
    """Result of :func:`gather`.

    Attributes:
        results: results in submission order (None for failed operations)
        errors: errors in submission order (None for successful operations)
    """

    results: List[Any] = field(default_factory=list)
    errors: List[Optional[BaseException]] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return all(e is None for e in self.errors)

    def first_error(self) -> Optional[BaseException]:
        return next((e for e in self.errors if e is not None), None)


async def gather(*aws: Awaitable[Any]) -> GatherResult:
    """Run all awaitables concurrently and wait for every one to finish."""
    outcomes = await asyncio.gather(*aws, return_exceptions=True)
    result = GatherResult()
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            result.results.append(None)
            result.errors.append(outcome)
        else:
            result.results.append(outcome)
            result.errors.append(None)
    return result


async def gather_all(*aws: Awaitable[Any]) -> List[Any]:
    """
    Run all awaitables concurrently and return their results in order.

    Every awaitable runs to completion even if another fails.

    Raises:
        The first failure (in submission order), once all have finished.
    """
    result = await gather(*aws)
    error = result.first_error()
    if error is not None:
        failed = sum(1 for e in result.errors if e is not None)
        if failed > 1:
            logger.warning("%d of %d concurrent chores failed", failed, len(result.errors))
        raise error
    return result.results
