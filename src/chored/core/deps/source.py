"""Dependency source abstractions.

A *source* recognises remote dependency URLs of one shape (e.g. GitHub
raw file URLs) and splits them into an import (the parsed URL) and a
spec (what to resolve the version against: a repository plus an
optional ref filter). Specs with equal ``identity`` are resolved once
per run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Protocol, Sequence, TypeVar

from chored.core.errors import ValidationError

ImportT = TypeVar("ImportT")


@dataclass(frozen=True)
class BumpSpec:
    """Explicit ref filter for one source, e.g. ``chored#main``."""

    source_name: str
    spec: str


def parse_spec(s: str) -> BumpSpec:
    parts = s.split("#")
    if len(parts) == 2 and all(parts):
        source_name, spec = parts
        return BumpSpec(source_name=source_name, spec=spec)
    raise ValidationError(f"Can't parse spec: {s}")


class Spec(Protocol[ImportT]):
    identity: str

    def matches_spec(self, spec: BumpSpec) -> bool: ...

    async def resolve(self, verbose: bool = False) -> Optional[str]: ...

    def show(self, imp: ImportT) -> str: ...


@dataclass(frozen=True)
class ImportSpec(Generic[ImportT]):
    imp: ImportT
    spec: Spec[ImportT]


MatchFn = Callable[[BumpSpec], bool]
OverrideFn = Callable[[ImportT, MatchFn], ImportT]


class Source(Protocol):
    def parse(self, url: str, override: OverrideFn) -> Optional[ImportSpec]: ...


def make_override_fn(explicit_specs: Sequence[BumpSpec]) -> OverrideFn:
    """Build a function replacing an import's spec with the first explicit
    spec that ``matches`` accepts."""

    def override(imp, matches: MatchFn):
        for explicit in explicit_specs:
            if matches(explicit):
                return imp.with_spec(explicit.spec)
        return imp

    return override
