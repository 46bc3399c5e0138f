"""Rewrite pinned remote dependency URLs to their latest versions.

:class:`Bumper` scans text for remote URLs, asks each registered
:class:`~chored.core.deps.source.Source` whether it recognises them, and
replaces the pinned version with the newest one its spec resolves to.

Resolution is memoised per spec identity for the lifetime of a
:class:`Bumper`: the first caller starts an ``asyncio.Task`` and every
concurrent or later caller awaits that same task, so each remote is
listed at most once even when hundreds of files reference it.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Optional, Pattern, Sequence, Union

import click

from chored.core.deps.github import GithubPipSource, GithubRawSource
from chored.core.deps.source import BumpSpec, ImportSpec, Source, make_override_fn
from chored.core.errors import ValidationError

logger = logging.getLogger(__name__)

AsyncReplacer = Callable[[str], Awaitable[str]]

DEFAULT_EXTS: tuple[str, ...] = (".py", ".txt", ".toml", ".cfg", ".yml", ".yaml")
DEFAULT_SKIP: tuple[str, ...] = (r"^\..+", r"node_modules$", r"__pycache__$")
DEFAULT_SOURCES: tuple[Source, ...] = (GithubRawSource(), GithubPipSource())

# A remote URL that is quoted, follows a PEP 508 `name @ `, or starts a line.
_URL_RE = re.compile(r"""(['"]|@ |^)((?:git\+)?https?://[^'"\s]+)""", re.MULTILINE)


@dataclass
class BumpOptions:
    exts: Sequence[str] = DEFAULT_EXTS
    skip: Sequence[Union[str, Pattern[str]]] = DEFAULT_SKIP
    explicit_specs: Sequence[BumpSpec] = field(default_factory=list)
    verbose: bool = False


class Bumper:
    def __init__(
        self,
        sources: Sequence[Source] = DEFAULT_SOURCES,
        *,
        explicit_specs: Sequence[BumpSpec] = (),
        verbose: bool = False,
    ):
        self.sources = list(sources)
        self.verbose = verbose
        self._override = make_override_fn(list(explicit_specs))
        self.cache: dict[str, asyncio.Task] = {}
        self.changed_sources: set[str] = set()
        self.fetch_count = 0

    def parse(self, url: str) -> Optional[ImportSpec]:
        for source in self.sources:
            import_spec = source.parse(url, self._override)
            if import_spec is not None:
                return import_spec
        return None

    async def _resolve(self, import_spec: ImportSpec) -> Optional[str]:
        version = await import_spec.spec.resolve(self.verbose)
        if version is not None:
            logger.debug("[version] %s %s", version, import_spec.spec.identity)
        return version

    def _lookup(self, import_spec: ImportSpec) -> asyncio.Task:
        spec_id = import_spec.spec.identity
        task = self.cache.get(spec_id)
        if task is None:
            task = asyncio.ensure_future(self._resolve(import_spec))
            self.cache[spec_id] = task
            self.fetch_count += 1
            if self.verbose:
                logger.info("[fetch] %s", spec_id)
            else:
                click.echo(".", nl=False, err=True)
        return task

    async def replace_url(self, url: str) -> str:
        import_spec = self.parse(url)
        if import_spec is None:
            return url
        resolved = await self._lookup(import_spec)
        if resolved:
            replacement = import_spec.spec.show(import_spec.imp.with_version(resolved))
            if replacement != url:
                self.changed_sources.add(import_spec.spec.identity)
                return replacement
        return url

    async def process_imports(self, contents: str, fn: Optional[AsyncReplacer] = None) -> str:
        """Replace every remote URL in ``contents`` with ``fn(url)``.

        Replacements for distinct URLs are computed concurrently.
        """
        fn = fn or self.replace_url
        urls = list(dict.fromkeys(m.group(2) for m in _URL_RE.finditer(contents)))
        results = await asyncio.gather(*(fn(url) for url in urls))
        replacements = {url: new for url, new in zip(urls, results) if new is not None}
        return _URL_RE.sub(lambda m: m.group(1) + replacements.get(m.group(2), m.group(2)), contents)

    async def bump_source_file(self, path: Union[str, Path], replacer: Optional[AsyncReplacer] = None) -> bool:
        path = Path(path)
        contents = path.read_text()
        result = await self.process_imports(contents, replacer)
        changed = contents != result
        if self.verbose:
            logger.info("[%s]: %s", "modified" if changed else "unchanged", path)
        if changed:
            path.write_text(result)
        return changed

    async def summarize(self) -> None:
        missing = [spec_id for spec_id, task in self.cache.items() if await task is None]
        if self.fetch_count and not self.verbose:
            click.echo("", err=True)
        if missing:
            logger.warning("%d sources have no available versions:", len(missing))
            for spec_id in missing:
                logger.warning(" - %s", spec_id)
        logger.info("%d remote sources found, %d updated", self.fetch_count, self.changes())

    def changes(self) -> int:
        return len(self.changed_sources)


def _compile_skip(skip: Sequence[Union[str, Pattern[str]]]) -> list[Pattern[str]]:
    return [re.compile(p) if isinstance(p, str) else p for p in skip]


def walk_paths(root: Path, exts: Sequence[str], skip: Sequence[Pattern[str]]) -> list[Path]:
    """Files under ``root`` with one of ``exts``.

    ``skip`` patterns are searched in each path relative to ``root``;
    a matching directory is not descended into.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root)

        def skipped(name: str) -> bool:
            rel = (rel_dir / name).as_posix()
            return any(p.search(rel) for p in skip)

        dirnames[:] = sorted(d for d in dirnames if not skipped(d))
        for name in sorted(filenames):
            if name.endswith(tuple(exts)) and not skipped(name):
                found.append(Path(dirpath) / name)
    return found


async def walk_roots(
    roots: Sequence[Union[str, Path]],
    opts: BumpOptions,
    handle: Callable[[Path], Awaitable[object]],
) -> None:
    """Call ``handle`` concurrently for every matching file under ``roots``.

    Roots that are files are handled directly; no roots means ``.``.
    """
    if not opts.exts:
        raise ValidationError("Empty list of `exts` passed to walk function")
    skip = _compile_skip(opts.skip)
    work = []
    for root in [Path(r) for r in roots] or [Path(".")]:
        if root.is_dir():
            logger.debug("[walk] root: %s", root)
            work.extend(handle(path) for path in walk_paths(root, opts.exts, skip))
        else:
            work.append(handle(root))
    await asyncio.gather(*work)


async def bump(
    roots: Sequence[Union[str, Path]],
    opts: Optional[BumpOptions] = None,
    sources: Sequence[Source] = DEFAULT_SOURCES,
) -> int:
    """Bump every recognised URL under ``roots``; returns the number of updated sources."""
    opts = opts or BumpOptions()
    bumper = Bumper(sources, explicit_specs=opts.explicit_specs, verbose=opts.verbose)

    async def handle(path: Path) -> None:
        if opts.verbose:
            logger.info("[bump] %s", path)
        await bumper.bump_source_file(path)

    await walk_roots(roots, opts, handle)
    await bumper.summarize()
    return bumper.changes()
