"""
Chore discovery and invocation.

A *chore* is a public function exported by a task module. Task modules
are the ``*.py`` files in the task root (``./choredefs`` by default).
A chore is addressed by a path of one or two components:

- ``chored build`` runs ``build`` from ``index.py`` or the builtins, or
  ``default`` from ``build.py``
- ``chored build docker`` runs ``docker`` from ``build.py``
- ``chored ./tools/release.py tag`` runs ``tag`` from an explicit file

Candidate sources are consulted in priority order:

1. task files matching the first path component (all of them, sorted by
   name, when listing)
2. ``index.py`` in the task root (unscoped: chores are addressed by
   function name alone)
3. the builtin chores bundled with chored (:mod:`chored.chores.builtins`)

The first candidate whose id matches the requested path wins.

A module's exports are the names in its ``__all__``, or else every
public callable defined in the module itself. Classes, modules, and
objects marked with :func:`not_a_chore` are never chores. A non-callable
``default`` export (a namespace, a mapping, or any object) contributes
its public callables as if they were exported directly.

Chores receive CLI options as keyword arguments. Option values keep
their type (str, bool, int or any JSON value); ``--env`` options are read
from the environment when the command line is parsed.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import inspect
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import unquote, urlparse

import click

from chored.core.errors import MissingEnvironmentError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

BUILTIN_CHORES = "chored.chores.builtins"
INDEX_MODULE = "index.py"
TASK_MODULE_PREFIX = "chored_tasks"

Id = Tuple[str, ...]

USAGE = """\
Usage: chored [--task-root DIR] [MODULE] CHORE [OPTIONS]

Options are passed to the chore as keyword arguments:
  --string key value / -s key value / --key=value
  --bool flag true / --flag / --no-flag
  --num key int / -n key int / --key=int
  --env key ENVNAME / -e key ENVNAME
  --json '{ ... }'
  -- ARGS (passed as `args`, a list of strings)

  --list / -l   list available chores
  --help / -h   show a chore's documentation
"""


# --- Option values ---


@dataclass(frozen=True)
class OptionValue:
    """A typed CLI option value.

    Attributes:
        kind: one of ``string``, ``bool``, ``int``, ``json``, ``env``
        value: the Python value passed to the chore
        source: the environment variable name for ``env`` values
    """

    kind: str
    value: Any
    source: Optional[str] = None

    @classmethod
    def string(cls, value: str) -> "OptionValue":
        return cls("string", value)

    @classmethod
    def boolean(cls, value: bool) -> "OptionValue":
        return cls("bool", value)

    @classmethod
    def integer(cls, value: int) -> "OptionValue":
        return cls("int", value)

    @classmethod
    def from_json(cls, value: Any) -> "OptionValue":
        return cls("json", value)

    @classmethod
    def env(cls, name: str, environ: Optional[Mapping[str, str]] = None) -> "OptionValue":
        """Read ``name`` from the environment now.

        Raises:
            MissingEnvironmentError: if the variable is unset
        """
        env = os.environ if environ is None else environ
        value = env.get(name)
        if value is None:
            raise MissingEnvironmentError(name, "--env option")
        return cls("env", value, source=name)

    def show(self) -> str:
        if self.kind == "env":
            return f"${self.source}"
        return json.dumps(self.value)


Options = Mapping[str, Union[OptionValue, Any]]


def option_kwargs(opts: Options) -> Dict[str, Any]:
    return {k: v.value if isinstance(v, OptionValue) else v for k, v in opts.items()}


# --- Exports ---


def not_a_chore(obj: Any) -> Any:
    """Mark a public callable in a task module as not being a chore."""
    obj.is_chore = False
    return obj


def is_chore(obj: Any) -> bool:
    if not callable(obj) or inspect.isclass(obj) or inspect.ismodule(obj):
        return False
    return getattr(obj, "is_chore", True) is not False


def module_exports(module: ModuleType) -> Dict[str, Any]:
    names = getattr(module, "__all__", None)
    if names is None:
        names = [
            name
            for name, value in vars(module).items()
            if not name.startswith("_")
            and (getattr(value, "__module__", None) == module.__name__ or name == "default")
        ]
    return {name: getattr(module, name) for name in names if hasattr(module, name)}


def _members(obj: Any) -> Dict[str, Any]:
    if isinstance(obj, Mapping):
        return {str(k): v for k, v in obj.items() if not str(k).startswith("_")}
    return {name: getattr(obj, name) for name in dir(obj) if not name.startswith("_")}


@dataclass(frozen=True)
class Entrypoint:
    """A resolved chore.

    Attributes:
        module: where the chore was found (file path or module name)
        id: the path the chore is addressed by
        fn: the exported name
        impl: the callable
        via_default: whether it was found on a non-callable ``default`` export
    """

    module: str
    id: Id
    fn: str
    impl: Callable[..., Any]
    via_default: bool = False

    def display_id(self) -> str:
        parts = list(self.id)
        if len(parts) > 1 and parts[-1] == "default":
            parts = parts[:-1]
        return " ".join(parts)


def entrypoints_from_module(scope: Optional[str], label: str, module: ModuleType) -> List[Entrypoint]:
    def make_id(key: str) -> Id:
        return (key,) if scope is None else (scope, key)

    def tasks_on(base: Mapping[str, Any], via_default: bool) -> List[Entrypoint]:
        return [
            Entrypoint(module=label, id=make_id(key), fn=key, impl=base[key], via_default=via_default)
            for key in sorted(base)
            if is_chore(base[key])
        ]

    exports = module_exports(module)
    entrypoints = tasks_on(exports, False)
    default = exports.get("default")
    if default is not None and not callable(default):
        entrypoints.extend(tasks_on(_members(default), True))
    return entrypoints


@dataclass
class EntrypointSource:
    """A module that may provide chores.

    ``scope`` is None for unscoped modules (``index.py`` and builtins),
    whose chores are addressed without a module prefix.
    """

    scope: Optional[str]
    label: str
    load: Callable[[], ModuleType]

    def entrypoints(self) -> List[Entrypoint]:
        return entrypoints_from_module(self.scope, self.label, self.load())


async def run_resolved(entrypoint: Entrypoint, opts: Options) -> Any:
    logger.debug("Running %s from %s", entrypoint.display_id(), entrypoint.module)
    result = entrypoint.impl(**option_kwargs(opts))
    if inspect.isawaitable(result):
        result = await result
    return result


def task_module_name(path: Path) -> str:
    """Unique module name for a task file, e.g. ``chored_tasks.build_1a2b3c4d``."""
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:8]
    return f"{TASK_MODULE_PREFIX}.{path.stem}_{digest}"


def _basename(label: str) -> str:
    if label.endswith(".py"):
        return Path(label).stem
    return label.rsplit(".", 1)[-1]


class Resolver:
    """Resolves chore paths against a task root.

    Loaded modules are cached for the lifetime of the resolver.
    """

    def __init__(self, task_root: Union[str, Path], builtins: str = BUILTIN_CHORES):
        self.task_root = Path(task_root)
        self.builtins = builtins
        self._modules: Dict[str, ModuleType] = {}

    # --- module loading ---

    def _load_file(self, path: Path, module_name: str) -> ModuleType:
        key = str(path.resolve())
        cached = self._modules.get(key)
        if cached is not None:
            return cached
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ValidationError(f"Cannot load chores from {path}")
        module = importlib.util.module_from_spec(spec)
        # Task modules may import helpers that sit next to them.
        parent = str(path.parent.resolve())
        if parent not in sys.path:
            sys.path.insert(0, parent)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        self._modules[key] = module
        return module

    def _load_builtins(self) -> ModuleType:
        return importlib.import_module(self.builtins)

    def _task_source(self, scope: Optional[str], path: Path) -> EntrypointSource:
        return EntrypointSource(
            scope=scope, label=str(path), load=lambda: self._load_file(path, task_module_name(path))
        )

    def _task_files(self) -> List[str]:
        try:
            return sorted(p.name for p in self.task_root.iterdir() if p.is_file() and p.suffix == ".py")
        except FileNotFoundError:
            logger.debug("Task root %s does not exist", self.task_root)
            return []

    @staticmethod
    def direct_path(reference: str) -> Path:
        """Filesystem path for a direct module reference (path or ``file://`` URI)."""
        if "://" not in reference:
            return Path(reference)
        parsed = urlparse(reference)
        if parsed.scheme != "file":
            raise ValidationError(f"Unsupported module reference: {reference} (only local files can be loaded)")
        return Path(unquote(parsed.path))

    def entrypoint_sources(self, restrict_scope: Optional[str]) -> Iterator[EntrypointSource]:
        """Yield candidate sources for ``restrict_scope`` in priority order."""
        if restrict_scope is not None and ("/" in restrict_scope or "://" in restrict_scope):
            path = self.direct_path(restrict_scope)
            yield EntrypointSource(
                scope=restrict_scope,
                label=str(path),
                load=lambda: self._load_file(path, task_module_name(path)),
            )
            return

        files = [f for f in self._task_files() if not f.startswith("_")]
        index_files = [f for f in files if f == INDEX_MODULE]
        task_files = [f for f in files if f != INDEX_MODULE]

        for filename in task_files:
            file_scope = filename[: -len(".py")]
            if restrict_scope is not None and file_scope != restrict_scope:
                continue
            yield self._task_source(file_scope, self.task_root / filename)

        for filename in index_files:
            yield self._task_source(None, self.task_root / filename)

        yield EntrypointSource(scope=None, label=self.builtins, load=self._load_builtins)

    def _resolve(self, main: Sequence[str]) -> Tuple[Optional[Entrypoint], List[str]]:
        main = tuple(main)
        restrict_scope = main[0] if main else None
        target = main if main else ("default",)
        with_default = main + ("default",)
        searched: List[str] = []

        for source in self.entrypoint_sources(restrict_scope):
            if source.scope is None and len(main) > 1:
                # unscoped modules only provide single-component ids
                continue
            searched.append(source.label)
            for entry in source.entrypoints():
                expected = target if len(entry.id) == len(target) else with_default
                if entry.id == expected:
                    return entry, searched
        return None, searched

    def resolve_entrypoint(self, main: Sequence[str]) -> Optional[Entrypoint]:
        entry, _ = self._resolve(main)
        return entry

    def require_entrypoint(self, main: Sequence[str]) -> Entrypoint:
        entry, searched = self._resolve(main)
        if entry is None:
            raise NotFoundError(list(main), searched)
        return entry

    async def run(self, main: Sequence[str], opts: Optional[Options] = None) -> Any:
        """
        Resolve ``main`` and invoke it with ``opts`` as keyword arguments.

        Returns:
            The chore's return value (awaited if it is awaitable)

        Raises:
            NotFoundError: if nothing matches, listing every module searched
        """
        return await run_resolved(self.require_entrypoint(main), opts or {})

    # --- presentation ---

    def list_entrypoints(self, main: Sequence[str] = ()) -> List[str]:
        """Display lines for every chore reachable under ``main[0]``.

        Unscoped chores shadowed by an earlier export of the same name
        (typically builtins overridden by a task file) are listed once.
        """
        scope = main[0] if main else None

        def matches_scope(name: str) -> bool:
            return scope is None or name == scope

        seen: set = set()
        lines: List[str] = []
        for source in self.entrypoint_sources(scope):
            entrypoints = source.entrypoints()
            if source.scope is None:
                entrypoints = [e for e in entrypoints if matches_scope(e.fn) and e.fn not in seen]
                seen.update(e.fn for e in entrypoints)
            else:
                if not matches_scope(source.scope):
                    continue
                seen.add(source.scope)

            if not entrypoints:
                continue
            if _basename(source.label) != entrypoints[0].id[0]:
                lines.append("")
                lines.append(f"[ from {source.label} ]:")
            for entrypoint in entrypoints:
                lines.append(f" - {entrypoint.display_id()}")
        return lines

    def print_list(self, main: Sequence[str] = ()) -> None:
        click.echo("\n".join([""] + self.list_entrypoints(main)))

    def help_text(self, main: Sequence[str]) -> str:
        if not main:
            return USAGE
        entrypoint = self.require_entrypoint(main)
        doc = inspect.getdoc(entrypoint.impl) or "(chore has no docstring)"
        return f"\nsource: {entrypoint.module}\nchore:  {entrypoint.display_id()}\n\n{doc}"

    def print_help(self, main: Sequence[str]) -> None:
        click.echo(self.help_text(main))
