"""
Command-line option grammar.

Everything after the global click options is parsed here rather than by
click, because chore options are open-ended: any ``--key`` is passed to
the chore as a keyword argument.

Explicit forms:
    --string/-s KEY VALUE    string
    --bool/-b KEY true|false boolean
    --num/-n KEY INT         integer
    --json/-j JSON           object whose top-level keys become options
    --env/-e KEY ENVNAME     value of an environment variable
    -- ARGS / - ARGS         remaining arguments as ``args`` (list of str)

Terse forms:
    --foo                    True (when last or followed by another option)
    --no-foo                 False
    --foo VALUE, --foo=VALUE true/false -> bool, integers -> int, else str

``--list/-l`` and ``--help/-h`` select the action instead of running.
Keys are converted from kebab-case to snake_case.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Mapping, Optional, Sequence

from chored.core.entrypoint import OptionValue
from chored.core.errors import ValidationError

logger = logging.getLogger(__name__)

Action = Literal["run", "list", "help"]

_INT_RE = re.compile(r"^-?[0-9]+$")


@dataclass
class ParsedArgs:
    """Result of :func:`parse_args`.

    Attributes:
        main: the chore path (module and/or chore name)
        opts: options passed to the chore
        action: what to do with ``main``
    """

    main: List[str] = field(default_factory=list)
    opts: Dict[str, OptionValue] = field(default_factory=dict)
    action: Action = "run"


def option_key(key: str) -> str:
    return key.replace("-", "_")


def parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationError(f"Invalid boolean: {value!r} (expected true or false)")


def parse_int(value: str) -> int:
    if not _INT_RE.match(value):
        raise ValidationError(f"Invalid number: {value!r}")
    return int(value, 10)


def guess_value(value: str) -> OptionValue:
    if value in ("true", "false"):
        return OptionValue.boolean(value == "true")
    if _INT_RE.match(value):
        return OptionValue.integer(int(value, 10))
    return OptionValue.string(value)


def parse_args(argv: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> ParsedArgs:
    """
    Parse chore arguments.

    Args:
        argv: arguments following the global options
        environ: environment used for ``--env`` (defaults to ``os.environ``)

    Returns:
        ParsedArgs with the chore path, typed options and action

    Raises:
        ValidationError: on a missing or malformed option value
        MissingEnvironmentError: if an ``--env`` variable is not set
    """
    args = list(argv)
    parsed = ParsedArgs()

    def take(n: int) -> List[str]:
        if len(args) < n:
            raise ValidationError("too few arguments")
        taken = args[:n]
        del args[:n]
        return taken

    while args:
        arg = args.pop(0)
        if arg in ("--string", "-s"):
            key, value = take(2)
            parsed.opts[option_key(key)] = OptionValue.string(value)
        elif arg in ("--bool", "-b"):
            key, value = take(2)
            parsed.opts[option_key(key)] = OptionValue.boolean(parse_bool(value))
        elif arg in ("--num", "-n"):
            key, value = take(2)
            parsed.opts[option_key(key)] = OptionValue.integer(parse_int(value))
        elif arg in ("--json", "-j"):
            (text,) = take(1)
            try:
                obj = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Invalid JSON for --json: {e}") from e
            if not isinstance(obj, dict):
                raise ValidationError("--json expects an object")
            for key, value in obj.items():
                parsed.opts[option_key(key)] = OptionValue.from_json(value)
        elif arg in ("--env", "-e"):
            key, name = take(2)
            parsed.opts[option_key(key)] = OptionValue.env(name, environ)
        elif arg in ("--list", "-l"):
            parsed.action = "list"
        elif arg in ("--help", "-h"):
            parsed.action = "help"
        elif arg in ("--", "-"):
            parsed.opts["args"] = OptionValue.from_json(list(args))
            args.clear()
        elif arg.startswith("--"):
            _parse_terse(arg[2:], args, parsed)
        elif arg.startswith("-"):
            raise ValidationError(f"Unknown option: {arg}")
        else:
            parsed.main.append(arg)

    logger.debug("Parsed args: main=%s opts=%s action=%s", parsed.main, list(parsed.opts), parsed.action)
    return parsed


def _parse_terse(name: str, rest: List[str], parsed: ParsedArgs) -> None:
    if "=" in name:
        key, value = name.split("=", 1)
        parsed.opts[option_key(key)] = guess_value(value)
    elif name.startswith("no-"):
        parsed.opts[option_key(name[len("no-") :])] = OptionValue.boolean(False)
    elif not rest or rest[0].startswith("-"):
        parsed.opts[option_key(name)] = OptionValue.boolean(True)
    else:
        parsed.opts[option_key(name)] = guess_value(rest.pop(0))
