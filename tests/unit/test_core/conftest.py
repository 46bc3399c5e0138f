"""Shared fixtures for core tests."""

from typing import List, Sequence, Tuple, Union

import pytest

from chored.core.errors import SubprocessError

Response = Union[str, bool]


class FakeRunner:
    """Scripted :class:`~chored.core.cmd.CmdRunner`.

    Each response is matched against a command prefix and consumed once.
    ``run`` succeeds and ``exists`` returns False unless told otherwise;
    ``run_output`` requires a response. A ``False`` response is a command
    failure. Every command (and ``["stat", path]`` for ``exists``) is
    recorded in ``audit``.
    """

    def __init__(self) -> None:
        self.responses: List[Tuple[List[str], Response]] = []
        self.audit: List[List[str]] = []

    def respond(self, prefix: Sequence[str], response: Response) -> "FakeRunner":
        self.responses.append((list(prefix), response))
        return self

    def _consume(self, cmd: Sequence[str], default: Union[Response, None] = None) -> Response:
        cmd = list(cmd)
        self.audit.append(cmd)
        for i, (prefix, response) in enumerate(self.responses):
            if cmd[: len(prefix)] == prefix:
                del self.responses[i]
                return response
        if default is None:
            raise AssertionError(f"Unexpected command: {' '.join(cmd)}")
        return default

    def _consume_bool(self, cmd: Sequence[str], default: bool) -> bool:
        response = self._consume(cmd, default)
        if not isinstance(response, bool):
            raise AssertionError(f"Unexpected response type: {response!r}")
        return response

    async def run(self, cmd: Sequence[str]) -> None:
        if not self._consume_bool(cmd, True):
            raise SubprocessError(list(cmd), 1)

    async def run_output(self, cmd: Sequence[str], *, allow_failure: bool = False) -> str:
        response = self._consume(cmd)
        if response is False:
            if allow_failure:
                return ""
            raise SubprocessError(list(cmd), 1)
        if response is True:
            raise AssertionError(f"Unexpected response type: {response!r}")
        return response

    async def exists(self, path: str) -> bool:
        return self._consume_bool(["stat", path], False)

    def commands(self, subcommand: str) -> List[List[str]]:
        """Recorded git commands whose subcommand is ``subcommand``."""
        return [c for c in self.audit if len(c) > 1 and c[1] == subcommand]

    def reset_audit(self) -> List[List[str]]:
        audit, self.audit = self.audit, []
        return audit


@pytest.fixture
def runner():
    return FakeRunner()
