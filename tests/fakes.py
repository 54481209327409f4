from __future__ import annotations

from typing import Dict, List, Sequence, Tuple, Union

from devports.errors import ToolInvocationError
from devports.runner import CommandOutput

Response = Union[CommandOutput, Exception]


def ok(stdout: str = "", returncode: int = 0) -> CommandOutput:
    return CommandOutput(returncode=returncode, stdout=stdout, stderr="")


class FakeRunner:
    """Canned tool output keyed by argv; unknown commands fail to spawn."""

    def __init__(self, responses: Dict[Tuple[str, ...], Response]):
        self.responses = responses
        self.calls: List[Tuple[str, ...]] = []

    async def __call__(self, cmd: Sequence[str], *, timeout=None) -> CommandOutput:
        key = tuple(cmd)
        self.calls.append(key)
        resp = self.responses.get(key)
        if resp is None:
            raise ToolInvocationError(
                f"Failed to run {cmd[0]}: [Errno 2] No such file or directory"
            )
        if isinstance(resp, Exception):
            raise resp
        return resp
