from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from .errors import ToolInvocationError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandOutput:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# Anything with this shape can stand in for run_command (tests inject fakes).
Runner = Callable[..., Awaitable[CommandOutput]]


async def run_command(
    cmd: Sequence[str], *, timeout: Optional[float] = None
) -> CommandOutput:
    """Spawn one child, wait for it and buffer its output.

    A non-zero exit status is returned, not raised. Only a failure to start
    the tool (or a timeout) becomes a ToolInvocationError.
    """
    tool = cmd[0]
    log.debug("spawning %s", " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolInvocationError(f"Failed to run {tool}: {e}") from e

    try:
        out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ToolInvocationError(f"{tool} timed out after {timeout:g}s") from None

    log.debug("%s exited with %s", tool, proc.returncode)
    return CommandOutput(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=out.decode(errors="replace"),
        stderr=err.decode(errors="replace"),
    )
