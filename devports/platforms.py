from __future__ import annotations

import logging
import platform as _platform
from dataclasses import replace
from typing import ClassVar, Dict, List, Optional, Sequence

from .errors import ToolInvocationError, UnsupportedPlatformError
from .models import PortRecord
from .parsers import (
    find_netstat_pid,
    parse_lsof,
    parse_netstat,
    parse_pid,
    parse_ss,
    parse_tasklist_name,
)
from .runner import CommandOutput, Runner, run_command

log = logging.getLogger(__name__)


class PortPlatform:
    """One OS strategy: how to list listeners and how to kill a port owner.

    Subclasses provide ``listing_command``/``parse`` for the scan path and
    ``find_pid``/``kill_command`` for the kill path.
    """

    name: ClassVar[str] = "?"
    listing_command: ClassVar[Sequence[str]] = ()

    def __init__(
        self, runner: Optional[Runner] = None, timeout: Optional[float] = None
    ):
        self.runner: Runner = runner or run_command
        self.timeout = timeout

    async def run(self, cmd: Sequence[str]) -> CommandOutput:
        return await self.runner(list(cmd), timeout=self.timeout)

    # ----- scan -----

    def parse(self, out: str) -> List[PortRecord]:
        raise NotImplementedError

    async def list_ports(self) -> List[PortRecord]:
        result = await self.run(self.listing_command)
        return self.parse(result.stdout)

    # ----- kill -----

    async def find_pid(self, port: int) -> Optional[int]:
        raise NotImplementedError

    def kill_command(self, pid: int) -> List[str]:
        raise NotImplementedError

    async def kill_port(self, port: int) -> bool:
        """Force-kill whatever owns ``port``; False when nothing does.

        The PID is looked up fresh, never taken from an earlier scan, and
        the result is only the kill command's exit status.
        """
        if not 0 <= port <= 65535:
            raise ValueError(f"Invalid port: {port}")
        pid = await self.find_pid(port)
        if pid is None:
            log.debug("no process bound to port %s", port)
            return False
        try:
            result = await self.run(self.kill_command(pid))
        except ToolInvocationError as e:
            raise ToolInvocationError(f"Failed to kill process {pid}: {e}") from e
        return result.ok

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class UnixPlatform(PortPlatform):
    """Kill path shared by macOS and Linux: lsof lookup, then kill -9."""

    async def find_pid(self, port: int) -> Optional[int]:
        try:
            result = await self.run(["lsof", "-ti", f"tcp:{port}"])
        except ToolInvocationError as e:
            raise ToolInvocationError(
                f"Failed to find process on port {port}: {e}"
            ) from e
        if not result.stdout.strip():
            return None
        return parse_pid(result.stdout)

    def kill_command(self, pid: int) -> List[str]:
        return ["kill", "-9", str(pid)]


class MacOSPlatform(UnixPlatform):
    name = "macos"
    listing_command = ("lsof", "-i", "-P", "-n")

    def parse(self, out: str) -> List[PortRecord]:
        return parse_lsof(out)


class LinuxPlatform(UnixPlatform):
    name = "linux"
    listing_command = ("ss", "-tlnp")

    def parse(self, out: str) -> List[PortRecord]:
        return parse_ss(out)


class WindowsPlatform(PortPlatform):
    name = "windows"
    listing_command = ("netstat", "-ano")

    def parse(self, out: str) -> List[PortRecord]:
        return parse_netstat(out)

    async def process_name(self, pid: int) -> Optional[str]:
        # tasklist /FI "PID eq 1234" /FO CSV /NH
        try:
            result = await self.run(
                ["tasklist", "/FI", f"PID eq {pid}", "/FO", "CSV", "/NH"]
            )
        except ToolInvocationError as e:
            log.debug("tasklist lookup for PID %s failed: %s", pid, e)
            return None
        return parse_tasklist_name(result.stdout)

    async def list_ports(self) -> List[PortRecord]:
        records = await super().list_ports()
        names: Dict[int, Optional[str]] = {}
        for r in records:
            if r.pid is not None and r.pid not in names:
                names[r.pid] = await self.process_name(r.pid)
        return [
            r if r.pid is None else replace(r, process_name=names[r.pid])
            for r in records
        ]

    async def find_pid(self, port: int) -> Optional[int]:
        result = await self.run(self.listing_command)
        pid_str = find_netstat_pid(result.stdout, port)
        if pid_str is None:
            return None
        return parse_pid(pid_str)

    def kill_command(self, pid: int) -> List[str]:
        return ["taskkill", "/F", "/PID", str(pid)]


PLATFORMS: Dict[str, type[PortPlatform]] = {
    "darwin": MacOSPlatform,
    "linux": LinuxPlatform,
    "windows": WindowsPlatform,
}


def detect_platform(
    system: Optional[str] = None,
    *,
    runner: Optional[Runner] = None,
    timeout: Optional[float] = None,
) -> PortPlatform:
    system = (system or _platform.system()).lower()
    try:
        cls = PLATFORMS[system]
    except KeyError:
        raise UnsupportedPlatformError(f"Unsupported OS: {system}") from None
    return cls(runner=runner, timeout=timeout)
