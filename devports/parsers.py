"""
Parsers for the text printed by the platform socket tools.

Scan parsers are forgiving: a line that does not yield a valid port (or,
where the PID is mandatory, a valid PID) is dropped and never raises.
The kill-path helpers at the bottom are strict on purpose.

lsof -i -P -n (macOS):
  COMMAND   PID  USER   FD   TYPE  DEVICE SIZE/OFF NODE NAME
  node    12345 alice  23u  IPv4  0x1234      0t0  TCP *:3000 (LISTEN)

netstat -ano (Windows):
  (blank) / Active Connections / (blank) / header
  TCP    0.0.0.0:135    0.0.0.0:0    LISTENING    1044

ss -tlnp (Linux):
  State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process
  LISTEN 0      511    0.0.0.0:80         0.0.0.0:*  users:(("nginx",pid=901,fd=6))
"""

from __future__ import annotations

import csv
import logging
import re
from typing import List, Optional

from .classify import is_development_port
from .errors import PidParseError
from .models import PortRecord

log = logging.getLogger(__name__)

LSOF_HEADER_LINES = 1
NETSTAT_HEADER_LINES = 4
SS_HEADER_LINES = 1

_DIGITS = re.compile(r"\d+", re.ASCII)
_SS_PID = re.compile(r"pid=(\d+)", re.ASCII)
_SS_NAME = re.compile(r'"([^"]*)"')


def parse_int(text: str) -> Optional[int]:
    if not _DIGITS.fullmatch(text):
        return None
    return int(text)


def parse_port(text: str) -> Optional[int]:
    value = parse_int(text)
    if value is None or value > 65535:
        return None
    return value


def port_of_address(address: str) -> Optional[int]:
    """Port after the final colon of ``host:port`` (IPv6 hosts included)."""
    if ":" not in address:
        return None
    return parse_port(address.rsplit(":", 1)[1])


def _record(
    port: int,
    pid: Optional[int],
    process_name: Optional[str],
    protocol: str,
    state: str,
    local_address: str,
) -> PortRecord:
    return PortRecord(
        port=port,
        pid=pid,
        process_name=process_name,
        protocol=protocol,
        state=state,
        local_address=local_address,
        is_development=is_development_port(port),
    )


# --------------------------- Scan parsers ---------------------------


def parse_lsof(out: str) -> List[PortRecord]:
    records: List[PortRecord] = []
    for line in out.splitlines()[LSOF_HEADER_LINES:]:
        if "LISTEN" not in line:
            continue
        parts = line.split()
        if len(parts) < 9:
            continue
        pid = parse_int(parts[1])
        if pid is None:
            log.debug("lsof: dropping line with bad PID: %r", line)
            continue
        address = next((col for col in parts[3:] if ":" in col), None)
        port = port_of_address(address) if address else None
        if port is None:
            log.debug("lsof: dropping line without port: %r", line)
            continue
        records.append(_record(port, pid, parts[0], "TCP", "LISTEN", address))
    records.sort(key=lambda r: r.port)
    return records


def parse_netstat(out: str) -> List[PortRecord]:
    """Process names are not part of netstat output; they stay ``None`` here."""
    records: List[PortRecord] = []
    for line in out.splitlines()[NETSTAT_HEADER_LINES:]:
        if "LISTENING" not in line:
            continue
        parts = line.split()
        if len(parts) < 5:
            continue
        local = parts[1]
        pid = parse_int(parts[-1])
        if pid is None:
            log.debug("netstat: dropping line with bad PID: %r", line)
            continue
        port = port_of_address(local)
        if port is None:
            log.debug("netstat: dropping line without port: %r", line)
            continue
        records.append(_record(port, pid, None, parts[0], "LISTENING", local))
    records.sort(key=lambda r: r.port)
    return records


def parse_ss(out: str) -> List[PortRecord]:
    records: List[PortRecord] = []
    for line in out.splitlines()[SS_HEADER_LINES:]:
        if "LISTEN" not in line:
            continue
        parts = line.split()
        if len(parts) < 4:
            continue
        local = parts[3]
        port = port_of_address(local)
        if port is None:
            log.debug("ss: dropping line without port: %r", line)
            continue
        pid: Optional[int] = None
        name: Optional[str] = None
        if len(parts) >= 6:
            # users:(("python3",pid=1234,fd=7)); best effort, first entry wins
            info = parts[5]
            m = _SS_PID.search(info)
            if m:
                pid = int(m.group(1))
            m = _SS_NAME.search(info)
            if m:
                name = m.group(1)
        records.append(_record(port, pid, name, "TCP", "LISTEN", local))
    records.sort(key=lambda r: r.port)
    return records


def parse_tasklist_name(out: str) -> Optional[str]:
    # tasklist /FO CSV /NH: "node.exe","1234","Console","1","50,000 K"
    line = out.strip()
    if not line or line.startswith("INFO:"):
        return None
    row = next(csv.reader([line.splitlines()[0]]), [])
    if not row or not row[0].strip():
        return None
    return row[0].strip()


# --------------------------- Kill-path helpers ---------------------------


def parse_pid(text: str) -> int:
    """Strict PID parse; unlike the scan parsers this raises."""
    pid_str = text.strip()
    pid = parse_int(pid_str)
    if pid is None:
        raise PidParseError(f"Failed to parse PID: {pid_str!r} is not a valid integer")
    return pid


def find_netstat_pid(out: str, port: int) -> Optional[str]:
    """PID column of the first LISTENING row bound to ``port``, unparsed."""
    for line in out.splitlines():
        if "LISTENING" not in line:
            continue
        parts = line.split()
        if len(parts) < 5:
            continue
        if port_of_address(parts[1]) == port:
            return parts[-1]
    return None
