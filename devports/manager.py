"""
Public operations: scan the host's listeners and kill the owner of a port,
plus the small filtering/grouping helpers the UI layer builds on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .config import SORT_CHOICES
from .errors import PortManagerError
from .models import PortRecord, ScanResult
from .platforms import PortPlatform, detect_platform

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KillOutcome:
    port: int
    success: bool
    error: Optional[str] = None


async def scan_ports(platform: Optional[PortPlatform] = None) -> ScanResult:
    platform = platform or detect_platform()
    records = await platform.list_ports()
    return ScanResult.from_records(records)


async def kill_port(port: int, platform: Optional[PortPlatform] = None) -> bool:
    platform = platform or detect_platform()
    return await platform.kill_port(port)


async def kill_ports(
    ports: Iterable[int], platform: Optional[PortPlatform] = None
) -> List[KillOutcome]:
    """Kill ports one after another; a failure on one port does not stop the rest."""
    platform = platform or detect_platform()
    outcomes: List[KillOutcome] = []
    for port in ports:
        try:
            ok = await platform.kill_port(port)
        except (PortManagerError, ValueError) as e:
            log.debug("kill on port %s failed: %s", port, e)
            outcomes.append(KillOutcome(port=port, success=False, error=str(e)))
            continue
        outcomes.append(KillOutcome(port=port, success=ok))
    return outcomes


# --------------------------- Helpers over a scan ---------------------------


def development_ports(result: ScanResult) -> List[PortRecord]:
    return [r for r in result.ports if r.is_development]


def ports_in_range(result: ScanResult, start: int, end: int) -> List[PortRecord]:
    return [r for r in result.ports if start <= r.port <= end]


def find_port(result: ScanResult, port: int) -> Optional[PortRecord]:
    return next((r for r in result.ports if r.port == port), None)


def is_port_in_use(result: ScanResult, port: int) -> bool:
    return find_port(result, port) is not None


def search_ports(records: Iterable[PortRecord], term: str) -> List[PortRecord]:
    """Match the port digits, process name or local address (case-insensitive)."""
    kw = term.lower()
    if not kw:
        return list(records)
    return [
        r
        for r in records
        if kw in str(r.port)
        or kw in (r.process_name or "").lower()
        or kw in r.local_address.lower()
    ]


def sort_ports(records: Iterable[PortRecord], key: str = "port") -> List[PortRecord]:
    if key == "port":
        return sorted(records, key=lambda r: r.port)
    if key == "process":
        return sorted(records, key=lambda r: r.process_name or "")
    if key == "state":
        return sorted(records, key=lambda r: r.state)
    raise ValueError(
        f"Unknown sort key: {key} (expected one of {', '.join(SORT_CHOICES)})"
    )


def group_by_process(records: Iterable[PortRecord]) -> Dict[str, List[PortRecord]]:
    groups: Dict[str, List[PortRecord]] = {}
    for r in records:
        groups.setdefault(r.process_name or "Unknown", []).append(r)
    return groups
