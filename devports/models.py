from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional


@dataclass(frozen=True, slots=True)
class PortRecord:
    port: int
    pid: Optional[int]
    process_name: Optional[str]
    protocol: str
    state: str
    local_address: str
    is_development: bool
    # listening sockets have no peer
    foreign_address: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ScanResult:
    ports: tuple[PortRecord, ...]
    total_count: int
    development_count: int

    @classmethod
    def from_records(cls, records: Iterable[PortRecord]) -> "ScanResult":
        """Sort by port (stable, duplicates kept) and count."""
        ports = tuple(sorted(records, key=lambda r: r.port))
        return cls(
            ports=ports,
            total_count=len(ports),
            development_count=sum(1 for r in ports if r.is_development),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ports": [r.to_dict() for r in self.ports],
            "total_count": self.total_count,
            "development_count": self.development_count,
        }
