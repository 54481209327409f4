"""List listening TCP ports, flag development servers, kill a port's owner."""

from .classify import is_development_port, port_category
from .errors import (
    ConfigError,
    PidParseError,
    PortManagerError,
    ToolInvocationError,
    UnsupportedPlatformError,
)
from .manager import KillOutcome, kill_port, kill_ports, scan_ports
from .models import PortRecord, ScanResult
from .platforms import detect_platform

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "KillOutcome",
    "PidParseError",
    "PortManagerError",
    "PortRecord",
    "ScanResult",
    "ToolInvocationError",
    "UnsupportedPlatformError",
    "detect_platform",
    "is_development_port",
    "kill_port",
    "kill_ports",
    "port_category",
    "scan_ports",
]
