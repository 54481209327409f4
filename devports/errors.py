from __future__ import annotations


class PortManagerError(Exception):
    pass


class ToolInvocationError(PortManagerError):
    """A diagnostic or termination tool could not be spawned (or hung)."""


class PidParseError(PortManagerError, ValueError):
    """PID text found on the kill path was not an integer."""


class UnsupportedPlatformError(PortManagerError):
    pass


class ConfigError(PortManagerError):
    pass
