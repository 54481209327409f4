from __future__ import annotations

from types import MappingProxyType

# Common development ports and their typical uses
DEV_PORT_CATEGORIES = MappingProxyType(
    {
        "React/Next.js": (3000, 3001, 3002, 3003, 3004, 3005),
        "Express/Node.js": (4000, 4001, 4002, 4003, 4004, 4005),
        "Python/Flask": (5000, 5001, 5002, 5003, 5004, 5005),
        "Vite": (5173, 5174, 5175, 5176, 5177, 5178),
        "Django": (8000, 8001, 8002, 8003, 8004, 8005),
        "Java/Tomcat": (8080, 8081, 8082, 8083, 8084, 8085),
        "Tauri": (1420, 1421, 1422, 1423, 1424, 1425),
        "Storybook": (6006, 6007, 6008, 6009, 6010, 6011),
        "Various": (
            7000, 7001, 7002, 7003, 7004, 7005,
            9000, 9001, 9002, 9003, 9004, 9005,
        ),
    }
)

DEV_PORTS = frozenset(p for ports in DEV_PORT_CATEGORIES.values() for p in ports)

DEV_PORT_RANGE = (3000, 9999)


def is_development_port(port: int) -> bool:
    lo, hi = DEV_PORT_RANGE
    return port in DEV_PORTS or lo <= port <= hi


def is_common_dev_port(port: int) -> bool:
    """Allow-list membership only, ignoring the numeric range."""
    return port in DEV_PORTS


def port_category(port: int) -> str:
    for category, ports in DEV_PORT_CATEGORIES.items():
        if port in ports:
            return category
    return "Other"
