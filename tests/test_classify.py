from __future__ import annotations

import pytest

from devports.classify import (
    DEV_PORT_CATEGORIES,
    DEV_PORT_RANGE,
    DEV_PORTS,
    is_common_dev_port,
    is_development_port,
    port_category,
)


@pytest.mark.parametrize(
    "port, expected",
    [
        (3000, True),
        (5173, True),
        (9999, True),
        (1420, True),
        (1425, True),
        (2999, False),
        (10000, False),
        (22, False),
        (1426, False),
        (65535, False),
    ],
)
def test_is_development_port(port: int, expected: bool) -> None:
    assert is_development_port(port) is expected


def test_allow_list_outside_range_is_honored() -> None:
    lo, hi = DEV_PORT_RANGE
    outside = sorted(p for p in DEV_PORTS if not lo <= p <= hi)
    # only the Tauri ports sit below the range
    assert outside == list(DEV_PORT_CATEGORIES["Tauri"])
    assert all(is_development_port(p) for p in outside)


def test_allow_list_inside_range_is_redundant() -> None:
    # Every other allow-list entry is already covered by the numeric range,
    # so the list only matters for categories and the Tauri ports.
    lo, hi = DEV_PORT_RANGE
    inside = [p for p in DEV_PORTS if lo <= p <= hi]
    assert inside
    assert all(lo <= p <= hi and is_development_port(p) for p in inside)
    assert len(inside) == len(DEV_PORTS) - len(DEV_PORT_CATEGORIES["Tauri"])


def test_range_flags_unlisted_services() -> None:
    # e.g. a database on 5432 is "development" purely by range
    assert not is_common_dev_port(5432)
    assert is_development_port(5432)


def test_port_category() -> None:
    assert port_category(5173) == "Vite"
    assert port_category(8080) == "Java/Tomcat"
    assert port_category(1420) == "Tauri"
    assert port_category(9003) == "Various"
    assert port_category(5432) == "Other"


def test_allow_list_is_immutable() -> None:
    with pytest.raises(TypeError):
        DEV_PORT_CATEGORIES["Custom"] = (1234,)  # type: ignore[index]
    assert isinstance(DEV_PORTS, frozenset)
