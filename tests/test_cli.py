from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from devports import cli
from devports.errors import UnsupportedPlatformError
from devports.platforms import MacOSPlatform

from fakes import FakeRunner, ok
from tool_output import LSOF

runner = CliRunner()


@pytest.fixture(autouse=True)
def plain_consoles(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "console", Console(force_terminal=False, width=120))
    monkeypatch.setattr(
        cli, "err_console", Console(stderr=True, force_terminal=False, width=120)
    )


@pytest.fixture
def fake(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    for var in ("DEVPORTS_TIMEOUT", "DEVPORTS_DEV_ONLY", "DEVPORTS_SORT"):
        monkeypatch.delenv(var, raising=False)
    tool = FakeRunner(
        {
            ("lsof", "-i", "-P", "-n"): ok(LSOF),
            ("lsof", "-ti", "tcp:3000"): ok("12345\n"),
            ("kill", "-9", "12345"): ok(),
            ("lsof", "-ti", "tcp:4000"): ok(""),
        }
    )
    monkeypatch.setattr(
        cli, "make_platform", lambda settings: MacOSPlatform(runner=tool)
    )
    return tool


def invoke(tmp_path: Path, *args: str, **kwargs):
    return runner.invoke(
        cli.app, ["--config", str(tmp_path / "config.toml"), *args], **kwargs
    )


def test_scan_json(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "scan", "--json")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [p["port"] for p in payload["ports"]] == [3000, 5173, 49152]
    assert payload["total_count"] == 3
    assert payload["development_count"] == 2


def test_scan_json_dev_only_recounts(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "scan", "--dev-only", "--json")

    payload = json.loads(result.stdout)
    assert payload["total_count"] == payload["development_count"] == 2


def test_scan_table_summary(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "scan", "--filter", "rapportd")

    assert result.exit_code == 0, result.output
    assert "3 listening, 2 development, 1 shown" in result.output


def test_scan_rejects_unknown_sort(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "scan", "--sort", "pid")
    assert result.exit_code != 0


def test_kill_with_yes(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "kill", "3000", "--yes")

    assert result.exit_code == 0, result.output
    assert "Killed" in result.output
    assert ("kill", "-9", "12345") in fake.calls


def test_kill_nothing_bound_exits_1(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "kill", "4000", "-y")

    assert result.exit_code == 1
    assert "No process killed on port 4000" in result.output


def test_kill_confirmation_declined(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "kill", "3000", input="n\n")

    assert result.exit_code == 1
    assert "Aborted." in result.output
    assert fake.calls == []


def test_info(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "info", "5173")

    assert result.exit_code == 0, result.output
    assert "Category: Vite" in result.output


def test_info_unknown_port(fake: FakeRunner, tmp_path: Path) -> None:
    result = invoke(tmp_path, "info", "8081")

    assert result.exit_code == 1
    assert "No listener found on port 8081" in result.output


def test_tool_failure_exits_1(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        cli, "make_platform", lambda settings: MacOSPlatform(runner=FakeRunner({}))
    )
    result = invoke(tmp_path, "scan")

    assert result.exit_code == 1
    assert "Failed to run lsof" in result.output


def test_unsupported_platform_exits_2(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def unsupported(settings):
        raise UnsupportedPlatformError("Unsupported OS: plan9")

    monkeypatch.setattr(cli, "make_platform", unsupported)
    result = invoke(tmp_path, "scan")

    assert result.exit_code == 2
    assert "Unsupported OS: plan9" in result.output


def test_bad_config_exits_1(tmp_path: Path) -> None:
    (tmp_path / "config.toml").write_text('[devports]\nsort_by = "pid"\n')
    result = invoke(tmp_path, "scan")

    assert result.exit_code == 1
    assert "sort_by" in result.output
