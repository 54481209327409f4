"""
devports: list listening TCP ports and kill the process that owns one.

Examples
  # Everything that is listening
  devports scan

  # Only development servers, as JSON
  devports scan --dev-only --json

  # Kill whatever owns port 3000 (with confirmation)
  devports kill 3000

  # Noninteractive, several ports
  devports kill 3000 5173 --yes
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .classify import port_category
from .config import SORT_CHOICES, Settings, load_settings
from .errors import PortManagerError, UnsupportedPlatformError
from .manager import (
    find_port,
    group_by_process,
    kill_ports,
    scan_ports,
    search_ports,
    sort_ports,
)
from .models import PortRecord, ScanResult
from .platforms import PortPlatform, detect_platform

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="List listening TCP ports and kill the process that owns one.",
)
console = Console()
err_console = Console(stderr=True)


# --------------------------- Helpers ---------------------------


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@contextmanager
def reported_errors() -> Iterator[None]:
    try:
        yield
    except UnsupportedPlatformError as e:
        err_console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)
    except PortManagerError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def make_platform(settings: Settings) -> PortPlatform:
    return detect_platform(timeout=settings.timeout)


def ports_table(records: List[PortRecord], title: Optional[str] = None) -> Table:
    table = Table(title=title)
    table.add_column("Port", justify="right")
    table.add_column("PID", justify="right")
    table.add_column("Process", overflow="fold")
    table.add_column("Proto")
    table.add_column("State")
    table.add_column("Local address", overflow="fold")
    table.add_column("Category")
    table.add_column("Dev", justify="center", width=3)
    for r in records:
        table.add_row(
            str(r.port),
            str(r.pid) if r.pid is not None else "-",
            r.process_name or "?",
            r.protocol,
            r.state,
            r.local_address,
            port_category(r.port),
            "✓" if r.is_development else "",
        )
    return table


# --------------------------- CLI ---------------------------


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every tool invocation."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: user config dir)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait on each tool (0 = no limit)."
    ),
):
    setup_logging(verbose)
    with reported_errors():
        settings = load_settings(config)
    if timeout is not None:
        settings = replace(settings, timeout=timeout if timeout > 0 else None)
    ctx.obj = settings


@app.command()
def scan(
    ctx: typer.Context,
    dev_only: Optional[bool] = typer.Option(
        None, "--dev-only/--all", help="Only show development ports."
    ),
    filter: Optional[str] = typer.Option(
        None, "--filter", help="Substring filter on port, process or address."
    ),
    sort: Optional[str] = typer.Option(
        None, "--sort", help=f"Sort key: {', '.join(SORT_CHOICES)}."
    ),
    group: bool = typer.Option(False, "--group", help="Group rows by process."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead."),
):
    """List every listening TCP port on this host."""
    settings: Settings = ctx.obj
    sort_key = sort or settings.sort_by
    if sort_key not in SORT_CHOICES:
        raise typer.BadParameter(
            f"expected one of {', '.join(SORT_CHOICES)}", param_hint="--sort"
        )

    with reported_errors():
        result = asyncio.run(scan_ports(make_platform(settings)))

    records = list(result.ports)
    if settings.dev_only if dev_only is None else dev_only:
        records = [r for r in records if r.is_development]
    if filter:
        records = search_ports(records, filter)

    if as_json:
        # JSON keeps the port order of a ScanResult
        typer.echo(json.dumps(ScanResult.from_records(records).to_dict(), indent=2))
        return

    records = sort_ports(records, sort_key)
    if not records:
        console.print("[yellow]No listening ports matched.[/yellow]")
    elif group:
        for name, items in group_by_process(records).items():
            console.print(ports_table(items, title=f"{name} ({len(items)})"))
    else:
        console.print(ports_table(records))
    console.print(
        f"[bold]{result.total_count}[/bold] listening, "
        f"[bold green]{result.development_count}[/bold green] development, "
        f"{len(records)} shown"
    )


@app.command()
def kill(
    ctx: typer.Context,
    ports: List[int] = typer.Argument(
        ..., min=0, max=65535, help="Port(s) whose owning process to kill."
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Proceed without confirmation"
    ),
):
    """Force-kill the process bound to each PORT (SIGKILL / taskkill /F)."""
    settings: Settings = ctx.obj
    if not yes:
        listed = ", ".join(str(p) for p in ports)
        if not typer.confirm(f"Force-kill the process on port(s) {listed}?"):
            console.print("Aborted.")
            raise typer.Exit(code=1)

    with reported_errors():
        outcomes = asyncio.run(kill_ports(ports, make_platform(settings)))

    failed = 0
    for o in outcomes:
        if o.success:
            console.print(f"[green]Killed[/green] process on port {o.port}")
        elif o.error:
            failed += 1
            console.print(f"[red]Port {o.port}:[/red] {o.error}")
        else:
            failed += 1
            console.print(f"[yellow]No process killed on port {o.port}[/yellow]")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def info(
    ctx: typer.Context,
    port: int = typer.Argument(..., min=0, max=65535, help="Port to look up."),
):
    """Show what is listening on PORT right now."""
    settings: Settings = ctx.obj
    with reported_errors():
        result = asyncio.run(scan_ports(make_platform(settings)))

    record = find_port(result, port)
    if record is None:
        console.print(f"No listener found on port {port}")
        raise typer.Exit(code=1)
    records = [r for r in result.ports if r.port == port]
    console.print(ports_table(records, title=f"Port {port}"))
    console.print(
        f"Category: [bold]{port_category(port)}[/bold]  •  "
        f"Development: {'yes' if record.is_development else 'no'}"
    )
