"""keepalive CLI entry point."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

if TYPE_CHECKING:
    from keepalive.config.models import KeepAliveConfig
    from keepalive.registry.registry import LinkRegistry

app = typer.Typer(
    name="keepalive",
    help="keepalive: keep-alive monitor for HTTP(S) endpoints",
    no_args_is_help=True,
)
console = Console()

ConfigPath = typer.Option(None, "--config", "-c", help="Path to .keepalive.yaml")


def _load(path: Path | None) -> KeepAliveConfig:
    """Load config, falling back to defaults when no file exists."""
    from keepalive.config.loader import load_config
    from keepalive.config.models import KeepAliveConfig

    try:
        return load_config(path=path)
    except FileNotFoundError as exc:
        if path is not None:
            console.print(f"[red]{exc}[/red]")
            raise typer.Exit(1)
        return KeepAliveConfig()
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)


def _registry(path: Path | None) -> LinkRegistry:
    from keepalive.registry.registry import LinkRegistry

    return LinkRegistry.from_config(_load(path))


def _status_style(status: str) -> str:
    return "green" if status == "online" else "red"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(3000, envvar="PORT", help="Bind port"),
    config: Path | None = ConfigPath,
) -> None:
    """Start the API server and the background sweep scheduler."""
    import uvicorn

    from keepalive.api.app import create_app

    cfg = _load(config)
    setup_logging(cfg.logging.level)
    console.print(f"[bold]keepalive[/bold] starting on http://{host}:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port)


@app.command()
def status(config: Path | None = ConfigPath) -> None:
    """Show all registered links and their last known status."""
    from keepalive.registry.report import success_rate

    registry = _registry(config)
    links, stats = asyncio.run(registry.list_links())

    table = Table(title="keepalive links")
    table.add_column("Code", style="bold")
    table.add_column("URL")
    table.add_column("Status")
    table.add_column("HTTP")
    table.add_column("Latency")
    table.add_column("Success")

    for link in links:
        style = _status_style(link.status.value)
        table.add_row(
            link.code,
            link.url,
            f"[{style}]{link.status.value}[/{style}]",
            str(link.status_code or "—"),
            f"{link.response_time}ms",
            f"{success_rate(link.total_checks, link.fail_count)}%",
        )

    console.print(table)
    console.print(
        f"{stats.total_links} link(s), {stats.active_links} online, "
        f"{stats.total_links - stats.active_links} offline"
    )


@app.command()
def add(
    url: str = typer.Argument(help="URL to monitor"),
    config: Path | None = ConfigPath,
) -> None:
    """Register a URL and probe it once."""
    from keepalive.errors import DuplicateURLError, KeepAliveError

    registry = _registry(config)
    try:
        link = asyncio.run(registry.add(url))
    except DuplicateURLError as exc:
        console.print(f"[yellow]Already monitored as {exc.code}[/yellow]")
        raise typer.Exit(1)
    except KeepAliveError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    style = _status_style(link.status.value)
    console.print(f"[green]✓[/green] Registered [bold]{link.code}[/bold] for {link.url}")
    console.print(f"  Status: [{style}]{link.status.value}[/{style}] ({link.response_time}ms)")


@app.command()
def check(
    code: str = typer.Argument(help="Link code"),
    config: Path | None = ConfigPath,
) -> None:
    """Probe one link now and show its full status."""
    from keepalive.errors import KeepAliveError
    from keepalive.registry.report import link_status

    registry = _registry(config)
    try:
        link = asyncio.run(registry.refresh(code))
    except KeepAliveError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    info = link_status(link)
    style = _status_style(info["status"])
    console.print(f"[bold]{info['code']}[/bold] {info['url']}")
    console.print(f"  Status: [{style}]{info['status']}[/{style}] (HTTP {info['statusCode']}, {info['responseTime']}ms)")
    console.print(f"  Last success: {info['lastSuccess']}")
    if info["lastError"]:
        console.print(f"  Last error: [dim]{info['lastError']}[/dim]")
    console.print(f"  Monitored for: {info['uptime']}")
    console.print(f"  Checks: {info['totalChecks']}, failing streak: {info['failCount']}, success rate: {info['successRate']}")


@app.command()
def remove(
    code: str = typer.Argument(help="Link code"),
    config: Path | None = ConfigPath,
) -> None:
    """Stop monitoring a link."""
    from keepalive.errors import KeepAliveError

    registry = _registry(config)
    try:
        link = asyncio.run(registry.remove(code))
    except KeepAliveError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Removed {link.code} ({link.url})")


@app.command()
def sweep(config: Path | None = ConfigPath) -> None:
    """Probe every link once, right now."""
    from keepalive.errors import PersistError
    from keepalive.registry.registry import LinkRegistry
    from keepalive.scheduler.sweeper import SweepScheduler

    cfg = _load(config)
    scheduler = SweepScheduler(LinkRegistry.from_config(cfg), cfg.scheduler)
    try:
        report = asyncio.run(scheduler.run_sweep())
    except PersistError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    if report.probed == 0:
        console.print("[dim]No links registered.[/dim]")
        return
    console.print(
        f"Swept {report.probed} link(s): [green]{report.online} online[/green], "
        f"[red]{report.offline} offline[/red]"
    )


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("validate")
def config_validate(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .keepalive.yaml"),
) -> None:
    """Validate configuration file."""
    import yaml

    from keepalive.config.loader import load_config

    try:
        cfg = load_config(path=path)
    except FileNotFoundError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(1)
    except yaml.YAMLError as exc:
        console.print(f"[red]✗ YAML parsing failed: {exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print("[green]✓[/green] YAML parses correctly")
        console.print(f"[red]✗ Pydantic validation failed: {exc}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓[/green] YAML parses correctly")
    console.print("[green]✓[/green] Pydantic validation passes")

    warnings: list[str] = []
    if cfg.logging.level.upper() not in logging.getLevelNamesMapping():
        warnings.append(f"Unrecognized logging level '{cfg.logging.level}'")
    if not cfg.store.path:
        warnings.append("store.path is empty: links will not survive a restart")
    if cfg.scheduler.interval < cfg.prober.timeout:
        warnings.append("scheduler.interval is shorter than prober.timeout")

    for w in warnings:
        console.print(f"[yellow]! {w}[/yellow]")
    console.print("\n[green bold]Configuration is valid.[/green bold]")


@config_app.command("show")
def config_show(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .keepalive.yaml"),
) -> None:
    """Print resolved configuration."""
    from keepalive.config.loader import load_config

    try:
        cfg = load_config(path=path)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]{cfg.identity.name}[/bold] v{cfg.identity.version}\n")

    console.print("[bold]Store:[/bold]")
    console.print(f"  Path: {cfg.store.path or '(in-memory)'}\n")

    console.print("[bold]Prober:[/bold]")
    console.print(f"  Timeout: {cfg.prober.timeout}s")
    console.print(f"  User-Agent: {cfg.prober.user_agent}")
    console.print(f"  5xx counts as offline: {cfg.prober.server_error_offline}\n")

    console.print("[bold]Scheduler:[/bold]")
    console.print(f"  Enabled: {cfg.scheduler.enabled}")
    console.print(f"  First sweep after: {cfg.scheduler.initial_delay}s")
    console.print(f"  Interval: {cfg.scheduler.interval}s")
    console.print(f"  Pacing: {cfg.scheduler.pacing}s")
    checkpoint = cfg.scheduler.checkpoint_every or "end of sweep"
    console.print(f"  Persist every: {checkpoint}")


def main() -> None:
    app()
