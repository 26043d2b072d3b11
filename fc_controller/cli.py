"""
Command-line interface for fleet-controller.

Operates on the hosts files of a configuration directory:
tservers, managers, monitor, tracers, gc.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from fc_common.api import FCError, configure_logging
from fc_controller.engine.sequencer import FleetSequencer, SequenceReport
from fc_controller.factory import build_sequencer
from fc_controller.models.roles import Role
from fc_controller.models.settings import ControlSettings
from fc_controller.topology.resolver import create_default_config, load_topology
from fc_controller.topology.source import DirectoryConfigSource

app = typer.Typer(help="Start, stop and reconcile a fleet of cluster servers.", no_args_is_help=True)
console = Console()


def _settings(ctx: typer.Context) -> ControlSettings:
    return ctx.obj


def _fail(message: str) -> NoReturn:
    typer.echo(f"ERROR: {message}", err=True)
    raise typer.Exit(1)


@app.callback()
def entry(
    ctx: typer.Context,
    conf_dir: Optional[Path] = typer.Option(
        None,
        "--conf-dir",
        "-c",
        help="Directory holding the hosts files (default: $FC_CONF_DIR or ./conf).",
    ),
    workers_per_host: Optional[int] = typer.Option(
        None,
        "--workers-per-host",
        "-n",
        min=1,
        help="Worker instances per worker host (default: $FC_WORKERS_PER_HOST or 1).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global options shared by every command."""
    configure_logging(debug=debug, force=True)
    try:
        ctx.obj = ControlSettings.from_env(conf_dir=conf_dir, workers_per_host=workers_per_host)
    except ValidationError as exc:
        _fail(f"Invalid settings: {exc}")


def _run(ctx: typer.Context, operation: Callable[[FleetSequencer], SequenceReport]) -> None:
    settings = _settings(ctx)
    try:
        topology = load_topology(DirectoryConfigSource(settings.conf_dir))
    except FCError as exc:
        _fail(str(exc))
    sequencer = build_sequencer(settings, topology)
    with sequencer.dispatcher:
        report = operation(sequencer)
    failed = len(report.failures)
    typer.echo(
        f"{report.operation}: {len(report.outcomes)} dispatched, {failed} failed"
    )
    if report.admin_ok is False:
        typer.echo("WARN : administrative request failed; forced path was used", err=True)
    if report.purge_ok is False:
        typer.echo("WARN : coordination cleanup failed; rerun stop or kill to retry", err=True)


@app.command("create-config")
def create_config(
    ctx: typer.Context,
    host: str = typer.Option("localhost", "--host", help="Host written to every hosts file."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace existing hosts files."),
) -> None:
    """Create default hosts files for a single-host fleet."""
    settings = _settings(ctx)
    try:
        written = create_default_config(
            DirectoryConfigSource(settings.conf_dir), host, overwrite=overwrite
        )
    except FCError as exc:
        _fail(str(exc))
    typer.echo(f"Created {', '.join(written)} in {settings.conf_dir}")


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Resolve and print the topology."""
    settings = _settings(ctx)
    try:
        topology = load_topology(DirectoryConfigSource(settings.conf_dir))
    except FCError as exc:
        _fail(str(exc))
    table = Table(title=f"Topology ({settings.conf_dir})", show_header=True, header_style="bold magenta")
    table.add_column("Role", style="cyan")
    table.add_column("File")
    table.add_column("Hosts")
    for role in Role:
        table.add_row(role.value, role.hosts_file, ", ".join(topology.hosts(role)))
    console.print(table)


@app.command("start")
def start(ctx: typer.Context) -> None:
    """Start workers, then every other role."""
    _run(ctx, lambda seq: seq.start_all())


@app.command("stop")
def stop(ctx: typer.Context) -> None:
    """Graceful stop, escalating to kill, then clean up registrations."""
    _run(ctx, lambda seq: seq.stop_all())


@app.command("kill")
def kill(ctx: typer.Context) -> None:
    """Kill every role immediately."""
    _run(ctx, lambda seq: seq.kill_all())


@app.command("restart")
def restart(ctx: typer.Context) -> None:
    """Stop the fleet, then start it again."""
    _run(ctx, lambda seq: seq.restart())


@app.command("start-workers")
def start_workers(ctx: typer.Context) -> None:
    """Start all workers."""
    _run(ctx, lambda seq: seq.start_workers())


@app.command("stop-workers")
def stop_workers(ctx: typer.Context) -> None:
    """Stop, then kill, all workers."""
    _run(ctx, lambda seq: seq.stop_workers())


@app.command("start-here")
def start_here(ctx: typer.Context) -> None:
    """Start the roles configured for this machine."""
    _run(ctx, lambda seq: seq.start_here())


@app.command("stop-here")
def stop_here(ctx: typer.Context) -> None:
    """Stop the roles configured for this machine."""
    _run(ctx, lambda seq: seq.stop_here())


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
