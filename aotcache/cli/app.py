"""Main Typer application for the ``aotcache`` console script.

Commands: plan, status, enable.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from aotcache.config import settings
from aotcache.core.commands import create_command
from aotcache.core.controller import RelaunchController, enable
from aotcache.core.spawner import RecordingSpawner
from aotcache.logs import configure_logging
from aotcache.models.invocation import InvocationDescriptor
from aotcache.models.phases import CacheArtifact, Phase, Runtime

console = Console()

app = typer.Typer(
    name="aotcache",
    help="Acquire and reuse an ahead-of-time cache by relaunching the process.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        settings.log_level, "--log-level", help="Logging level for aotcache."
    ),
) -> None:
    configure_logging(log_level)


@app.command(name="plan", help="Show what the controller would do for a command line.")
def plan_cmd(
    command: list[str] = typer.Argument(
        ..., help="Runtime command line, e.g. -- java -XX:AOTCache=.aot -cp app.jar Main"
    ),
    cache: Path = typer.Option(
        settings.cache_file_name, "--cache", "-c", help="Path to the cache file."
    ),
    runtime: Runtime = typer.Option(
        Runtime.HOTSPOT, "--runtime", "-r", help="Flag vocabulary of the command line."
    ),
) -> None:
    """Classify a command line and print the command that would be spawned.

    Nothing is launched and no directory is created.
    """
    plan_settings = settings.model_copy(update={"runtime": runtime})
    vocabulary = plan_settings.vocabulary
    try:
        descriptor = InvocationDescriptor.from_command(command, vocabulary)
    except ValueError as e:
        console.print(f"[red]Invalid command:[/red] {e}")
        raise typer.Exit(code=2)

    controller = RelaunchController(
        cache,
        descriptor=descriptor,
        spawner=RecordingSpawner(),
        settings=plan_settings,
        terminate=lambda status: None,
        register_exit_hook=lambda hook: None,
    )
    phase = controller.classify()
    console.print(f"[bold]Phase:[/bold] [cyan]{phase.value}[/cyan]")

    if phase == Phase.NEEDS_TRAINING:
        console.print("[bold]Relaunch:[/bold]")
        console.print(" ".join(controller.relaunch().command), markup=False)
    elif phase == Phase.RECORDING:
        console.print("[bold]At exit:[/bold]")
        console.print(
            " ".join(create_command(descriptor, controller.artifact, vocabulary)),
            markup=False,
        )
    elif phase == Phase.CACHE_READY:
        console.print("[green]Cache is found, nothing to do.[/green]")
    else:
        console.print("[dim]No cache flags present, the process runs unchanged.[/dim]")


@app.command(name="status", help="Report whether the cache and training data exist.")
def status_cmd(
    cache: Path = typer.Option(
        settings.cache_file_name, "--cache", "-c", help="Path to the cache file."
    ),
) -> None:
    artifact = CacheArtifact(cache_path=cache)

    table = Table(title="AOT Cache")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path")
    table.add_column("Present", justify="center")

    for name, path in (("cache", artifact.cache_path), ("configuration", artifact.config_path)):
        present = "[green]Yes[/green]" if path.exists() else "[yellow]No[/yellow]"
        table.add_row(name, str(path), present)

    console.print(table)


@app.command(name="enable", help="Enable the cache for this interpreter.")
def enable_cmd(
    cache: Path = typer.Option(
        settings.cache_file_name, "--cache", "-c", help="Path to the cache file."
    ),
) -> None:
    enable(cache)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
