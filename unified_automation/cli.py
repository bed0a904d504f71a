"""
Unified Automation CLI - run browser journeys on Playwright or Selenium.
"""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unified_automation.config import (
    UnifiedAutomationConfig,
    find_config_file,
    load_config,
    resolve_config,
)
from unified_automation.errors import DiscoveryError
from unified_automation.journeys import discover_journeys
from unified_automation.orchestrator import (
    EventBroadcaster,
    JourneyError,
    JourneyExecutor,
    JourneyFinished,
    JourneyLog,
    JourneyStarted,
    RunEvent,
)
from unified_automation.types import Backend, DisplayMode, Outcome, RunRequest, RunSummary

console = Console()


def _load_config(config: Optional[str]) -> UnifiedAutomationConfig:
    """Load the given or discovered config file; exit 2 when it is invalid."""
    try:
        return resolve_config(Path(config) if config else None)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        sys.exit(2)


def _parse_overrides(ctx: click.Context, param: click.Parameter, values: Tuple[str, ...]) -> Dict[str, str]:
    """Turn repeated KEY=VALUE options into a dict."""
    overrides: Dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'")
        overrides[key.strip()] = value
    return overrides


def _print_event(event: RunEvent) -> None:
    if isinstance(event, JourneyStarted):
        console.print(f"[bold cyan]Running {escape(event.journey)}[/bold cyan] [dim]({event.backend})[/dim]")
    elif isinstance(event, JourneyLog):
        console.print(event.text, markup=False, highlight=False)
    elif isinstance(event, JourneyError):
        console.print(f"[red]{escape(event.text)}[/red]", highlight=False)
    elif isinstance(event, JourneyFinished):
        color = "green" if event.outcome == Outcome.PASSED else "red"
        console.print(
            f"[{color}]{event.outcome.value.upper()}[/{color}] {escape(event.journey)} "
            f"[dim]({event.duration_seconds:.2f}s)[/dim]"
        )
        console.print()


async def _print_events(queue: asyncio.Queue) -> None:
    while True:
        _print_event(await queue.get())


async def _run_journeys(request: RunRequest, base_env: Dict[str, str]) -> RunSummary:
    """Run a request in-process, printing events as they arrive."""
    broadcaster = EventBroadcaster()
    queue = broadcaster.subscribe()
    executor = JourneyExecutor(
        backend=request.backend,
        mode=request.mode,
        broadcaster=broadcaster,
        config={**base_env, **request.config},
        keep_browser_open=request.keep_browser_open,
    )
    printer = asyncio.create_task(_print_events(queue))
    try:
        return await executor.run(request.journeys)
    finally:
        printer.cancel()
        while not queue.empty():
            _print_event(queue.get_nowait())


def _print_summary(summary: RunSummary) -> None:
    table = Table(title=f"Journey Results ({summary.backend.value})")
    table.add_column("Journey", style="cyan")
    table.add_column("Outcome", style="white")
    table.add_column("Exit Code", style="dim")
    table.add_column("Duration", style="dim")

    for result in summary.results:
        outcome = result.outcome.value.upper()
        styled = f"[green]{outcome}[/green]" if result.outcome == Outcome.PASSED else f"[red]{outcome}[/red]"
        exit_code = "-" if result.exit_code is None else str(result.exit_code)
        table.add_row(result.journey, styled, exit_code, f"{result.duration_seconds:.2f}s")

    console.print(table)
    console.print(
        f"\n[bold]{summary.passed} passed, {summary.failed} failed[/bold] "
        f"[dim]in {summary.duration_seconds:.2f}s[/dim]"
    )
    if summary.stopped:
        console.print("[yellow]Run was stopped before completion[/yellow]")


@click.group()
@click.version_option(version=None, package_name="unified-automation")
@click.option('--verbose', '-v', is_flag=True, help='Verbose logging')
def main(verbose: bool) -> None:
    """Unified Automation - one journey, two browser engines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@main.command('journeys')
@click.option('--config', type=click.Path(exists=True), help='Path to config file')
def journeys_cmd(config: Optional[str]) -> None:
    """List discovered journeys."""
    automation_config = _load_config(config)
    try:
        journeys = discover_journeys(automation_config.settings.journeys_package, require=False)
    except DiscoveryError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    if not journeys:
        console.print("[yellow]No journeys found[/yellow]")
        return

    table = Table(title="Available Journeys")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Path", style="dim")

    for journey in journeys:
        table.add_row(journey.id, journey.name, journey.path)

    console.print(table)
    console.print("\n[dim]Usage: unified-automation run <id> [<id> ...][/dim]")


@main.command()
@click.argument('journeys', nargs=-1, required=True)
@click.option('--tool', '-t', type=click.Choice([b.value for b in Backend]), help='Browser engine (default from config)')
@click.option('--headless/--headed', default=None, help='Browser display mode (default from config)')
@click.option('--set', 'overrides', multiple=True, callback=_parse_overrides, metavar='KEY=VALUE',
              help='Environment override for every journey (repeatable)')
@click.option('--keep-open', is_flag=True, help='Leave the browser open (single headed journey only)')
@click.option('--config', type=click.Path(exists=True), help='Path to config file')
def run(
    journeys: Tuple[str, ...],
    tool: Optional[str],
    headless: Optional[bool],
    overrides: Dict[str, str],
    keep_open: bool,
    config: Optional[str],
) -> None:
    """Run journeys in order, one runner process each."""
    automation_config = _load_config(config)

    if headless is None:
        mode = automation_config.default_mode
    else:
        mode = DisplayMode.HEADLESS if headless else DisplayMode.HEADED

    try:
        request = RunRequest(
            journeys=list(journeys),
            backend=Backend(tool) if tool else automation_config.default_tool,
            mode=mode,
            config=overrides,
            keep_browser_open=keep_open,
        )
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    console.print(
        f"[bold cyan]Running {len(request.journeys)} journeys with {request.backend.value}[/bold cyan] "
        f"[dim]({request.mode.value})[/dim]"
    )
    console.print()

    try:
        summary = asyncio.run(_run_journeys(request, automation_config.runner_env()))
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted[/yellow]")
        sys.exit(130)

    _print_summary(summary)
    sys.exit(0 if summary.all_passed else 1)


@main.command()
@click.option('--host', help='Bind address (default from config)')
@click.option('--port', type=int, help='Bind port (default from config)')
@click.option('--config', type=click.Path(exists=True), help='Path to config file')
def serve(host: Optional[str], port: Optional[int], config: Optional[str]) -> None:
    """Serve the HTTP/WebSocket API."""
    import uvicorn

    from unified_automation.server import create_app

    automation_config = _load_config(config)
    bind_host = host or automation_config.server.host
    bind_port = port or automation_config.server.port

    console.print(f"[bold cyan]Serving on http://{bind_host}:{bind_port}[/bold cyan]")
    uvicorn.run(create_app(automation_config), host=bind_host, port=bind_port, log_level="info")


@main.command()
@click.option('--config', type=click.Path(exists=True), help='Path to config file')
def validate(config: Optional[str]) -> None:
    """Validate the configuration file."""
    config_path = Path(config) if config else find_config_file()
    if not config_path:
        console.print("[red]Error:[/red] No unified-automation.yaml found")
        sys.exit(2)

    console.print(f"Validating [cyan]{config_path}[/cyan]...")

    try:
        automation_config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Validation failed:[/red] {e}")
        sys.exit(1)

    settings = automation_config.settings
    table = Table(title="Configuration Summary")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Project Root", str(automation_config.project_root))
    table.add_row("App URL", settings.app_url)
    table.add_row("Default Tool", automation_config.default_tool.value)
    table.add_row("Default Mode", automation_config.default_mode.value)
    table.add_row("Journeys Package", settings.journeys_package)
    table.add_row("Profile Directory", settings.user_data_dir)
    table.add_row("Server", f"{automation_config.server.host}:{automation_config.server.port}")
    if settings.load_extensions:
        status = "found" if settings.extension_enabled else "[yellow]missing[/yellow]"
        table.add_row("Extension", f"{settings.extension_path} ({status})")
    if automation_config.env:
        table.add_row("Extra Env", ", ".join(sorted(automation_config.env)))

    console.print(table)
    console.print("\n[green]Configuration is valid![/green]")


if __name__ == "__main__":
    main()
