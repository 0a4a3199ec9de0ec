"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.slack_blocks import NO_AVAILABILITY_TEXT, group_slots_by_date
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import FreeTimeError
from ..domain.models import FreeSlot
from ..services.free_time_finder import build_calendar_source, build_service

app = typer.Typer(
    name="freetime",
    help="Find everyone's free time across Google calendars",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config = AppConfig.load(config_file or get_default_config_path())
    _configure_logging(config.log_level)
    return config


def _render_slots(slots: List[FreeSlot]) -> Table:
    table = Table(title="全員の空き時間", show_header=True, header_style="bold cyan")
    table.add_column("Date", style="bold yellow")
    table.add_column("Slots")
    table.add_column("Free min.", justify="right", style="dim")

    for day_slots in group_slots_by_date(slots).values():
        table.add_row(
            day_slots[0].date_label,
            ", ".join(s.format_range() for s in day_slots),
            str(sum(s.duration_minutes() for s in day_slots)),
        )
    return table


@app.command()
def find(
    config_file: ConfigOption = None,
    days: Annotated[Optional[int], typer.Option("--days", "-d", help="Number of calendar days to search")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use sample data instead of Google Calendar.")] = False,
):
    """
    Find free slots shared by all configured calendars.

    Examples:

        freetime find
        freetime find --days 14
        freetime find --mock
    """
    try:
        config = _load_config(config_file)
        window = config.get_work_window()
        horizon = days if days is not None else config.work_hours.horizon_days

        console.print(f"\n[bold cyan]🗓️  Free time, next {horizon} days[/bold cyan]")
        console.print(
            f"   Window: {window.start_minutes // 60}:00 - {window.end_minutes // 60}:00, "
            f"min. {window.min_slot_minutes} Min., timezone {config.timezone}"
        )
        if mock:
            console.print("[yellow]⚠  MOCK MODE: using sample data[/yellow]")
        console.print()

        service = build_service(config, mock=mock)
        slots = service.find_free_slots(days=horizon)

        if not slots:
            console.print(f"[yellow]⚠ {NO_AVAILABILITY_TEXT}[/yellow]\n")
            return

        console.print(_render_slots(slots))
        console.print()

    except (FileNotFoundError, ValueError, FreeTimeError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def serve(
    config_file: ConfigOption = None,
    host: Annotated[str, typer.Option("--host", help="Interface to bind")] = "0.0.0.0",
    port: Annotated[int, typer.Option("--port", "-p", help="Port to listen on")] = 8787,
):
    """
    Serve the Slack slash-command endpoint over HTTP.
    """
    import uvicorn

    from ..web.app import create_app

    try:
        config = _load_config(config_file)
        application = create_app(config)
    except (FileNotFoundError, ValueError, FreeTimeError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold cyan]Serving /slack/command on {host}:{port} ({config.environment})[/bold cyan]")
    uvicorn.run(application, host=host, port=port, log_level=config.log_level.lower())


@app.command()
def test_auth(
    config_file: ConfigOption = None,
):
    """
    Test Google service-account authentication and calendar access.
    """
    try:
        config = _load_config(config_file)
        console.print("\n[bold]Testing Google Calendar access...[/bold]\n")

        client = build_calendar_source(config)
        calendar = client.test_connection()

        console.print(Panel.fit(
            f"[bold green]✓ Authentication successful![/bold green]\n\n"
            f"[bold]Calendar:[/bold] {calendar.get('summary', 'N/A')}\n"
            f"[bold]ID:[/bold] {calendar.get('id', 'N/A')}\n"
            f"[bold]Timezone:[/bold] {calendar.get('timeZone', 'N/A')}",
            title="✓ Connection test"
        ))
        console.print()

    except (FileNotFoundError, ValueError, FreeTimeError) as e:
        console.print(f"\n[bold red]✗ Error:[/bold red] {e}\n")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]freetime[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
