"""Command-line interface for calendar-digest."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from calendar_digest.config import Settings, load_calendars, load_formats

app = typer.Typer(
    name="calendar-digest",
    help="Day-by-day digests of Google calendars",
    no_args_is_help=True,
)
console = Console()


def get_settings() -> Settings:
    """Load application settings."""
    return Settings()


def _init_logging(settings: Settings) -> None:
    from calendar_digest.logging import setup_logging

    setup_logging(
        log_dir=settings.log_dir,
        log_level=settings.log_level,
        max_bytes=settings.log_rotation_size_mb * 1024 * 1024,
        backup_count=settings.log_backup_count,
    )


def _make_transport(settings: Settings):
    from calendar_digest.google import BearerTransport

    if not settings.access_token:
        console.print("[red]No access token configured.[/red]")
        console.print("Set CALENDAR_DIGEST_ACCESS_TOKEN in the environment or a .env file.")
        raise typer.Exit(1)

    return BearerTransport(settings.access_token, timeout=settings.request_timeout)


def _make_client(settings: Settings, transport):
    from calendar_digest.calendar import CalendarClient

    return CalendarClient(transport, api_url=settings.api_url, max_results=settings.max_results)


@app.command()
def version() -> None:
    """Show version information."""
    from calendar_digest import __version__

    console.print(f"calendar-digest v{__version__}")


@app.command()
def init(
    config_dir: Annotated[
        Path | None,
        typer.Option("--config-dir", "-c", help="Configuration directory"),
    ] = None,
) -> None:
    """Initialize configuration directory with example files."""
    settings = get_settings()
    if config_dir:
        settings.config_dir = config_dir

    settings.ensure_config_dir()

    if not settings.calendars_path.exists():
        example_calendars = """# Calendar Digest Calendars
# Each entry is a Google calendar to include in digests

calendars:
  - id: "primary"
    name: "My calendar"

  - id: "en.uk#holiday@group.v.calendar.google.com"
    name: "UK holidays"
    enabled: false
"""
        settings.calendars_path.write_text(example_calendars)
        console.print(f"[green]Created[/green] {settings.calendars_path}")

    if not settings.formats_path.exists():
        example_formats = """# Calendar Digest Formats
# strftime patterns and strings used when describing days and events

day: "%a, %d %b %Y"
longday: "%A, %d %B %Y"
time: "%H:%M"
at: " at %H:%M"

all_day: "All day"
starting: "Starting at "
from: "From "
to: " to "
unknown: "Unknown time"

# Abbreviated weekday names, Monday first (used by --from mon, -fri, ...)
shortdays: [mon, tue, wed, thu, fri, sat, sun]
"""
        settings.formats_path.write_text(example_formats)
        console.print(f"[green]Created[/green] {settings.formats_path}")

    console.print(f"\n[bold]Configuration initialized at:[/bold] {settings.config_dir}")


@app.command("calendars")
def calendars_list() -> None:
    """List the calendars configured for digests."""
    settings = get_settings()
    calendars = load_calendars(settings.calendars_path)

    if not calendars:
        console.print(f"[yellow]No calendars configured in {settings.calendars_path}[/yellow]")
        return

    table = Table(title="Calendars")
    table.add_column("Name", style="cyan")
    table.add_column("ID", style="green")
    table.add_column("Enabled", style="yellow")

    for cal in calendars:
        table.add_row(cal.label, cal.id, "✓" if cal.enabled else "✗")

    console.print(table)


@app.command()
def info(
    calendar_id: Annotated[str, typer.Argument(help="Google calendar ID")],
) -> None:
    """Show the title and description of a calendar."""
    from calendar_digest.google import CalendarAPIError

    from calendar_digest.logging import get_error_logger

    settings = get_settings()
    _init_logging(settings)

    with _make_transport(settings) as transport:
        client = _make_client(settings, transport)
        try:
            cal = client.calendar_info(calendar_id)
        except CalendarAPIError as e:
            get_error_logger().error(f"Calendar info for {calendar_id} failed: {e}")
            console.print(f"[red]Unable to fetch information for this calendar:[/red] {e}")
            raise typer.Exit(1)

    console.print(f"[bold]{cal.title}[/bold]")
    if cal.description:
        console.print(cal.description)
    if cal.time_zone:
        console.print(f"[dim]Time zone: {cal.time_zone}[/dim]")


@app.command()
def digest(
    calendar_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Calendar IDs (configured calendars if not specified)"),
    ] = None,
    days: Annotated[
        int | None,
        typer.Option("--days", "-d", min=0, help="Days after the start day to include"),
    ] = None,
    from_spec: Annotated[
        str | None,
        typer.Option(
            "--from",
            "-f",
            help="Start day: offset in days, ISO date, =epoch, or weekday (-fri for the previous Friday)",
        ),
    ] = None,
) -> None:
    """Show events grouped by day."""
    from calendar_digest.calendar import DayBucketizer, fetch_digest
    from calendar_digest.google import CalendarAPIError
    from calendar_digest.logging import get_calendar_logger, get_error_logger

    settings = get_settings()
    _init_logging(settings)

    if not calendar_ids:
        calendar_ids = [cal.id for cal in load_calendars(settings.calendars_path) if cal.enabled]
    if not calendar_ids:
        console.print("[yellow]No calendars specified or configured[/yellow]")
        raise typer.Exit(1)

    formats = load_formats(settings.formats_path)

    with _make_transport(settings) as transport:
        bucketizer = DayBucketizer(_make_client(settings, transport), formats)
        try:
            result = fetch_digest(
                bucketizer,
                calendar_ids,
                settings.default_days if days is None else days,
                from_spec or settings.default_from,
                diagnostics_for=get_calendar_logger,
            )
        except CalendarAPIError as e:
            get_error_logger().error(f"Digest failed: {e}")
            console.print(f"[red]Calendar request failed:[/red] {e}")
            raise typer.Exit(1)

    console.print(f"[bold]Events from {result.start} to {result.end}[/bold]\n")

    if not result.days:
        console.print("[yellow]No events in this period[/yellow]")

    for bucket in result.sorted_days():
        console.print(f"[bold cyan]{bucket.long_name}[/bold cyan]")
        console.print("-" * len(bucket.long_name))

        for event in bucket.events:
            console.print(event.summary, markup=False)
            console.print(f"\t{event.time_string}", markup=False)
            if event.location:
                console.print(f"\tLocation: {event.location}", markup=False)
            if event.html_link:
                console.print(f"\t[dim]{escape(event.html_link)}[/dim]")
            console.print()

    if result.skipped:
        console.print(f"[yellow]{result.skipped} event(s) skipped (no usable date)[/yellow]")


if __name__ == "__main__":
    app()
