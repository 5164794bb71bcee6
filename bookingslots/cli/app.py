"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.booking_window import bookable_dates, is_date_bookable
from ..domain.clock import SystemClock
from ..domain.exceptions import BookingSlotsError
from ..domain.models import DayPeriod, SlotReason
from ..adapters.json_store import JsonDataStore
from ..adapters.rest_client import RestDataStore
from ..services.availability import AvailabilityResult, AvailabilityService

app = typer.Typer(
    name="bookingslots",
    help="Compute bookable appointment slots for a professional and day",
    add_completion=False
)

console = Console()

REASON_LABELS = {
    SlotReason.OCCUPIED: "Booked",
    SlotReason.BLOCKED: "Blocked",
    SlotReason.ON_BREAK: "Break",
    SlotReason.PAST_CUTOFF: "Already passed",
    SlotReason.OUTSIDE_OPERATING_WINDOW: "Ends after closing",
}

PERIOD_LABELS = {
    DayPeriod.MORNING: "Morning",
    DayPeriod.AFTERNOON: "Afternoon",
    DayPeriod.EVENING: "Evening",
}


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)

    logging.basicConfig(
        level=config.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    return config


def _build_store(config: AppConfig):
    """Pick the REST backend when configured, otherwise the JSON data file."""
    if config.rest is not None:
        return RestDataStore(config.rest, timezone=config.timezone)
    if config.data_file is not None:
        return JsonDataStore(config.data_file, timezone=config.timezone)
    raise BookingSlotsError("No data source configured. Set 'rest' or 'data_file' in the config.")


def _parse_day(value: Optional[str], tz: str) -> pendulum.Date:
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _render_result(result: AvailabilityResult, only_available: bool) -> None:
    if result.is_closed:
        console.print(f"[yellow]⚠ Closed on {result.day.isoformat()}.[/yellow]")
        return

    table = Table(
        title=f"Slots on {result.day.isoformat()} ({result.effective_day})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Start", style="bold")
    table.add_column("End", style="dim")
    table.add_column("Status")
    table.add_column("Reason", style="dim")

    for slot in result.slots:
        if only_available and not slot.available:
            continue
        status = "[green]available[/green]" if slot.available else "[red]unavailable[/red]"
        reason = REASON_LABELS[slot.reason] if slot.reason else ""
        if slot.offers_waitlist:
            reason += " (waitlist)"
        table.add_row(slot.label, slot.end_label, status, reason)

    console.print()
    console.print(table)

    summary = result.summary
    console.print(
        f"\n[bold green]{summary.available_count}[/bold green] available, "
        f"[bold red]{summary.unavailable_count}[/bold red] unavailable "
        f"of {summary.total} slot(s)"
    )
    for period in DayPeriod:
        slots = summary.by_period[period]
        if slots:
            console.print(
                f"   {PERIOD_LABELS[period]}: {summary.available_in(period)}/{len(slots)} available"
            )
    console.print()


@app.command()
def slots(
    business: Annotated[str, typer.Argument(help="Business identifier")],
    professional: Annotated[str, typer.Argument(help="Professional identifier")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    day: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD). Defaults to today")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Service duration in minutes")] = None,
    only_available: Annotated[bool, typer.Option("--only-available", help="Hide unavailable slots.")] = False,
    split_blocks: Annotated[bool, typer.Option("--split-blocks", help="Split time blocks into slot-sized pieces.")] = False,
):
    """
    Show the slot grid of a professional for one day.

    Examples:

        bookingslots slots shop-1 ana
        bookingslots slots shop-1 ana --date 2024-11-25 --duration 45
        bookingslots slots shop-1 ana --only-available
    """
    try:
        config = _load_config(config_file)
        tz = config.timezone
        target_day = _parse_day(day, tz)
        clock = SystemClock()

        if not is_date_bookable(target_day, clock.today(tz), config.defaults.booking_horizon_days):
            console.print(
                f"[yellow]Note: {target_day.isoformat()} is outside the "
                f"{config.defaults.booking_horizon_days}-day booking window.[/yellow]"
            )

        service_duration = duration if duration is not None else config.defaults.service_duration_minutes
        if service_duration <= 0:
            console.print("[red]Error: --duration must be greater than zero.[/red]")
            raise typer.Exit(1)

        store = _build_store(config)
        service = AvailabilityService(
            schedule_source=store,
            booking_source=store,
            block_source=store,
            clock=clock,
            timezone=tz,
            fallback_duration_minutes=config.defaults.fallback_booking_duration_minutes,
            split_blocks=split_blocks,
        )

        result = asyncio.run(
            service.find_slots(
                business_id=business,
                professional_id=professional,
                day=target_day,
                service_duration_minutes=service_duration,
            )
        )
        _render_result(result, only_available)

    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def dates(
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        help="Number of days ahead to list"
    )
):
    """
    List the dates customers can pick, starting today.
    """
    try:
        config = _load_config(config_file)
        count = days if days is not None else config.defaults.date_list_days
        today = SystemClock().today(config.timezone)

        for value, label in bookable_dates(today, count):
            console.print(f"  {value}  {label}")

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def professionals(
    business: str = typer.Argument(..., help="Business identifier"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Path to config file"
    )
):
    """
    List the active professionals of a business (JSON data file only).
    """
    try:
        config = _load_config(config_file)
        if config.data_file is None:
            console.print("[yellow]Listing professionals requires 'data_file' in the config.[/yellow]")
            raise typer.Exit(1)

        store = JsonDataStore(config.data_file, timezone=config.timezone)
        rows = store.list_professionals(business)

        if not rows:
            console.print(f"[yellow]No professionals found for '{business}'.[/yellow]")
            return

        table = Table(
            title="Professionals",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")

        for row in rows:
            table.add_row(str(row.get("id")), str(row.get("name", "")))

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
