"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.memory_repository import InMemoryScheduleRepository
from ..config import AppConfig, load_config
from ..domain.exceptions import RestGuardError
from ..domain.models import IntervalCategory
from ..domain.violations import ValidationResult
from ..services.schedule_guard import ScheduleGuardService, SubmissionOutcome

app = typer.Typer(
    name="restguard",
    help="Check worker rest periods and work assignments against schedule rules",
    add_completion=False
)

console = Console()

EXIT_REJECTED = 2

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
ScheduleOption = Annotated[Optional[Path], typer.Option("--schedule", "-s", help="JSON schedule file. Defaults to schedule_file from the config")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print machine-readable JSON.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _resolve_schedule_path(config: AppConfig, schedule: Optional[Path]) -> Path:
    path = schedule or config.schedule_file
    if path is None:
        raise ValueError("No schedule file given. Use --schedule or set schedule_file in the config.")
    return path


def _build_service(config: AppConfig, schedule_path: Path):
    repository = InMemoryScheduleRepository.from_json_file(schedule_path, timezone=config.timezone)
    service = ScheduleGuardService(repository=repository, validator=config.build_validator())
    return repository, service


def _parse_instant(value: str, tz: str, option: str) -> DateTime:
    try:
        parsed = pendulum.parse(value, tz=tz)
    except ValueError as e:
        raise ValueError(f"Could not parse {option} '{value}': {e}") from e

    if not isinstance(parsed, DateTime):
        raise ValueError(f"{option} must be a date or date-time, got '{value}'")

    return parsed.in_timezone(tz)


def _print_result(result: ValidationResult, as_json: bool, extra: Optional[dict] = None) -> None:
    if as_json:
        payload = result.to_dict()
        payload.update(extra or {})
        console.print_json(json.dumps(payload))
        return

    if result.accepted:
        console.print("[bold green]✓ Accepted[/bold green]")
        return

    table = Table(
        title=f"✗ Rejected ({len(result.violations)} violation(s))",
        show_header=True,
        header_style="bold red"
    )
    table.add_column("Code", style="bold yellow")
    table.add_column("Details")

    for violation in result.violations:
        table.add_row(violation.code, violation.describe())

    console.print(table)


def _run_check(
    category: IntervalCategory,
    worker: str,
    start: str,
    end: str,
    exclude: Optional[str],
    commit: bool,
    config_file: Optional[Path],
    schedule: Optional[Path],
    as_json: bool,
    verbose: bool,
) -> None:
    _configure_logging(verbose)

    try:
        config = load_config(config_file)
        tz = config.timezone
        schedule_path = _resolve_schedule_path(config, schedule)

        start_dt = _parse_instant(start, tz, "--start")
        end_dt = _parse_instant(end, tz, "--end")

        repository, service = _build_service(config, schedule_path)

        outcome = asyncio.run(
            _submit(service, category, worker, start_dt, end_dt, exclude, commit)
        )

        if outcome.persisted:
            repository.save_json_file(schedule_path)

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    except (RestGuardError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    extra = {"id": outcome.interval.id, "persisted": outcome.persisted}
    _print_result(outcome.result, as_json, extra)

    if outcome.persisted and not as_json:
        console.print(f"[dim]Saved as {outcome.interval.id} in {schedule_path}[/dim]")

    if not outcome.accepted:
        raise typer.Exit(EXIT_REJECTED)


async def _submit(
    service: ScheduleGuardService,
    category: IntervalCategory,
    worker: str,
    start: DateTime,
    end: DateTime,
    exclude: Optional[str],
    commit: bool,
) -> SubmissionOutcome:
    if exclude:
        return await service.update_interval(worker, exclude, start, end, category=category, commit=commit)
    if category is IntervalCategory.REST:
        return await service.submit_rest(worker, start, end, commit=commit)
    return await service.submit_work(worker, start, end, commit=commit)


@app.command()
def check_rest(
    worker: Annotated[str, typer.Argument(help="Worker id")],
    start: Annotated[str, typer.Option("--start", help="Start instant (ISO 8601)")],
    end: Annotated[str, typer.Option("--end", help="End instant (ISO 8601)")],
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Id of the existing record being edited")] = None,
    commit: Annotated[bool, typer.Option("--commit", help="Store the rest period if it is accepted.")] = False,
    config_file: ConfigOption = None,
    schedule: ScheduleOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Check whether a rest period is admissible for a worker.

    Examples:

        restguard check-rest w-1 --start 2024-11-25T18:00 --end 2024-11-25T20:00

        restguard check-rest w-1 --start 2024-11-25T18:00 --end 2024-11-25T19:00 --commit
    """
    _run_check(IntervalCategory.REST, worker, start, end, exclude, commit, config_file, schedule, as_json, verbose)


@app.command()
def check_work(
    worker: Annotated[str, typer.Argument(help="Worker id")],
    start: Annotated[str, typer.Option("--start", help="Start instant (ISO 8601)")],
    end: Annotated[str, typer.Option("--end", help="End instant (ISO 8601)")],
    exclude: Annotated[Optional[str], typer.Option("--exclude", help="Id of the existing record being edited")] = None,
    commit: Annotated[bool, typer.Option("--commit", help="Store the assignment if it is accepted.")] = False,
    config_file: ConfigOption = None,
    schedule: ScheduleOption = None,
    as_json: JsonOption = False,
    verbose: VerboseOption = False,
):
    """
    Check whether a work assignment is admissible for a worker.
    """
    _run_check(IntervalCategory.WORK, worker, start, end, exclude, commit, config_file, schedule, as_json, verbose)


@app.command()
def day_total(
    worker: Annotated[str, typer.Argument(help="Worker id")],
    date: Annotated[str, typer.Option("--date", help="Calendar day (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    schedule: ScheduleOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the rest hours already recorded for a worker on one day.
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_file)
        tz = config.timezone
        schedule_path = _resolve_schedule_path(config, schedule)

        try:
            day_start = pendulum.from_format(date, "YYYY-MM-DD", tz=tz)
        except ValueError as e:
            raise ValueError(f"Could not parse --date '{date}': {e}") from e

        _, service = _build_service(config, schedule_path)
        snapshot = asyncio.run(service.get_snapshot(worker))

        validator = service.validator
        aggregator = validator.aggregator
        bucket = aggregator.bucket_for(day_start)
        total = aggregator.daily_rest_hours(bucket, snapshot.rest_intervals)

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    except (RestGuardError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    budget = validator.daily_rest_budget_hours
    style = "red" if total > budget else "green"
    console.print(
        f"{worker} on {bucket}: [{style}]{total:.2f}h[/{style}] of {budget:.2f}h rest"
    )


@app.command()
def list_workers(
    config_file: ConfigOption = None,
    schedule: ScheduleOption = None,
):
    """
    List all workers in the schedule file.
    """
    try:
        config = load_config(config_file)
        schedule_path = _resolve_schedule_path(config, schedule)
        _, service = _build_service(config, schedule_path)

        async def _collect():
            rows = []
            for worker_id in await service.list_workers():
                snapshot = await service.get_snapshot(worker_id)
                rows.append((worker_id, len(snapshot.rest_intervals), len(snapshot.work_intervals)))
            return rows

        rows = asyncio.run(_collect())

    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    except (RestGuardError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not rows:
        console.print("[yellow]No workers in the schedule file.[/yellow]")
        return

    table = Table(
        title="Workers",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Worker", style="bold yellow")
    table.add_column("Rest periods", justify="right")
    table.add_column("Work assignments", justify="right")

    for worker_id, rest_count, work_count in rows:
        table.add_row(worker_id, str(rest_count), str(work_count))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]restguard[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
