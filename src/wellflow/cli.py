"""CLI interface using Typer."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from wellflow.app_logging import configure_logging
from wellflow.config import get_settings
from wellflow.db import DatabaseConnection, get_db, set_db
from wellflow.db.store import StateStore
from wellflow.fasting.session import FASTING_GOAL_HOURS, FastingAlreadyActiveError
from wellflow.tracking.models import ActivityType, Gender, LogEntry, LogKind
from wellflow.tracking.state import WellnessTracker
from wellflow.tracking.timeutils import (
    age,
    format_duration,
    from_local_datetime,
    now_ms,
    to_local_datetime,
)

app = typer.Typer(
    help="Personal calorie and intermittent-fasting tracker",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
profile_app = typer.Typer(help="Show and edit the user profile")
food_app = typer.Typer(help="Log food intake")
activity_app = typer.Typer(help="Log burned calories")
log_app = typer.Typer(help="List and delete calorie log entries")
fast_app = typer.Typer(help="Start, end and monitor fasts")
config_app = typer.Typer(help="Manage configuration")

app.add_typer(profile_app, name="profile")
app.add_typer(food_app, name="food")
app.add_typer(activity_app, name="activity")
app.add_typer(log_app, name="log")
app.add_typer(fast_app, name="fast")
app.add_typer(config_app, name="config")


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(
    command: str,
    message: str,
    json_output: bool,
    suggestions: Optional[list[str]] = None,
) -> None:
    """Report an error in the requested format and exit with status 1."""
    if json_output:
        output_json({
            "success": False,
            "command": command,
            "errors": [message],
            "suggestions": suggestions or [],
        })
    else:
        console.print(f"[red]{message}[/red]")
        for suggestion in suggestions or []:
            console.print(suggestion)
    raise typer.Exit(1)


def open_tracker() -> WellnessTracker:
    """Load the tracker from the configured database."""
    return WellnessTracker.open(StateStore(get_db()))


def parse_start_time(value: str) -> int:
    """Parse a fast start time: full ISO datetime, or HH:MM meaning today."""
    try:
        return from_local_datetime(datetime.fromisoformat(value))
    except ValueError:
        pass
    try:
        clock = time.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(
            f"'{value}' is not a datetime (YYYY-MM-DDTHH:MM) or a time (HH:MM)"
        ) from None
    return from_local_datetime(datetime.combine(date.today(), clock))


def format_timestamp(timestamp_ms: int) -> str:
    return to_local_datetime(timestamp_ms).strftime("%Y-%m-%d %H:%M")


def log_entry_row(entry: LogEntry) -> dict[str, Any]:
    data = entry.to_dict()
    data["time"] = format_timestamp(entry.occurred_at)
    return data


@app.callback()
def main(
    db_path: Optional[Path] = typer.Option(
        None, "--db", help="Custom database path"
    ),
) -> None:
    """Personal calorie and intermittent-fasting tracker."""
    settings = get_settings()
    configure_logging(settings.logging.level)
    if db_path is not None:
        set_db(DatabaseConnection(db_path))


# ============================================================================
# Profile Commands
# ============================================================================


def profile_data(tracker: WellnessTracker) -> dict[str, Any]:
    profile = tracker.state.profile
    data = profile.to_dict()
    data["age"] = age(profile.date_of_birth)
    data["bmr"] = round(tracker.bmr())
    data["daily_limit"] = round(tracker.daily_limit())
    return data


@profile_app.command("show")
def profile_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the profile with its BMR and effective daily limit."""
    tracker = open_tracker()
    profile = tracker.state.profile
    data = profile_data(tracker)

    if json_output:
        output_json({
            "success": True,
            "command": "profile show",
            "data": data,
            "human_summary": f"{profile.name}: BMR {data['bmr']} kcal, limit {data['daily_limit']} kcal",
        })
        return

    console.print(f"[bold]{profile.name}[/bold]")
    console.print(f"  Born: {profile.date_of_birth.isoformat()} (age {data['age']})")
    console.print(f"  Height: {profile.height_cm:g} cm")
    console.print(f"  Weight: {profile.weight_kg:g} kg")
    console.print(f"  Gender: {profile.gender.value}")
    if profile.address:
        console.print(f"  Address: {profile.address}")
    console.print(f"  BMR: {data['bmr']} kcal/day")
    if profile.manual_daily_limit is not None:
        console.print(f"  Daily limit: {data['daily_limit']} kcal (manual)")
    else:
        console.print(f"  Daily limit: {data['daily_limit']} kcal (BMR)")


@profile_app.command("set")
def profile_set(
    name: Optional[str] = typer.Option(None, "--name", help="Display name"),
    dob: Optional[str] = typer.Option(None, "--dob", help="Date of birth (YYYY-MM-DD)"),
    height: Optional[float] = typer.Option(None, "--height", help="Height in cm"),
    weight: Optional[float] = typer.Option(None, "--weight", help="Weight in kg"),
    gender: Optional[str] = typer.Option(None, "--gender", help="Gender (male/female)"),
    address: Optional[str] = typer.Option(None, "--address", help="Address (display only)"),
    limit: Optional[float] = typer.Option(
        None, "--limit", help="Manual daily calorie limit (overrides BMR)"
    ),
    clear_limit: bool = typer.Option(
        False, "--clear-limit", help="Remove the manual limit and use BMR"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Save the profile. Options not given keep their current value."""
    tracker = open_tracker()
    current = tracker.state.profile

    changes: dict[str, Any] = {}
    if name is not None:
        changes["name"] = name
    if height is not None:
        changes["height_cm"] = height
    if weight is not None:
        changes["weight_kg"] = weight
    if address is not None:
        changes["address"] = address
    if limit is not None and clear_limit:
        fail("profile set", "Use either --limit or --clear-limit, not both", json_output)
    if limit is not None:
        changes["manual_daily_limit"] = limit
    if clear_limit:
        changes["manual_daily_limit"] = None

    try:
        if dob is not None:
            changes["date_of_birth"] = date.fromisoformat(dob)
        if gender is not None:
            changes["gender"] = Gender(gender.lower())
        profile = replace(current, **changes)
    except ValueError as exc:
        fail("profile set", f"Invalid profile: {exc}", json_output)
        return

    tracker.save_profile(profile)
    data = profile_data(tracker)

    if json_output:
        output_json({
            "success": True,
            "command": "profile set",
            "data": data,
            "human_summary": f"Profile saved, daily limit {data['daily_limit']} kcal",
        })
    else:
        console.print(f"[green]Profile saved.[/green] Daily limit: {data['daily_limit']} kcal")


# ============================================================================
# Calorie Logging Commands
# ============================================================================


@food_app.command("add")
def food_add(
    label: str = typer.Argument(..., help="What you ate, e.g. 'Chicken Salad'"),
    calories: float = typer.Argument(..., help="Calories consumed"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log food eaten now."""
    tracker = open_tracker()
    try:
        entry = tracker.add_food(label, calories)
    except ValueError as exc:
        fail("food add", str(exc), json_output)
        return

    summary = tracker.daily_summary()
    if json_output:
        output_json({
            "success": True,
            "command": "food add",
            "data": {"entry": log_entry_row(entry), "today": summary.to_dict()},
            "human_summary": f"Logged {label} ({calories:.0f} kcal), {summary.remaining:.0f} kcal left",
        })
    else:
        console.print(f"[green]Logged:[/green] {label} ({calories:.0f} kcal)")
        console.print(f"Remaining today: {summary.remaining:.0f} kcal")


@activity_app.command("add")
def activity_add(
    calories: float = typer.Argument(..., help="Calories burned"),
    activity_type: ActivityType = typer.Option(
        ActivityType.WALKING, "--type", "-t", help="Activity type"
    ),
    label: Optional[str] = typer.Option(
        None, "--label", help="Label (default: the activity type)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log an activity done now."""
    tracker = open_tracker()
    try:
        entry = tracker.add_activity(activity_type, calories, label=label)
    except ValueError as exc:
        fail("activity add", str(exc), json_output)
        return

    summary = tracker.daily_summary()
    if json_output:
        output_json({
            "success": True,
            "command": "activity add",
            "data": {"entry": log_entry_row(entry), "today": summary.to_dict()},
            "human_summary": f"Logged {entry.label} (-{calories:.0f} kcal), {summary.remaining:.0f} kcal left",
        })
    else:
        console.print(f"[green]Logged:[/green] {entry.label} ({calories:.0f} kcal burned)")
        console.print(f"Remaining today: {summary.remaining:.0f} kcal")


@log_app.command("list")
def log_list(
    show_all: bool = typer.Option(False, "--all", "-a", help="Show every day, not just today"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List calorie log entries, newest first."""
    tracker = open_tracker()
    if show_all:
        entries = list(tracker.state.logs)
    else:
        entries = list(tracker.daily_summary().entries)

    if json_output:
        output_json({
            "success": True,
            "command": "log list",
            "data": {"entries": [log_entry_row(e) for e in entries]},
            "human_summary": f"{len(entries)} entries",
        })
        return

    if not entries:
        console.print("No entries yet. Start by logging food or activity!")
        return

    table = Table(title="All Entries" if show_all else "Today's Entries")
    table.add_column("ID", style="dim")
    table.add_column("Time", style="cyan")
    table.add_column("Type")
    table.add_column("Label")
    table.add_column("kcal", justify="right")

    for entry in entries:
        if entry.kind == LogKind.FOOD:
            kcal = f"[red]-{entry.calories:g}[/red]"
        else:
            kcal = f"[green]+{entry.calories:g}[/green]"
        table.add_row(
            entry.id[:8],
            format_timestamp(entry.occurred_at),
            entry.kind.value,
            entry.label,
            kcal,
        )

    console.print(table)


@log_app.command("delete")
def log_delete(
    log_id: str = typer.Argument(..., help="Entry ID (a unique prefix is enough)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Permanently delete a calorie log entry."""
    tracker = open_tracker()

    matches = [e for e in tracker.state.logs if e.id.startswith(log_id)]
    if len(matches) > 1:
        fail("log delete", f"ID prefix '{log_id}' matches {len(matches)} entries", json_output,
             ["Use more characters of the ID"])
    if not matches:
        fail("log delete", f"No log entry with ID '{log_id}'", json_output,
             ["List entries with: wellflow log list --all"])

    entry = matches[0]
    tracker.delete_log(entry.id)

    if json_output:
        output_json({
            "success": True,
            "command": "log delete",
            "data": {"deleted": log_entry_row(entry)},
            "human_summary": f"Deleted {entry.label}",
        })
    else:
        console.print(f"[green]Deleted:[/green] {entry.label} ({entry.calories:g} kcal)")


@app.command()
def today(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show today's calorie budget."""
    tracker = open_tracker()
    summary = tracker.daily_summary()

    if json_output:
        output_json({
            "success": True,
            "command": "today",
            "data": summary.to_dict(),
            "human_summary": f"{summary.remaining:.0f} {summary.status_label}",
        })
        return

    color = "red" if summary.is_over_or_near_limit else "green"
    lines = [
        f"[bold {color}]{summary.remaining:.0f}[/bold {color}] {summary.status_label}",
        "",
        f"Daily limit: {summary.daily_limit:.0f} kcal",
        f"Consumed:    {summary.consumed:.0f} kcal",
        f"Burned:      {summary.burned:.0f} kcal",
        f"Net:         {summary.net:.0f} kcal",
        # clamp for display only; the figure itself is unbounded
        f"Used:        {max(0.0, min(100.0, summary.percentage_of_limit)):.0f}%",
    ]
    console.print(Panel("\n".join(lines), title="Today", expand=False))


# ============================================================================
# Fasting Commands
# ============================================================================


def fasting_panel(tracker: WellnessTracker, now: int) -> Panel:
    progress = tracker.fasting_progress(now)
    if progress is None:
        body = "[bold]00:00:00[/bold]\nNo active fast. Start one with: wellflow fast start"
        return Panel(body, title="Fasting", expand=False)

    stage = progress.stage
    lines = [
        f"[bold]{progress.elapsed_label}[/bold] elapsed",
        f"Started: {format_timestamp(progress.started_at)}",
        f"Goal: {FASTING_GOAL_HOURS}h ({progress.percentage:.0f}%)",
        "",
        f"[bold magenta]{stage.name}[/bold magenta]",
        stage.description,
    ]
    return Panel("\n".join(lines), title="Fasting", expand=False)


@fast_app.command("start")
def fast_start(
    at: Optional[str] = typer.Option(
        None, "--at", help="Start time (YYYY-MM-DDTHH:MM or HH:MM today, default: now)"
    ),
    restart: bool = typer.Option(
        False, "--restart", help="Overwrite the start time of a running fast"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Start a fast."""
    started_at = parse_start_time(at) if at else now_ms()
    tracker = open_tracker()

    try:
        tracker.start_fast(started_at, restart=restart)
    except FastingAlreadyActiveError as exc:
        fail("fast start", f"A fast is already running since {format_timestamp(exc.started_at)}",
             json_output, ["End it with: wellflow fast end",
                           "Or move its start with: wellflow fast start --restart --at HH:MM"])

    if json_output:
        output_json({
            "success": True,
            "command": "fast start",
            "data": tracker.state.fasting.to_dict(),
            "human_summary": f"Fast started at {format_timestamp(started_at)}",
        })
    else:
        console.print(f"[green]Fast started[/green] at {format_timestamp(started_at)}")


@fast_app.command("end")
def fast_end(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """End the running fast and record it in the history."""
    tracker = open_tracker()
    session = tracker.end_fast()

    if session is None:
        if json_output:
            output_json({
                "success": True,
                "command": "fast end",
                "data": {"session": None},
                "warnings": ["No active fast"],
                "human_summary": "No active fast",
            })
        else:
            console.print("[yellow]No active fast[/yellow]")
        return

    duration = format_duration(session.duration_ms)
    if json_output:
        output_json({
            "success": True,
            "command": "fast end",
            "data": {"session": session.to_dict(), "duration": duration},
            "human_summary": f"Fast completed: {duration}",
        })
    else:
        console.print(f"[green]Fast completed:[/green] {duration}")


@fast_app.command("status")
def fast_status(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the elapsed time, goal progress and stage of the running fast."""
    tracker = open_tracker()
    now = now_ms()
    progress = tracker.fasting_progress(now)

    if json_output:
        output_json({
            "success": True,
            "command": "fast status",
            "data": {
                "is_active": progress is not None,
                "progress": progress.to_dict() if progress else None,
            },
            "human_summary": (
                f"{progress.elapsed_label} elapsed, {progress.stage.name}"
                if progress else "No active fast"
            ),
        })
        return

    console.print(fasting_panel(tracker, now))


@fast_app.command("history")
def fast_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of fasts to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List completed fasts, newest first."""
    tracker = open_tracker()
    sessions = tracker.state.fasting_history[:limit]

    if json_output:
        output_json({
            "success": True,
            "command": "fast history",
            "data": {
                "sessions": [
                    {**s.to_dict(), "duration_label": format_duration(s.duration_ms)}
                    for s in sessions
                ],
                "total": len(tracker.state.fasting_history),
            },
            "human_summary": f"{len(tracker.state.fasting_history)} completed fasts",
        })
        return

    if not sessions:
        console.print("No past fasts recorded.")
        return

    table = Table(title="Fasting History")
    table.add_column("Date", style="cyan")
    table.add_column("Duration", justify="right", style="bold")
    table.add_column("Ended", justify="right")

    for session in sessions:
        table.add_row(
            to_local_datetime(session.started_at).date().isoformat(),
            format_duration(session.duration_ms),
            to_local_datetime(session.ended_at).strftime("%H:%M"),
        )

    console.print(table)


@fast_app.command("watch")
def fast_watch(
    seconds: Optional[float] = typer.Option(
        None, "--seconds", help="Stop after this many seconds (default: until Ctrl+C)"
    ),
) -> None:
    """Show a live readout of the running fast."""
    from wellflow.scheduler import WatchScheduler, schedule_fast_watch

    tracker = open_tracker()
    if not tracker.state.fasting.is_active:
        console.print("[yellow]No active fast[/yellow]")
        return

    intervals = get_settings().scheduler
    watch = WatchScheduler()

    with Live(fasting_panel(tracker, now_ms()), console=console, auto_refresh=False) as live:
        schedule_fast_watch(
            watch,
            refresh=lambda: live.update(fasting_panel(tracker, now_ms()), refresh=True),
            check_day_boundary=tracker.check_day_boundary,
            display_interval=intervals.display_interval_seconds,
            day_check_interval=intervals.day_check_interval_seconds,
        )
        try:
            watch.run_for(seconds)
        except KeyboardInterrupt:
            pass


# ============================================================================
# Export / Import Commands
# ============================================================================


@app.command("export")
def export_data(
    output: Optional[Path] = typer.Argument(
        None, help="Output file or directory (default: timestamped file here)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Export profile, logs and fasting data to one JSON file."""
    from wellflow.export.backup import write_export

    tracker = open_tracker()
    path = write_export(tracker.state, output)

    if json_output:
        output_json({
            "success": True,
            "command": "export",
            "data": {"path": str(path), "log_entries": len(tracker.state.logs),
                     "fasts": len(tracker.state.fasting_history)},
            "human_summary": f"Exported to {path}",
        })
    else:
        console.print(f"[green]Exported to[/green] {path}")


@app.command("import")
def import_data(
    input_path: Path = typer.Argument(..., help="File written by 'wellflow export'"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Import a backup, overwriting the records it contains."""
    from wellflow.export.backup import import_document, read_import

    if not input_path.exists():
        fail("import", f"File not found: {input_path}", json_output)

    try:
        document = read_import(input_path)
    except ValueError as exc:
        fail("import", f"Not a wellflow backup: {exc}", json_output)
        return

    tracker = open_tracker()
    imported, skipped = import_document(tracker.store, document)  # type: ignore[arg-type]
    tracker.reload()

    warnings = [f"Skipped invalid '{key}' record" for key in skipped]
    if json_output:
        output_json({
            "success": bool(imported) or not skipped,
            "command": "import",
            "data": {
                "imported": imported,
                "skipped": skipped,
                "log_entries": len(tracker.state.logs),
                "fasts": len(tracker.state.fasting_history),
            },
            "warnings": warnings,
            "human_summary": f"Imported {', '.join(imported) or 'nothing'}",
        })
    else:
        if imported:
            console.print(f"[green]Imported:[/green] {', '.join(imported)}")
        else:
            console.print("[yellow]Nothing imported[/yellow]")
        for warning in warnings:
            console.print(f"[yellow]{warning}[/yellow]")


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the active configuration."""
    settings = get_settings()
    if json_output:
        output_json({
            "success": True,
            "command": "config show",
            "data": settings.to_dict(),
            "human_summary": f"Database: {settings.database.path}",
        })
        return

    for section, values in settings.to_dict().items():
        console.print(f"[bold]{section}[/bold]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")


@config_app.command("init")
def config_init(
    path: Optional[Path] = typer.Option(None, "--path", help="Where to write config.yaml"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a config.yaml with the current settings."""
    from wellflow.config.settings import default_config_path

    target = path or default_config_path()
    if target.exists() and not force:
        console.print(f"[yellow]{target} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    get_settings().save(target)
    console.print(f"[green]Wrote[/green] {target}")


if __name__ == "__main__":
    app()
