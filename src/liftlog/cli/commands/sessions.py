"""Session commands: start, log-session, show-history, delete-record, and helpers."""

import json
from datetime import datetime
from typing import Annotated, Optional

import typer

from ...core.planner import PrefilledExercise, finish_workout, prefill_day
from ...core.units import format_weight
from ...io.serializers import (
    ValidationError,
    parse_entry,
    parse_reps_string,
    session_to_dict,
    validate_date,
)
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_settings, get_store

EngineOption = Annotated[
    Optional[str],
    typer.Option("--engine", "-e", help="Override the configured engine: epley | threshold"),
]


def _interactive_entries(
    prefilled: list[PrefilledExercise],
    unit: str,
) -> dict[str, tuple[float, list[int]]]:
    """
    Prompt for weight and reps of each exercise of the day.

    An empty weight accepts the suggestion; an empty reps line skips the
    exercise.  Reps accept ``10,8,7`` or compact ``8x3`` (8 reps x 3 sets).
    """
    views.console.print()
    views.console.print("[bold]Enter weight and reps for each exercise.[/bold]")
    views.console.print(
        "  Reps: [green]10,8,7[/green] or [green]8x3[/green] (8 reps x 3 sets)."
        "  Leave reps empty to skip the exercise.\n"
    )

    entries: dict[str, tuple[float, list[int]]] = {}
    for p in prefilled:
        ex = p.exercise
        views.console.print(f"[cyan]{ex.name}[/cyan]  {ex.sets} x {ex.target_reps}")

        hint = f" [{format_weight(p.suggested_weight, unit)}]" if p.suggested_weight is not None else ""
        while True:
            raw = views.console.input(f"  Weight{hint}: ").strip()
            if not raw and p.suggested_weight is not None:
                weight = p.suggested_weight
                break
            try:
                weight = float(raw)
                if weight < 0:
                    raise ValueError
                break
            except ValueError:
                views.print_error("Enter a non-negative number, e.g. 82.5")

        while True:
            raw = views.console.input("  Reps: ").strip()
            if not raw:
                reps = None
                break
            try:
                reps = parse_reps_string(raw)
                break
            except ValidationError as e:
                views.print_error(str(e))

        if reps is not None:
            entries[ex.exercise_id] = (weight, reps)

    return entries


@app.command()
def start(
    day_id: Annotated[str, typer.Argument(help="Routine day id to train")],
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the suggested weights for a routine day before training.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        history = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    day = profile.find_day(day_id)
    if day is None:
        views.print_error(f"Unknown day '{day_id}'")
        raise typer.Exit(1)

    prefilled = prefill_day(day, history)

    if json_out:
        print(json.dumps({
            "day_id": day.day_id,
            "name": day.name,
            "unit": profile.unit_preference,
            "exercises": [
                {
                    "exercise_id": p.exercise.exercise_id,
                    "name": p.exercise.name,
                    "sets": p.exercise.sets,
                    "target_reps": p.exercise.target_reps,
                    "suggested_weight": p.suggested_weight,
                }
                for p in prefilled
            ],
        }, indent=2))
        return

    if not day.exercises:
        views.print_info(f"'{day.name}' has no exercises. Add some with 'add-exercise'.")
        return
    views.print_prefill(day.name, prefilled, profile.unit_preference)


@app.command("log-session")
def log_session(
    day_id: Annotated[str, typer.Option("--day", "-d", help="Routine day id performed")],
    date: Annotated[
        Optional[str],
        typer.Option("--date", help="Session date (YYYY-MM-DD, default: today)"),
    ] = None,
    entry: Annotated[
        Optional[list[str]],
        typer.Option(
            "--entry",
            "-x",
            help="Logged exercise: <exercise_id>=<weight>:<reps>, e.g. bench_press=80:10,8,7",
        ),
    ] = None,
    notes: Annotated[
        Optional[str],
        typer.Option("--notes", "-n", help="Session notes"),
    ] = None,
    engine: EngineOption = None,
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Log a completed workout and store next-session recommendations.

    Run without --entry for interactive entry, or give one --entry per
    exercise for one-liner use:

      liftlog log-session --day push_a --entry bench_press=80:10,8,7 \\
        --entry ohp=40:8x3
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        history = store.load_history()
        settings = get_settings(engine)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    day = profile.find_day(day_id)
    if day is None:
        views.print_error(f"Unknown day '{day_id}'")
        raise typer.Exit(1)

    try:
        date = validate_date(date or datetime.now().strftime("%Y-%m-%d"))
    except ValidationError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    # Only sessions before this one count towards suggestions and streaks
    earlier = [s for s in history if s.date < date]

    if entry:
        entries: dict[str, tuple[float, list[int]]] = {}
        try:
            for raw in entry:
                exercise_id, weight, reps = parse_entry(raw)
                entries[exercise_id] = (weight, reps)
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
    else:
        entries = _interactive_entries(prefill_day(day, earlier), profile.unit_preference)

    if not entries:
        views.print_error("Nothing to log.")
        raise typer.Exit(1)

    try:
        session = finish_workout(
            day,
            entries,
            earlier,
            settings=settings,
            date=date,
            notes=notes,
            unit=profile.unit_preference,
        )
        replaced = store.append_session(session)
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        out = session_to_dict(session)
        out["replaced"] = replaced
        out["unit"] = profile.unit_preference
        print(json.dumps(out, indent=2))
        return

    views.console.print()
    if replaced:
        views.print_warning(f"Replaced the existing {day.name} session on {date}")
    views.print_success(f"Logged {day.name} for {date}")
    views.console.print(views.format_results_table(session.exercises, profile))


@app.command("show-history")
def show_history(
    history_path: HistoryPathOption = None,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Limit number of sessions to show"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Display workout history as a table.
    """
    if limit is not None and limit < 1:
        views.print_error("--limit must be at least 1")
        raise typer.Exit(1)

    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if limit is not None:
        sessions = sessions[-limit:]

    if json_out:
        print(json.dumps([session_to_dict(s) for s in sessions], indent=2))
        return

    views.print_history(sessions, profile)


@app.command("delete-record")
def delete_record(
    record_id: Annotated[
        int,
        typer.Argument(help="Session ID to delete (see # column in show-history)"),
    ],
    history_path: HistoryPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """
    Remove a session by its ID.

    Use 'show-history' to see session IDs in the # column.
    """
    store = get_store(history_path)

    try:
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if not sessions:
        views.print_error("No sessions in history.")
        raise typer.Exit(1)

    if record_id < 1 or record_id > len(sessions):
        views.print_error(f"Record ID must be between 1 and {len(sessions)}")
        raise typer.Exit(1)

    target = sessions[record_id - 1]
    views.console.print(f"Session to delete: [bold]{target.date}[/bold] ({target.day_id})")

    if not force and not views.confirm_action("Delete this session?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)

    try:
        store.delete_session_at(record_id - 1)
    except (IndexError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    views.print_success(f"Deleted session #{record_id}: {target.date} ({target.day_id})")
