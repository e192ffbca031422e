"""Analysis commands: recommend, records, status, plot, volume."""

import json
from typing import Annotated, Optional

import typer
from rich.table import Table

from ...core.adaptation import apply_failure_policy, failure_streak
from ...core.ascii_plot import create_weekly_volume_chart, create_weight_plot
from ...core.config import DEFAULT_VOLUME_WEEKS, ENGINE_NAMES
from ...core.metrics import estimate_1rm
from ...core.overload import performance_factor, run_engine
from ...core.planner import exercise_history, suggested_weight
from ...core.progress import (
    day_progress,
    personal_records,
    total_volume,
    weekly_volume,
    workout_streak,
)
from ...core.units import format_weight
from ...io.serializers import ValidationError, parse_reps_string
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_settings, get_store


@app.command()
def recommend(
    weight: Annotated[float, typer.Option("--weight", "-w", help="Weight used this session")],
    reps: Annotated[
        str,
        typer.Option("--reps", "-r", help="Reps per set, top set first: 10,8,7 or 8x3"),
    ],
    target_reps: Annotated[
        int,
        typer.Option("--target-reps", "-t", help="Prescribed reps per set"),
    ],
    rounding: Annotated[
        Optional[float],
        typer.Option("--rounding", help="Rounding increment (default from config)"),
    ] = None,
    increment: Annotated[
        float,
        typer.Option("--increment", "-i", help="Fixed step for the threshold engine"),
    ] = 2.5,
    previous_failures: Annotated[
        int,
        typer.Option("--previous-failures", "-f", help="Failed sessions in a row before this one"),
    ] = 0,
    engine: Annotated[
        Optional[str],
        typer.Option("--engine", "-e", help=f"Engine: {' | '.join(ENGINE_NAMES)}"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    One-off recommendation without touching the history.

      liftlog recommend --weight 80 --reps 12,11,10 --target-reps 10
    """
    try:
        settings = get_settings(engine)
        reps_performed = parse_reps_string(reps)
        inp = settings.params.input_for(
            current_weight=weight,
            reps_performed=reps_performed,
            target_reps=target_reps,
            rounding_increment=rounding,
        )
        output = run_engine(
            settings.engine,
            inp,
            increment=increment,
            previous_failures=previous_failures,
            policy=settings.failure_policy,
        )
        output = apply_failure_policy(inp, output, previous_failures, settings.failure_policy)
    except (ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    pf = performance_factor(inp) if reps_performed else 0.0
    one_rm = estimate_1rm(weight, reps_performed[0]) if reps_performed else weight

    if json_out:
        print(json.dumps({
            "engine": settings.engine,
            "current_weight": weight,
            "reps_performed": list(reps_performed),
            "target_reps": target_reps,
            "performance_factor": round(pf, 4),
            "estimated_1rm": round(one_rm, 2),
            "next_weight": output.next_weight,
            "decision": output.decision,
        }, indent=2))
        return

    views.console.print()
    views.console.print(f"  Engine:        {settings.engine}")
    views.console.print(f"  Performance:   {pf:+.3f}")
    views.console.print(f"  Estimated 1RM: {one_rm:.1f}")
    views.console.print(
        f"  Next weight:   [bold]{output.next_weight:g}[/bold]  {views.format_decision(output.decision)}"
    )
    views.console.print()


@app.command()
def records(
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the heaviest weight logged for each exercise.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    prs = personal_records(sessions)

    if json_out:
        print(json.dumps({
            "unit": profile.unit_preference,
            "records": [
                {
                    "exercise_id": r.exercise_id,
                    "weight": r.weight,
                    "volume": r.volume,
                    "date": r.date,
                }
                for r in sorted(prs.values(), key=lambda r: r.exercise_id)
            ],
        }, indent=2))
        return

    views.print_records(prs, profile)


@app.command()
def status(
    history_path: HistoryPathOption = None,
    day_id: Annotated[
        Optional[str],
        typer.Option("--day", "-d", help="Also show per-session progress of this day"),
    ] = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the training streak, total volume and where each exercise stands.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
        settings = get_settings()
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if day_id is not None and profile.find_day(day_id) is None:
        views.print_error(f"Unknown day '{day_id}'")
        raise typer.Exit(1)

    unit = profile.unit_preference
    exercises = []
    for ex in profile.all_exercises():
        entries = exercise_history(sessions, ex.exercise_id)
        last = entries[-1] if entries else None
        exercises.append({
            "exercise_id": ex.exercise_id,
            "name": ex.name,
            "last_date": last.date if last else None,
            "last_weight": last.result.weight if last else None,
            "last_decision": last.result.decision if last else None,
            "next_weight": suggested_weight(sessions, ex.exercise_id),
            "failure_streak": failure_streak(
                [e.result for e in entries], ex.target_reps, settings.failure_policy
            ),
        })

    progress = day_progress(sessions, day_id) if day_id is not None else []

    if json_out:
        out = {
            "unit": unit,
            "engine": settings.engine,
            "sessions": len(sessions),
            "streak": workout_streak(sessions),
            "total_volume": round(total_volume(sessions), 1),
            "exercises": exercises,
        }
        if day_id is not None:
            out["day_progress"] = [
                {
                    "date": p.date,
                    "total_volume": round(p.total_volume, 1),
                    "avg_weight": round(p.avg_weight, 2),
                }
                for p in progress
            ]
        print(json.dumps(out, indent=2))
        return

    views.console.print()
    views.console.print(f"  Sessions logged: {len(sessions)}")
    views.console.print(f"  Current streak:  {workout_streak(sessions)} session(s)")
    views.console.print(f"  Total volume:    {total_volume(sessions):,.0f} {unit} x reps")
    views.console.print(f"  Engine:          {settings.engine}")
    views.console.print()

    if exercises:
        table = Table(title="Exercises")
        table.add_column("Exercise", style="cyan")
        table.add_column("Last", justify="right")
        table.add_column("Next", justify="right")
        table.add_column("Decision")
        table.add_column("Fails", justify="right")
        for row in exercises:
            table.add_row(
                row["name"],
                format_weight(row["last_weight"], unit) if row["last_weight"] is not None else "—",
                format_weight(row["next_weight"], unit) if row["next_weight"] is not None else "—",
                views.format_decision(row["last_decision"]) if row["last_decision"] else "",
                str(row["failure_streak"]),
            )
        views.console.print(table)

    if day_id is not None:
        table = Table(title=f"Progress: {day_id}")
        table.add_column("Date", style="cyan")
        table.add_column("Volume", justify="right")
        table.add_column("Avg weight", justify="right")
        for p in progress:
            table.add_row(p.date, f"{p.total_volume:,.0f}", format_weight(p.avg_weight, unit))
        views.console.print(table)


@app.command()
def plot(
    exercise_id: Annotated[str, typer.Option("--exercise", "-e", help="Exercise id to plot")],
    history_path: HistoryPathOption = None,
    no_recommendations: Annotated[
        bool,
        typer.Option("--no-recommendations", help="Hide the recommended next weights"),
    ] = False,
    json_out: JsonOption = False,
) -> None:
    """
    ASCII chart of an exercise's working weight over time.

    ● marks the weight used, · the weight recommended for the next session.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    entries = exercise_history(sessions, exercise_id)
    ex = profile.find_exercise(exercise_id)
    name = ex.name if ex is not None else exercise_id

    if json_out:
        print(json.dumps({
            "exercise_id": exercise_id,
            "unit": profile.unit_preference,
            "points": [
                {
                    "date": e.date,
                    "weight": e.result.weight,
                    "next_weight": e.result.next_weight,
                    "decision": e.result.decision,
                }
                for e in entries
            ],
        }, indent=2))
        return

    views.console.print(
        create_weight_plot(
            entries,
            exercise_name=name,
            unit=profile.unit_preference,
            show_recommendations=not no_recommendations,
        ),
        markup=False,
        highlight=False,
    )


@app.command()
def volume(
    history_path: HistoryPathOption = None,
    weeks: Annotated[
        int,
        typer.Option("--weeks", "-w", help="Number of weeks to show"),
    ] = DEFAULT_VOLUME_WEEKS,
    json_out: JsonOption = False,
) -> None:
    """
    Show weekly volume chart.
    """
    if weeks < 1:
        views.print_error("--weeks must be at least 1")
        raise typer.Exit(1)

    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        values = weekly_volume(sessions, weeks)
        result = []
        for i, value in zip(range(weeks - 1, -1, -1), values):
            label = "This week" if i == 0 else ("Last week" if i == 1 else f"{i} weeks ago")
            result.append({"label": label, "volume": round(value, 1)})
        print(json.dumps({"unit": profile.unit_preference, "weeks": result}, indent=2))
        return

    views.console.print(
        create_weekly_volume_chart(sessions, weeks, unit=profile.unit_preference),
        markup=False,
        highlight=False,
    )
