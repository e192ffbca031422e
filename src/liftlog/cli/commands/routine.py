"""Routine management commands: init, add-day, add-exercise, remove-exercise, show-routine, switch-unit."""

import json
from typing import Annotated, Optional

import typer

from ...core.models import ExerciseConfig, RoutineDay, UserProfile
from ...core.units import convert_routine, convert_session
from ...io.serializers import ValidationError, routine_day_to_dict, slugify
from .. import views
from ..app import HistoryPathOption, JsonOption, app, get_store


@app.command()
def init(
    history_path: HistoryPathOption = None,
    unit: Annotated[
        str,
        typer.Option("--unit", "-u", help="Weight unit for everything you log: kg | lbs"),
    ] = "kg",
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Your name (optional)"),
    ] = None,
    bodyweight_kg: Annotated[
        Optional[float],
        typer.Option("--bodyweight-kg", "-w", help="Current bodyweight in kg (optional)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Reset the profile even if one exists"),
    ] = False,
) -> None:
    """
    Create the profile and an empty history file.

    Re-running init keeps the existing routine and history unless --force
    is given, in which case the routine is reset (history is kept).
    """
    store = get_store(history_path)

    try:
        profile = UserProfile(unit_preference=unit, name=name, bodyweight_kg=bodyweight_kg)  # type: ignore[arg-type]
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    existing = store.load_profile()
    if existing is not None and not force:
        views.print_info(f"Profile already exists: {store.profile_path}")
        views.print_info("Use --force to reset the routine, or 'switch-unit' to change units.")
        store.init()
        return

    store.init()
    if existing is not None and existing.unit_preference != profile.unit_preference:
        # Kept history must stay in the profile's unit
        try:
            sessions = store.load_history()
        except ValidationError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        store.replace_history([
            convert_session(session, existing.unit_preference, profile.unit_preference)
            for session in sessions
        ])
        views.print_info(
            f"Converted {len(sessions)} session(s) to {profile.unit_preference}"
        )

    store.save_profile(profile)
    views.print_success(f"Initialized profile at {store.profile_path}")
    views.print_info(f"History file: {store.history_path}")


@app.command("add-day")
def add_day(
    name: Annotated[str, typer.Argument(help="Day name, e.g. 'Push A'")],
    day_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Day id (default: derived from name)"),
    ] = None,
    history_path: HistoryPathOption = None,
) -> None:
    """
    Add a training day to the weekly routine.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        new_id = day_id or slugify(name)
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if profile.find_day(new_id) is not None:
        views.print_error(f"Day '{new_id}' already exists")
        raise typer.Exit(1)

    profile.routine.append(RoutineDay(day_id=new_id, name=name))
    store.save_profile(profile)
    views.print_success(f"Added day '{name}' ({new_id})")


@app.command("add-exercise")
def add_exercise(
    day_id: Annotated[str, typer.Option("--day", "-d", help="Day id to add the exercise to")],
    name: Annotated[str, typer.Option("--name", "-n", help="Exercise name, e.g. 'Bench Press'")],
    target_reps: Annotated[
        int,
        typer.Option("--target-reps", "-r", help="Prescribed reps per set"),
    ] = 8,
    sets: Annotated[
        int,
        typer.Option("--sets", "-s", help="Number of sets"),
    ] = 3,
    increment: Annotated[
        float,
        typer.Option("--increment", "-i", help="Fixed weight step (threshold engine)"),
    ] = 2.5,
    rounding: Annotated[
        Optional[float],
        typer.Option("--rounding", help="Round recommendations to this step (e.g. 5 for a stack)"),
    ] = None,
    exercise_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Exercise id (default: derived from name)"),
    ] = None,
    history_path: HistoryPathOption = None,
) -> None:
    """
    Add an exercise to a routine day.

      liftlog add-exercise --day push_a --name "Bench Press" -r 8 -s 3
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        ex = ExerciseConfig(
            exercise_id=exercise_id or slugify(name),
            name=name,
            target_reps=target_reps,
            sets=sets,
            increment=increment,
            rounding_increment=rounding,
        )
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    day = profile.find_day(day_id)
    if day is None:
        views.print_error(f"Unknown day '{day_id}'. Add it with 'add-day' first.")
        raise typer.Exit(1)
    if day.find_exercise(ex.exercise_id) is not None:
        views.print_error(f"Exercise '{ex.exercise_id}' is already in '{day.name}'")
        raise typer.Exit(1)

    day.exercises.append(ex)
    store.save_profile(profile)
    views.print_success(
        f"Added {ex.name} ({ex.exercise_id}): {ex.sets} x {ex.target_reps} to '{day.name}'"
    )


@app.command("remove-exercise")
def remove_exercise(
    exercise_id: Annotated[str, typer.Argument(help="Exercise id to remove")],
    day_id: Annotated[
        Optional[str],
        typer.Option("--day", "-d", help="Only remove from this day"),
    ] = None,
    history_path: HistoryPathOption = None,
) -> None:
    """
    Remove an exercise from the routine.  Logged history is kept.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
    except FileNotFoundError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    removed = 0
    for day in profile.routine:
        if day_id is not None and day.day_id != day_id:
            continue
        before = len(day.exercises)
        day.exercises = [ex for ex in day.exercises if ex.exercise_id != exercise_id]
        removed += before - len(day.exercises)

    if not removed:
        views.print_error(f"Exercise '{exercise_id}' not found in routine")
        raise typer.Exit(1)

    store.save_profile(profile)
    views.print_success(f"Removed '{exercise_id}' from {removed} day(s)")


@app.command("show-routine")
def show_routine(
    history_path: HistoryPathOption = None,
    json_out: JsonOption = False,
) -> None:
    """
    Show the weekly routine.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
    except FileNotFoundError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if json_out:
        print(json.dumps({
            "unit": profile.unit_preference,
            "routine": [routine_day_to_dict(d) for d in profile.routine],
        }, indent=2))
        return

    views.print_routine(profile)


@app.command("switch-unit")
def switch_unit(
    unit: Annotated[str, typer.Argument(help="New unit: kg | lbs")],
    history_path: HistoryPathOption = None,
) -> None:
    """
    Convert the routine and every logged weight to another unit.
    """
    store = get_store(history_path)
    try:
        profile = store.require_profile()
        sessions = store.load_history()
        converted_profile = UserProfile(
            routine=convert_routine(profile.routine, profile.unit_preference, unit),
            unit_preference=unit,  # type: ignore[arg-type]
            name=profile.name,
            bodyweight_kg=profile.bodyweight_kg,
        )
        converted = [convert_session(s, profile.unit_preference, unit) for s in sessions]
    except (FileNotFoundError, ValidationError, ValueError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    if unit == profile.unit_preference:
        views.print_info(f"Already using {unit}.")
        return

    store.replace_history(converted)
    store.save_profile(converted_profile)
    views.print_success(
        f"Converted {len(converted)} session(s) from {profile.unit_preference} to {unit}"
    )
