"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of routines, sessions and progress.
"""

from typing import Sequence

from rich.console import Console
from rich.table import Table

from ..core.models import ExerciseResult, PersonalRecord, UserProfile, WorkoutSession
from ..core.planner import PrefilledExercise
from ..core.units import format_weight

console = Console()

_DECISION_STYLE = {
    "increase": "[green]▲ increase[/green]",
    "maintain": "[yellow]= maintain[/yellow]",
    "deload": "[red]▼ deload[/red]",
}


def format_decision(decision: str) -> str:
    """Colored label for a decision."""
    return _DECISION_STYLE.get(decision, decision)


def _fmt_sets(sets: Sequence[int]) -> str:
    return ", ".join(str(r) for r in sets) if sets else "—"


def print_routine(profile: UserProfile) -> None:
    """Print every routine day and its exercises."""
    if not profile.routine:
        print_info("Routine is empty. Add a day with 'add-day'.")
        return

    for day in profile.routine:
        table = Table(title=f"{day.name} [dim]({day.day_id})[/dim]", title_justify="left")
        table.add_column("Exercise ID", style="cyan")
        table.add_column("Name")
        table.add_column("Sets", justify="right")
        table.add_column("Target reps", justify="right")
        table.add_column("Increment", justify="right")
        table.add_column("Rounding", justify="right")
        for ex in day.exercises:
            table.add_row(
                ex.exercise_id,
                ex.name,
                str(ex.sets),
                str(ex.target_reps),
                format_weight(ex.increment, profile.unit_preference),
                f"{ex.rounding_increment:g}" if ex.rounding_increment else "default",
            )
        if not day.exercises:
            table.add_row("—", "[dim]no exercises[/dim]", "", "", "", "")
        console.print(table)


def print_prefill(day_name: str, prefilled: list[PrefilledExercise], unit: str) -> None:
    """Print suggested weights for the start of a workout."""
    table = Table(title=f"Today: {day_name}", title_justify="left")
    table.add_column("Exercise", style="cyan")
    table.add_column("Sets x reps", justify="right")
    table.add_column("Suggested weight", justify="right")
    for p in prefilled:
        suggestion = (
            format_weight(p.suggested_weight, unit)
            if p.suggested_weight is not None
            else "[dim]choose a start weight[/dim]"
        )
        table.add_row(p.exercise.name, f"{p.exercise.sets} x {p.exercise.target_reps}", suggestion)
    console.print(table)


def format_results_table(results: Sequence[ExerciseResult], profile: UserProfile) -> Table:
    """Table of per-exercise results with recommendations."""
    table = Table()
    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Reps")
    table.add_column("Next", justify="right")
    table.add_column("Decision")

    unit = profile.unit_preference
    for r in results:
        ex = profile.find_exercise(r.exercise_id)
        table.add_row(
            ex.name if ex is not None else r.exercise_id,
            format_weight(r.weight, unit),
            _fmt_sets(r.sets),
            format_weight(r.next_weight, unit),
            format_decision(r.decision),
        )
    return table


def format_session_table(sessions: Sequence[WorkoutSession], profile: UserProfile) -> Table:
    """
    Format sessions as a Rich table.

    Args:
        sessions: Sessions to display, chronological
        profile: Profile used for names and units

    Returns:
        Rich Table object
    """
    table = Table(title="Workout History")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Day")
    table.add_column("Exercise")
    table.add_column("Weight", justify="right")
    table.add_column("Reps")
    table.add_column("Next", justify="right")
    table.add_column("Decision")

    unit = profile.unit_preference
    for i, session in enumerate(sessions, 1):
        day = profile.find_day(session.day_id)
        day_name = day.name if day is not None else session.day_id
        if not session.exercises:
            table.add_row(str(i), session.date, day_name, "—", "", "", "", "")
            continue
        for j, r in enumerate(session.exercises):
            ex = profile.find_exercise(r.exercise_id)
            table.add_row(
                str(i) if j == 0 else "",
                session.date if j == 0 else "",
                day_name if j == 0 else "",
                ex.name if ex is not None else r.exercise_id,
                format_weight(r.weight, unit),
                _fmt_sets(r.sets),
                format_weight(r.next_weight, unit),
                format_decision(r.decision),
            )

    return table


def print_history(sessions: Sequence[WorkoutSession], profile: UserProfile) -> None:
    """Print session history table."""
    if not sessions:
        print_info("No sessions logged yet.")
        return
    console.print(format_session_table(sessions, profile))


def print_records(records: dict[str, PersonalRecord], profile: UserProfile) -> None:
    """Print personal records table."""
    if not records:
        print_info("No personal records yet.")
        return

    table = Table(title="Personal Records")
    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Volume", justify="right")
    table.add_column("Date")
    for rec in sorted(records.values(), key=lambda r: r.exercise_id):
        ex = profile.find_exercise(rec.exercise_id)
        table.add_row(
            ex.name if ex is not None else rec.exercise_id,
            format_weight(rec.weight, profile.unit_preference),
            f"{rec.volume:.0f}",
            rec.date,
        )
    console.print(table)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} [y/N]: ")
    return response.lower() in ("y", "yes")
