"""
Progress statistics over the workout history.

Personal records, total tonnage, workout streaks and per-day trends.
All functions take the history in chronological order and are pure.
"""

from datetime import datetime
from typing import Sequence

from .config import DEFAULT_VOLUME_WEEKS, STREAK_MAX_GAP_DAYS
from .metrics import exercise_volume, session_avg_weight, session_volume
from .models import DayProgressPoint, PersonalRecord, WorkoutSession


def _parse(date_str: str) -> datetime:
    return datetime.strptime(date_str, "%Y-%m-%d")


def personal_records(history: Sequence[WorkoutSession]) -> dict[str, PersonalRecord]:
    """
    Heaviest weight logged per exercise.

    A later session only replaces the record when it is strictly heavier,
    so the first session to reach a weight keeps the record.

    Args:
        history: Sessions in chronological order

    Returns:
        {exercise_id: PersonalRecord}
    """
    records: dict[str, PersonalRecord] = {}
    for session in history:
        for result in session.exercises:
            current = records.get(result.exercise_id)
            if current is None or result.weight > current.weight:
                records[result.exercise_id] = PersonalRecord(
                    exercise_id=result.exercise_id,
                    weight=result.weight,
                    volume=exercise_volume(result),
                    date=session.date,
                )
    return records


def total_volume(history: Sequence[WorkoutSession]) -> float:
    """Tonnage across every logged session."""
    return sum(session_volume(s) for s in history)


def workout_streak(
    history: Sequence[WorkoutSession],
    max_gap_days: int = STREAK_MAX_GAP_DAYS,
) -> int:
    """
    Count sessions in the current training streak.

    Walks back from the most recent session; the streak continues while
    consecutive sessions are at most ``max_gap_days`` apart.

    Args:
        history: Logged sessions (any order)
        max_gap_days: Largest gap that keeps the streak alive

    Returns:
        Number of sessions in the streak (0 for an empty history)
    """
    if not history:
        return 0

    dates = sorted((_parse(s.date) for s in history), reverse=True)
    streak = 1
    current = dates[0]
    for prev in dates[1:]:
        if (current - prev).days <= max_gap_days:
            streak += 1
            current = prev
        else:
            break
    return streak


def day_progress(
    history: Sequence[WorkoutSession],
    day_id: str,
) -> list[DayProgressPoint]:
    """Total volume and average working weight for each session of a day."""
    return [
        DayProgressPoint(
            date=s.date,
            total_volume=session_volume(s),
            avg_weight=session_avg_weight(s),
        )
        for s in history
        if s.day_id == day_id
    ]


def weekly_volume(
    history: Sequence[WorkoutSession],
    weeks: int = DEFAULT_VOLUME_WEEKS,
) -> list[float]:
    """
    Tonnage per week, counted back from the latest session.

    Args:
        history: Sessions in chronological order
        weeks: Number of weeks to report

    Returns:
        List of length ``weeks``; index 0 is the oldest week, the last index
        is the week of the latest session
    """
    totals = [0.0] * weeks
    if not history or weeks <= 0:
        return totals

    latest = max(_parse(s.date) for s in history)
    for session in history:
        weeks_ago = (latest - _parse(session.date)).days // 7
        if weeks_ago < weeks:
            totals[weeks - 1 - weeks_ago] += session_volume(session)
    return totals
