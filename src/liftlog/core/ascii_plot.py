"""
ASCII plotting for working-weight progress.

Creates terminal-friendly plots showing training progress over time.
"""

from datetime import datetime
from typing import Sequence

from .models import ExerciseHistoryEntry, WorkoutSession
from .progress import weekly_volume


def create_weight_plot(
    entries: Sequence[ExerciseHistoryEntry],
    width: int = 60,
    height: int = 20,
    exercise_name: str = "Exercise",
    unit: str = "kg",
    show_recommendations: bool = True,
) -> str:
    """
    Create an ASCII plot of working weight over time for one exercise.

    Args:
        entries: Chronological exercise history (weights in display unit)
        width: Plot width in characters
        height: Plot height in lines
        exercise_name: Display name shown in chart title
        unit: Unit label for the title
        show_recommendations: Also mark each session's next_weight as ·

    Returns:
        ASCII art string
    """
    if not entries:
        return "No sessions logged for this exercise yet."

    points: list[tuple[datetime, float]] = sorted(
        (datetime.strptime(e.date, "%Y-%m-%d"), e.result.weight) for e in entries
    )
    recs: list[tuple[datetime, float]] = (
        sorted((datetime.strptime(e.date, "%Y-%m-%d"), e.result.next_weight) for e in entries)
        if show_recommendations
        else []
    )

    min_date = points[0][0]
    max_date = points[-1][0]
    date_range = (max_date - min_date).days or 1

    values = [w for _, w in points] + [w for _, w in recs]
    y_min = max(0.0, min(values) - 2.5)
    y_max = max(values) + 2.5
    y_range = (y_max - y_min) or 1.0

    plot_width = width - 8  # Leave room for y-axis labels
    plot_height = height - 3  # Leave room for x-axis and title

    grid = [[" " for _ in range(plot_width)] for _ in range(plot_height)]

    def _grid_pos(date: datetime, value: float) -> tuple[int, int]:
        x = int(((date - min_date).days / date_range) * (plot_width - 1))
        y = int(((value - y_min) / y_range) * (plot_height - 1))
        return x, plot_height - 1 - y  # Flip y-axis

    plot_points: list[tuple[int, int, float]] = []
    for date, weight in points:
        x, y = _grid_pos(date, weight)
        plot_points.append((x, y, weight))

    for date, weight in recs:
        x, y = _grid_pos(date, weight)
        if 0 <= x < plot_width and 0 <= y < plot_height and grid[y][x] == " ":
            grid[y][x] = "·"

    # Draw connecting lines (staircase style: ╭─╯)
    for i in range(len(plot_points) - 1):
        col1, row1, _ = plot_points[i]
        col2, row2, _ = plot_points[i + 1]

        def _p(x: int, r: int, ch: str) -> None:
            if 0 <= x < plot_width and 0 <= r < plot_height and grid[r][x] in (" ", "·"):
                grid[r][x] = ch

        n_rows = abs(row2 - row1)
        if n_rows == 0:
            for x in range(col1 + 1, col2):
                _p(x, row1, "─")
            continue

        if col1 == col2:
            for r in range(min(row1, row2) + 1, max(row1, row2)):
                _p(col1, r, "│")
            continue

        row_dir = -1 if row2 < row1 else 1  # -1 = going up (heavier)
        up = row_dir == -1
        corner_exit = "╯" if up else "╮"
        corner_entry = "╭" if up else "╰"

        n_segs = n_rows + 1
        for step in range(n_segs):
            row = row1 + row_dir * step
            pivot_in = col1 + (col2 - col1) * step // n_segs
            pivot_out = col1 + (col2 - col1) * (step + 1) // n_segs

            if step == 0:
                for x in range(col1 + 1, pivot_out):
                    _p(x, row, "─")
                _p(pivot_out, row, corner_exit)
            elif step == n_segs - 1:
                _p(pivot_in, row, corner_entry)
                for x in range(pivot_in + 1, col2):
                    _p(x, row, "─")
            else:
                _p(pivot_in, row, corner_entry)
                for x in range(pivot_in + 1, pivot_out):
                    _p(x, row, "─")
                _p(pivot_out, row, corner_exit)

    for x, y, _ in plot_points:
        if 0 <= x < plot_width and 0 <= y < plot_height:
            grid[y][x] = "●"

    lines = [f"Working Weight ({exercise_name}, {unit})", "─" * width]

    for i, row in enumerate(grid):
        y_val = y_max - (i / (plot_height - 1)) * y_range if plot_height > 1 else y_max
        label = f"{y_val:6.1f} ┤"
        row_list = list(row)

        # Weight labels next to data points, flipped left near the right edge
        for x, py, weight in plot_points:
            if py != i:
                continue
            text = f"({weight:g})"
            pos = x + 2 if x + 2 + len(text) < plot_width else x - len(text) - 1
            if pos < 0:
                continue
            for j, c in enumerate(text):
                if pos + j < len(row_list) and row_list[pos + j] != "●":
                    row_list[pos + j] = c

        lines.append(label + "".join(row_list))

    lines.append("─" * width)

    label_line = [" "] * plot_width
    mid_date = min_date + (max_date - min_date) / 2
    for x_pos, date in ((0, min_date), (plot_width // 2, mid_date), (plot_width - 7, max_date)):
        for i, c in enumerate(date.strftime("%b %d")):
            if 0 <= x_pos + i < plot_width:
                label_line[x_pos + i] = c
    lines.append(" " * 8 + "".join(label_line))

    if show_recommendations:
        lines.append("● weight used   · recommended next")

    return "\n".join(lines)


def create_simple_bar_chart(
    labels: list[str],
    values: list[float],
    width: int = 40,
    title: str = "",
) -> str:
    """
    Create a simple horizontal bar chart.

    Args:
        labels: Labels for each bar
        values: Values for each bar
        width: Maximum bar width
        title: Chart title

    Returns:
        ASCII bar chart string
    """
    if not values:
        return "No data to display."

    max_val = max(values)
    max_label_len = max(len(l) for l in labels) if labels else 0

    lines = []

    if title:
        lines.append(title)
        lines.append("─" * (max_label_len + width + 5))

    for label, value in zip(labels, values):
        bar_len = int((value / max_val) * width) if max_val > 0 else 0
        bar = "█" * bar_len
        lines.append(f"{label:>{max_label_len}} │{bar} {value:.1f}")

    return "\n".join(lines)


def create_weekly_volume_chart(
    history: Sequence[WorkoutSession],
    weeks: int = 4,
    unit: str = "kg",
) -> str:
    """
    Create a chart showing weekly tonnage (weight x reps).

    Args:
        history: Training history
        weeks: Number of weeks to show
        unit: Unit label for the title

    Returns:
        ASCII chart string
    """
    if not history:
        return "No training history."

    values = weekly_volume(history, weeks)

    labels = []
    for i in range(weeks - 1, -1, -1):
        if i == 0:
            labels.append("This week")
        elif i == 1:
            labels.append("Last week")
        else:
            labels.append(f"{i} weeks ago")

    return create_simple_bar_chart(labels, values, title=f"Weekly Volume ({unit} x reps)")
