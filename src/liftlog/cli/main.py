"""
CLI entry point using Typer.

Provides commands for routine and workout management:
- init / switch-unit: Create the profile, change the weight unit
- add-day / add-exercise / remove-exercise / show-routine: Edit the routine
- start / log-session: Suggested weights before, recommendations after
- show-history / delete-record: Browse and fix the log
- recommend: One-off engine call
- records / status / plot / volume: Progress views
"""

from .app import app
from .commands import analysis, routine, sessions  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
