"""Shared Typer app object, shared option types, and store/settings utilities."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.engine.config_loader import load_engine_settings
from ..core.models import EngineSettings
from ..io.history_store import HistoryStore, get_default_history_path

# Shared --history-path option type used across all commands
HistoryPathOption = Annotated[
    Optional[Path],
    typer.Option("--history-path", "-p", help="Path to history JSONL file"),
]

# Shared --json option type
JsonOption = Annotated[
    bool,
    typer.Option("--json", "-j", help="Output as JSON for machine processing"),
]

app = typer.Typer(
    name="liftlog",
    help="Workout log with progressive-overload weight recommendations.",
    no_args_is_help=True,
)


def get_store(history_path: Path | None) -> HistoryStore:
    """Get history store from path or default location."""
    if history_path is None:
        history_path = get_default_history_path()
    return HistoryStore(history_path)


def get_settings(engine: str | None = None) -> EngineSettings:
    """Load engine settings, optionally overriding the engine name."""
    settings = load_engine_settings()
    if engine is None:
        return settings
    return EngineSettings(
        engine=engine,
        params=settings.params,
        failure_policy=settings.failure_policy,
    )
