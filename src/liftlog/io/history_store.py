"""
JSONL-based history storage for workout sessions.

Handles reading, writing, and managing the history file and the profile
(routine + preferences) stored next to it.
"""

import json
import os
from pathlib import Path

from ..core.models import UserProfile, WorkoutSession
from .serializers import (
    ValidationError,
    dict_to_user_profile,
    json_line_to_session,
    session_to_json_line,
    user_profile_to_dict,
)


class HistoryStore:
    """
    Manages workout history stored in JSONL format.

    The history file contains one JSON object per line, one per session.
    A separate profile.json file stores the routine and preferences.
    """

    def __init__(self, history_path: str | Path):
        """
        Initialize the history store.

        Args:
            history_path: Path to the JSONL history file
        """
        self.history_path = Path(history_path)
        self.profile_path = self.history_path.parent / "profile.json"

    def exists(self) -> bool:
        """Check if the history file exists."""
        return self.history_path.exists()

    def init(self) -> None:
        """
        Initialize empty history file if it doesn't exist.

        Creates parent directories if needed.
        """
        self.history_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.history_path.exists():
            self.history_path.touch()

    def load_profile(self) -> UserProfile | None:
        """
        Load user profile from profile.json.

        Returns:
            UserProfile if file exists and is valid, None otherwise
        """
        if not self.profile_path.exists():
            return None

        try:
            with open(self.profile_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return dict_to_user_profile(data)
        except (json.JSONDecodeError, ValidationError):
            return None

    def require_profile(self) -> UserProfile:
        """
        Load the profile or fail with a hint to run init.

        Raises:
            FileNotFoundError: If the profile is missing or unreadable
        """
        profile = self.load_profile()
        if profile is None:
            raise FileNotFoundError(
                f"Profile not found or invalid: {self.profile_path}. Run 'init' first."
            )
        return profile

    def save_profile(self, profile: UserProfile) -> None:
        """
        Save user profile to profile.json.

        Args:
            profile: User profile to save
        """
        self.profile_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.profile_path, "w", encoding="utf-8") as f:
            json.dump(user_profile_to_dict(profile), f, indent=2)

    def load_history(self) -> list[WorkoutSession]:
        """
        Load all sessions from the history file.

        Returns:
            List of WorkoutSession, sorted by date

        Raises:
            FileNotFoundError: If history file doesn't exist
            ValidationError: If a line cannot be parsed
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        sessions: list[WorkoutSession] = []

        with open(self.history_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue

                try:
                    sessions.append(json_line_to_session(line))
                except ValidationError as e:
                    raise ValidationError(
                        f"Error parsing line {line_num} in {self.history_path}: {e}"
                    ) from e

        # Stable sort keeps same-day sessions in logged order
        sessions.sort(key=lambda s: s.date)

        return sessions

    def append_session(self, session: WorkoutSession) -> bool:
        """
        Add a session to the history file.

        Maintains chronological order.  A session with the same date and
        routine day as an existing one replaces it.

        Args:
            session: Session to add

        Returns:
            True if an existing session was replaced
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )

        sessions = self.load_history()

        replaced = False
        insert_idx = len(sessions)
        for i, existing in enumerate(sessions):
            if session.date < existing.date:
                insert_idx = i
                break
            if session.date == existing.date and existing.day_id == session.day_id:
                sessions[i] = session
                replaced = True
                break

        if not replaced:
            sessions.insert(insert_idx, session)

        self._write_sessions(sessions)
        return replaced

    def replace_history(self, sessions: list[WorkoutSession]) -> None:
        """
        Overwrite the whole history with the given sessions.

        Sessions are written as given, in date order, without the same-day
        replacement done by append_session.

        Args:
            sessions: Sessions to keep
        """
        if not self.history_path.exists():
            raise FileNotFoundError(
                f"History file not found: {self.history_path}. Run 'init' first."
            )
        self._write_sessions(sorted(sessions, key=lambda s: s.date))

    def _write_sessions(self, sessions: list[WorkoutSession]) -> None:
        """
        Write all sessions to the history file.

        The lines go to a sibling temp file first, which then replaces the
        history file, so an interrupted write leaves the old history intact.

        Args:
            sessions: Sessions to write
        """
        tmp_path = self.history_path.with_name(self.history_path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            for session in sessions:
                f.write(session_to_json_line(session) + "\n")
        os.replace(tmp_path, self.history_path)

    def get_latest_session(self) -> WorkoutSession | None:
        """
        Get the most recent session.

        Returns:
            Latest WorkoutSession or None if no history
        """
        try:
            sessions = self.load_history()
        except FileNotFoundError:
            return None
        return sessions[-1] if sessions else None

    def delete_session_at(self, index: int) -> WorkoutSession:
        """
        Delete the session at the given 0-based index in sorted history.

        Args:
            index: 0-based index

        Returns:
            The deleted session

        Raises:
            IndexError: If index is out of range
        """
        sessions = self.load_history()
        if index < 0 or index >= len(sessions):
            raise IndexError(f"Session index {index} out of range (0-{len(sessions) - 1})")
        removed = sessions.pop(index)
        self._write_sessions(sessions)
        return removed


def get_default_history_path() -> Path:
    """
    Get the default history file path.

    Returns:
        ~/.liftlog/history.jsonl
    """
    return Path.home() / ".liftlog" / "history.jsonl"
