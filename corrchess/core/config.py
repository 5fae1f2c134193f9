"""
Explicit configuration, passed into the service at construction time.

Nothing in the package reads the environment on its own: the application entry point builds a Settings
(usually through Settings.from_env()) and hands it down.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping, Self

DEFAULT_DATABASE_URL = "sqlite:///corrchess.db"
DEFAULT_MOVE_DEADLINE_HOURS = 72
DEFAULT_REMINDER_HOURS = 12


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    # time a player has to answer once it is their turn
    move_deadline: timedelta = timedelta(hours=DEFAULT_MOVE_DEADLINE_HOURS)
    # start the clock for white as soon as the game is created
    deadline_on_create: bool = False
    deadline_reminder_window: timedelta = timedelta(hours=DEFAULT_REMINDER_HOURS)
    event_name: str = "Correspondence Game"
    site_name: str = "corrchess"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Read CORRCHESS_* variables, falling back to the defaults above."""
        env = os.environ if environ is None else environ
        return cls(
            database_url=env.get("CORRCHESS_DATABASE_URL", DEFAULT_DATABASE_URL),
            move_deadline=timedelta(
                hours=_parse_int(
                    env, "CORRCHESS_MOVE_DEADLINE_HOURS", DEFAULT_MOVE_DEADLINE_HOURS
                )
            ),
            deadline_on_create=env.get("CORRCHESS_DEADLINE_ON_CREATE", "0").lower()
            in {"1", "true", "yes", "on"},
            deadline_reminder_window=timedelta(
                hours=_parse_int(
                    env, "CORRCHESS_REMINDER_HOURS", DEFAULT_REMINDER_HOURS
                )
            ),
            event_name=env.get("CORRCHESS_EVENT_NAME", cls.event_name),
            site_name=env.get("CORRCHESS_SITE_NAME", cls.site_name),
        )


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value
