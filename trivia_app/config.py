"""Runtime configuration read from the environment (and an optional .env file)."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv

from trivia_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from trivia_app.constants.trivia_constants import (
    DEFAULT_DATA_DIR,
    DEFAULT_LEADERBOARD_PAGE_SIZE,
    DEFAULT_OPEN_HOURS,
    DEFAULT_WINDOW_HOURS,
)


@dataclass(frozen=True, slots=True)
class TriviaConfig:
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    window_hours: float = DEFAULT_WINDOW_HOURS
    open_hours: tuple[int, ...] = DEFAULT_OPEN_HOURS
    leaderboard_page_size: int = DEFAULT_LEADERBOARD_PAGE_SIZE
    scheduler_enabled: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_dir: Path | None = None
    admin_ids: frozenset[str] = frozenset()

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "TriviaConfig":
        if load_env_file:
            load_dotenv()
        log_dir = os.getenv("TRIVIA_LOG_DIR")
        config = cls(
            data_dir=Path(os.getenv("TRIVIA_DATA_DIR", DEFAULT_DATA_DIR)),
            window_hours=float(os.getenv("TRIVIA_WINDOW_HOURS", str(DEFAULT_WINDOW_HOURS))),
            open_hours=parse_hours(os.getenv("TRIVIA_OPEN_HOURS", "")) or DEFAULT_OPEN_HOURS,
            leaderboard_page_size=int(
                os.getenv("TRIVIA_LEADERBOARD_PAGE_SIZE", str(DEFAULT_LEADERBOARD_PAGE_SIZE))
            ),
            scheduler_enabled=_parse_bool(os.getenv("TRIVIA_SCHEDULER_ENABLED", "true")),
            host=os.getenv("TRIVIA_HOST", DEFAULT_HOST),
            port=int(os.getenv("TRIVIA_PORT", str(DEFAULT_PORT))),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
            admin_ids=parse_ids(os.getenv("TRIVIA_ADMIN_IDS", "")),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.window_hours <= 0:
            raise ValueError("TRIVIA_WINDOW_HOURS must be positive.")
        if self.leaderboard_page_size < 1:
            raise ValueError("TRIVIA_LEADERBOARD_PAGE_SIZE must be at least 1.")
        if any(not 0 <= hour <= 23 for hour in self.open_hours):
            raise ValueError("TRIVIA_OPEN_HOURS must be hours between 0 and 23.")

    @property
    def open_interval_hours(self) -> float:
        """Typical gap between two opens, used in help text."""
        hours = sorted(set(self.open_hours))
        if len(hours) < 2:
            return 24.0
        return float(min(later - earlier for earlier, later in zip(hours, hours[1:] + [hours[0] + 24])))


def parse_hours(raw: str) -> tuple[int, ...]:
    return tuple(sorted({int(part) for part in raw.split(",") if part.strip()}))


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def parse_ids(raw: str) -> frozenset[str]:
    return frozenset(part.strip() for part in raw.split(",") if part.strip())
