"""Domain models for the trivia application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from trivia_app.constants.trivia_constants import OPTION_LETTERS


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with exactly four options. Identity is the text."""

    text: str
    options: tuple[str, ...]
    correct_answer: str
    category: str = "General"
    explanation: str | None = None


@dataclass(slots=True)
class AskedSet:
    """Texts of already served questions and the time of the last reset."""

    questions: list[str]
    last_reset: datetime

    def contains(self, text: str) -> bool:
        return text in self.questions


class RoundStatus(Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass(slots=True)
class Round:
    """A single open-to-close cycle with a frozen option order."""

    round_id: str
    question: Question
    options: tuple[str, ...]
    opened_at: datetime
    status: RoundStatus = RoundStatus.OPEN

    @property
    def correct_letter(self) -> str:
        return OPTION_LETTERS[self.options.index(self.question.correct_answer)]

    def lettered_options(self) -> list[tuple[str, str]]:
        return list(zip(OPTION_LETTERS, self.options))


@dataclass(frozen=True, slots=True)
class Vote:
    """One accepted answer, owned by the ledger of the round it was cast against."""

    participant_id: str
    option_letter: str
    cast_at: datetime
    display_name: str


@dataclass(slots=True)
class ParticipantScore:
    """Cumulative statistics persisted per participant."""

    display_name: str
    points: int = 0
    correct: int = 0
    total: int = 0

    @property
    def accuracy(self) -> int:
        """Correct answers as a rounded percentage of attempts."""
        if not self.total:
            return 0
        return round(self.correct / self.total * 100)


class VoteOutcome(Enum):
    ACCEPTED = "accepted"
    DUPLICATE_VOTE = "duplicate_vote"
    ROUND_NOT_OPEN = "round_not_open"


@dataclass(frozen=True, slots=True)
class VoteReceipt:
    outcome: VoteOutcome
    round_id: str
    participant_id: str
    vote: Vote | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome is VoteOutcome.ACCEPTED


@dataclass(frozen=True, slots=True)
class RoundHandle:
    """Returned by a successful open: the round id plus what to display."""

    round_id: str
    question: Question
    options: tuple[str, ...]
    opened_at: datetime
    window_hours: float
    payload: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScoredVote:
    participant_id: str
    display_name: str
    option_letter: str
    is_correct: bool
    delta: int
    new_total: int


@dataclass(frozen=True, slots=True)
class RoundResult:
    round_id: str
    question: Question
    correct_letter: str
    opened_at: datetime
    closed_at: datetime
    results: list[ScoredVote]
    payload: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RoundStatusSnapshot:
    """Read-only view of the round slot; ``round_id`` is None when idle."""

    state: str
    round_id: str | None = None
    question: str | None = None
    category: str | None = None
    vote_count: int = 0
    opened_at: datetime | None = None
    remaining_seconds: float = 0.0
    max_points_available: int = 0

    @property
    def is_open(self) -> bool:
        return self.round_id is not None


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    participant_id: str
    position: int
    rank: int
    display_name: str
    points: int
    correct: int
    total: int
    accuracy: int
    medal: str | None = None


@dataclass(frozen=True, slots=True)
class LeaderboardPage:
    page: int
    page_size: int
    total_pages: int
    total_players: int
    entries: list[LeaderboardEntry]


@dataclass(frozen=True, slots=True)
class ParticipantStats:
    participant_id: str
    score: ParticipantScore
    rank: int
    accuracy: int
