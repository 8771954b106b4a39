"""Round lifecycle shared by the scheduler and the HTTP adapter."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from datetime import datetime, timedelta
import json
import logging
import math
import random
from threading import Lock

from trivia_app.config import TriviaConfig
from trivia_app.constants.trivia_constants import (
    ASKED_QUESTIONS_FILENAME,
    DEFAULT_LEADERBOARD_PAGE_SIZE,
    DEFAULT_WINDOW_HOURS,
    MIN_CORRECT_POINTS,
    OPTION_LETTERS,
    QUESTIONS_FILENAME,
    SCORES_FILENAME,
)
from trivia_app.core.errors import AlreadyOpenError, NoActiveRoundError, PersistenceError
from trivia_app.core.models import (
    LeaderboardPage,
    ParticipantScore,
    ParticipantStats,
    RoundHandle,
    RoundResult,
    RoundStatusSnapshot,
    ScoredVote,
    VoteOutcome,
    VoteReceipt,
)
from trivia_app.core.payload_renderer import render_close_payload, render_open_payload
from trivia_app.core.services.leaderboard import build_page, competition_rank
from trivia_app.core.services.question_pool import QuestionPool, utc_now
from trivia_app.core.services.round_session import RoundSession
from trivia_app.core.services.score_store import ScoreStore, apply_to_table
from trivia_app.core.services.scoring import SECONDS_PER_HOUR, remaining_hours, score_round

logger = logging.getLogger(__name__)


class TriviaManager:
    """Facade over the question pool, round session and score store.

    Lifecycle: idle -> open -> closed -> idle. ``_lock`` makes every
    "check the slot, then act" step atomic, so two concurrent opens can never
    both succeed. Votes are inserted by the round's ledger, which is sealed
    at the start of a close; a vote that loses that race is rejected as
    ``ROUND_NOT_OPEN``.
    """

    def __init__(
        self,
        pool: QuestionPool,
        scores: ScoreStore,
        window: timedelta = timedelta(hours=DEFAULT_WINDOW_HOURS),
        clock: Callable[[], datetime] = utc_now,
        rng: random.Random | None = None,
        leaderboard_page_size: int = DEFAULT_LEADERBOARD_PAGE_SIZE,
    ) -> None:
        self._lock = Lock()
        self._pool = pool
        self._scores = scores
        self._session = RoundSession(rng)
        self._window = window
        self._clock = clock
        self._leaderboard_page_size = leaderboard_page_size

    @classmethod
    def from_config(cls, config: TriviaConfig) -> "TriviaManager":
        data_dir = config.data_dir
        return cls(
            pool=QuestionPool(data_dir / QUESTIONS_FILENAME, data_dir / ASKED_QUESTIONS_FILENAME),
            scores=ScoreStore(data_dir / SCORES_FILENAME),
            window=timedelta(hours=config.window_hours),
            leaderboard_page_size=config.leaderboard_page_size,
        )

    @property
    def window_hours(self) -> float:
        return self._window.total_seconds() / SECONDS_PER_HOUR

    # --- Round lifecycle ---

    def open_round(self) -> RoundHandle:
        with self._lock:
            if self._session.is_closing():
                raise AlreadyOpenError(
                    "The previous round is waiting for its results to be saved; close it again first."
                )
            if self._session.get_round() is not None:
                raise AlreadyOpenError("A trivia round is already in progress.")

            question = self._pool.next_question()
            round_ = self._session.start_round(question, self._clock())
            logger.info("Opened round %s: %s", round_.round_id, question.text)
            return RoundHandle(
                round_id=round_.round_id,
                question=question,
                options=round_.options,
                opened_at=round_.opened_at,
                window_hours=self.window_hours,
                payload=render_open_payload(round_, self.window_hours),
            )

    def cast_vote(
        self,
        round_id: str,
        participant_id: str,
        option_letter: str,
        display_name: str,
    ) -> VoteReceipt:
        letter = option_letter.strip().upper()
        if letter not in OPTION_LETTERS:
            raise ValueError(f"Option must be one of {', '.join(OPTION_LETTERS)}.")
        if not participant_id:
            raise ValueError("Participant id must not be empty.")

        with self._lock:
            current = self._session.get_round()
            ledger = self._session.get_ledger()
            if current is None or ledger is None or current.round_id != round_id or not self._session.is_open():
                logger.debug("Rejected vote from %s on stale round %s", participant_id, round_id)
                return VoteReceipt(VoteOutcome.ROUND_NOT_OPEN, round_id, participant_id)

        outcome, vote = ledger.record(participant_id, letter, self._clock(), display_name or participant_id)
        if outcome is VoteOutcome.ACCEPTED:
            logger.info("Accepted vote from %s on round %s", participant_id, round_id)
        else:
            logger.debug("Rejected vote from %s on round %s: %s", participant_id, round_id, outcome.value)
        return VoteReceipt(outcome, round_id, participant_id, vote)

    def close_round(self) -> RoundResult:
        with self._lock:
            current = self._session.get_round()
            ledger = self._session.get_ledger()
            if current is None or ledger is None:
                raise NoActiveRoundError("No active trivia round to end.")

            if self._session.is_open():
                votes = self._session.begin_close()
            else:
                logger.info("Retrying score persistence for round %s", current.round_id)
                votes = ledger.get_votes()

            closed_at = self._clock()
            results: list[ScoredVote] | None = None
            try:
                with self._scores.transaction() as table:
                    results = score_round(current, votes, table, self._window)
                    for result in results:
                        apply_to_table(
                            table, result.participant_id, result.delta, result.display_name, result.is_correct
                        )
            except PersistenceError:
                logger.error(
                    "Could not save results of round %s; it stays pending until closed again. Votes: %s Results: %s",
                    current.round_id,
                    json.dumps([_vote_record(vote) for vote in votes]),
                    json.dumps([asdict(result) for result in results or []]),
                )
                raise

            self._session.finish_close()
            logger.info("Closed round %s with %d votes", current.round_id, len(results))
            return RoundResult(
                round_id=current.round_id,
                question=current.question,
                correct_letter=current.correct_letter,
                opened_at=current.opened_at,
                closed_at=closed_at,
                results=results,
                payload=render_close_payload(current, results),
            )

    def get_status(self) -> RoundStatusSnapshot:
        with self._lock:
            current = self._session.get_round()
            ledger = self._session.get_ledger()
            if current is None or ledger is None:
                return RoundStatusSnapshot(state="idle")
            remaining = remaining_hours(current.opened_at, self._clock(), self._window)
            return RoundStatusSnapshot(
                state=current.status.value,
                round_id=current.round_id,
                question=current.question.text,
                category=current.question.category,
                vote_count=len(ledger),
                opened_at=current.opened_at,
                remaining_seconds=remaining * SECONDS_PER_HOUR,
                max_points_available=max(MIN_CORRECT_POINTS, math.ceil(remaining)),
            )

    # --- Scores ---

    def adjust_points(self, participant_id: str, amount: int, display_name: str = "") -> int:
        if amount == 0:
            raise ValueError("Amount must not be zero.")
        return self._scores.adjust_points(participant_id, amount, display_name)

    def get_score(self, participant_id: str) -> ParticipantStats:
        table = self._scores.all()
        score = table.get(participant_id) or ParticipantScore(display_name="")
        return ParticipantStats(
            participant_id=participant_id,
            score=score,
            rank=competition_rank(score.points, table),
            accuracy=score.accuracy,
        )

    def get_leaderboard(self, page: int = 1, page_size: int | None = None) -> LeaderboardPage:
        return build_page(self._scores.all(), page, page_size or self._leaderboard_page_size)


def _vote_record(vote) -> dict[str, str]:
    return {
        "participant_id": vote.participant_id,
        "display_name": vote.display_name,
        "option": vote.option_letter,
        "cast_at": vote.cast_at.isoformat(),
    }
