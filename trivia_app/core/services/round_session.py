"""Service owning the current-round slot and its vote ledger."""

from __future__ import annotations

from datetime import datetime
import random
from uuid import uuid4

from trivia_app.core.models import Question, Round, RoundStatus, Vote
from trivia_app.core.services.vote_ledger import VoteLedger


class RoundSession:
    """Holds at most one round. Callers serialize access through TriviaManager."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._round: Round | None = None
        self._ledger: VoteLedger | None = None
        self._shuffle_rng = rng or random.Random()

    def start_round(self, question: Question, opened_at: datetime) -> Round:
        if self._round is not None:
            raise RuntimeError("A round is already held by this session.")
        self._round = Round(
            round_id=uuid4().hex,
            question=question,
            options=self._shuffle_options(question),
            opened_at=opened_at,
        )
        self._ledger = VoteLedger()
        return self._round

    def get_round(self) -> Round | None:
        return self._round

    def get_ledger(self) -> VoteLedger | None:
        return self._ledger

    def is_open(self) -> bool:
        return self._round is not None and self._round.status is RoundStatus.OPEN

    def is_closing(self) -> bool:
        return self._round is not None and self._round.status is RoundStatus.CLOSING

    def begin_close(self) -> list[Vote]:
        """Seal the ledger and move the round to CLOSING; returns votes in cast order."""
        if self._round is None or self._ledger is None:
            raise RuntimeError("No round to close.")
        self._round.status = RoundStatus.CLOSING
        return self._ledger.seal()

    def finish_close(self) -> Round:
        if self._round is None:
            raise RuntimeError("No round to close.")
        closed = self._round
        closed.status = RoundStatus.CLOSED
        self._round = None
        self._ledger = None
        return closed

    def _shuffle_options(self, question: Question) -> tuple[str, ...]:
        options = list(question.options)
        self._shuffle_rng.shuffle(options)
        return tuple(options)
