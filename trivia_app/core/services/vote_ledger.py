"""Service collecting the votes of the open round."""

from __future__ import annotations

from datetime import datetime
from threading import Lock

from trivia_app.core.models import Vote, VoteOutcome


class VoteLedger:
    """Append-only, insertion-ordered record of one vote per participant.

    The duplicate check and the insert happen under one lock. Once sealed the
    ledger rejects every further vote with ``ROUND_NOT_OPEN``.
    """

    def __init__(self) -> None:
        self._votes: dict[str, Vote] = {}
        self._sealed: bool = False
        self._lock = Lock()

    def record(
        self,
        participant_id: str,
        option_letter: str,
        cast_at: datetime,
        display_name: str,
    ) -> tuple[VoteOutcome, Vote | None]:
        with self._lock:
            if self._sealed:
                return VoteOutcome.ROUND_NOT_OPEN, None
            if participant_id in self._votes:
                return VoteOutcome.DUPLICATE_VOTE, None
            vote = Vote(
                participant_id=participant_id,
                option_letter=option_letter,
                cast_at=cast_at,
                display_name=display_name,
            )
            self._votes[participant_id] = vote
            return VoteOutcome.ACCEPTED, vote

    def seal(self) -> list[Vote]:
        """Stop accepting votes and return them in cast order."""
        with self._lock:
            self._sealed = True
            return list(self._votes.values())

    def get_votes(self) -> list[Vote]:
        with self._lock:
            return list(self._votes.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._votes)
