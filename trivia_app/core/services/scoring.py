"""Time-decayed scoring of a closed round.

A correct vote earns one point per started hour left in the window, and at
least one point: with a five hour window an answer after 30 minutes earns 5,
after 1 hour 4, after 4.5 hours 1. A wrong vote costs one point. Totals never
go below zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
import math

from trivia_app.constants.trivia_constants import MIN_CORRECT_POINTS, WRONG_ANSWER_PENALTY
from trivia_app.core.models import ParticipantScore, Round, ScoredVote, Vote

SECONDS_PER_HOUR = 3600


def remaining_hours(opened_at: datetime, at: datetime, window: timedelta) -> float:
    """Hours left in the window at ``at``, clamped at zero."""
    remaining = window - (at - opened_at)
    return max(0.0, remaining.total_seconds() / SECONDS_PER_HOUR)


def points_for_vote(is_correct: bool, opened_at: datetime, cast_at: datetime, window: timedelta) -> int:
    if not is_correct:
        return WRONG_ANSWER_PENALTY
    return max(MIN_CORRECT_POINTS, math.ceil(remaining_hours(opened_at, cast_at, window)))


def score_round(
    round_: Round,
    votes: Iterable[Vote],
    scores: Mapping[str, ParticipantScore],
    window: timedelta,
) -> list[ScoredVote]:
    """Score each vote against the participant's stored total.

    Results are ordered by delta, highest first; equal deltas keep cast order.
    """
    correct_letter = round_.correct_letter
    scored: list[ScoredVote] = []
    for vote in votes:
        is_correct = vote.option_letter == correct_letter
        delta = points_for_vote(is_correct, round_.opened_at, vote.cast_at, window)
        previous = scores.get(vote.participant_id)
        old_total = previous.points if previous else 0
        scored.append(
            ScoredVote(
                participant_id=vote.participant_id,
                display_name=vote.display_name,
                option_letter=vote.option_letter,
                is_correct=is_correct,
                delta=delta,
                new_total=max(0, old_total + delta),
            )
        )
    return sorted(scored, key=lambda result: -result.delta)
