from datetime import timedelta

import pytest

from conftest import START
from trivia_app.core.models import ParticipantScore, Question, Round, Vote
from trivia_app.core.services.scoring import points_for_vote, remaining_hours, score_round

WINDOW = timedelta(hours=5)


def make_round() -> Round:
    question = Question(
        text="Capital of France?",
        options=("Paris", "Rome", "Madrid", "Berlin"),
        correct_answer="Paris",
    )
    return Round(round_id="r1", question=question, options=("Rome", "Paris", "Berlin", "Madrid"), opened_at=START)


def vote(participant: str, letter: str, hours: float) -> Vote:
    return Vote(participant, letter, START + timedelta(hours=hours), participant.title())


@pytest.mark.parametrize(
    ("hours", "expected"),
    [(0, 5), (0.5, 5), (1, 4), (2.25, 3), (4.5, 1), (5, 1), (7, 1)],
)
def test_correct_answers_decay_by_whole_hours(hours, expected):
    cast_at = START + timedelta(hours=hours)
    assert points_for_vote(True, START, cast_at, WINDOW) == expected


@pytest.mark.parametrize("hours", [0, 1, 4.99, 12])
def test_wrong_answers_cost_one_point(hours):
    assert points_for_vote(False, START, START + timedelta(hours=hours), WINDOW) == -1


def test_remaining_hours_clamps_at_zero():
    assert remaining_hours(START, START + timedelta(hours=6), WINDOW) == 0.0
    assert remaining_hours(START, START + timedelta(minutes=90), WINDOW) == pytest.approx(3.5)


def test_score_round_orders_by_delta_then_cast_order():
    round_ = make_round()
    votes = [
        vote("bob", "A", 1),
        vote("alice", "B", 2),
        vote("carol", "C", 3),
        vote("dave", "B", 2.5),
    ]

    results = score_round(round_, votes, {}, WINDOW)

    assert [(r.participant_id, r.delta) for r in results] == [
        ("alice", 3),
        ("dave", 3),
        ("bob", -1),
        ("carol", -1),
    ]


def test_new_totals_are_clamped_at_zero():
    round_ = make_round()
    scores = {"bob": ParticipantScore("Bob", points=0), "alice": ParticipantScore("Alice", points=10)}

    results = {r.participant_id: r for r in score_round(round_, [vote("bob", "A", 1), vote("alice", "B", 0.5)], scores, WINDOW)}

    assert results["bob"].new_total == 0
    assert results["alice"].new_total == 15
    assert results["alice"].is_correct
    assert not results["bob"].is_correct
