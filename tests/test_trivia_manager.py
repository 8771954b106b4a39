from concurrent.futures import ThreadPoolExecutor
import json
from threading import Barrier

import pytest

from conftest import START
from trivia_app.constants.trivia_constants import OPTION_LETTERS
from trivia_app.core.errors import AlreadyOpenError, NoActiveRoundError, PersistenceError
from trivia_app.core.models import VoteOutcome


def letter_of(handle, text: str) -> str:
    return OPTION_LETTERS[handle.options.index(text)]


def wrong_letter(handle) -> str:
    correct = letter_of(handle, handle.question.correct_answer)
    return next(letter for letter in OPTION_LETTERS if letter != correct)


def test_end_to_end_round(manager, clock, tmp_path):
    handle = manager.open_round()
    assert sorted(handle.options) == sorted(handle.question.options)
    assert handle.opened_at == START

    clock.advance(minutes=30)
    alice = manager.cast_vote(handle.round_id, "alice", letter_of(handle, handle.question.correct_answer), "Alice")
    clock.advance(minutes=30)
    bob = manager.cast_vote(handle.round_id, "bob", wrong_letter(handle), "Bob")
    again = manager.cast_vote(handle.round_id, "alice", "A", "Alice")

    assert alice.outcome is VoteOutcome.ACCEPTED
    assert bob.outcome is VoteOutcome.ACCEPTED
    assert again.outcome is VoteOutcome.DUPLICATE_VOTE

    result = manager.close_round()

    assert [(r.participant_id, r.delta) for r in result.results] == [("alice", 5), ("bob", -1)]
    assert result.correct_letter == letter_of(handle, handle.question.correct_answer)
    stored = json.loads((tmp_path / "scores.json").read_text(encoding="utf-8"))
    assert stored["alice"] == {"username": "Alice", "points": 5, "correct": 1, "total": 1}
    assert stored["bob"] == {"username": "Bob", "points": 0, "correct": 0, "total": 1}
    assert manager.get_status().state == "idle"


def test_open_while_open_is_rejected(manager):
    manager.open_round()

    with pytest.raises(AlreadyOpenError):
        manager.open_round()


def test_concurrent_opens_yield_a_single_round(manager):
    workers = 16
    barrier = Barrier(workers)

    def try_open(_):
        barrier.wait()
        try:
            return manager.open_round().round_id
        except AlreadyOpenError:
            return None

    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(try_open, range(workers)))

    opened = [round_id for round_id in outcomes if round_id]
    assert len(opened) == 1
    assert manager.get_status().round_id == opened[0]


def test_concurrent_votes_accept_one_per_participant(manager):
    handle = manager.open_round()
    workers = 24
    barrier = Barrier(workers)

    def cast(index: int):
        barrier.wait()
        participant = f"p{index % 3}"
        return participant, manager.cast_vote(handle.round_id, participant, "A", participant).outcome

    with ThreadPoolExecutor(max_workers=workers) as executor:
        outcomes = list(executor.map(cast, range(workers)))

    for participant in ("p0", "p1", "p2"):
        mine = [outcome for who, outcome in outcomes if who == participant]
        assert mine.count(VoteOutcome.ACCEPTED) == 1
        assert mine.count(VoteOutcome.DUPLICATE_VOTE) == len(mine) - 1
    assert manager.get_status().vote_count == 3


def test_close_without_round_raises(manager):
    with pytest.raises(NoActiveRoundError):
        manager.close_round()


def test_votes_on_stale_or_missing_round_are_rejected(manager):
    no_round = manager.cast_vote("whatever", "alice", "A", "Alice")
    assert no_round.outcome is VoteOutcome.ROUND_NOT_OPEN

    first = manager.open_round()
    manager.close_round()
    second = manager.open_round()

    stale = manager.cast_vote(first.round_id, "alice", "A", "Alice")
    assert stale.outcome is VoteOutcome.ROUND_NOT_OPEN
    assert manager.cast_vote(second.round_id, "alice", "A", "Alice").accepted


def test_invalid_option_letter_raises(manager):
    handle = manager.open_round()

    with pytest.raises(ValueError):
        manager.cast_vote(handle.round_id, "alice", "E", "Alice")
    assert manager.cast_vote(handle.round_id, "alice", " b ", "Alice").vote.option_letter == "B"


def test_late_votes_still_score_at_least_one_point(manager, clock):
    handle = manager.open_round()
    clock.advance(hours=9)
    manager.cast_vote(handle.round_id, "alice", letter_of(handle, handle.question.correct_answer), "Alice")

    result = manager.close_round()

    assert result.results[0].delta == 1


def test_status_reports_open_round(manager, clock):
    assert manager.get_status().is_open is False

    handle = manager.open_round()
    manager.cast_vote(handle.round_id, "alice", "A", "Alice")
    clock.advance(hours=1, minutes=30)
    status = manager.get_status()

    assert status.state == "open"
    assert status.round_id == handle.round_id
    assert status.question == handle.question.text
    assert status.vote_count == 1
    assert status.remaining_seconds == pytest.approx(3.5 * 3600)
    assert status.max_points_available == 4


def test_failed_score_write_keeps_round_pending(manager, tmp_path):
    handle = manager.open_round()
    manager.cast_vote(handle.round_id, "alice", letter_of(handle, handle.question.correct_answer), "Alice")
    blocker = tmp_path / "scores.json"
    blocker.mkdir()

    with pytest.raises(PersistenceError):
        manager.close_round()

    assert manager.get_status().state == "closing"
    assert manager.cast_vote(handle.round_id, "bob", "A", "Bob").outcome is VoteOutcome.ROUND_NOT_OPEN
    with pytest.raises(AlreadyOpenError):
        manager.open_round()

    blocker.rmdir()
    result = manager.close_round()

    assert [r.participant_id for r in result.results] == ["alice"]
    assert manager.get_score("alice").score.points == 5
    assert manager.get_status().state == "idle"


def test_pool_rotation_across_rounds(manager):
    first = manager.open_round().question.text
    manager.close_round()
    second = manager.open_round().question.text

    assert first != second


def test_close_payload_lists_medals_and_explanation(manager, clock):
    handle = manager.open_round()
    correct = letter_of(handle, handle.question.correct_answer)
    for index, name in enumerate(["a", "b", "c", "d"]):
        clock.advance(minutes=20)
        letter = correct if index < 3 else wrong_letter(handle)
        manager.cast_vote(handle.round_id, name, letter, name.upper())

    payload = manager.close_round().payload

    assert [row["rank"] for row in payload["results"]] == [1, 2, 3, None]
    assert payload["results"][3]["medal"] is None
    assert payload["explanation"] == "No explanation was specified for this question."
    assert payload["correct_letter"] == correct


def test_admin_adjustments_and_stats(manager):
    manager.adjust_points("alice", 10, "Alice")
    manager.adjust_points("bob", 10, "Bob")
    manager.adjust_points("carol", 3, "Carol")
    assert manager.adjust_points("carol", -5, "Carol") == 0

    assert manager.get_score("alice").rank == 1
    assert manager.get_score("bob").rank == 1
    assert manager.get_score("carol").rank == 3
    assert manager.get_score("unknown").rank == 3
    with pytest.raises(ValueError):
        manager.adjust_points("alice", 0, "Alice")


def test_votes_racing_a_close_are_scored_or_rejected(manager):
    voters = 40
    for _ in range(20):
        handle = manager.open_round()
        barrier = Barrier(voters + 1)

        def vote(index: int):
            barrier.wait()
            return manager.cast_vote(handle.round_id, f"p{index}", "A", f"P{index}")

        def close():
            barrier.wait()
            return manager.close_round()

        with ThreadPoolExecutor(max_workers=voters + 1) as executor:
            closing = executor.submit(close)
            receipts = list(executor.map(vote, range(voters)))
            result = closing.result()

        accepted = {r.participant_id for r in receipts if r.outcome is VoteOutcome.ACCEPTED}
        rejected = {r.participant_id for r in receipts if r.outcome is VoteOutcome.ROUND_NOT_OPEN}
        assert len(accepted) + len(rejected) == voters
        assert {r.participant_id for r in result.results} == accepted


def test_max_points_never_drops_below_one(manager, clock):
    manager.open_round()
    clock.advance(hours=7)

    assert manager.get_status().max_points_available == 1
