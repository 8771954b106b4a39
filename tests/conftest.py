"""Shared fixtures for trivia tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import random

import pytest

from trivia_app.core.services.question_pool import QuestionPool
from trivia_app.core.services.score_store import ScoreStore
from trivia_app.core.trivia_manager import TriviaManager

START = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_question(number: int, correct_index: int = 0, **extra: object) -> dict[str, object]:
    options = [f"Q{number} option {letter}" for letter in "ABCD"]
    record: dict[str, object] = {
        "question": f"Question {number}?",
        "options": options,
        "correct_answer": options[correct_index],
        "category": "General",
    }
    record.update(extra)
    return record


def write_corpus(path, questions: list[dict[str, object]]) -> None:
    path.write_text(json.dumps({"questions": questions}), encoding="utf-8")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def corpus_path(tmp_path):
    path = tmp_path / "questions.json"
    write_corpus(path, [make_question(1), make_question(2)])
    return path


@pytest.fixture()
def pool(tmp_path, corpus_path, clock) -> QuestionPool:
    return QuestionPool(corpus_path, tmp_path / "asked_questions.json", rng=random.Random(7), clock=clock)


@pytest.fixture()
def scores(tmp_path) -> ScoreStore:
    return ScoreStore(tmp_path / "scores.json")


@pytest.fixture()
def manager(pool, scores, clock) -> TriviaManager:
    return TriviaManager(pool, scores, window=timedelta(hours=5), clock=clock, rng=random.Random(3))
