"""Service for selecting non-repeating questions from the corpus."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
import logging
from pathlib import Path
import random
from threading import Lock

from trivia_app.constants.trivia_constants import OPTION_COUNT
from trivia_app.core.errors import CorpusError, PersistenceError, PoolEmptyError
from trivia_app.core.json_store import JsonDocument
from trivia_app.core.models import AskedSet, Question

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuestionPool:
    """Serves questions uniformly at random, never repeating one until all were asked.

    The corpus is curated outside the application and re-read on every
    selection. The asked set is persisted before a question is handed out,
    which makes that write the commit point of opening a round.
    """

    def __init__(
        self,
        corpus_path: Path | str,
        asked_path: Path | str,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._corpus = JsonDocument(corpus_path)
        self._asked = JsonDocument(asked_path)
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = Lock()

    def next_question(self) -> Question:
        with self._lock:
            questions = self.load_corpus()
            if not questions:
                raise PoolEmptyError("No questions are configured.")

            asked = self.load_asked()
            candidates = [q for q in questions if not asked.contains(q.text)]
            if not candidates:
                logger.info("All %d questions have been asked, resetting tracking", len(questions))
                asked = self._write_reset()
                candidates = questions

            question = self._rng.choice(candidates)
            if not asked.contains(question.text):
                asked.questions.append(question.text)
                self._write_asked(asked)
            return question

    def load_corpus(self) -> list[Question]:
        document = self._corpus.read(default={"questions": []})
        if not isinstance(document, dict):
            raise CorpusError(f"{self._corpus.path} must contain an object with a 'questions' list.")
        raw_questions = document.get("questions") or []
        if not isinstance(raw_questions, list):
            raise CorpusError("'questions' must be a list.")
        return [parse_question(raw, position) for position, raw in enumerate(raw_questions, start=1)]

    def load_asked(self) -> AskedSet:
        document = self._asked.read()
        if document is None:
            logger.info("No asked questions file found, starting a new one")
            return AskedSet(questions=[], last_reset=self._clock())
        try:
            return AskedSet(
                questions=[str(text) for text in document.get("questions", [])],
                last_reset=_parse_timestamp(document["lastReset"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Malformed asked questions record: {exc}", self._asked.path) from exc

    def remaining_count(self) -> int:
        with self._lock:
            asked = self.load_asked()
            return sum(1 for q in self.load_corpus() if not asked.contains(q.text))

    def _write_reset(self) -> AskedSet:
        asked = AskedSet(questions=[], last_reset=self._clock())
        self._write_asked(asked)
        return asked

    def _write_asked(self, asked: AskedSet) -> None:
        self._asked.write({
            "questions": list(asked.questions),
            "lastReset": asked.last_reset.isoformat(),
        })


def parse_question(raw: object, position: int = 0) -> Question:
    """Validate and normalize one corpus entry."""
    if not isinstance(raw, dict):
        raise CorpusError(f"Question #{position} must be an object.")

    text = str(raw.get("question") or "").strip()
    if not text:
        raise CorpusError(f"Question #{position} has no text.")

    options = raw.get("options")
    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        raise CorpusError(f"Question '{text}' must have exactly {OPTION_COUNT} options.")
    cleaned = tuple(str(option).strip() for option in options)
    if any(not option for option in cleaned):
        raise CorpusError(f"Question '{text}' has an empty option.")
    if len(set(cleaned)) != len(cleaned):
        raise CorpusError(f"Question '{text}' has duplicate options.")

    correct = str(raw.get("correct_answer") or "").strip()
    if correct not in cleaned:
        raise CorpusError(f"Correct answer of '{text}' is not one of its options.")

    explanation = raw.get("answer_reason")
    return Question(
        text=text,
        options=cleaned,
        correct_answer=correct,
        category=str(raw.get("category") or "General").strip(),
        explanation=str(explanation).strip() if explanation else None,
    )


def question_to_record(question: Question) -> dict[str, object]:
    record: dict[str, object] = {
        "question": question.text,
        "options": list(question.options),
        "correct_answer": question.correct_answer,
        "category": question.category,
    }
    if question.explanation:
        record["answer_reason"] = question.explanation
    return record


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
