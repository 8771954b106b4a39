"""Service for durable participant scores and statistics."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
from threading import Lock

from trivia_app.core.errors import PersistenceError
from trivia_app.core.json_store import JsonDocument
from trivia_app.core.models import ParticipantScore

logger = logging.getLogger(__name__)

ScoreTable = dict[str, ParticipantScore]


class ScoreStore:
    """Persists the participant score table as one JSON document.

    Every mutation reads the whole table, changes it in memory and writes it
    back while holding ``_lock``; reads take the same lock so they never see a
    write in flight. Points never drop below zero.
    """

    def __init__(self, path: Path | str) -> None:
        self._document = JsonDocument(path)
        self._lock = Lock()

    def get(self, participant_id: str) -> ParticipantScore:
        """Return the participant's score, or a zero-value entry if unknown."""
        with self._lock:
            table = self._load()
        return table.get(participant_id) or ParticipantScore(display_name="")

    def all(self) -> ScoreTable:
        """Snapshot of the whole table in stored (insertion) order."""
        with self._lock:
            return self._load()

    @contextmanager
    def transaction(self) -> Iterator[ScoreTable]:
        """Yield the mutable table; it is written back once if the block succeeds."""
        with self._lock:
            table = self._load()
            yield table
            self._save(table)

    def apply_delta(
        self,
        participant_id: str,
        delta: int,
        display_name: str,
        is_correct: bool | None = None,
    ) -> int:
        """Add ``delta`` (clamped at zero) and, for round results, count the attempt."""
        with self.transaction() as table:
            entry = apply_to_table(table, participant_id, delta, display_name, is_correct)
        return entry.points

    def adjust_points(self, participant_id: str, amount: int, display_name: str) -> int:
        """Administrative add (positive) or remove (negative) of points."""
        new_total = self.apply_delta(participant_id, amount, display_name)
        logger.info("Adjusted points for %s by %+d, new total %d", participant_id, amount, new_total)
        return new_total

    def _load(self) -> ScoreTable:
        document = self._document.read(default={})
        if not isinstance(document, dict):
            raise PersistenceError("Score table must be a JSON object.", self._document.path)
        table: ScoreTable = {}
        for participant_id, raw in document.items():
            try:
                table[str(participant_id)] = ParticipantScore(
                    display_name=str(raw.get("username", "")),
                    points=max(0, int(raw.get("points", 0))),
                    correct=int(raw.get("correct", 0)),
                    total=int(raw.get("total", 0)),
                )
            except (AttributeError, TypeError, ValueError) as exc:
                raise PersistenceError(
                    f"Malformed score entry for {participant_id}: {exc}", self._document.path
                ) from exc
        return table

    def _save(self, table: ScoreTable) -> None:
        self._document.write({
            participant_id: {
                "username": entry.display_name,
                "points": entry.points,
                "correct": entry.correct,
                "total": entry.total,
            }
            for participant_id, entry in table.items()
        })


def apply_to_table(
    table: ScoreTable,
    participant_id: str,
    delta: int,
    display_name: str,
    is_correct: bool | None = None,
) -> ParticipantScore:
    entry = table.get(participant_id)
    if entry is None:
        entry = ParticipantScore(display_name=display_name)
        table[participant_id] = entry
    if display_name:
        entry.display_name = display_name
    entry.points = max(0, entry.points + delta)
    if is_correct is not None:
        entry.total += 1
        if is_correct:
            entry.correct += 1
    return entry
