"""Exceptions raised by the trivia core.

Rejected votes (duplicate or stale) are not errors; they are reported through
:class:`trivia_app.core.models.VoteOutcome`.
"""

from __future__ import annotations


class TriviaError(Exception):
    """Base class for trivia core failures."""


class AlreadyOpenError(TriviaError):
    """Raised when a round is opened while another one is still open."""


class NoActiveRoundError(TriviaError):
    """Raised when closing while no round is open."""


class PoolEmptyError(TriviaError):
    """Raised when the question corpus holds no questions."""


class CorpusError(TriviaError):
    """Raised when a question corpus entry cannot be parsed."""


class PersistenceError(TriviaError):
    """Raised when a durable record cannot be read or written."""

    def __init__(self, message: str, path: object | None = None) -> None:
        super().__init__(message)
        self.path = path
