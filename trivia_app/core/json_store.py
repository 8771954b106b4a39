"""Whole-document JSON persistence with atomic rewrites.

Each durable record (question corpus, asked set, score table) is one JSON
file. Writes go to a temporary file in the same directory which then replaces
the target, so readers see either the old or the new document, never a
partial one.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from trivia_app.core.errors import PersistenceError

logger = logging.getLogger(__name__)


class JsonDocument:
    """A single JSON file read and written as a whole."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def read(self, default: Any = None) -> Any:
        """Return the parsed document, or ``default`` when the file is missing."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default
        except OSError as exc:
            raise PersistenceError(f"Could not read {self._path}: {exc}", self._path) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"{self._path} is not valid JSON: {exc}", self._path) from exc

    def write(self, payload: Any) -> None:
        serialized = json.dumps(payload, indent=2, ensure_ascii=False)
        temp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=self._path.parent, prefix=f".{self._path.name}.", delete=False, encoding="utf-8"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(serialized)
                tmp.flush()
                os.fsync(tmp.fileno())
            temp_path.replace(self._path)
        except OSError as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self._path}: {exc}", self._path) from exc
        logger.debug("Wrote %s", self._path)
