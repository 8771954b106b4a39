"""Utilities for importing questions from a human-friendly text file.

File format (repeat blocks separated by blank lines or '---'):

    Q: Question text. Additional lines until the next marker are treated as
       part of the question.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D
    CATEGORY: Category name      (optional)
    EXPLANATION: Why it is right (optional, may continue on later lines)

Example:

    Q: Which planet is closest to the sun?
    A: Venus
    B: Mercury
    C: Mars
    D: Earth
    CORRECT: B
    CATEGORY: Science

Imported questions are merged into the JSON corpus; a question whose text is
already present is skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from trivia_app.constants.trivia_constants import OPTION_LETTERS
from trivia_app.core.errors import CorpusError
from trivia_app.core.json_store import JsonDocument
from trivia_app.core.models import Question
from trivia_app.core.services.question_pool import parse_question, question_to_record

logger = logging.getLogger(__name__)


class QuestionImportError(CorpusError):
    """Raised when a question file cannot be parsed."""


@dataclass(slots=True)
class ImportSummary:
    source_path: Path
    added: int
    skipped: int
    total: int


def load_questions_from_file(file_path: Path) -> list[Question]:
    text = file_path.read_text(encoding="utf-8")
    questions = parse_questions_text(text)
    if not questions:
        raise QuestionImportError("Question file did not contain any questions.")
    return questions


def import_into_corpus(file_path: Path, corpus_path: Path) -> ImportSummary:
    """Append new questions from ``file_path`` to the corpus at ``corpus_path``."""
    questions = load_questions_from_file(file_path)
    corpus = JsonDocument(corpus_path)
    document = corpus.read(default={"questions": []})
    if not isinstance(document, dict):
        raise CorpusError(f"{corpus_path} must contain an object with a 'questions' list.")
    records = list(document.get("questions") or [])
    known = {str(record.get("question", "")).strip() for record in records if isinstance(record, dict)}

    added = 0
    for question in questions:
        if question.text in known:
            continue
        records.append(question_to_record(question))
        known.add(question.text)
        added += 1

    document["questions"] = records
    corpus.write(document)
    summary = ImportSummary(
        source_path=file_path,
        added=added,
        skipped=len(questions) - added,
        total=len(records),
    )
    logger.info("Imported %d questions from %s (%d already present)", added, file_path, summary.skipped)
    return summary


def parse_questions_text(text: str) -> list[Question]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    return [_parse_block(block, position) for position, block in enumerate(blocks, start=1) if block]


def _parse_block(block: str, position: int) -> Question:
    question_lines: list[str] = []
    explanation_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    category: str | None = None
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if upper.startswith("CATEGORY:"):
            category = line.split(":", 1)[1].strip()
            current_section = None
            continue

        if upper.startswith("EXPLANATION:"):
            explanation_lines = [line.split(":", 1)[1].strip()]
            current_section = "EXPLANATION"
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section == "EXPLANATION":
            explanation_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuestionImportError(
                f"Block {position}: text outside of a known section: '{line}'."
            )

    if not question_lines:
        raise QuestionImportError(f"Block {position}: question text missing (Q: ...)")
    if len(options) != len(OPTION_LETTERS):
        raise QuestionImportError(f"Block {position}: each question must define exactly four options (A-D).")
    if correct_letter not in OPTION_LETTERS:
        raise QuestionImportError(f"Block {position}: CORRECT must be one of A, B, C, or D.")

    option_list = [options[letter].strip() for letter in OPTION_LETTERS]
    raw = {
        "question": "\n".join(question_lines).strip(),
        "options": option_list,
        "correct_answer": option_list[OPTION_LETTERS.index(correct_letter)],
        "category": category,
        "answer_reason": "\n".join(explanation_lines).strip() or None,
    }
    try:
        return parse_question(raw, position)
    except CorpusError as exc:
        raise QuestionImportError(f"Block {position}: {exc}") from exc
