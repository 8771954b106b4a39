import json

import pytest

from trivia_app.core.question_importer import (
    QuestionImportError,
    import_into_corpus,
    parse_questions_text,
)

SAMPLE = """
Q: Which planet is closest to the sun?
A: Venus
B: Mercury
C: Mars
D: Earth
CORRECT: B
CATEGORY: Science
EXPLANATION: Mercury orbits at about 0.39 AU.
That is closer than any other planet.

---

Q: How many sides does a hexagon have?
A: Five
B: Six
C: Seven
D: Eight
CORRECT: b
"""


def test_parses_blocks_with_optional_fields():
    first, second = parse_questions_text(SAMPLE)

    assert first.text == "Which planet is closest to the sun?"
    assert first.correct_answer == "Mercury"
    assert first.category == "Science"
    assert first.explanation == "Mercury orbits at about 0.39 AU.\nThat is closer than any other planet."
    assert second.correct_answer == "Six"
    assert second.category == "General"
    assert second.explanation is None


@pytest.mark.parametrize(
    "block",
    [
        "A: one\nB: two\nC: three\nD: four\nCORRECT: A",
        "Q: Missing option?\nA: one\nB: two\nC: three\nCORRECT: A",
        "Q: Bad letter?\nA: one\nB: two\nC: three\nD: four\nCORRECT: E",
        "stray text\nQ: Where?\nA: one\nB: two\nC: three\nD: four\nCORRECT: A",
        "Q: Duplicates?\nA: same\nB: same\nC: three\nD: four\nCORRECT: A",
    ],
)
def test_rejects_invalid_blocks(block):
    with pytest.raises(QuestionImportError):
        parse_questions_text(block)


def test_import_merges_and_skips_known_questions(tmp_path):
    source = tmp_path / "questions.txt"
    source.write_text(SAMPLE, encoding="utf-8")
    corpus = tmp_path / "questions.json"
    corpus.write_text(
        json.dumps({"questions": [{
            "question": "How many sides does a hexagon have?",
            "options": ["Five", "Six", "Seven", "Eight"],
            "correct_answer": "Six",
            "category": "Math",
        }]}),
        encoding="utf-8",
    )

    summary = import_into_corpus(source, corpus)

    assert (summary.added, summary.skipped, summary.total) == (1, 1, 2)
    stored = json.loads(corpus.read_text(encoding="utf-8"))["questions"]
    assert stored[1]["question"] == "Which planet is closest to the sun?"
    assert stored[1]["answer_reason"].startswith("Mercury orbits")


def test_empty_file_is_rejected(tmp_path):
    source = tmp_path / "empty.txt"
    source.write_text("\n\n", encoding="utf-8")

    with pytest.raises(QuestionImportError):
        import_into_corpus(source, tmp_path / "questions.json")
