"""Trivia round constants shared across core and adapter layers."""

OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")
OPTION_COUNT: int = len(OPTION_LETTERS)

DEFAULT_WINDOW_HOURS: float = 5.0
DEFAULT_OPEN_HOURS: tuple[int, ...] = (0, 6, 12, 18)
DEFAULT_LEADERBOARD_PAGE_SIZE: int = 10

WRONG_ANSWER_PENALTY: int = -1
MIN_CORRECT_POINTS: int = 1

DEFAULT_DATA_DIR: str = "data"
QUESTIONS_FILENAME: str = "questions.json"
ASKED_QUESTIONS_FILENAME: str = "asked_questions.json"
SCORES_FILENAME: str = "scores.json"

NO_EXPLANATION_TEXT: str = "No explanation was specified for this question."
