"""Render-ready payloads for the round opened / round closed signals.

The payloads are plain dictionaries so any adapter (chat embed, HTTP JSON,
console) can display them. Question text is markdown; ``question_html`` holds
the rendered fragment for adapters that display HTML.
"""

from __future__ import annotations

import random

from markdown_it import MarkdownIt

from trivia_app.constants.about import APP_ABOUT_TEXT, APP_NAME, HELP_COMMANDS_TEXT, HELP_HOW_TO_PLAY_TEXT
from trivia_app.constants.render_constants import (
    DUPLICATE_VOTE_MESSAGE,
    EMOJI_CORRECT,
    EMOJI_WRONG,
    LEADERBOARD_FOOTER_TEMPLATE,
    LEADERBOARD_TITLE,
    NO_ANSWERS_TEXT,
    QUESTION_FOOTER_TEMPLATE,
    QUESTION_TITLE,
    RESULTS_TITLE,
    ROUND_NOT_OPEN_MESSAGE,
    UNRANKED_MARK,
    VOTE_MESSAGES,
)
from trivia_app.constants.trivia_constants import NO_EXPLANATION_TEXT
from trivia_app.core.models import LeaderboardPage, Round, ScoredVote, VoteOutcome, VoteReceipt
from trivia_app.core.services.leaderboard import medal_for_position

_markdown = MarkdownIt("commonmark", {"html": False}).enable(["table", "strikethrough"])


def question_html(text: str) -> str:
    """Render question markdown; raw HTML in the corpus is escaped, not passed through."""
    return _markdown.render(text.strip())


def render_open_payload(round_: Round, window_hours: float) -> dict[str, object]:
    question = round_.question
    return {
        "title": QUESTION_TITLE,
        "round_id": round_.round_id,
        "question": question.text,
        "question_html": question_html(question.text),
        "category": question.category,
        "options": [{"letter": letter, "text": text} for letter, text in round_.lettered_options()],
        "window_hours": window_hours,
        "footer": QUESTION_FOOTER_TEMPLATE.format(window_hours=window_hours),
    }


def format_delta(delta: int) -> str:
    return f"+{delta}" if delta > 0 else str(delta)


def render_close_payload(round_: Round, results: list[ScoredVote]) -> dict[str, object]:
    question = round_.question
    rows: list[dict[str, object]] = []
    lines: list[str] = []
    for position, result in enumerate(results, start=1):
        medal = medal_for_position(position)
        rows.append({
            "rank": position if medal else None,
            "medal": medal,
            "participant_id": result.participant_id,
            "display_name": result.display_name,
            "is_correct": result.is_correct,
            "delta": result.delta,
            "new_total": result.new_total,
        })
        mark = EMOJI_CORRECT if result.is_correct else EMOJI_WRONG
        lines.append(
            f"{medal or UNRANKED_MARK} {result.display_name}: {mark} {format_delta(result.delta)} points"
        )
    return {
        "title": RESULTS_TITLE,
        "round_id": round_.round_id,
        "question": question.text,
        "correct_letter": round_.correct_letter,
        "correct_answer": question.correct_answer,
        "explanation": question.explanation or NO_EXPLANATION_TEXT,
        "results": rows,
        "summary": "\n".join(lines) if lines else NO_ANSWERS_TEXT,
    }


def vote_acknowledgement(receipt: VoteReceipt, rng: random.Random | None = None) -> str:
    if receipt.outcome is VoteOutcome.DUPLICATE_VOTE:
        return DUPLICATE_VOTE_MESSAGE
    if receipt.outcome is VoteOutcome.ROUND_NOT_OPEN or receipt.vote is None:
        return ROUND_NOT_OPEN_MESSAGE
    flavour = (rng or random).choice(VOTE_MESSAGES)
    return f"{EMOJI_CORRECT} **{receipt.vote.display_name}** {flavour}!"


def render_help(window_hours: float, open_interval_hours: float) -> dict[str, str]:
    return {
        "title": f"{APP_NAME} Help Guide",
        "description": APP_ABOUT_TEXT,
        "commands": HELP_COMMANDS_TEXT,
        "how_to_play": HELP_HOW_TO_PLAY_TEXT.format(
            open_interval_hours=f"{open_interval_hours:g}",
            window_hours=f"{window_hours:g}",
        ),
    }


def render_leaderboard_header(board: LeaderboardPage) -> dict[str, str]:
    return {
        "title": LEADERBOARD_TITLE,
        "footer": LEADERBOARD_FOOTER_TEMPLATE.format(
            page=board.page,
            total_pages=board.total_pages,
            total_players=board.total_players,
        ),
    }
