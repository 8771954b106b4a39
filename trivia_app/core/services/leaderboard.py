"""Leaderboard ranking and pagination over a score table snapshot."""

from __future__ import annotations

from collections.abc import Mapping
import math

from trivia_app.constants.render_constants import MEDALS
from trivia_app.core.models import LeaderboardEntry, LeaderboardPage, ParticipantScore


def medal_for_position(position: int) -> str | None:
    if 1 <= position <= len(MEDALS):
        return MEDALS[position - 1]
    return None


def competition_rank(points: int, table: Mapping[str, ParticipantScore]) -> int:
    """Standard competition rank: 1 + number of participants with strictly more points."""
    return 1 + sum(1 for entry in table.values() if entry.points > points)


def sorted_standings(table: Mapping[str, ParticipantScore]) -> list[tuple[str, ParticipantScore]]:
    # sorted() is stable, so equal points keep their stored order.
    return sorted(table.items(), key=lambda item: -item[1].points)


def build_page(table: Mapping[str, ParticipantScore], page: int, page_size: int) -> LeaderboardPage:
    if page < 1:
        raise ValueError("Page number must be at least 1.")
    if page_size < 1:
        raise ValueError("Page size must be at least 1.")

    standings = sorted_standings(table)
    total_pages = math.ceil(len(standings) / page_size)
    start = (page - 1) * page_size

    entries: list[LeaderboardEntry] = []
    rank = 0
    previous_points: int | None = None
    for index, (participant_id, score) in enumerate(standings):
        if score.points != previous_points:
            rank = index + 1
            previous_points = score.points
        if index < start:
            continue
        if index >= start + page_size:
            break
        position = index + 1
        entries.append(
            LeaderboardEntry(
                participant_id=participant_id,
                position=position,
                rank=rank,
                display_name=score.display_name,
                points=score.points,
                correct=score.correct,
                total=score.total,
                accuracy=score.accuracy,
                medal=medal_for_position(position),
            )
        )

    return LeaderboardPage(
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        total_players=len(standings),
        entries=entries,
    )
