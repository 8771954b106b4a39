"""FastAPI server exposing the trivia trigger API."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import asdict
from datetime import datetime
from threading import Thread

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from trivia_app.constants.about import APP_NAME, APP_VERSION
from trivia_app.constants.network_constants import CALLER_ID_HEADER, DEFAULT_HOST, DEFAULT_PORT
from trivia_app.core.errors import (
    AlreadyOpenError,
    CorpusError,
    NoActiveRoundError,
    PersistenceError,
    PoolEmptyError,
)
from trivia_app.core.models import LeaderboardEntry
from trivia_app.core.payload_renderer import render_help, render_leaderboard_header, vote_acknowledgement
from trivia_app.core.trivia_manager import TriviaManager


class VotePayload(BaseModel):
    """Payload schema for a vote on the open round."""

    participant_id: str = Field(min_length=1)
    option: str = Field(min_length=1, max_length=1)
    display_name: str | None = None


class PointsPayload(BaseModel):
    """Payload schema for administrative point changes; negative removes points."""

    amount: int
    display_name: str | None = None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _entry_to_dict(entry: LeaderboardEntry) -> dict[str, object]:
    return asdict(entry)


def _get_trivia_manager_dependency(trivia_manager: TriviaManager):
    def dependency() -> TriviaManager:
        return trivia_manager

    return dependency


def _get_admin_guard(admin_ids: Collection[str]):
    allowed = frozenset(admin_ids)

    def guard(caller_id: str | None = Header(default=None, alias=CALLER_ID_HEADER)) -> str:
        if caller_id is None or caller_id not in allowed:
            raise HTTPException(status_code=403, detail="Only trivia admins can use this command.")
        return caller_id

    return guard


def create_api_app(
    trivia_manager: TriviaManager,
    admin_ids: Collection[str] = (),
    open_interval_hours: float = 6.0,
) -> FastAPI:
    """Create a FastAPI application wired to the provided trivia manager.

    Round control, status and point changes require the caller id header to
    name one of ``admin_ids``; with no admins configured those routes answer 403.
    """
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    manager_dep = _get_trivia_manager_dependency(trivia_manager)
    admin_only = [Depends(_get_admin_guard(admin_ids))]

    @app.exception_handler(AlreadyOpenError)
    @app.exception_handler(NoActiveRoundError)
    async def _conflict(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(PoolEmptyError)
    @app.exception_handler(CorpusError)
    async def _unavailable(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(PersistenceError)
    async def _persistence(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/help")
    def get_help(manager: TriviaManager = Depends(manager_dep)) -> dict[str, str]:
        return render_help(manager.window_hours, open_interval_hours)

    @app.post("/rounds/open", status_code=201, dependencies=admin_only)
    def open_round(manager: TriviaManager = Depends(manager_dep)) -> dict[str, object]:
        handle = manager.open_round()
        return {
            "round_id": handle.round_id,
            "opened_at": _iso(handle.opened_at),
            "payload": handle.payload,
        }

    @app.post("/rounds/close", dependencies=admin_only)
    def close_round(manager: TriviaManager = Depends(manager_dep)) -> dict[str, object]:
        result = manager.close_round()
        return {
            "round_id": result.round_id,
            "correct_letter": result.correct_letter,
            "correct_answer": result.question.correct_answer,
            "closed_at": _iso(result.closed_at),
            "results": [asdict(scored) for scored in result.results],
            "payload": result.payload,
        }

    @app.post("/rounds/{round_id}/votes")
    def cast_vote(
        round_id: str,
        payload: VotePayload,
        manager: TriviaManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            receipt = manager.cast_vote(
                round_id,
                payload.participant_id,
                payload.option,
                payload.display_name or payload.participant_id,
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {
            "accepted": receipt.accepted,
            "outcome": receipt.outcome.value,
            "message": vote_acknowledgement(receipt),
            "cast_at": _iso(receipt.vote.cast_at) if receipt.vote else None,
        }

    @app.get("/status", dependencies=admin_only)
    def get_status(manager: TriviaManager = Depends(manager_dep)) -> dict[str, object]:
        snapshot = manager.get_status()
        body = asdict(snapshot)
        body["opened_at"] = _iso(snapshot.opened_at)
        return body

    @app.post("/participants/{participant_id}/points", dependencies=admin_only)
    def adjust_points(
        participant_id: str,
        payload: PointsPayload,
        manager: TriviaManager = Depends(manager_dep),
    ) -> dict[str, object]:
        try:
            new_total = manager.adjust_points(participant_id, payload.amount, payload.display_name or "")
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"participant_id": participant_id, "amount": payload.amount, "points": new_total}

    @app.get("/participants/{participant_id}")
    def get_score(participant_id: str, manager: TriviaManager = Depends(manager_dep)) -> dict[str, object]:
        stats = manager.get_score(participant_id)
        return {
            "participant_id": participant_id,
            "display_name": stats.score.display_name,
            "points": stats.score.points,
            "correct": stats.score.correct,
            "total": stats.score.total,
            "accuracy": stats.accuracy,
            "rank": stats.rank,
        }

    @app.get("/leaderboard")
    def get_leaderboard(
        page: int = Query(1, ge=1),
        page_size: int | None = Query(None, ge=1, le=100),
        manager: TriviaManager = Depends(manager_dep),
    ) -> dict[str, object]:
        board = manager.get_leaderboard(page, page_size)
        if not board.entries and board.total_players:
            raise HTTPException(
                status_code=404,
                detail=f"Invalid page number. Total pages: {board.total_pages}",
            )
        return {
            **render_leaderboard_header(board),
            "page": board.page,
            "page_size": board.page_size,
            "total_pages": board.total_pages,
            "total_players": board.total_players,
            "entries": [_entry_to_dict(entry) for entry in board.entries],
        }

    return app


def start_api_server(
    trivia_manager: TriviaManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    admin_ids: Collection[str] = (),
    open_interval_hours: float = 6.0,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(trivia_manager, admin_ids=admin_ids, open_interval_hours=open_interval_hours)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="TriviaApiServer", daemon=True)
    thread.start()
    return thread
