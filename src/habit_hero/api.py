from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from habit_hero.constants import HERO_CLASSES
from habit_hero.converters import state_to_snapshot, to_jsonable
from habit_hero.difficulty import DIFFICULTIES
from habit_hero.intents import UnknownIntent, intent_from_payload
from habit_hero.reducer import REJECTED
from habit_hero.service import HeroStatus
from habit_hero.session import GameSession

logger = logging.getLogger(__name__)


def _require_auth(request: Request, token: str | None) -> None:
    if not token:
        return
    header = request.headers.get("x-api-token")
    query = request.query_params.get("token")
    if header == token or query == token:
        return
    raise HTTPException(status_code=401, detail="Unauthorized")


class IntentRequest(BaseModel):
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)


def status_to_dict(status: HeroStatus, lang: str = "en") -> dict[str, Any]:
    data = to_jsonable(asdict(status))
    data["level"] = status.level
    data["coins"] = status.coins
    data["reminders"] = [
        {**to_jsonable(asdict(r)), "message": r.message(lang)} for r in status.reminders
    ]
    return data


def build_app(session: GameSession, api_token: str | None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if not session.loaded:
            result = await session.load()
            logger.info("Session ready for player=%s (%s)", session.player_id, result.source)
        try:
            yield
        finally:
            await session.close()

    app = FastAPI(title="Habit Hero", version="1.0.0", lifespan=lifespan)

    @app.get("/api/status")
    async def api_status(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {
            "player_id": session.player_id,
            "source": session.source,
            "status": status_to_dict(session.status(), session.lang),
        }

    @app.get("/api/state")
    async def api_state(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"player_id": session.player_id, "state": state_to_snapshot(session.state)}

    @app.get("/api/classes")
    async def api_classes(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"classes": [to_jsonable(asdict(c)) for c in HERO_CLASSES.values()]}

    @app.get("/api/difficulties")
    async def api_difficulties(request: Request) -> dict[str, Any]:
        _require_auth(request, api_token)
        return {"difficulties": [asdict(tier) for tier in DIFFICULTIES.values()]}

    @app.post("/api/intents")
    async def api_intents(request: Request, payload: IntentRequest) -> dict[str, Any]:
        _require_auth(request, api_token)
        try:
            intent = intent_from_payload(payload.type, payload.payload)
        except UnknownIntent as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        result = session.dispatch(intent)
        return {
            "ok": result.status != REJECTED,
            "status": result.status,
            "message": result.message,
        }

    return app
