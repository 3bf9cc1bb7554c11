"""Agent message, profile and manifest endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from agentpass.api.deps import AppState, get_state, require_api_key

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/agent",
    tags=["agent"],
    dependencies=[Depends(require_api_key)],
)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class MessageRequest(BaseModel):
    message: str
    history: list[HistoryTurn] = Field(default_factory=list)


class MessageResponse(BaseModel):
    response: str
    path: str
    skill: str | None = None


class ProfileResponse(BaseModel):
    summary: str
    initialized: bool


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/message", response_model=MessageResponse)
async def agent_message(
    req: MessageRequest,
    state: AppState = Depends(get_state),
) -> MessageResponse:
    outcome = await state.engine.dispatch(
        req.message, [turn.model_dump() for turn in req.history]
    )
    logger.info("Dispatched message via %s path", outcome.path.value)
    return MessageResponse(
        response=outcome.response,
        path=outcome.path.value,
        skill=outcome.skill.value or None,
    )


@router.get("/profile", response_model=ProfileResponse)
async def agent_profile(state: AppState = Depends(get_state)) -> ProfileResponse:
    return ProfileResponse(
        summary=state.profiles.get_summary(),
        initialized=state.profiles.is_initialized,
    )


@router.get("/manifest")
async def agent_manifest(state: AppState = Depends(get_state)) -> dict:
    manifest = state.profiles.export_for_openclaw()
    if manifest is None:
        raise HTTPException(status_code=404, detail="Agent not initialized.")
    return manifest


@router.get("/agents/{agent_id}")
async def get_agent(agent_id: str, state: AppState = Depends(get_state)) -> dict:
    profile = state.registry.get_agent(agent_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found.")
    return profile.to_dict()
