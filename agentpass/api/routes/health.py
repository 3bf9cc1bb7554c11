"""Health check endpoint."""

from fastapi import APIRouter, Depends

from agentpass import __version__
from agentpass.api.deps import AppState, get_state

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(state: AppState = Depends(get_state)) -> dict:
    check = getattr(state.completion_client, "check_health", None)
    ai_ok = await check() if check is not None else True
    return {
        "status": "ok" if ai_ok else "degraded",
        "mode": state.settings.BOT_MODE,
        "provider": state.settings.AI_PROVIDER,
        "ai_available": ai_ok,
        "version": __version__,
    }
