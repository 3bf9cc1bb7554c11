"""Application container and FastAPI dependencies.

One :class:`AppState` is built per process and shared by every request;
there are no module-level singletons for the registry or the engine.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException, Request

from agentpass.cognition.collaborators import CommandHandler, CompletionClient
from agentpass.cognition.dispatch import DispatchConfig, DispatchEngine
from agentpass.cognition.llm_client import create_completion_client
from agentpass.cognition.prompts import build_system_prompt
from agentpass.config.settings import Settings
from agentpass.registry.profile import ProfileManager
from agentpass.registry.store import AgentRegistry, ReputationPolicy
from agentpass.solana.commands import SolanaCommandHandler
from agentpass.solana.rpc import RPC_URLS, SolanaRPCClient

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    settings: Settings
    registry: AgentRegistry
    profiles: ProfileManager
    engine: DispatchEngine
    completion_client: CompletionClient
    command_handler: Optional[CommandHandler] = None


def build_app_state(
    s: Settings,
    completion_client: CompletionClient | None = None,
    command_handler: CommandHandler | None = None,
) -> AppState:
    """Wire registry, local profile, collaborators and engine from settings."""
    registry = AgentRegistry(
        policy=ReputationPolicy(
            success_delta=s.REPUTATION_SUCCESS_DELTA,
            failure_penalty=s.REPUTATION_FAILURE_PENALTY,
        )
    )
    profiles = ProfileManager(registry)

    agent_id: str | None = None
    if s.SAP_ENABLED:
        agent_id = profiles.initialize(
            name=s.SAP_AGENT_NAME,
            description=s.SAP_AGENT_DESCRIPTION,
            version=s.SAP_AGENT_VERSION,
            public_key=s.AGENT_WALLET_PUBLIC or None,
        )
        logger.info("Local agent profile initialised: %s", agent_id)

    if command_handler is None and s.SOLANA_ENABLED:
        command_handler = SolanaCommandHandler(
            SolanaRPCClient(
                rpc_url=s.SOLANA_RPC_URL or RPC_URLS[s.SOLANA_NETWORK],
                timeout=s.SOLANA_RPC_TIMEOUT_SECONDS,
                price_url=s.JUPITER_PRICE_URL,
            ),
            profile_manager=profiles,
        )

    completion_client = completion_client or create_completion_client(s)

    engine = DispatchEngine(
        registry=registry,
        completion_client=completion_client,
        command_handler=command_handler,
        agent_id=agent_id,
        config=DispatchConfig(
            max_input_length=s.MAX_INPUT_LENGTH,
            history_window=s.HISTORY_WINDOW,
            system_prompt=build_system_prompt(s.AGENT_WALLET_PUBLIC),
        ),
    )

    return AppState(
        settings=s,
        registry=registry,
        profiles=profiles,
        engine=engine,
        completion_client=completion_client,
        command_handler=command_handler,
    )


def get_state(request: Request) -> AppState:
    return request.app.state.agentpass


async def require_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(default=None),
) -> None:
    """Reject requests without the configured ``X-API-Key`` (if any)."""
    expected = get_state(request).settings.WEB_API_KEY
    if not expected:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")
