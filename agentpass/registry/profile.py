"""Local agent profile management.

:class:`ProfileManager` is a façade over the one registry record that
describes *this* agent.  It keeps nothing but that record's id; every read
goes back to the :class:`~agentpass.registry.store.AgentRegistry`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from .models import AgentCapability, AgentProfile, AgentRegistration, Currency, Pricing
from .store import AgentRegistry

logger = logging.getLogger(__name__)

NOT_INITIALIZED = "Agent not initialized"
OPENCLAW_AUTHOR = "Solana Agent Protocol"

_RULE = "━" * 34


def default_capabilities() -> list[AgentCapability]:
    """Starter capability set declared by every freshly initialised agent."""
    return [
        AgentCapability("Solana Balance Check", "Check SOL and SPL token balances"),
        AgentCapability("Token Price Query", "Get real-time token prices via Jupiter"),
        AgentCapability("Transaction Analysis", "Analyze and format recent transactions"),
        AgentCapability("Network Status", "Check Solana network health"),
        AgentCapability("Natural Language Processing", "Understand and process user queries"),
        AgentCapability("Multi-Provider AI", "Support for Ollama, OpenAI, and local models"),
    ]


def slugify(name: str) -> str:
    return re.sub(r"\s+", "-", name.lower())


class ProfileManager:
    """Capability, pricing and presentation helpers for the local agent.

    Parameters
    ----------
    registry:
        Registry holding the local agent record.
    """

    def __init__(self, registry: AgentRegistry) -> None:
        self._registry = registry
        self._agent_id: Optional[str] = None

    @property
    def agent_id(self) -> Optional[str]:
        return self._agent_id

    @property
    def is_initialized(self) -> bool:
        return self._agent_id is not None

    def initialize(
        self,
        name: str,
        description: str,
        version: str,
        public_key: Optional[str] = None,
        capabilities: Optional[list[AgentCapability]] = None,
    ) -> str:
        """Register the local agent and return its id.

        A second call returns the already-registered id without creating
        another registry entry.

        Raises:
            AgentValidationError: If ``name`` or ``version`` is empty.
        """
        if self._agent_id is not None:
            logger.info("Local agent already initialised as %s", self._agent_id)
            return self._agent_id

        self._agent_id = self._registry.register_agent(
            AgentRegistration(
                name=name,
                description=description,
                version=version,
                public_key=public_key,
                capabilities=(
                    default_capabilities() if capabilities is None else capabilities
                ),
                reputation=0,
                tasks_completed=0,
                success_rate=100.0,
            )
        )
        return self._agent_id

    def get_profile(self) -> Optional[AgentProfile]:
        if self._agent_id is None:
            return None
        return self._registry.get_agent(self._agent_id)

    # -- capabilities -------------------------------------------------------

    def add_capability(self, capability: AgentCapability) -> bool:
        """Append a capability; False when uninitialised or the name exists."""
        if self._agent_id is None:
            return False
        return self._registry.add_capability(self._agent_id, capability)

    def toggle_capability(self, name: str, enabled: bool) -> bool:
        if self._agent_id is None:
            return False
        return self._registry.set_capability_enabled(self._agent_id, name, enabled)

    def get_enabled_capabilities(self) -> list[AgentCapability]:
        profile = self.get_profile()
        if profile is None:
            return []
        return profile.enabled_capabilities()

    # -- mutable details ----------------------------------------------------

    def update_description(self, description: str) -> bool:
        if self._agent_id is None:
            return False
        return self._registry.update_description(self._agent_id, description)

    def set_pricing(self, price_per_task: float, currency: Currency | str) -> bool:
        if self._agent_id is None:
            return False
        return self._registry.set_pricing(
            self._agent_id, Pricing(price_per_task=price_per_task, currency=Currency(currency))
        )

    # -- views --------------------------------------------------------------

    def get_summary(self) -> str:
        """Human-readable profile card, or :data:`NOT_INITIALIZED`."""
        profile = self.get_profile()
        if profile is None:
            return NOT_INITIALIZED

        capabilities = profile.enabled_capabilities()
        lines = [
            "**Agent Profile**",
            _RULE,
            f"Name: {profile.name}",
            f"Description: {profile.description}",
            f"ID: {profile.id}",
            f"Version: {profile.version}",
            f"Wallet: {profile.public_key or 'Not configured'}",
            "",
            f"**Capabilities ({len(capabilities)}):**",
            *(f"  • {c.name} (v{c.version})" for c in capabilities),
            "",
            "**Statistics:**",
            f"  Reputation: {profile.reputation}/100",
            f"  Tasks Completed: {profile.tasks_completed}",
            f"  Success Rate: {profile.success_rate:.1f}%",
            "",
        ]
        if profile.pricing is not None:
            lines.append(
                f"Pricing: {profile.pricing.price_per_task} "
                f"{profile.pricing.currency.value} per task"
            )
            lines.append("")
        lines += [
            f"Created: {profile.created_at:%Y-%m-%d %H:%M:%S}",
            f"Last Active: {profile.last_active:%Y-%m-%d %H:%M:%S}",
            _RULE,
        ]
        return "\n".join(lines)

    def export_for_openclaw(self) -> Optional[dict[str, Any]]:
        """OpenClaw skill manifest for the local agent, or None."""
        profile = self.get_profile()
        if profile is None:
            return None

        return {
            "name": slugify(profile.name),
            "version": profile.version,
            "description": profile.description,
            "author": OPENCLAW_AUTHOR,
            "capabilities": [c.name for c in profile.enabled_capabilities()],
            "config": {
                "agentId": profile.id,
                "solanaEnabled": True,
                "reputation": profile.reputation,
            },
        }
