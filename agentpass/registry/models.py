"""Agent registry models using pure dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

REPUTATION_MIN = 0
REPUTATION_MAX = 100
INITIAL_SUCCESS_RATE = 100.0


class Currency(str, Enum):
    SOL = "SOL"
    USDC = "USDC"


@dataclass
class AgentCapability:
    """A named, versioned, toggle-able feature advertised by an agent."""

    name: str
    description: str = ""
    version: str = "1.0.0"
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "enabled": self.enabled,
        }


@dataclass
class Pricing:
    price_per_task: float
    currency: Currency

    def __post_init__(self) -> None:
        if self.price_per_task < 0:
            raise ValueError(f"price_per_task must be >= 0, got {self.price_per_task}")
        self.currency = Currency(self.currency)

    def to_dict(self) -> dict[str, Any]:
        return {"pricePerTask": self.price_per_task, "currency": self.currency.value}


@dataclass
class AgentRegistration:
    """Input for :meth:`AgentRegistry.register_agent`.

    Attributes:
        name: Display name, must be non-empty.
        description: Free-form description.
        version: Agent version string, must be non-empty.
        public_key: Optional wallet public key.
        capabilities: Initial capability list (duplicate names are dropped).
        reputation: Starting reputation, clamped to [0, 100].
        tasks_completed: Previously completed tasks to seed the counters with.
        success_rate: Success rate matching ``tasks_completed``.
    """

    name: str
    description: str
    version: str
    public_key: Optional[str] = None
    capabilities: List[AgentCapability] = field(default_factory=list)
    reputation: int = 0
    tasks_completed: int = 0
    success_rate: float = INITIAL_SUCCESS_RATE


@dataclass
class AgentProfile:
    id: str
    name: str
    description: str
    version: str
    created_at: datetime
    last_active: datetime
    public_key: Optional[str] = None
    capabilities: List[AgentCapability] = field(default_factory=list)
    reputation: int = 0
    tasks_completed: int = 0
    success_rate: float = INITIAL_SUCCESS_RATE
    pricing: Optional[Pricing] = None

    def __post_init__(self) -> None:
        if not (REPUTATION_MIN <= self.reputation <= REPUTATION_MAX):
            raise ValueError(f"reputation must be 0-100, got {self.reputation}")
        if self.tasks_completed < 0:
            raise ValueError(f"tasks_completed must be >= 0, got {self.tasks_completed}")
        if not (0.0 <= self.success_rate <= 100.0):
            raise ValueError(f"success_rate must be 0-100, got {self.success_rate}")

    def get_capability(self, name: str) -> Optional[AgentCapability]:
        for capability in self.capabilities:
            if capability.name == name:
                return capability
        return None

    def enabled_capabilities(self) -> List[AgentCapability]:
        return [c for c in self.capabilities if c.enabled]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "publicKey": self.public_key,
            "capabilities": [c.to_dict() for c in self.capabilities],
            "reputation": self.reputation,
            "tasksCompleted": self.tasks_completed,
            "successRate": self.success_rate,
            "pricing": self.pricing.to_dict() if self.pricing else None,
            "createdAt": self.created_at.isoformat(),
            "lastActive": self.last_active.isoformat(),
        }


@dataclass(frozen=True)
class TaskRecord:
    """One skill invocation outcome; only its aggregate effect is kept."""

    description: str
    skill_name: str
    success: bool
    timestamp: datetime
