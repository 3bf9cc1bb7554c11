"""In-memory agent registry with reputation aggregation.

The :class:`AgentRegistry` is the sole owner of the ``agent_id ->
AgentProfile`` mapping.  Every mutation happens under one registry-wide
lock and every read hands out a deep copy, so callers never observe a
half-applied task outcome.

Usage:
    registry = AgentRegistry()
    agent_id = registry.register_agent(
        AgentRegistration(name="Scout", description="...", version="1.0.0")
    )
    registry.record_task(agent_id, "check balance", "Balance Checker", True)
    profile = registry.get_agent(agent_id)
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from agentpass.errors import AgentPassError, AgentValidationError

from .models import (
    INITIAL_SUCCESS_RATE,
    REPUTATION_MAX,
    REPUTATION_MIN,
    AgentCapability,
    AgentProfile,
    AgentRegistration,
    Pricing,
    TaskRecord,
)

logger = logging.getLogger(__name__)

IdGenerator = Callable[[], str]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SequentialIdGenerator:
    """Monotonic agent id generator: ``agent_000001_1f2e3d4c``.

    The counter guarantees ordering within a process; the random suffix keeps
    ids from separate processes apart.
    """

    def __init__(self, prefix: str = "agent") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}_{n:06d}_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class ReputationPolicy:
    """Reputation adjustment applied per recorded task outcome.

    Attributes:
        success_delta: Points added on success (toward 100).
        failure_penalty: Points removed on failure (toward 0).
    """

    success_delta: int = 1
    failure_penalty: int = 2

    def __post_init__(self) -> None:
        if self.success_delta < 0:
            raise ValueError(f"success_delta must be >= 0, got {self.success_delta}")
        if self.failure_penalty < 0:
            raise ValueError(f"failure_penalty must be >= 0, got {self.failure_penalty}")

    def apply(self, reputation: int, success: bool) -> int:
        delta = self.success_delta if success else -self.failure_penalty
        return clamp_reputation(reputation + delta)


def clamp_reputation(value: int) -> int:
    return max(REPUTATION_MIN, min(REPUTATION_MAX, int(value)))


@dataclass
class _Outcomes:
    successes: int = 0
    failures: int = 0

    @property
    def total(self) -> int:
        return self.successes + self.failures

    def success_rate(self) -> float:
        if self.total == 0:
            return INITIAL_SUCCESS_RATE
        return 100.0 * self.successes / self.total


class AgentRegistry:
    """Registry of agent identities, capabilities and reputation.

    Parameters
    ----------
    id_generator:
        Callable returning a fresh agent id.  Defaults to
        :class:`SequentialIdGenerator`.
    clock:
        Callable returning the current timestamp.  Defaults to UTC now.
    policy:
        Reputation adjustment policy.
    """

    def __init__(
        self,
        id_generator: IdGenerator | None = None,
        clock: Clock | None = None,
        policy: ReputationPolicy | None = None,
    ) -> None:
        self._id_generator = id_generator or SequentialIdGenerator()
        self._clock = clock or utc_now
        self._policy = policy or ReputationPolicy()
        self._agents: dict[str, AgentProfile] = {}
        self._outcomes: dict[str, _Outcomes] = {}
        self._lock = threading.RLock()

    @property
    def policy(self) -> ReputationPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Registration & lookup
    # ------------------------------------------------------------------

    def register_agent(self, data: AgentRegistration) -> str:
        """Create a new agent record and return its id.

        Every call creates a new record; there is no deduplication by name.

        Raises:
            AgentValidationError: If ``name`` or ``version`` is empty, or the
                seeded statistics are out of range.
        """
        if not data.name or not data.name.strip():
            raise AgentValidationError("Agent name must not be empty")
        if not data.version or not data.version.strip():
            raise AgentValidationError("Agent version must not be empty")
        if data.tasks_completed < 0:
            raise AgentValidationError(
                f"tasks_completed must be >= 0, got {data.tasks_completed}"
            )
        if not (0.0 <= data.success_rate <= 100.0):
            raise AgentValidationError(
                f"success_rate must be 0-100, got {data.success_rate}"
            )

        capabilities: list[AgentCapability] = []
        seen: set[str] = set()
        for capability in data.capabilities:
            if capability.name in seen:
                logger.warning(
                    "Dropping duplicate capability %r for agent %r",
                    capability.name,
                    data.name,
                )
                continue
            seen.add(capability.name)
            capabilities.append(copy.copy(capability))

        successes = round(data.tasks_completed * data.success_rate / 100.0)
        outcomes = _Outcomes(
            successes=successes,
            failures=data.tasks_completed - successes,
        )

        with self._lock:
            agent_id = self._id_generator()
            if agent_id in self._agents:
                raise AgentPassError(f"Id generator reused agent id {agent_id!r}")
            now = self._clock()
            profile = AgentProfile(
                id=agent_id,
                name=data.name,
                description=data.description,
                version=data.version,
                public_key=data.public_key or None,
                capabilities=capabilities,
                reputation=clamp_reputation(data.reputation),
                tasks_completed=outcomes.total,
                success_rate=outcomes.success_rate(),
                created_at=now,
                last_active=now,
            )
            self._agents[agent_id] = profile
            self._outcomes[agent_id] = outcomes

        logger.info("Registered agent %s (%s v%s)", agent_id, data.name, data.version)
        return agent_id

    def get_agent(self, agent_id: str) -> Optional[AgentProfile]:
        """Return a snapshot of the agent profile, or None if unknown."""
        with self._lock:
            profile = self._agents.get(agent_id)
            return copy.deepcopy(profile) if profile is not None else None

    def list_agents(self) -> list[AgentProfile]:
        """Return snapshots of all agents in registration order."""
        with self._lock:
            return [copy.deepcopy(p) for p in self._agents.values()]

    # ------------------------------------------------------------------
    # Task outcomes
    # ------------------------------------------------------------------

    def record_task(
        self,
        agent_id: str,
        description: str,
        skill_name: str,
        success: bool,
    ) -> None:
        """Apply one task outcome to the agent's statistics.

        Unknown ``agent_id`` values are ignored.  This method never raises.
        """
        try:
            self._apply_outcome(agent_id, description, skill_name, success)
        except Exception:
            logger.exception("Failed to record task for agent %s", agent_id)

    def _apply_outcome(
        self,
        agent_id: str,
        description: str,
        skill_name: str,
        success: bool,
    ) -> None:
        with self._lock:
            profile = self._agents.get(agent_id)
            if profile is None:
                logger.debug("record_task ignored for unknown agent %s", agent_id)
                return

            record = TaskRecord(
                description=description,
                skill_name=skill_name,
                success=bool(success),
                timestamp=self._clock(),
            )
            reputation = self._policy.apply(profile.reputation, record.success)

            outcomes = self._outcomes[agent_id]
            if record.success:
                outcomes.successes += 1
            else:
                outcomes.failures += 1

            profile.tasks_completed = outcomes.total
            profile.success_rate = outcomes.success_rate()
            profile.reputation = reputation
            profile.last_active = record.timestamp

        logger.debug(
            "Recorded task for %s: skill=%s success=%s reputation=%d",
            agent_id,
            record.skill_name,
            record.success,
            reputation,
        )

    # ------------------------------------------------------------------
    # Profile mutations
    # ------------------------------------------------------------------

    def add_capability(self, agent_id: str, capability: AgentCapability) -> bool:
        """Append *capability*; returns False if unknown agent or duplicate name."""
        with self._lock:
            profile = self._agents.get(agent_id)
            if profile is None:
                return False
            if profile.get_capability(capability.name) is not None:
                logger.warning(
                    "Capability %r already present on agent %s",
                    capability.name,
                    agent_id,
                )
                return False
            profile.capabilities.append(copy.copy(capability))
        logger.info("Added capability: %s", capability.name)
        return True

    def set_capability_enabled(self, agent_id: str, name: str, enabled: bool) -> bool:
        with self._lock:
            profile = self._agents.get(agent_id)
            capability = profile.get_capability(name) if profile is not None else None
            if capability is None:
                return False
            capability.enabled = enabled
        logger.info("%s %s", "Enabled" if enabled else "Disabled", name)
        return True

    def set_pricing(self, agent_id: str, pricing: Pricing) -> bool:
        with self._lock:
            profile = self._agents.get(agent_id)
            if profile is None:
                return False
            profile.pricing = copy.copy(pricing)
        logger.info(
            "Pricing set: %s %s per task",
            pricing.price_per_task,
            pricing.currency.value,
        )
        return True

    def update_description(self, agent_id: str, description: str) -> bool:
        with self._lock:
            profile = self._agents.get(agent_id)
            if profile is None:
                return False
            profile.description = description
        return True

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    def __contains__(self, agent_id: object) -> bool:
        with self._lock:
            return agent_id in self._agents

    def __iter__(self) -> Iterator[AgentProfile]:
        return iter(self.list_agents())
