"""Agent registry package -- identities, capabilities and reputation."""

from .models import (
    AgentCapability,
    AgentProfile,
    AgentRegistration,
    Currency,
    Pricing,
    TaskRecord,
)
from .profile import NOT_INITIALIZED, ProfileManager, default_capabilities
from .store import AgentRegistry, ReputationPolicy, SequentialIdGenerator

__all__ = [
    "AgentCapability",
    "AgentProfile",
    "AgentRegistration",
    "AgentRegistry",
    "Currency",
    "NOT_INITIALIZED",
    "Pricing",
    "ProfileManager",
    "ReputationPolicy",
    "SequentialIdGenerator",
    "TaskRecord",
    "default_capabilities",
]
