"""Cognition package -- skill classification, dispatch and completion clients."""

from __future__ import annotations

from agentpass.cognition.classifier import (
    DEFAULT_RULES,
    SkillClassifier,
    SkillRule,
    SkillTag,
    classify_skill,
)
from agentpass.cognition.collaborators import (
    ChatMessage,
    CommandHandler,
    CommandResult,
    CompletionClient,
)
from agentpass.cognition.dispatch import (
    DispatchConfig,
    DispatchEngine,
    DispatchOutcome,
    DispatchPath,
)
from agentpass.cognition.prompts import build_system_prompt

__all__ = [
    # Classification
    "DEFAULT_RULES",
    "SkillClassifier",
    "SkillRule",
    "SkillTag",
    "classify_skill",
    # Collaborators
    "ChatMessage",
    "CommandHandler",
    "CommandResult",
    "CompletionClient",
    # Dispatch
    "DispatchConfig",
    "DispatchEngine",
    "DispatchOutcome",
    "DispatchPath",
    "build_system_prompt",
]
