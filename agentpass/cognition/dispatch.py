"""Request dispatch -- structured commands, skill recording and completion.

The :class:`DispatchEngine` is the single entry point for inbound chat
messages.  Each call walks ``Idle -> ClassifyInput -> {CommandPath |
CompletionPath} -> Responded`` and always ends with text; no exception
escapes :meth:`DispatchEngine.process`.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from agentpass.cognition.classifier import SkillClassifier, SkillTag
from agentpass.cognition.collaborators import (
    ChatMessage,
    CommandHandler,
    CompletionClient,
)
from agentpass.cognition.prompts import build_system_prompt
from agentpass.errors import CompletionError
from agentpass.registry.store import AgentRegistry

logger = logging.getLogger(__name__)

HistoryItem = Union[ChatMessage, Mapping[str, Any]]

EMPTY_INPUT_MESSAGE = "Please send a non-empty message."
TOO_LONG_TEMPLATE = "Message is too long. Maximum {limit} characters."
COMMAND_ERROR_PREFIX = "Command error: "
COMPLETION_ERROR_PREFIX = "Error: "

_DISALLOWED_CHARS = re.compile(r"[^\w\s?!.,;:()\-]")
_WHITESPACE = re.compile(r"\s+")
_BLANK_RUNS = re.compile(r"\n{3,}")


class DispatchPath(str, enum.Enum):
    REJECTED = "rejected"
    COMMAND = "command"
    COMPLETION = "completion"


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened to one message."""

    response: str
    path: DispatchPath
    skill: SkillTag = SkillTag.NONE
    success: Optional[bool] = None


@dataclass
class DispatchConfig:
    """Configuration for the :class:`DispatchEngine`.

    Parameters
    ----------
    max_input_length:
        Longest accepted message after whitespace normalisation.
    history_window:
        Number of trailing history turns forwarded to the completion client.
    description_limit:
        Maximum length of the message copy stored with a task outcome.
    system_prompt:
        Preamble for the completion client.  Built from
        :func:`build_system_prompt` when *None*.
    """

    max_input_length: int = 2000
    history_window: int = 10
    description_limit: int = 80
    system_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        if self.max_input_length < 1:
            raise ValueError(f"max_input_length must be >= 1, got {self.max_input_length}")
        if self.history_window < 0:
            raise ValueError(f"history_window must be >= 0, got {self.history_window}")


def clean_input(text: str) -> str:
    """Trim, collapse whitespace and drop characters outside the safe set."""
    text = _WHITESPACE.sub(" ", text.strip())
    return _DISALLOWED_CHARS.sub("", text).strip()


def clean_output(text: str) -> str:
    """Trim and collapse runs of three or more newlines to one blank line."""
    return _BLANK_RUNS.sub("\n\n", text.strip())


class DispatchEngine:
    """Route messages to the command handler or the completion client.

    Parameters
    ----------
    registry:
        Registry receiving task outcomes for recognised skills.
    completion_client:
        Backend for free-form replies.
    command_handler:
        Optional structured-command collaborator.  When *None* every
        message goes to the completion client.
    agent_id:
        Registry id credited with command outcomes.  Outcomes are not
        recorded when *None*.
    classifier:
        Skill classifier.  Uses the default rule set when *None*.
    config:
        Limits and prompt.  Uses defaults when *None*.
    """

    def __init__(
        self,
        registry: AgentRegistry,
        completion_client: CompletionClient,
        command_handler: CommandHandler | None = None,
        agent_id: str | None = None,
        classifier: SkillClassifier | None = None,
        config: DispatchConfig | None = None,
    ) -> None:
        self._registry = registry
        self._completion = completion_client
        self._commands = command_handler
        self._agent_id = agent_id
        self._classifier = classifier or SkillClassifier()
        self._config = config or DispatchConfig()
        self._system_prompt = self._config.system_prompt or build_system_prompt()

    @property
    def agent_id(self) -> str | None:
        return self._agent_id

    @agent_id.setter
    def agent_id(self, value: str | None) -> None:
        self._agent_id = value

    # -- public API ---------------------------------------------------------

    async def process(
        self,
        message: str,
        history: Iterable[HistoryItem] | None = None,
    ) -> str:
        """Return the reply text for *message*.  Never raises."""
        outcome = await self.dispatch(message, history)
        return outcome.response

    async def dispatch(
        self,
        message: str,
        history: Iterable[HistoryItem] | None = None,
    ) -> DispatchOutcome:
        """Like :meth:`process` but also report the path taken."""
        try:
            return await self._dispatch(message or "", history)
        except Exception as exc:
            logger.exception("Unexpected dispatch failure")
            return DispatchOutcome(
                response=f"{COMPLETION_ERROR_PREFIX}{_describe(exc)}",
                path=DispatchPath.REJECTED,
            )

    # -- internals ----------------------------------------------------------

    async def _dispatch(
        self,
        message: str,
        history: Iterable[HistoryItem] | None,
    ) -> DispatchOutcome:
        cleaned = clean_input(message)
        if not cleaned:
            return DispatchOutcome(EMPTY_INPUT_MESSAGE, DispatchPath.REJECTED)
        limit = self._config.max_input_length
        if len(cleaned) > limit:
            return DispatchOutcome(
                TOO_LONG_TEMPLATE.format(limit=limit), DispatchPath.REJECTED
            )

        raw = message.strip()
        if self._commands is not None and self._is_command(raw):
            return await self._run_command(raw)

        return await self._run_completion(cleaned, history)

    def _is_command(self, text: str) -> bool:
        try:
            return bool(self._commands.is_command(text))
        except Exception:
            logger.exception("Command recogniser failed; using completion")
            return False

    async def _run_command(self, message: str) -> DispatchOutcome:
        try:
            result = await self._commands.execute(message)
        except Exception as exc:
            logger.error("Command error: %s", exc)
            return DispatchOutcome(
                response=f"{COMMAND_ERROR_PREFIX}{_describe(exc)}",
                path=DispatchPath.COMMAND,
                success=False,
            )

        skill = self._classifier.classify(message)
        if skill:
            self._record_outcome(message, skill, result.success)

        return DispatchOutcome(
            response=clean_output(result.message),
            path=DispatchPath.COMMAND,
            skill=skill,
            success=result.success,
        )

    def _record_outcome(self, message: str, skill: SkillTag, success: bool) -> None:
        if self._agent_id is None:
            return
        try:
            self._registry.record_task(
                self._agent_id,
                message[: self._config.description_limit],
                skill.value,
                success,
            )
        except Exception:
            logger.exception("Failed to record %s outcome", skill.value)

    async def _run_completion(
        self,
        cleaned: str,
        history: Iterable[HistoryItem] | None,
    ) -> DispatchOutcome:
        messages = self._window(history)
        messages.append(ChatMessage(role="user", content=cleaned))

        try:
            response = await self._completion.complete(self._system_prompt, messages)
        except Exception as exc:
            logger.error("Completion error: %s", _describe(exc))
            return DispatchOutcome(
                response=f"{COMPLETION_ERROR_PREFIX}{_describe(exc)}",
                path=DispatchPath.COMPLETION,
                success=False,
            )

        return DispatchOutcome(
            response=clean_output(response or ""),
            path=DispatchPath.COMPLETION,
            success=True,
        )

    def _window(self, history: Iterable[HistoryItem] | None) -> list[ChatMessage]:
        if not history or self._config.history_window == 0:
            return []
        turns = [_to_chat_message(item) for item in history]
        turns = [t for t in turns if t is not None]
        return turns[-self._config.history_window:]


def _to_chat_message(item: HistoryItem) -> ChatMessage | None:
    if isinstance(item, ChatMessage):
        return item
    if not isinstance(item, Mapping):
        return None
    role = item.get("role")
    content = item.get("content")
    if role not in ("user", "assistant") or not isinstance(content, str):
        return None
    return ChatMessage(role=role, content=content)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, CompletionError):
        return exc.detail
    return str(exc) or type(exc).__name__

