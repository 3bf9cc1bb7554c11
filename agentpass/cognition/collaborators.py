"""Narrow interfaces for the collaborators the dispatch engine consumes.

The engine only ever sees these shapes; production wiring supplies the
Solana command handler and an LLM client, tests supply fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, Sequence, runtime_checkable

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a structured command.

    Attributes:
        message: Text returned to the user as-is.
        success: Whether the command achieved its goal; feeds reputation.
    """

    message: str
    success: bool


@runtime_checkable
class CommandHandler(Protocol):
    """Recogniser/executor for on-chain and data commands."""

    def is_command(self, text: str) -> bool: ...

    async def execute(self, text: str) -> CommandResult: ...


@runtime_checkable
class CompletionClient(Protocol):
    """Chat completion backend.  May raise on any failure."""

    async def complete(
        self,
        system_prompt: str,
        messages: Sequence[ChatMessage],
    ) -> str: ...
