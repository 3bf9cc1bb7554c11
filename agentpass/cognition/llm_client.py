"""Completion clients for the dispatch engine's free-form path.

Providers:
- ``anthropic``: Claude via the official async SDK.
- ``openai``: chat-completions API over *httpx*.
- ``ollama``: local Ollama ``/api/chat`` over *httpx*.
- ``local``: offline canned reply, no network.

Every client implements
:class:`~agentpass.cognition.collaborators.CompletionClient` and raises
:class:`~agentpass.errors.CompletionError` on failure.  Timeouts are set
here, at the collaborator boundary; the engine never imposes one.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from anthropic import APIError, APIStatusError, AsyncAnthropic

from agentpass.cognition.collaborators import ChatMessage
from agentpass.config.settings import Settings, settings
from agentpass.errors import CompletionError

logger = logging.getLogger(__name__)

_OPENAI_URL = "https://api.openai.com/v1"

_OPENAI_KEY_MISSING = "OPENAI_API_KEY is not configured. Set it in the environment or .env."
_ANTHROPIC_KEY_MISSING = (
    "ANTHROPIC_API_KEY is not configured. Set it in the environment or .env."
)

LOCAL_REPLY = (
    "Running in local mode without a language model. "
    "Set AI_PROVIDER to openai, ollama or anthropic for full answers; "
    "on-chain commands such as /balance <address> work without one."
)


def _http_error_detail(exc: httpx.HTTPStatusError) -> str:
    """Pull the provider's own error message out of an HTTP error body."""
    try:
        body = exc.response.json()
    except ValueError:
        return exc.response.text or str(exc)
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return str(exc)


class _HTTPCompletionClient:
    """Shared request plumbing for JSON-over-HTTP providers."""

    def __init__(
        self,
        base_url: str,
        timeout: float,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    async def _post(self, path: str, payload: dict[str, Any], headers: dict[str, str]) -> Any:
        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
                return resp.json()
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPStatusError as exc:
            raise CompletionError(
                _http_error_detail(exc), status_code=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise CompletionError(str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise CompletionError(f"Invalid JSON from provider: {exc}") from exc

    async def _get_ok(self, path: str, headers: dict[str, str] | None = None) -> bool:
        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                resp = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Health check for %s failed: %s", url, exc)
            return False
        return resp.status_code == 200


class OpenAICompletionClient(_HTTPCompletionClient):
    """OpenAI chat-completions client.

    Parameters
    ----------
    api_key:
        OpenAI API key.
    model:
        Model identifier, e.g. ``gpt-4o-mini``.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        base_url: str = _OPENAI_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout, client)
        if not api_key:
            logger.warning(_OPENAI_KEY_MISSING)
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        if not self._api_key:
            raise CompletionError(_OPENAI_KEY_MISSING)
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                *(m.to_dict() for m in messages),
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        data = await self._post("/chat/completions", payload, self._headers())
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError(f"Unexpected OpenAI response shape: {exc!r}") from exc

    async def check_health(self) -> bool:
        if not self._api_key:
            return False
        return await self._get_ok("/models", self._headers())


class OllamaCompletionClient(_HTTPCompletionClient):
    """Client for a local Ollama server."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout, client)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                *(m.to_dict() for m in messages),
            ],
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "num_predict": self._max_tokens,
            },
        }
        data = await self._post("/api/chat", payload, {"Content-Type": "application/json"})
        try:
            return data["message"]["content"] or ""
        except (KeyError, TypeError) as exc:
            raise CompletionError(f"Unexpected Ollama response shape: {exc!r}") from exc

    async def check_health(self) -> bool:
        return await self._get_ok("/api/tags")


class AnthropicCompletionClient:
    """Async Anthropic client.

    Parameters
    ----------
    api_key:
        Anthropic API key.
    model:
        Claude model identifier.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-20241022",
        temperature: float = 0.7,
        max_tokens: int = 1000,
        timeout: float = 60.0,
        client: AsyncAnthropic | None = None,
    ) -> None:
        if client is None and api_key:
            client = AsyncAnthropic(api_key=api_key, timeout=timeout)
        elif client is None:
            logger.warning(_ANTHROPIC_KEY_MISSING)
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        if self._client is None:
            raise CompletionError(_ANTHROPIC_KEY_MISSING)
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                system=system_prompt,
                messages=[m.to_dict() for m in messages],
                temperature=self._temperature,
            )
        except APIStatusError as exc:
            raise CompletionError(exc.message, status_code=exc.status_code) from exc
        except APIError as exc:
            raise CompletionError(str(exc)) from exc

        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text

        logger.debug(
            "Anthropic completion: %d input, %d output tokens",
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return text

    async def check_health(self) -> bool:
        return self._client is not None


class LocalCompletionClient:
    """Offline fallback used when no provider is configured."""

    def __init__(self, reply: str = LOCAL_REPLY) -> None:
        self._reply = reply

    async def complete(self, system_prompt: str, messages: Sequence[ChatMessage]) -> str:
        return self._reply

    async def check_health(self) -> bool:
        return True


def create_completion_client(
    s: Settings | None = None,
) -> OpenAICompletionClient | OllamaCompletionClient | AnthropicCompletionClient | LocalCompletionClient:
    """Build the completion client selected by ``AI_PROVIDER``."""
    s = s or settings
    if s.AI_PROVIDER == "openai":
        return OpenAICompletionClient(
            api_key=s.OPENAI_API_KEY,
            model=s.AI_MODEL_NAME,
            temperature=s.AI_TEMPERATURE,
            max_tokens=s.AI_MAX_TOKENS,
            timeout=s.COMPLETION_TIMEOUT_SECONDS,
        )
    if s.AI_PROVIDER == "ollama":
        return OllamaCompletionClient(
            base_url=s.OLLAMA_BASE_URL,
            model=s.AI_MODEL_NAME,
            temperature=s.AI_TEMPERATURE,
            max_tokens=s.AI_MAX_TOKENS,
            timeout=s.COMPLETION_TIMEOUT_SECONDS,
        )
    if s.AI_PROVIDER == "anthropic":
        return AnthropicCompletionClient(
            api_key=s.ANTHROPIC_API_KEY,
            model=s.AI_MODEL_NAME,
            temperature=s.AI_TEMPERATURE,
            max_tokens=s.AI_MAX_TOKENS,
            timeout=s.COMPLETION_TIMEOUT_SECONDS,
        )
    return LocalCompletionClient()
