"""Tests for agentpass.cognition.llm_client."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from agentpass.cognition.collaborators import ChatMessage, CompletionClient
from agentpass.cognition.llm_client import (
    LOCAL_REPLY,
    AnthropicCompletionClient,
    LocalCompletionClient,
    OllamaCompletionClient,
    OpenAICompletionClient,
    create_completion_client,
)
from agentpass.config.settings import Settings
from agentpass.errors import CompletionError

MESSAGES = [
    ChatMessage(role="assistant", content="earlier"),
    ChatMessage(role="user", content="hello"),
]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


class TestOpenAICompletionClient:
    @pytest.mark.asyncio
    async def test_missing_key_fails_per_request(self):
        def handler(request):
            raise AssertionError("no request expected without a key")

        client = OpenAICompletionClient(api_key="", client=_client(handler))
        with pytest.raises(CompletionError, match="OPENAI_API_KEY"):
            await client.complete("S", MESSAGES)
        assert await client.check_health() is False

    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"choices": [{"message": {"content": "hi!"}}]}
            )

        client = OpenAICompletionClient(
            api_key="sk-test", model="gpt-4o-mini", client=_client(handler)
        )
        reply = await client.complete("SYSTEM", MESSAGES)

        assert reply == "hi!"
        assert seen["url"] == "https://api.openai.com/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["model"] == "gpt-4o-mini"
        assert seen["body"]["messages"][0] == {"role": "system", "content": "SYSTEM"}
        assert seen["body"]["messages"][1:] == [m.to_dict() for m in MESSAGES]

    @pytest.mark.asyncio
    async def test_error_detail_from_body(self):
        def handler(request):
            return httpx.Response(
                429, json={"error": {"message": "Rate limit reached"}}
            )

        client = OpenAICompletionClient(api_key="sk", client=_client(handler))
        with pytest.raises(CompletionError) as exc_info:
            await client.complete("S", MESSAGES)
        assert exc_info.value.detail == "Rate limit reached"
        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        client = OpenAICompletionClient(api_key="sk", client=_client(handler))
        with pytest.raises(CompletionError) as exc_info:
            await client.complete("S", MESSAGES)
        assert exc_info.value.detail == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        client = OpenAICompletionClient(api_key="sk", client=_client(handler))
        with pytest.raises(CompletionError):
            await client.complete("S", MESSAGES)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = OpenAICompletionClient(api_key="sk", client=_client(handler))
        with pytest.raises(CompletionError, match="connection refused"):
            await client.complete("S", MESSAGES)

    @pytest.mark.asyncio
    async def test_check_health(self):
        def handler(request):
            assert request.url.path == "/v1/models"
            return httpx.Response(200, json={"data": []})

        client = OpenAICompletionClient(api_key="sk", client=_client(handler))
        assert await client.check_health() is True


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


class TestOllamaCompletionClient:
    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"message": {"content": "pong"}})

        client = OllamaCompletionClient(
            base_url="http://ollama:11434/", model="llama3", client=_client(handler)
        )
        assert await client.complete("S", MESSAGES) == "pong"
        assert seen["path"] == "/api/chat"
        assert seen["body"]["stream"] is False
        assert seen["body"]["options"]["num_predict"] == 1000

    @pytest.mark.asyncio
    async def test_health_down(self):
        def handler(request):
            return httpx.Response(503)

        client = OllamaCompletionClient(client=_client(handler))
        assert await client.check_health() is False

    @pytest.mark.asyncio
    async def test_health_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        client = OllamaCompletionClient(client=_client(handler))
        assert await client.check_health() is False


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


class TestAnthropicCompletionClient:
    @pytest.mark.asyncio
    async def test_missing_key_fails_per_request(self):
        client = AnthropicCompletionClient(api_key="")
        with pytest.raises(CompletionError, match="ANTHROPIC_API_KEY"):
            await client.complete("S", MESSAGES)
        assert await client.check_health() is False

    @pytest.mark.asyncio
    async def test_complete_joins_text_blocks(self):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Hello "),
                SimpleNamespace(type="tool_use"),
                SimpleNamespace(type="text", text="there"),
            ],
            usage=SimpleNamespace(input_tokens=10, output_tokens=3),
        )
        sdk = SimpleNamespace(messages=SimpleNamespace(create=AsyncMock(return_value=response)))

        client = AnthropicCompletionClient(api_key="", model="claude-test", client=sdk)
        assert await client.complete("SYSTEM", MESSAGES) == "Hello there"

        kwargs = sdk.messages.create.call_args.kwargs
        assert kwargs["system"] == "SYSTEM"
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [m.to_dict() for m in MESSAGES]


# ---------------------------------------------------------------------------
# Local + factory
# ---------------------------------------------------------------------------


class TestLocalCompletionClient:
    @pytest.mark.asyncio
    async def test_canned_reply(self):
        client = LocalCompletionClient()
        assert await client.complete("S", MESSAGES) == LOCAL_REPLY
        assert await client.check_health() is True

    def test_satisfies_protocol(self):
        assert isinstance(LocalCompletionClient(), CompletionClient)


class TestFactory:
    def test_local_default(self):
        client = create_completion_client(Settings(_env_file=None, AI_PROVIDER="local"))
        assert isinstance(client, LocalCompletionClient)

    def test_openai(self):
        s = Settings(_env_file=None, AI_PROVIDER="openai", OPENAI_API_KEY="sk")
        assert isinstance(create_completion_client(s), OpenAICompletionClient)

    def test_ollama(self):
        s = Settings(_env_file=None, AI_PROVIDER="ollama")
        assert isinstance(create_completion_client(s), OllamaCompletionClient)

    def test_anthropic(self):
        s = Settings(_env_file=None, AI_PROVIDER="anthropic", ANTHROPIC_API_KEY="sk-ant")
        assert isinstance(create_completion_client(s), AnthropicCompletionClient)

    @pytest.mark.asyncio
    async def test_openai_without_key_builds_unavailable_client(self):
        s = Settings(_env_file=None, AI_PROVIDER="openai", OPENAI_API_KEY="")
        client = create_completion_client(s)
        assert isinstance(client, OpenAICompletionClient)
        with pytest.raises(CompletionError):
            await client.complete("S", MESSAGES)
