"""Tests for agentpass.config.settings."""

import pytest

from agentpass.config.settings import Settings, validate_settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "AI_PROVIDER",
        "AI_MODEL_NAME",
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "REPUTATION_SUCCESS_DELTA",
        "REPUTATION_FAILURE_PENALTY",
        "MAX_INPUT_LENGTH",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test the Settings pydantic-settings class."""

    def _make(self, **kwargs):
        return Settings(_env_file=None, **kwargs)

    # -- defaults --

    def test_defaults(self):
        s = self._make()
        assert s.BOT_MODE == "web"
        assert s.AI_PROVIDER == "local"
        assert s.AI_MODEL_NAME == "local"
        assert s.MAX_INPUT_LENGTH == 2000
        assert s.HISTORY_WINDOW == 10
        assert s.REPUTATION_SUCCESS_DELTA == 1
        assert s.REPUTATION_FAILURE_PENALTY == 2
        assert s.SOLANA_ENABLED is True
        assert s.SAP_ENABLED is True
        assert s.WEB_PORT == 3000
        assert s.CORS_ORIGINS == ["*"]

    # -- _default_model_name validator --

    @pytest.mark.parametrize(
        "provider, model",
        [
            ("openai", "gpt-4o-mini"),
            ("ollama", "llama3"),
            ("anthropic", "claude-3-5-haiku-20241022"),
        ],
    )
    def test_model_defaults_per_provider(self, provider, model):
        assert self._make(AI_PROVIDER=provider).AI_MODEL_NAME == model

    def test_explicit_model_kept(self):
        s = self._make(AI_PROVIDER="openai", AI_MODEL_NAME="gpt-4o")
        assert s.AI_MODEL_NAME == "gpt-4o"

    # -- _strip_strings validator --

    def test_strings_stripped(self):
        s = self._make(OPENAI_API_KEY="  sk-test \n", AGENT_WALLET_PUBLIC=" abc ")
        assert s.OPENAI_API_KEY == "sk-test"
        assert s.AGENT_WALLET_PUBLIC == "abc"

    # -- environment --

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("REPUTATION_FAILURE_PENALTY", "5")
        monkeypatch.setenv("AI_PROVIDER", "ollama")
        s = self._make()
        assert s.REPUTATION_FAILURE_PENALTY == 5
        assert s.AI_PROVIDER == "ollama"

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError):
            self._make(AI_PROVIDER="mystery")


class TestValidateSettings:
    def test_valid_defaults(self):
        assert validate_settings(Settings(_env_file=None)) == []

    def test_openai_without_key(self):
        errors = validate_settings(Settings(_env_file=None, AI_PROVIDER="openai"))
        assert errors == ["OPENAI_API_KEY is required when using OpenAI provider"]

    def test_anthropic_without_key(self):
        errors = validate_settings(Settings(_env_file=None, AI_PROVIDER="anthropic"))
        assert any("ANTHROPIC_API_KEY" in e for e in errors)

    def test_anthropic_with_key(self):
        s = Settings(_env_file=None, AI_PROVIDER="anthropic", ANTHROPIC_API_KEY="sk-ant")
        assert validate_settings(s) == []

    def test_negative_deltas_and_limit(self):
        s = Settings(
            _env_file=None,
            REPUTATION_SUCCESS_DELTA=-1,
            REPUTATION_FAILURE_PENALTY=-3,
            MAX_INPUT_LENGTH=0,
        )
        errors = validate_settings(s)
        assert len(errors) == 3
