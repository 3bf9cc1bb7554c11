"""AgentPass configuration via environment / .env file."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "ollama": "llama3",
    "anthropic": "claude-3-5-haiku-20241022",
    "local": "local",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Runtime mode ---
    BOT_MODE: Literal["web", "twitter"] = "web"

    # --- Completion provider ---
    AI_PROVIDER: Literal["local", "openai", "ollama", "anthropic"] = "local"
    AI_MODEL_NAME: str = ""
    OPENAI_API_KEY: str = ""
    ANTHROPIC_API_KEY: str = ""
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 1000
    COMPLETION_TIMEOUT_SECONDS: float = 60.0

    # --- Dispatch ---
    MAX_INPUT_LENGTH: int = 2000
    HISTORY_WINDOW: int = 10

    # --- Solana (read-only) ---
    SOLANA_ENABLED: bool = True
    SOLANA_RPC_URL: str = ""
    SOLANA_NETWORK: Literal["mainnet", "devnet", "testnet"] = "mainnet"
    SOLANA_RPC_TIMEOUT_SECONDS: float = 15.0
    JUPITER_PRICE_URL: str = "https://api.jup.ag/price/v2"

    # --- Solana Agent Protocol identity ---
    SAP_ENABLED: bool = True
    SAP_AGENT_NAME: str = "Solana AI Agent"
    SAP_AGENT_DESCRIPTION: str = "Advanced AI agent for Solana blockchain interactions"
    SAP_AGENT_VERSION: str = "1.0.0"
    AGENT_WALLET_PUBLIC: str = ""

    # --- Reputation policy ---
    REPUTATION_SUCCESS_DELTA: int = 1
    REPUTATION_FAILURE_PENALTY: int = 2

    # --- Web ---
    WEB_PORT: int = 3000
    WEB_API_KEY: str = ""
    CORS_ORIGINS: list[str] = ["*"]

    @field_validator("*", mode="before")
    @classmethod
    def _strip_strings(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def _default_model_name(self) -> "Settings":
        if not self.AI_MODEL_NAME:
            self.AI_MODEL_NAME = _DEFAULT_MODELS[self.AI_PROVIDER]
        return self


def validate_settings(s: Settings) -> list[str]:
    """Return human-readable configuration problems (empty when valid)."""
    errors: list[str] = []

    if s.AI_PROVIDER == "openai" and not s.OPENAI_API_KEY:
        errors.append("OPENAI_API_KEY is required when using OpenAI provider")
    if s.AI_PROVIDER == "anthropic" and not s.ANTHROPIC_API_KEY:
        errors.append("ANTHROPIC_API_KEY is required when using Anthropic provider")
    if s.REPUTATION_SUCCESS_DELTA < 0:
        errors.append("REPUTATION_SUCCESS_DELTA must be >= 0")
    if s.REPUTATION_FAILURE_PENALTY < 0:
        errors.append("REPUTATION_FAILURE_PENALTY must be >= 0")
    if s.MAX_INPUT_LENGTH < 1:
        errors.append("MAX_INPUT_LENGTH must be >= 1")

    return errors


settings = Settings()
