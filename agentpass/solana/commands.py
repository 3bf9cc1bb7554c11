"""Structured Solana commands for the dispatch engine.

:class:`SolanaCommandHandler` recognises two shapes of request:

- slash commands: ``/balance <address>``, ``/tx <address>``,
  ``/price <symbol|mint>``, ``/status``, ``/profile``, ``/manifest``, ``/help``;
- natural language that names a skill keyword together with the data the
  skill needs, e.g. ``"check balance of 9xQe..."`` or ``"цена BONK"``.

Expected failures (bad address, RPC outage, unknown token) come back as
``CommandResult(success=False)`` so they count against reputation.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from agentpass.cognition.classifier import SkillClassifier, SkillTag
from agentpass.cognition.collaborators import CommandResult
from agentpass.errors import CommandError
from agentpass.registry.profile import ProfileManager

from .rpc import TOKEN_MINTS, SolanaRPCClient

logger = logging.getLogger(__name__)

_ADDRESS = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{32,44}\b")
_SOLANA_WORDS = ("solana", "солан", "mainnet", "devnet", "testnet")

HELP_TEXT = "\n".join(
    [
        "**Available commands**",
        "  /balance <address>  - SOL balance of a wallet",
        "  /tx <address>       - recent transactions of a wallet",
        "  /price <token>      - USD price (SOL, USDC, USDT, BONK, JUP or a mint)",
        "  /status             - Solana network health",
        "  /profile            - this agent's profile",
        "  /manifest           - OpenClaw manifest",
    ]
)


@dataclass(frozen=True)
class ParsedCommand:
    action: str
    argument: Optional[str] = None


_SLASH_ACTIONS: dict[str, str] = {
    "/balance": "balance",
    "/tx": "transactions",
    "/transactions": "transactions",
    "/history": "transactions",
    "/price": "price",
    "/status": "status",
    "/network": "status",
    "/profile": "profile",
    "/manifest": "manifest",
    "/help": "help",
}

_SKILL_ACTIONS: dict[SkillTag, str] = {
    SkillTag.BALANCE_CHECKER: "balance",
    SkillTag.TRANSACTION_ANALYZER: "transactions",
    SkillTag.PRICE_MONITOR: "price",
    SkillTag.NETWORK_STATUS: "status",
}


def _find_token(text: str) -> Optional[str]:
    for word in re.findall(r"[A-Za-z]+", text):
        if word.upper() in TOKEN_MINTS:
            return word.upper()
    return None


def _short(value: str, keep: int = 6) -> str:
    if len(value) <= keep * 2 + 3:
        return value
    return f"{value[:keep]}...{value[-keep:]}"


class SolanaCommandHandler:
    """Read-only Solana command collaborator.

    Parameters
    ----------
    rpc:
        JSON-RPC client used for all chain reads.
    profile_manager:
        Source for ``/profile`` and ``/manifest``.  Those commands are not
        recognised when *None*.
    classifier:
        Used to spot skill keywords in natural-language requests.
    """

    def __init__(
        self,
        rpc: SolanaRPCClient,
        profile_manager: ProfileManager | None = None,
        classifier: SkillClassifier | None = None,
    ) -> None:
        self._rpc = rpc
        self._profiles = profile_manager
        self._classifier = classifier or SkillClassifier()

    # -- recognition --------------------------------------------------------

    def parse(self, text: str) -> Optional[ParsedCommand]:
        stripped = text.strip()
        if stripped.startswith("/"):
            head, _, rest = stripped.partition(" ")
            action = _SLASH_ACTIONS.get(head.lower())
            if action is None:
                return None
            if action in ("profile", "manifest") and self._profiles is None:
                return None
            return ParsedCommand(action, rest.strip() or None)

        skill = self._classifier.classify(stripped)
        action = _SKILL_ACTIONS.get(skill)
        if action in ("balance", "transactions"):
            match = _ADDRESS.search(stripped)
            return ParsedCommand(action, match.group(0)) if match else None
        if action == "price":
            token = _find_token(stripped)
            return ParsedCommand(action, token) if token else None
        if action == "status":
            lower = stripped.lower()
            if any(word in lower for word in _SOLANA_WORDS):
                return ParsedCommand(action)
        return None

    def is_command(self, text: str) -> bool:
        return self.parse(text) is not None

    # -- execution ----------------------------------------------------------

    async def execute(self, text: str) -> CommandResult:
        command = self.parse(text)
        if command is None:
            return CommandResult("Unrecognised command. Try /help.", success=False)

        handler = getattr(self, f"_cmd_{command.action}")
        try:
            return await handler(command.argument)
        except CommandError as exc:
            logger.warning("Solana command %s failed: %s", command.action, exc)
            return CommandResult(f"Solana request failed: {exc}", success=False)

    async def _cmd_help(self, _: Optional[str]) -> CommandResult:
        return CommandResult(HELP_TEXT, success=True)

    async def _cmd_balance(self, address: Optional[str]) -> CommandResult:
        if not address or not _ADDRESS.fullmatch(address):
            return CommandResult(
                "Please provide a full base58 wallet address: /balance <address>",
                success=False,
            )
        balance = await self._rpc.get_balance(address)
        amount = f"{balance:,.9f}".rstrip("0").rstrip(".")
        return CommandResult(
            f"**Balance**\nAddress: {address}\nSOL: {amount}",
            success=True,
        )

    async def _cmd_transactions(self, address: Optional[str]) -> CommandResult:
        if not address or not _ADDRESS.fullmatch(address):
            return CommandResult(
                "Please provide a full base58 wallet address: /tx <address>",
                success=False,
            )
        signatures = await self._rpc.get_signatures(address, limit=10)
        if not signatures:
            return CommandResult(
                f"No transactions found for {_short(address)}.", success=True
            )

        lines = [f"**Recent transactions** for {_short(address)} ({len(signatures)}):"]
        for sig in signatures:
            when = (
                datetime.fromtimestamp(sig.block_time, tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M UTC"
                )
                if sig.block_time
                else "unknown time"
            )
            status = "failed" if sig.failed else "ok"
            lines.append(f"  • {_short(sig.signature, 8)}  slot {sig.slot}  {when}  [{status}]")
        failed = sum(1 for s in signatures if s.failed)
        lines.append(f"Failed: {failed}/{len(signatures)}")
        return CommandResult("\n".join(lines), success=True)

    async def _cmd_price(self, token: Optional[str]) -> CommandResult:
        if not token:
            return CommandResult(
                "Please name a token: /price <SOL|USDC|USDT|BONK|JUP|mint>",
                success=False,
            )
        symbol = token.upper()
        mint = TOKEN_MINTS.get(symbol, token)
        if symbol not in TOKEN_MINTS and not _ADDRESS.fullmatch(token):
            return CommandResult(f"Unknown token: {token}", success=False)

        price = await self._rpc.get_token_price(mint)
        label = symbol if symbol in TOKEN_MINTS else _short(mint)
        if price is None:
            return CommandResult(f"No price available for {label}.", success=False)
        return CommandResult(f"**{label}** price: ${price:,.6g} (Jupiter)", success=True)

    async def _cmd_status(self, _: Optional[str]) -> CommandResult:
        snapshot = await self._rpc.get_network_snapshot()
        tps = f"{snapshot.tps:,.0f}" if snapshot.tps is not None else "n/a"
        lines = [
            "**Solana network status**",
            f"Health: {'ok' if snapshot.healthy else 'degraded'}",
            f"Slot: {snapshot.slot:,}",
            f"Epoch: {snapshot.epoch} ({snapshot.epoch_progress:.1f}% complete)",
            f"TPS: {tps}",
        ]
        return CommandResult("\n".join(lines), success=snapshot.healthy)

    async def _cmd_profile(self, _: Optional[str]) -> CommandResult:
        return CommandResult(self._profiles.get_summary(), success=self._profiles.is_initialized)

    async def _cmd_manifest(self, _: Optional[str]) -> CommandResult:
        manifest = self._profiles.export_for_openclaw()
        if manifest is None:
            return CommandResult("Agent not initialized", success=False)
        return CommandResult(json.dumps(manifest, indent=2, ensure_ascii=False), success=True)
