"""Read-only Solana JSON-RPC and Jupiter price client.

Nothing here builds or signs transactions.  Every failure surfaces as
:class:`~agentpass.errors.CommandError`.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from agentpass.errors import CommandError

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000

RPC_URLS: dict[str, str] = {
    "mainnet": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}

# Well-known SPL mints accepted by symbol in price queries.
TOKEN_MINTS: dict[str, str] = {
    "SOL": "So11111111111111111111111111111111111111112",
    "USDC": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "USDT": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "BONK": "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
    "JUP": "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
}


@dataclass(frozen=True)
class SignatureInfo:
    signature: str
    slot: int
    block_time: Optional[int]
    failed: bool


@dataclass(frozen=True)
class NetworkSnapshot:
    healthy: bool
    slot: int
    epoch: int
    slot_index: int
    slots_in_epoch: int
    tps: Optional[float]

    @property
    def epoch_progress(self) -> float:
        if self.slots_in_epoch <= 0:
            return 0.0
        return 100.0 * self.slot_index / self.slots_in_epoch


class SolanaRPCClient:
    """Minimal async JSON-RPC client.

    Parameters
    ----------
    rpc_url:
        Cluster RPC endpoint.
    timeout:
        Per-request timeout in seconds.
    price_url:
        Jupiter price API endpoint.
    client:
        Optional shared ``httpx.AsyncClient`` (tests inject a mock transport).
    """

    def __init__(
        self,
        rpc_url: str = RPC_URLS["mainnet"],
        timeout: float = 15.0,
        price_url: str = "https://api.jup.ag/price/v2",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._timeout = timeout
        self._price_url = price_url
        self._client = client
        self._ids = itertools.count(1)

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def _send(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            if self._client is not None:
                resp = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.request(method, url, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise CommandError(
                f"RPC request failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CommandError(f"RPC request failed: {exc or type(exc).__name__}") from exc
        except ValueError as exc:
            raise CommandError(f"Invalid JSON from RPC: {exc}") from exc

    async def call(self, method: str, params: list[Any] | None = None) -> Any:
        """Invoke a JSON-RPC method and return its ``result``."""
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        logger.debug("RPC %s %s", method, params)
        data = await self._send("POST", self._rpc_url, json=payload)
        if "error" in data:
            error = data["error"] or {}
            raise CommandError(error.get("message", f"{method} failed"))
        return data.get("result")

    # -- accounts -----------------------------------------------------------

    async def get_balance(self, address: str) -> float:
        """Native balance of *address* in SOL."""
        result = await self.call("getBalance", [address])
        return result["value"] / LAMPORTS_PER_SOL

    async def get_signatures(self, address: str, limit: int = 10) -> list[SignatureInfo]:
        result = await self.call(
            "getSignaturesForAddress", [address, {"limit": limit}]
        )
        return [
            SignatureInfo(
                signature=item["signature"],
                slot=item["slot"],
                block_time=item.get("blockTime"),
                failed=item.get("err") is not None,
            )
            for item in result or []
        ]

    # -- cluster ------------------------------------------------------------

    async def get_health(self) -> bool:
        try:
            return await self.call("getHealth") == "ok"
        except CommandError as exc:
            logger.warning("getHealth reported unhealthy node: %s", exc)
            return False

    async def get_slot(self) -> int:
        return int(await self.call("getSlot"))

    async def get_network_snapshot(self) -> NetworkSnapshot:
        healthy = await self.get_health()
        epoch = await self.call("getEpochInfo")
        samples = await self.call("getRecentPerformanceSamples", [1])
        tps: Optional[float] = None
        if samples:
            sample = samples[0]
            if sample.get("samplePeriodSecs"):
                tps = sample["numTransactions"] / sample["samplePeriodSecs"]
        return NetworkSnapshot(
            healthy=healthy,
            slot=epoch["absoluteSlot"],
            epoch=epoch["epoch"],
            slot_index=epoch["slotIndex"],
            slots_in_epoch=epoch["slotsInEpoch"],
            tps=tps,
        )

    # -- prices -------------------------------------------------------------

    async def get_token_price(self, mint: str) -> Optional[float]:
        """USD price of *mint* from Jupiter, or None if unknown."""
        data = await self._send("GET", self._price_url, params={"ids": mint})
        entry = (data.get("data") or {}).get(mint)
        if not entry or entry.get("price") is None:
            return None
        return float(entry["price"])
