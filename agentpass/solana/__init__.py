"""Read-only Solana data access and structured commands."""

from .commands import HELP_TEXT, ParsedCommand, SolanaCommandHandler
from .rpc import LAMPORTS_PER_SOL, RPC_URLS, TOKEN_MINTS, SolanaRPCClient

__all__ = [
    "HELP_TEXT",
    "LAMPORTS_PER_SOL",
    "ParsedCommand",
    "RPC_URLS",
    "SolanaCommandHandler",
    "SolanaRPCClient",
    "TOKEN_MINTS",
]
