"""AgentPass - agent registry and skill-dispatch engine for the Solana Agent Protocol."""

__version__ = "1.0.0"
