"""genesisctl — bootstrap a ledger network from independently published validator configs."""

__version__ = "0.1.0"
