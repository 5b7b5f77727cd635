"""Orchestration harness for an ERC998 composable car on an EVM ledger."""

__version__ = "0.1.0"
