"""Error types for the composable-car demo.

Two failure kinds exist: a contract looked up before it was deployed, and a
ledger operation that was rejected, reverted, or produced no expected event.
Both carry structured data so the run log can record them.
"""

from __future__ import annotations

from typing import Any


class DemoError(Exception):
    """Base class for demo errors."""

    def __init__(self, message: str, data: dict[str, Any] | None = None):
        self.message = message
        self.data = data or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a JSON-serializable dictionary."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "data": self.data,
        }


class NotDeployed(DemoError):
    """Registry lookup for a contract that has not been registered yet."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            message=f"Contract {name!r} has not been deployed",
            data={"contract": name},
        )


class TransactionFailed(DemoError):
    """The ledger rejected or reverted an operation, or a confirmation event was missing."""

    def __init__(self, action: str, reason: str, tx_hash: str | None = None):
        self.action = action
        self.reason = reason
        self.tx_hash = tx_hash
        message = f"{action} failed: {reason}"
        if tx_hash:
            message += f" (tx {tx_hash})"
        super().__init__(
            message=message,
            data={"action": action, "reason": reason, "txHash": tx_hash},
        )
