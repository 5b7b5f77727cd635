from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from composable_car.ledger import LedgerClient, Receipt
from composable_car.logging import NullLogger, RunLog
from composable_car.registry import ContractRegistry
from composable_car.transcript import Transcript

logger = logging.getLogger(__name__)


@dataclass
class DemoContext:
    """
    Everything an operation needs: the ledger, the deployed contracts, and the
    account acting on the operator's behalf. Passed explicitly to every step.
    """

    ledger: LedgerClient
    registry: ContractRegistry
    operator: str
    transcript: Transcript = field(default_factory=Transcript)
    events: RunLog = field(default_factory=NullLogger)

    def execute(self, contract: str, method: str, *args: Any, sender: str | None = None) -> Receipt:
        """
        Submit `contract.method(*args)` and block until it is confirmed.

        The contract is resolved before anything is submitted, so an unknown
        name raises `NotDeployed` with no on-ledger effect. Failures surface as
        `TransactionFailed` from the ledger adapter.
        """
        handle = self.registry.handle(contract)
        sender = sender or self.operator
        pending = self.ledger.submit(handle, method, *args, sender=sender)
        receipt = pending.wait()
        logger.debug(f"{contract}.{method} confirmed in {receipt.tx_hash} (gas {receipt.gas_used})")
        self.events.event(
            "tx_confirmed",
            contract=contract,
            method=method,
            sender=sender,
            tx_hash=receipt.tx_hash,
            gas_used=receipt.gas_used,
        )
        return receipt

    def read(self, contract: str, method: str, *args: Any) -> Any:
        return self.ledger.call(self.registry.handle(contract), method, *args)
