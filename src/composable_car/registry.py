from __future__ import annotations

import logging

from composable_car.constants import CONTRACT_NAMES
from composable_car.errors import NotDeployed
from composable_car.ledger import ContractHandle, LedgerClient

logger = logging.getLogger(__name__)


class ContractRegistry:
    """
    Deployed contract handles keyed by logical name.

    Populated once during the deploy stage and read-only afterwards. Only the
    five demo contracts may be registered, each exactly once.
    """

    def __init__(self) -> None:
        self._handles: dict[str, ContractHandle] = {}

    def register(self, name: str, handle: ContractHandle) -> None:
        if name not in CONTRACT_NAMES:
            raise ValueError(f"unknown contract {name!r} (expected one of {', '.join(CONTRACT_NAMES)})")
        if name in self._handles:
            raise ValueError(f"contract {name!r} is already registered at {self._handles[name].address}")
        self._handles[name] = handle

    def handle(self, name: str) -> ContractHandle:
        try:
            return self._handles[name]
        except KeyError:
            raise NotDeployed(name) from None

    def address_of(self, name: str) -> str:
        return self.handle(name).address

    def is_registered(self, name: str) -> bool:
        return name in self._handles

    def addresses(self) -> dict[str, str]:
        return {name: h.address for name, h in self._handles.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._handles

    def __len__(self) -> int:
        return len(self._handles)


def deploy_all(ledger: LedgerClient, registry: ContractRegistry) -> ContractRegistry:
    """Deploy the five demo contracts in order and register each handle."""
    for name in CONTRACT_NAMES:
        handle = ledger.deploy(name)
        registry.register(name, handle)
        logger.info(f"deployed {name} at {handle.address}")
    return registry
