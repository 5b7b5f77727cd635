"""Ledger client adapter.

The rest of the package talks to the chain only through `LedgerClient`:
deploy a named contract, submit a transaction and wait for its receipt, and
make read-only calls. `Web3Ledger` implements it over web3.py and JSON-RPC,
using the node's unlocked accounts (a local Hardhat node by default).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from web3 import Web3
from web3.exceptions import LogTopicError, MismatchedABI, Web3Exception

from composable_car.artifacts import load_artifact
from composable_car.errors import DemoError, TransactionFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractHandle:
    name: str
    address: str
    abi: list[dict[str, Any]] = field(default_factory=list, repr=False, compare=False)
    native: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class EventLog:
    address: str
    name: str | None
    # Positional event arguments, in ABI order
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    gas_used: int
    status: int
    logs: tuple[EventLog, ...] = ()


@dataclass(frozen=True)
class PendingTransaction:
    tx_hash: str
    _wait: Callable[[], Receipt] = field(repr=False, compare=False)

    def wait(self) -> Receipt:
        """Block until the transaction is included and return its receipt."""
        return self._wait()


class LedgerClient(Protocol):
    def accounts(self) -> list[str]: ...

    def deploy(self, name: str) -> ContractHandle: ...

    def submit(self, handle: ContractHandle, method: str, *args: Any, sender: str) -> PendingTransaction: ...

    def call(self, handle: ContractHandle, method: str, *args: Any) -> Any: ...


def _contract_function(contract: Any, method: str) -> Any:
    # Overloaded functions are addressed by full signature, e.g. "safeTransferFrom(address,address,uint256,bytes)"
    if "(" in method:
        return contract.get_function_by_signature(method)
    return contract.functions[method]


class Web3Ledger:
    """`LedgerClient` over web3.py."""

    def __init__(
        self,
        w3: Web3,
        *,
        artifacts_dir: Path,
        receipt_timeout_s: float = 120.0,
    ) -> None:
        self.w3 = w3
        self.artifacts_dir = artifacts_dir
        self.receipt_timeout_s = receipt_timeout_s
        self._by_address: dict[str, ContractHandle] = {}

    @classmethod
    def connect(
        cls,
        rpc_url: str,
        *,
        artifacts_dir: Path,
        request_timeout_s: float = 30.0,
        receipt_timeout_s: float = 120.0,
    ) -> Web3Ledger:
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout_s}))
        if not w3.is_connected():
            raise DemoError(f"no JSON-RPC node reachable at {rpc_url}", data={"rpcUrl": rpc_url})
        logger.info(f"connected to {rpc_url} (chain id {w3.eth.chain_id})")
        return cls(w3, artifacts_dir=artifacts_dir, receipt_timeout_s=receipt_timeout_s)

    def accounts(self) -> list[str]:
        return list(self.w3.eth.accounts)

    def deploy(self, name: str) -> ContractHandle:
        artifact = load_artifact(self.artifacts_dir, name)
        deployer = self.accounts()[0]
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        try:
            tx_hash = factory.constructor().transact({"from": deployer})
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout_s)
        except (Web3Exception, ValueError) as e:
            raise TransactionFailed(f"deploy {name}", f"{type(e).__name__}: {e}") from e
        if receipt["status"] != 1 or not receipt["contractAddress"]:
            raise TransactionFailed(f"deploy {name}", "deployment reverted", tx_hash=Web3.to_hex(tx_hash))

        address = receipt["contractAddress"]
        native = self.w3.eth.contract(address=address, abi=artifact.abi)
        handle = ContractHandle(name=name, address=address, abi=artifact.abi, native=native)
        self._by_address[address.lower()] = handle
        logger.debug(f"deployed {name} at {address}")
        return handle

    def submit(self, handle: ContractHandle, method: str, *args: Any, sender: str) -> PendingTransaction:
        action = f"{handle.name}.{method}"
        try:
            fn = _contract_function(handle.native, method)
            raw_hash = fn(*args).transact({"from": sender})
        except (Web3Exception, ValueError) as e:
            raise TransactionFailed(action, f"{type(e).__name__}: {e}") from e

        tx_hash = Web3.to_hex(raw_hash)
        logger.debug(f"submitted {action} {tx_hash}")
        return PendingTransaction(tx_hash=tx_hash, _wait=lambda: self._wait(action, tx_hash))

    def call(self, handle: ContractHandle, method: str, *args: Any) -> Any:
        try:
            return _contract_function(handle.native, method)(*args).call()
        except (Web3Exception, ValueError) as e:
            raise TransactionFailed(f"{handle.name}.{method}", f"{type(e).__name__}: {e}") from e

    def _wait(self, action: str, tx_hash: str) -> Receipt:
        try:
            raw = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout_s)
        except Web3Exception as e:
            raise TransactionFailed(action, f"{type(e).__name__}: {e}", tx_hash=tx_hash) from e
        if raw["status"] != 1:
            raise TransactionFailed(action, "transaction reverted", tx_hash=tx_hash)
        return Receipt(
            tx_hash=tx_hash,
            gas_used=int(raw["gasUsed"]),
            status=int(raw["status"]),
            logs=tuple(self._decode_log(log) for log in raw["logs"]),
        )

    def _decode_log(self, log: Any) -> EventLog:
        address = log["address"]
        handle = self._by_address.get(address.lower())
        if handle is None:
            return EventLog(address=address, name=None)

        for entry in handle.abi:
            if entry.get("type") != "event" or entry.get("anonymous"):
                continue
            try:
                decoded = handle.native.events[entry["name"]]().process_log(log)
            except (MismatchedABI, LogTopicError):
                continue
            args = tuple(decoded["args"][inp["name"]] for inp in entry.get("inputs", []))
            return EventLog(address=address, name=decoded["event"], args=args)
        return EventLog(address=address, name=None)
