"""
Shared pytest fixtures for the composable car tests.

This module provides:
- An in-memory ledger with the five contracts deployed
- A demo context acting as the seller (alice)
- Recording prompt for interactive runs
- Scrubbed CAR_DEMO_* environment so config tests are deterministic
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from composable_car.context import DemoContext
from fakes import FakeLedger, make_context

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_demo_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "CAR_DEMO_RPC_URL",
        "CAR_DEMO_ARTIFACTS_DIR",
        "CAR_DEMO_REQUEST_TIMEOUT_SECONDS",
        "CAR_DEMO_RECEIPT_TIMEOUT_SECONDS",
        "CAR_DEMO_INTERACTIVE",
        "CAR_DEMO_PARENT_TRANSFER",
    ):
        monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Ledger and context
# ---------------------------------------------------------------------------


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def ctx(ledger: FakeLedger) -> DemoContext:
    """Context with all five contracts deployed, acting as alice."""
    return make_context(ledger)


@pytest.fixture
def empty_ctx(ledger: FakeLedger) -> DemoContext:
    """Context whose registry has not been populated."""
    return make_context(ledger, deployed=False)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200, color_system=None)


class RecordingPrompt:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> str:
        self.messages.append(message)
        return ""


@pytest.fixture
def prompt() -> RecordingPrompt:
    return RecordingPrompt()


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


def write_artifact(artifacts_dir: Path, name: str, *, bytecode: str = "0x6080604052", flat: bool = False) -> Path:
    """Write a minimal Hardhat-style artifact for `name`."""
    path = artifacts_dir / f"{name}.json" if flat else artifacts_dir / "contracts" / f"{name}.sol" / f"{name}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"contractName": name, "abi": [], "bytecode": bytecode}))
    return path
