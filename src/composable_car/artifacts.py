"""Shared utilities for locating and loading compiled Hardhat contract artifacts."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

__all__ = [
    "ArtifactNotFoundError",
    "ContractArtifact",
    "artifact_path",
    "load_artifact",
]


class ArtifactNotFoundError(FileNotFoundError):
    """Raised when a compiled contract artifact is missing."""

    pass


@dataclass(frozen=True)
class ContractArtifact:
    contract_name: str
    abi: list[dict[str, Any]]
    bytecode: str


def artifact_path(artifacts_dir: Path, name: str) -> Path:
    """
    Locate the artifact JSON for a contract.

    Checks (in order):
    1. `<artifacts_dir>/contracts/<name>.sol/<name>.json` (Hardhat layout)
    2. `<artifacts_dir>/<name>.json` (flat export)

    Returns:
        Path to the artifact (may not exist; `load_artifact` checks).
    """
    hardhat = artifacts_dir / "contracts" / f"{name}.sol" / f"{name}.json"
    if hardhat.exists():
        return hardhat
    flat = artifacts_dir / f"{name}.json"
    if flat.exists():
        return flat
    return hardhat


def load_artifact(artifacts_dir: Path, name: str) -> ContractArtifact:
    """
    Load the ABI and creation bytecode for a contract.

    Raises:
        ArtifactNotFoundError: If no artifact exists for `name`.
        ValueError: If the artifact is not valid JSON or lacks `abi`/`bytecode`.
    """
    path = artifact_path(artifacts_dir, name)
    if not path.exists():
        raise ArtifactNotFoundError(f"artifact for {name} not found: {path}\nRun: npx hardhat compile")

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON parse error in artifact {path}: {e.msg} (position {e.pos})") from e

    abi = data.get("abi")
    bytecode = data.get("bytecode")
    if not isinstance(abi, list):
        raise ValueError(f"artifact {path} has no `abi` list")
    if not isinstance(bytecode, str) or bytecode in ("", "0x"):
        raise ValueError(f"artifact {path} has no creation `bytecode` (abstract contract or interface?)")

    logger.debug(f"loaded artifact {name} from {path}")
    return ContractArtifact(contract_name=data.get("contractName", name), abi=abi, bytecode=bytecode)
