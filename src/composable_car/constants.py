"""
Centralized constants for the composable-car demo.

This module provides single-source-of-truth defaults for configuration values
that are used across multiple modules.

Environment variable overrides:
- CAR_DEMO_RPC_URL: JSON-RPC endpoint of the EVM node (Hardhat node by default)
- CAR_DEMO_ARTIFACTS_DIR: Hardhat artifacts directory holding the compiled contracts
"""

from __future__ import annotations

import os

# Local Hardhat node (`npx hardhat node`)
DEFAULT_RPC_URL = os.environ.get("CAR_DEMO_RPC_URL", "http://127.0.0.1:8545")

# Output of `npx hardhat compile`, relative to the working directory
DEFAULT_ARTIFACTS_DIR = os.environ.get("CAR_DEMO_ARTIFACTS_DIR", "artifacts")

# RPC request timeout (seconds)
RPC_REQUEST_TIMEOUT_SECONDS = 30.0

# How long to wait for a receipt before giving up (seconds)
RECEIPT_TIMEOUT_SECONDS = 120.0

# Health check timeout (seconds)
HEALTH_CHECK_TIMEOUT_SECONDS = 5.0

# =============================================================================
# Contracts
# =============================================================================

CAR = "Car"
ENGINE = "Engine"
WHEEL = "Wheel"
FUEL_TANK = "FuelTank"
FUEL = "Fuel"

# Deploy order
CONTRACT_NAMES = (CAR, ENGINE, WHEEL, FUEL_TANK, FUEL)

WHEELS_PER_CAR = 4

# Fuel is an 18-decimal ERC20; one whole token is one litre
FUEL_DECIMALS = 18

# =============================================================================
# Contract method signatures
# =============================================================================

# Overloaded ERC721 / ERC998 functions are addressed by full signature
SAFE_TRANSFER_FROM = "safeTransferFrom(address,address,uint256)"
SAFE_TRANSFER_FROM_WITH_DATA = "safeTransferFrom(address,address,uint256,bytes)"
SAFE_TRANSFER_CHILD_WITH_DATA = "safeTransferChild(uint256,address,address,uint256,bytes)"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
