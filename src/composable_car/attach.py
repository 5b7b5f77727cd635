"""
Attach operations: move a child token into a parent token's bookkeeping.

Two mechanisms are used, chosen per asset type:
- transfer-with-data: `safeTransferFrom` to the parent contract with the
  ABI-encoded parent token id as data; the receiving contract records the edge.
- approve-then-claim: approve the parent contract, then ask it to pull the
  child in (`getChild` for ERC721 children, `getERC20` for fungible ones).

Each step is submitted and awaited before the next. Nothing is rolled back on
failure; a `TransactionFailed` stops the caller.
"""

from __future__ import annotations

import logging

from eth_abi import encode

from composable_car.constants import CAR, ENGINE, FUEL, FUEL_TANK, SAFE_TRANSFER_FROM_WITH_DATA, WHEEL
from composable_car.context import DemoContext
from composable_car.minting import format_litres

logger = logging.getLogger(__name__)


def encode_token_id(token_id: int) -> bytes:
    """ABI-encode a parent token id as a single uint256 (transfer data payload)."""
    return encode(["uint256"], [token_id])


def transfer_with_data(ctx: DemoContext, child: str, child_id: int, parent: str, parent_id: int) -> None:
    """`child.safeTransferFrom(operator, parent, child_id, abi.encode(parent_id))`."""
    t = ctx.transcript
    parent_address = ctx.registry.address_of(parent)
    data = encode_token_id(parent_id)
    t.row(f"From: {ctx.operator}")
    t.row(f"To: {parent_address}")

    receipt = ctx.execute(child, SAFE_TRANSFER_FROM_WITH_DATA, ctx.operator, parent_address, child_id, data)
    t.transaction(receipt)


def transfer_engine_to_car(ctx: DemoContext, engine_id: int, car_id: int) -> None:
    ctx.transcript.row(f"Sending Engine #{engine_id} to Car #{car_id}...")
    transfer_with_data(ctx, ENGINE, engine_id, CAR, car_id)
    ctx.transcript.success(f"Engine #{engine_id} successfully transferred to Car #{car_id}")
    logger.info(f"engine {engine_id} -> car {car_id}")


def add_wheel_to_car(ctx: DemoContext, wheel_id: int, car_id: int) -> None:
    t = ctx.transcript
    # Resolve both contracts before submitting anything
    car_address = ctx.registry.address_of(CAR)
    wheel_address = ctx.registry.address_of(WHEEL)

    t.row(f"Adding Wheel #{wheel_id} to Car #{car_id}...")
    t.row(f"From: {ctx.operator}")
    t.row(f"To: {car_address}")

    ctx.execute(WHEEL, "approve", car_address, wheel_id)
    t.row(f"Approved Car contract to claim Wheel #{wheel_id}")

    receipt = ctx.execute(CAR, "getChild", ctx.operator, car_id, wheel_address, wheel_id)
    t.transaction(receipt)
    t.success(f"Wheel #{wheel_id} successfully added to Car #{car_id}")
    t.rule()
    logger.info(f"wheel {wheel_id} -> car {car_id}")


def add_fuel_to_tank(ctx: DemoContext, amount: int, tank_id: int) -> None:
    t = ctx.transcript
    tank_address = ctx.registry.address_of(FUEL_TANK)
    fuel_address = ctx.registry.address_of(FUEL)

    t.row(f"Filling FuelTank #{tank_id} with {format_litres(amount)}...")
    t.row(f"From: {ctx.operator}")
    t.row(f"To: {tank_address}")

    ctx.execute(FUEL, "approve", tank_address, amount)
    t.row(f"Approved FuelTank contract to pull {format_litres(amount)}")

    receipt = ctx.execute(FUEL_TANK, "getERC20", ctx.operator, tank_id, fuel_address, amount)
    t.transaction(receipt)
    t.success(f"{format_litres(amount)} of fuel added to FuelTank #{tank_id}")
    t.rule()
    logger.info(f"fuel {amount} -> tank {tank_id}")


def add_fuel_tank_to_car(ctx: DemoContext, tank_id: int, car_id: int) -> None:
    """Composable-to-composable: the tank keeps its own children when it moves into the car."""
    ctx.transcript.row(f"Adding FuelTank #{tank_id} to Car #{car_id}...")
    transfer_with_data(ctx, FUEL_TANK, tank_id, CAR, car_id)
    ctx.transcript.success(f"FuelTank #{tank_id} successfully added to Car #{car_id}")
    ctx.transcript.rule()
    logger.info(f"fuel tank {tank_id} -> car {car_id}")
