"""Read-only ownership queries against the deployed contracts."""

from __future__ import annotations

from typing import Any

from web3 import Web3

from composable_car.constants import CAR, ENGINE, FUEL, FUEL_TANK, WHEEL
from composable_car.context import DemoContext
from composable_car.minting import AssembledCar, format_litres


def _as_address(raw: Any) -> str:
    # ERC998 packs addresses into bytes32 (magic value in the high bytes)
    if isinstance(raw, (bytes, bytearray)):
        return Web3.to_checksum_address("0x" + bytes(raw[-20:]).hex())
    return raw


def owner_of(ctx: DemoContext, contract: str, token_id: int) -> str:
    return ctx.read(contract, "ownerOf", token_id)


def root_owner_of(ctx: DemoContext, contract: str, token_id: int) -> str:
    """The account at the top of the ownership chain of a composable token (Car or FuelTank)."""
    return _as_address(ctx.read(contract, "rootOwnerOf", token_id))


def root_owner_of_child(ctx: DemoContext, child: str, child_id: int) -> str:
    return _as_address(ctx.read(CAR, "rootOwnerOfChild", ctx.registry.address_of(child), child_id))


def owner_of_child(ctx: DemoContext, child: str, child_id: int) -> tuple[str, int]:
    """(owner of the parent token, parent token id) for a child held by a car."""
    parent_owner, parent_id = ctx.read(CAR, "ownerOfChild", ctx.registry.address_of(child), child_id)
    return _as_address(parent_owner), int(parent_id)


def total_child_tokens(ctx: DemoContext, car_id: int, child: str) -> int:
    return int(ctx.read(CAR, "totalChildTokens", car_id, ctx.registry.address_of(child)))


def fuel_balance_of(ctx: DemoContext, account: str) -> int:
    return int(ctx.read(FUEL, "balanceOf", account))


def fuel_in_tank(ctx: DemoContext, tank_id: int) -> int:
    return int(ctx.read(FUEL_TANK, "balanceOfERC20", tank_id, ctx.registry.address_of(FUEL)))


def holder_label(ctx: DemoContext, child: str, child_id: int) -> str:
    owner = owner_of(ctx, child, child_id)
    if owner.lower() == ctx.registry.address_of(CAR).lower():
        _, car_id = owner_of_child(ctx, child, child_id)
        return f"Car #{car_id}"
    return owner


def describe_car(ctx: DemoContext, parts: AssembledCar) -> list[tuple[str, str]]:
    """Who holds each part of `parts`, as transcript rows."""
    rows = [(f"Car #{parts.car}", owner_of(ctx, CAR, parts.car))]
    rows.append((f"Engine #{parts.engine}", holder_label(ctx, ENGINE, parts.engine)))
    for wheel in parts.wheels:
        rows.append((f"Wheel #{wheel}", holder_label(ctx, WHEEL, wheel)))
    rows.append((f"FuelTank #{parts.fuel_tank}", holder_label(ctx, FUEL_TANK, parts.fuel_tank)))
    rows.append(("Fuel", f"{format_litres(fuel_in_tank(ctx, parts.fuel_tank))} in FuelTank #{parts.fuel_tank}"))
    return rows
