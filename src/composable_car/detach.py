"""
Detach operations: take a child token out of a car.

A child either lands at a plain account (`transferChild`) or moves straight
into another car (`safeTransferChild` with the ABI-encoded destination car id),
never passing through an external account on the way.
"""

from __future__ import annotations

import logging

from composable_car.attach import encode_token_id
from composable_car.constants import CAR, FUEL, FUEL_TANK, SAFE_TRANSFER_CHILD_WITH_DATA
from composable_car.context import DemoContext
from composable_car.minting import format_litres, mint_car

logger = logging.getLogger(__name__)


def detach_to_account(ctx: DemoContext, child: str, child_id: int, car_id: int, to: str | None = None) -> None:
    """Move `child #child_id` out of `Car #car_id` to `to` (the operator by default)."""
    t = ctx.transcript
    to = to or ctx.operator
    child_address = ctx.registry.address_of(child)

    t.row(f"Removing {child} #{child_id} from Car #{car_id}...")
    t.row(f"To: {to}")
    receipt = ctx.execute(CAR, "transferChild", car_id, to, child_address, child_id)
    t.transaction(receipt)
    t.success(f"{child} #{child_id} now held by {to}")
    logger.info(f"{child} {child_id}: car {car_id} -> {to}")


def transfer_between_cars(ctx: DemoContext, child: str, child_id: int, from_car: int, to_car: int) -> None:
    t = ctx.transcript
    car_address = ctx.registry.address_of(CAR)
    child_address = ctx.registry.address_of(child)

    t.row(f"Moving {child} #{child_id} from Car #{from_car} to Car #{to_car}...")
    receipt = ctx.execute(
        CAR,
        SAFE_TRANSFER_CHILD_WITH_DATA,
        from_car,
        car_address,
        child_address,
        child_id,
        encode_token_id(to_car),
    )
    t.transaction(receipt)
    t.success(f"{child} #{child_id} moved to Car #{to_car}")
    logger.info(f"{child} {child_id}: car {from_car} -> car {to_car}")


def move_child_via_other_car(ctx: DemoContext, child: str, child_id: int, car_id: int) -> int:
    """
    Detach through a second car: mint a spare car, move the child into it,
    then release it from the spare car to the operator. Returns the spare car id.
    """
    spare_car = mint_car(ctx, ctx.operator)
    ctx.transcript.row(f"Minted spare Car #{spare_car} to {ctx.operator}")
    transfer_between_cars(ctx, child, child_id, car_id, spare_car)
    ctx.transcript.pause(f"{child} #{child_id} is now inside Car #{spare_car}")
    detach_to_account(ctx, child, child_id, spare_car)
    return spare_car


def remove_fuel_from_tank(ctx: DemoContext, amount: int, tank_id: int, to: str | None = None) -> None:
    t = ctx.transcript
    to = to or ctx.operator
    fuel_address = ctx.registry.address_of(FUEL)

    t.row(f"Draining {format_litres(amount)} from FuelTank #{tank_id}...")
    receipt = ctx.execute(FUEL_TANK, "transferERC20", tank_id, to, fuel_address, amount)
    t.transaction(receipt)
    t.success(f"{format_litres(amount)} of fuel returned to {to}")
    logger.info(f"fuel {amount}: tank {tank_id} -> {to}")
