"""Mint operations: one per asset type, each returning what the mint event reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from composable_car.constants import CAR, ENGINE, FUEL, FUEL_DECIMALS, FUEL_TANK, WHEEL, WHEELS_PER_CAR
from composable_car.context import DemoContext
from composable_car.errors import TransactionFailed
from composable_car.ledger import Receipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssembledCar:
    car: int
    engine: int
    wheels: tuple[int, ...]
    fuel_tank: int
    # ERC20 base units
    fuel: int


def format_litres(amount: int) -> str:
    return f"{Decimal(amount).scaleb(-FUEL_DECIMALS).normalize():f}L"


def _transfer_value(receipt: Receipt, action: str) -> int:
    # First log is Transfer(from, to, tokenId) for ERC721, Transfer(from, to, value) for ERC20
    if not receipt.logs:
        raise TransactionFailed(action, "no Transfer event in receipt", tx_hash=receipt.tx_hash)
    args = receipt.logs[0].args
    if len(args) < 3:
        raise TransactionFailed(action, f"unexpected first event {receipt.logs[0].name!r}", tx_hash=receipt.tx_hash)
    return int(args[2])


def _mint(ctx: DemoContext, contract: str, to: str, method: str = "mint") -> int:
    receipt = ctx.execute(contract, method, to)
    value = _transfer_value(receipt, f"{contract}.{method}")
    logger.debug(f"minted {contract} {value} to {to}")
    return value


def mint_car(ctx: DemoContext, to: str) -> int:
    return _mint(ctx, CAR, to)


def mint_engine(ctx: DemoContext, to: str) -> int:
    return _mint(ctx, ENGINE, to)


def mint_wheel(ctx: DemoContext, to: str) -> int:
    return _mint(ctx, WHEEL, to)


def mint_fuel_tank(ctx: DemoContext, to: str) -> int:
    return _mint(ctx, FUEL_TANK, to)


def mint_fuel(ctx: DemoContext, to: str) -> int:
    """Mint the fixed fuel allowance; returns the amount in base units."""
    return _mint(ctx, FUEL, to, method="mintTo")


def mint_car_parts(ctx: DemoContext, to: str) -> AssembledCar:
    """Mint a car and everything that goes into it, in a fixed order."""
    car = mint_car(ctx, to)
    engine = mint_engine(ctx, to)
    wheels = tuple(mint_wheel(ctx, to) for _ in range(WHEELS_PER_CAR))
    fuel_tank = mint_fuel_tank(ctx, to)
    fuel = mint_fuel(ctx, to)
    parts = AssembledCar(car=car, engine=engine, wheels=wheels, fuel_tank=fuel_tank, fuel=fuel)

    t = ctx.transcript
    t.row(f"Minted car parts to {to}")
    t.rule()
    t.row(f"Car ID: {parts.car}")
    t.row(f"Engine ID: {parts.engine}")
    t.row(f"Wheel ID: {', '.join(str(w) for w in parts.wheels)}")
    t.row(f"Fuel Tank ID: {parts.fuel_tank}")
    t.row(f"Fuel Balance: {format_litres(parts.fuel)}")
    t.rule()
    return parts
