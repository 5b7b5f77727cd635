"""Mint operations against the in-memory ledger."""

from __future__ import annotations

import pytest

from composable_car.constants import CAR, ENGINE, FUEL, FUEL_TANK, WHEEL
from composable_car.context import DemoContext
from composable_car.errors import NotDeployed, TransactionFailed
from composable_car.minting import (
    format_litres,
    mint_car,
    mint_car_parts,
    mint_engine,
    mint_fuel,
    mint_fuel_tank,
    mint_wheel,
)
from composable_car.ownership import fuel_balance_of, owner_of
from fakes import ALICE, BOB, FUEL_PER_MINT, FakeLedger


@pytest.mark.parametrize(
    ("mint", "contract"),
    [(mint_car, CAR), (mint_engine, ENGINE), (mint_wheel, WHEEL), (mint_fuel_tank, FUEL_TANK)],
)
def test_minted_token_resolves_to_recipient(ctx: DemoContext, mint, contract: str) -> None:
    token_id = mint(ctx, BOB)
    assert owner_of(ctx, contract, token_id) == BOB


def test_minted_fuel_is_credited_to_recipient(ctx: DemoContext) -> None:
    amount = mint_fuel(ctx, BOB)
    assert amount == FUEL_PER_MINT
    assert fuel_balance_of(ctx, BOB) == FUEL_PER_MINT


def test_successive_mints_yield_distinct_ids(ctx: DemoContext) -> None:
    ids = {mint_wheel(ctx, ALICE) for _ in range(4)}
    assert len(ids) == 4


def test_mint_uses_mint_to_for_fuel(ctx: DemoContext, ledger: FakeLedger) -> None:
    mint_fuel(ctx, ALICE)
    contract, method, args, sender = ledger.submitted[-1]
    assert (contract, method, args, sender) == (FUEL, "mintTo", (ALICE,), ALICE)


def test_mint_without_transfer_event_fails(ctx: DemoContext, ledger: FakeLedger) -> None:
    ledger.muted.add(ENGINE)
    with pytest.raises(TransactionFailed, match="no Transfer event"):
        mint_engine(ctx, ALICE)


def test_mint_revert_surfaces_as_transaction_failed(ctx: DemoContext, ledger: FakeLedger) -> None:
    ledger.reverts[(CAR, "mint")] = "paused"
    with pytest.raises(TransactionFailed) as exc:
        mint_car(ctx, ALICE)
    assert "paused" in exc.value.reason


def test_mint_before_deploy_raises_not_deployed(empty_ctx: DemoContext, ledger: FakeLedger) -> None:
    with pytest.raises(NotDeployed):
        mint_car(empty_ctx, ALICE)
    assert ledger.submitted == []


def test_mint_car_parts_mints_everything_to_recipient(ctx: DemoContext) -> None:
    parts = mint_car_parts(ctx, ALICE)

    assert len(parts.wheels) == 4
    assert owner_of(ctx, CAR, parts.car) == ALICE
    assert owner_of(ctx, ENGINE, parts.engine) == ALICE
    assert all(owner_of(ctx, WHEEL, w) == ALICE for w in parts.wheels)
    assert owner_of(ctx, FUEL_TANK, parts.fuel_tank) == ALICE
    assert parts.fuel == FUEL_PER_MINT

    out = ctx.transcript.console.file.getvalue()
    assert f"Car ID: {parts.car}" in out
    assert "Wheel ID: 1, 2, 3, 4" in out
    assert "Fuel Balance: 100L" in out


@pytest.mark.parametrize(
    ("amount", "expected"),
    [(100 * 10**18, "100L"), (15 * 10**17, "1.5L"), (0, "0L"), (1, "0.000000000000000001L")],
)
def test_format_litres(amount: int, expected: str) -> None:
    assert format_litres(amount) == expected
