from __future__ import annotations

import hypothesis.strategies as st
import pytest
from hypothesis import given, settings

from composable_car.attach import add_fuel_to_tank, add_wheel_to_car, transfer_engine_to_car
from composable_car.constants import CAR, ENGINE, WHEEL
from composable_car.context import DemoContext
from composable_car.detach import (
    detach_to_account,
    move_child_via_other_car,
    remove_fuel_from_tank,
    transfer_between_cars,
)
from composable_car.errors import TransactionFailed
from composable_car.minting import mint_car, mint_engine, mint_fuel, mint_fuel_tank, mint_wheel
from composable_car.ownership import fuel_balance_of, fuel_in_tank, owner_of, owner_of_child, total_child_tokens
from fakes import ALICE, BOB, make_context


def test_attach_then_detach_returns_engine_to_owner(ctx: DemoContext) -> None:
    car = mint_car(ctx, ALICE)
    engine = mint_engine(ctx, ALICE)

    transfer_engine_to_car(ctx, engine, car)
    detach_to_account(ctx, ENGINE, engine, car)

    assert owner_of(ctx, ENGINE, engine) == ALICE
    assert total_child_tokens(ctx, car, ENGINE) == 0


def test_detach_to_another_account(ctx: DemoContext) -> None:
    car = mint_car(ctx, ALICE)
    wheel = mint_wheel(ctx, ALICE)
    add_wheel_to_car(ctx, wheel, car)

    detach_to_account(ctx, WHEEL, wheel, car, to=BOB)

    assert owner_of(ctx, WHEEL, wheel) == BOB


def test_transfer_between_cars_keeps_child_count(ctx: DemoContext) -> None:
    car_a = mint_car(ctx, ALICE)
    car_b = mint_car(ctx, ALICE)
    engine = mint_engine(ctx, ALICE)
    transfer_engine_to_car(ctx, engine, car_a)

    transfer_between_cars(ctx, ENGINE, engine, car_a, car_b)

    assert total_child_tokens(ctx, car_a, ENGINE) == 0
    assert total_child_tokens(ctx, car_b, ENGINE) == 1
    assert owner_of_child(ctx, ENGINE, engine) == (ALICE, car_b)
    # Never passed through an external account
    assert owner_of(ctx, ENGINE, engine) == ctx.registry.address_of(CAR)


def test_move_child_via_other_car_lands_back_with_operator(ctx: DemoContext, prompt) -> None:
    car = mint_car(ctx, ALICE)
    engine = mint_engine(ctx, ALICE)
    transfer_engine_to_car(ctx, engine, car)
    ctx.transcript.prompt = prompt

    spare = move_child_via_other_car(ctx, ENGINE, engine, car)

    assert spare != car
    assert owner_of(ctx, CAR, spare) == ALICE
    assert owner_of(ctx, ENGINE, engine) == ALICE
    assert total_child_tokens(ctx, car, ENGINE) == 0
    assert total_child_tokens(ctx, spare, ENGINE) == 0
    assert prompt.messages == [f"Engine #{engine} is now inside Car #{spare}"]


def test_detach_by_non_owner_is_rejected(ctx: DemoContext) -> None:
    car = mint_car(ctx, ALICE)
    engine = mint_engine(ctx, ALICE)
    transfer_engine_to_car(ctx, engine, car)
    as_bob = make_context(ctx.ledger, deployed=False, operator=BOB)
    as_bob.registry = ctx.registry

    with pytest.raises(TransactionFailed, match="root owner"):
        detach_to_account(as_bob, ENGINE, engine, car)

    assert owner_of_child(ctx, ENGINE, engine) == (ALICE, car)


def test_detach_child_from_wrong_car_is_rejected(ctx: DemoContext) -> None:
    car = mint_car(ctx, ALICE)
    other = mint_car(ctx, ALICE)
    engine = mint_engine(ctx, ALICE)
    transfer_engine_to_car(ctx, engine, car)

    with pytest.raises(TransactionFailed):
        detach_to_account(ctx, ENGINE, engine, other)


def test_drain_fuel_from_tank(ctx: DemoContext) -> None:
    tank = mint_fuel_tank(ctx, ALICE)
    fuel = mint_fuel(ctx, ALICE)
    add_fuel_to_tank(ctx, fuel, tank)

    remove_fuel_from_tank(ctx, fuel, tank)

    assert fuel_in_tank(ctx, tank) == 0
    assert fuel_balance_of(ctx, ALICE) == fuel


@settings(max_examples=25, deadline=None)
@given(moves=st.lists(st.tuples(st.integers(0, 2), st.integers(0, 2)), min_size=1, max_size=8))
def test_moves_between_cars_never_create_or_lose_wheels(moves: list[tuple[int, int]]) -> None:
    """Invariant: total wheels held across all cars is constant under car-to-car moves."""
    ctx = make_context()
    cars = [mint_car(ctx, ALICE) for _ in range(3)]
    wheels = [mint_wheel(ctx, ALICE) for _ in range(4)]
    location = {}
    for wheel in wheels:
        add_wheel_to_car(ctx, wheel, cars[0])
        location[wheel] = cars[0]

    for i, (src, dst) in enumerate(moves):
        wheel = wheels[i % len(wheels)]
        if location[wheel] != cars[src] or src == dst:
            continue
        transfer_between_cars(ctx, WHEEL, wheel, cars[src], cars[dst])
        location[wheel] = cars[dst]

    assert sum(total_child_tokens(ctx, car, WHEEL) for car in cars) == len(wheels)
    for wheel, car in location.items():
        assert owner_of_child(ctx, WHEEL, wheel) == (ALICE, car)
