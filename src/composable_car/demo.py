"""
Composable car demo.

Deploys the five contracts, mints a car and its parts to the first node
account, builds the car, takes it apart, builds it again and sells it to the
second account, printing a transcript of every step.

Usage:
    composable-car-demo                  # run everything back to back
    composable-car-demo --interactive    # pause between narrated steps
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from rich.console import Console

from composable_car.attach import add_fuel_tank_to_car, add_fuel_to_tank, add_wheel_to_car, transfer_engine_to_car
from composable_car.config import DemoConfig, load_demo_config, load_dotenv
from composable_car.constants import CAR, ENGINE, FUEL_TANK, SAFE_TRANSFER_FROM, WHEEL
from composable_car.context import DemoContext
from composable_car.detach import detach_to_account, move_child_via_other_car, remove_fuel_from_tank
from composable_car.errors import DemoError
from composable_car.ledger import LedgerClient, Web3Ledger
from composable_car.logging import JsonlLogger, NullLogger, RunLog, default_run_id
from composable_car.minting import AssembledCar, mint_car_parts
from composable_car.ownership import describe_car, owner_of, root_owner_of_child
from composable_car.registry import ContractRegistry, deploy_all
from composable_car.transcript import Transcript, interactive_prompt

logger = logging.getLogger(__name__)


@contextmanager
def stage(ctx: DemoContext, name: str) -> Iterator[None]:
    logger.info(f"--- {name} ---")
    ctx.events.event("stage_started", stage=name)
    yield
    ctx.events.event("stage_finished", stage=name)


def deploy(ctx: DemoContext) -> None:
    ctx.transcript.banner("Deploying contracts")
    deploy_all(ctx.ledger, ctx.registry)
    ctx.transcript.deployments(ctx.registry.addresses())


def attach_parts(ctx: DemoContext, parts: AssembledCar) -> None:
    transfer_engine_to_car(ctx, parts.engine, parts.car)
    ctx.transcript.rule()
    for wheel in parts.wheels:
        add_wheel_to_car(ctx, wheel, parts.car)
    # The tank is filled first and carries its fuel into the car
    add_fuel_to_tank(ctx, parts.fuel, parts.fuel_tank)
    add_fuel_tank_to_car(ctx, parts.fuel_tank, parts.car)


def assemble(ctx: DemoContext) -> AssembledCar:
    ctx.transcript.banner("Assembling the car")
    parts = mint_car_parts(ctx, ctx.operator)
    attach_parts(ctx, parts)
    return parts


def narrate(ctx: DemoContext, parts: AssembledCar, title: str) -> None:
    ctx.transcript.ownership(title, describe_car(ctx, parts))
    ctx.transcript.pause(title)


def disassemble(ctx: DemoContext, parts: AssembledCar, *, parent_transfer: bool = True) -> None:
    ctx.transcript.banner("Disassembling the car")
    if parent_transfer:
        move_child_via_other_car(ctx, ENGINE, parts.engine, parts.car)
    else:
        detach_to_account(ctx, ENGINE, parts.engine, parts.car)
    ctx.transcript.rule()
    for wheel in parts.wheels:
        detach_to_account(ctx, WHEEL, wheel, parts.car)
    ctx.transcript.rule()
    detach_to_account(ctx, FUEL_TANK, parts.fuel_tank, parts.car)
    remove_fuel_from_tank(ctx, parts.fuel, parts.fuel_tank)
    ctx.transcript.rule()


def reassemble(ctx: DemoContext, parts: AssembledCar) -> None:
    ctx.transcript.banner("Reassembling the car")
    attach_parts(ctx, parts)


def resell(ctx: DemoContext, parts: AssembledCar, buyer: str) -> None:
    """Sell the whole car; every child travels with it."""
    t = ctx.transcript
    t.banner("Reselling the car")
    t.row(f"Selling Car #{parts.car} from {ctx.operator} to {buyer}...")
    receipt = ctx.execute(CAR, SAFE_TRANSFER_FROM, ctx.operator, buyer, parts.car)
    t.transaction(receipt)

    t.row(f"Car #{parts.car} owner: {owner_of(ctx, CAR, parts.car)}")
    t.row(f"Engine #{parts.engine} root owner: {root_owner_of_child(ctx, ENGINE, parts.engine)}")
    t.success(f"Car #{parts.car} sold to {buyer}")


def narrate_parts_loose(ctx: DemoContext, parts: AssembledCar) -> None:
    rows = [(f"Engine #{parts.engine}", owner_of(ctx, ENGINE, parts.engine))]
    rows += [(f"Wheel #{w}", owner_of(ctx, WHEEL, w)) for w in parts.wheels]
    rows.append((f"FuelTank #{parts.fuel_tank}", owner_of(ctx, FUEL_TANK, parts.fuel_tank)))
    ctx.transcript.ownership("Loose parts", rows)
    ctx.transcript.pause("Loose parts")


def run_demo(ctx: DemoContext, *, buyer: str, parent_transfer: bool = True) -> AssembledCar:
    """deploy -> mint parts + assemble -> narrate -> disassemble -> reassemble -> resell."""
    with stage(ctx, "deploy"):
        deploy(ctx)
    ctx.events.write_run_metadata(
        {
            "operator": ctx.operator,
            "buyer": buyer,
            "contracts": ctx.registry.addresses(),
        }
    )
    with stage(ctx, "assemble"):
        parts = assemble(ctx)
    narrate(ctx, parts, "Assembled car")
    with stage(ctx, "disassemble"):
        disassemble(ctx, parts, parent_transfer=parent_transfer)
    narrate_parts_loose(ctx, parts)
    with stage(ctx, "reassemble"):
        reassemble(ctx, parts)
    narrate(ctx, parts, "Reassembled car")
    with stage(ctx, "resell"):
        resell(ctx, parts, buyer)
    return parts


def run(
    config: DemoConfig,
    *,
    ledger: LedgerClient,
    console: Console,
    events: RunLog,
) -> AssembledCar:
    accounts = ledger.accounts()
    if len(accounts) < 2:
        raise ValueError(f"need at least two node accounts (seller and buyer), found {len(accounts)}")
    operator, buyer = accounts[0], accounts[1]

    prompt = interactive_prompt(console) if config.interactive else None
    ctx = DemoContext(
        ledger=ledger,
        registry=ContractRegistry(),
        operator=operator,
        transcript=Transcript(console, prompt=prompt),
        events=events,
    )
    return run_demo(ctx, buyer=buyer, parent_transfer=config.parent_transfer)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Composable car (ERC998) demo")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to a dotenv file (default: .env in the current working directory).",
    )
    parser.add_argument("--interactive", action="store_true", help="Pause for Enter between narrated steps.")
    parser.add_argument(
        "--skip-parent-transfer",
        action="store_true",
        help="Detach the engine straight to the seller instead of routing it through a spare car.",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        help="Directory to write JSONL logs under (default: logs). Use --no-log to disable.",
    )
    parser.add_argument("--run-id", type=str, help="Optional run id for log directory naming.")
    parser.add_argument("--no-log", action="store_true", help="Disable JSONL logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console = Console()

    events: RunLog = NullLogger()
    if not args.no_log:
        events = JsonlLogger(base_dir=args.log_dir, run_id=args.run_id or default_run_id(prefix="car_demo"))

    try:
        config = load_demo_config(load_dotenv(args.env_file))
        if args.interactive:
            config = dataclasses.replace(config, interactive=True)
        if args.skip_parent_transfer:
            config = dataclasses.replace(config, parent_transfer=False)

        ledger = Web3Ledger.connect(
            config.rpc_url,
            artifacts_dir=config.artifacts_dir,
            request_timeout_s=config.request_timeout_s,
            receipt_timeout_s=config.receipt_timeout_s,
        )
        run(config, ledger=ledger, console=console, events=events)
    except Exception as e:
        logger.error(f"demo failed: {type(e).__name__}: {e}")
        error = e.to_dict() if isinstance(e, DemoError) else {"type": type(e).__name__, "message": str(e)}
        events.event("run_failed", error=error)
        Transcript(console).error(e)
        raise SystemExit(1) from e

    events.event("run_finished")


if __name__ == "__main__":
    main()
