"""
Composable car doctor - environment validation before running the demo.

Usage:
    composable-car-doctor                     # check artifacts, deps, .env and the node
    composable-car-doctor --rpc-url http://127.0.0.1:8545
"""

from __future__ import annotations

import argparse
import importlib.util
import sys
from pathlib import Path

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from composable_car.artifacts import artifact_path, load_artifact
from composable_car.config import load_demo_config, load_dotenv
from composable_car.constants import CONTRACT_NAMES, HEALTH_CHECK_TIMEOUT_SECONDS

console = Console()

CheckResult = tuple[bool, str, str | None]


# ---------------------------------------------------------------------------
# Check Functions
# ---------------------------------------------------------------------------


def check_artifacts(artifacts_dir: Path) -> CheckResult:
    """
    Check that every demo contract has a compiled artifact with bytecode.

    Returns:
        (ok, message, fix_command)
    """
    problems = []
    for name in CONTRACT_NAMES:
        try:
            load_artifact(artifacts_dir, name)
        except FileNotFoundError:
            problems.append(f"{name} (missing {artifact_path(artifacts_dir, name)})")
        except ValueError as e:
            problems.append(f"{name} ({e})")

    if problems:
        return False, f"Unusable artifacts: {'; '.join(problems)}", "npx hardhat compile"
    return True, f"All {len(CONTRACT_NAMES)} artifacts found in {artifacts_dir}", None


def _rpc(client: httpx.Client, rpc_url: str, method: str) -> object:
    r = client.post(rpc_url, json={"jsonrpc": "2.0", "id": 1, "method": method, "params": []})
    r.raise_for_status()
    body = r.json()
    if "error" in body:
        raise ValueError(f"{method}: {body['error']}")
    return body.get("result")


def check_rpc(
    rpc_url: str,
    *,
    timeout_s: float = HEALTH_CHECK_TIMEOUT_SECONDS,
    transport: httpx.BaseTransport | None = None,
) -> CheckResult:
    """Check the node answers JSON-RPC and exposes a seller and a buyer account."""
    try:
        with httpx.Client(timeout=timeout_s, transport=transport) as client:
            chain_id = int(str(_rpc(client, rpc_url, "eth_chainId")), 16)
            accounts = _rpc(client, rpc_url, "eth_accounts")
    except (httpx.HTTPError, ValueError) as e:
        return False, f"RPC unreachable: {rpc_url} ({type(e).__name__}: {e})", "npx hardhat node"

    n_accounts = len(accounts) if isinstance(accounts, list) else 0
    if n_accounts < 2:
        return False, f"Node at {rpc_url} exposes {n_accounts} unlocked account(s); the demo needs 2", None
    return True, f"Node reachable: {rpc_url} (chain id {chain_id}, {n_accounts} accounts)", None


def check_env_file(env_file: Path) -> CheckResult:
    if env_file.exists():
        return True, f".env file found: {env_file}", None
    return True, f"No {env_file}; using environment and defaults", None


def check_python_deps() -> CheckResult:
    """Check if Python dependencies are installed."""
    missing = [mod for mod in ("web3", "eth_abi", "httpx", "rich") if importlib.util.find_spec(mod) is None]
    if missing:
        return False, f"Missing Python dependency: {', '.join(missing)}", "pip install -e ."
    return True, "Python dependencies installed", None


# ---------------------------------------------------------------------------
# Main Doctor Logic
# ---------------------------------------------------------------------------


def run_checks(
    *,
    rpc_url: str,
    artifacts_dir: Path,
    env_file: Path,
    transport: httpx.BaseTransport | None = None,
) -> list[tuple[str, bool, str, str | None]]:
    """
    Run all environment checks.

    Returns:
        List of (check_name, passed, message, fix_command)
    """
    results: list[tuple[str, bool, str, str | None]] = []
    ok, msg, fix = check_python_deps()
    results.append(("Python Deps", ok, msg, fix))
    ok, msg, fix = check_env_file(env_file)
    results.append((".env File", ok, msg, fix))
    ok, msg, fix = check_artifacts(artifacts_dir)
    results.append(("Artifacts", ok, msg, fix))
    ok, msg, fix = check_rpc(rpc_url, transport=transport)
    results.append(("Node", ok, msg, fix))
    return results


def print_results(results: list[tuple[str, bool, str, str | None]]) -> bool:
    """Print check results and return overall status."""
    table = Table(title="Composable Car Environment Check", show_header=True)
    table.add_column("Check", style="cyan", width=12)
    table.add_column("Status", width=6)
    table.add_column("Details", style="dim")

    all_passed = True
    fixes: list[tuple[str, str]] = []

    for name, passed, message, fix in results:
        status = "[green]✓[/green]" if passed else "[red]✗[/red]"
        table.add_row(name, status, message)
        if not passed:
            all_passed = False
            if fix:
                fixes.append((name, fix))

    console.print(table)

    if fixes:
        console.print()
        console.print(
            Panel.fit(
                "\n".join([f"[bold]{name}:[/bold] {cmd}" for name, cmd in fixes]),
                title="[yellow]Suggested Fixes[/yellow]",
                border_style="yellow",
            )
        )

    return all_passed


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Composable car doctor - environment validation")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to a dotenv file (default: .env in the current working directory).",
    )
    parser.add_argument("--rpc-url", type=str, help="Override CAR_DEMO_RPC_URL")
    parser.add_argument("--artifacts-dir", type=Path, help="Override CAR_DEMO_ARTIFACTS_DIR")
    args = parser.parse_args(argv)

    config = load_demo_config(load_dotenv(args.env_file))

    console.print("[bold blue]Composable Car Doctor[/bold blue]")
    console.print()

    results = run_checks(
        rpc_url=args.rpc_url or config.rpc_url,
        artifacts_dir=args.artifacts_dir or config.artifacts_dir,
        env_file=args.env_file,
    )
    all_passed = print_results(results)

    console.print()
    if all_passed:
        console.print("[bold green]✓ All checks passed! Ready to run composable-car-demo.[/bold green]")
    else:
        console.print("[bold red]✗ Some checks failed. See suggested fixes above.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
