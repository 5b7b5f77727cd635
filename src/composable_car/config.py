from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from composable_car.constants import (
    DEFAULT_ARTIFACTS_DIR,
    DEFAULT_RPC_URL,
    RECEIPT_TIMEOUT_SECONDS,
    RPC_REQUEST_TIMEOUT_SECONDS,
)


@dataclass(frozen=True)
class DemoConfig:
    rpc_url: str
    artifacts_dir: Path
    request_timeout_s: float
    receipt_timeout_s: float
    interactive: bool
    parent_transfer: bool


def load_dotenv(path: Path) -> dict[str, str]:
    """
    Minimal .env loader:
    - supports KEY=VALUE and `export KEY=VALUE`
    - strips surrounding quotes
    - ignores blank lines and `#` comments
    - does not expand variables
    """
    out: dict[str, str] = {}
    if not path.exists():
        return out

    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()
        if not k:
            continue
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]
        out[k] = v
    return out


def parse_bool(v: str) -> bool:
    s = v.strip().lower()
    if s in ("1", "true", "t", "yes", "y", "on"):
        return True
    if s in ("0", "false", "f", "no", "n", "off"):
        return False
    raise ValueError(f"invalid bool: {v!r}")


def _parse_positive_float(v: str, *, name: str) -> float:
    try:
        out = float(v)
    except ValueError as e:
        raise ValueError(f"invalid {name}={v!r} (expected a number)") from e
    if out <= 0:
        raise ValueError(f"invalid {name}={v!r} (must be > 0)")
    return out


def load_demo_config(env_overrides: dict[str, str] | None = None) -> DemoConfig:
    """
    Resolve the demo configuration.

    Values come from the process environment first, then from `env_overrides`
    (normally a parsed .env file), then from the defaults in `constants`.
    Process env wins so operators can override a checked-in .env without editing it.
    """
    env_overrides = env_overrides or {}

    def get(key: str) -> str | None:
        v = os.environ.get(key)
        if v:
            return v
        return env_overrides.get(key) or None

    def get_bool(key: str, default: bool) -> bool:
        v = get(key)
        if v is None:
            return default
        try:
            return parse_bool(v)
        except ValueError as e:
            raise ValueError(f"invalid {key}={v!r} (expected 'true', 'false', '1', '0', 'yes', 'no')") from e

    timeout_s = get("CAR_DEMO_REQUEST_TIMEOUT_SECONDS")
    receipt_timeout_s = get("CAR_DEMO_RECEIPT_TIMEOUT_SECONDS")

    return DemoConfig(
        rpc_url=get("CAR_DEMO_RPC_URL") or DEFAULT_RPC_URL,
        artifacts_dir=Path(get("CAR_DEMO_ARTIFACTS_DIR") or DEFAULT_ARTIFACTS_DIR),
        request_timeout_s=(
            _parse_positive_float(timeout_s, name="CAR_DEMO_REQUEST_TIMEOUT_SECONDS")
            if timeout_s
            else RPC_REQUEST_TIMEOUT_SECONDS
        ),
        receipt_timeout_s=(
            _parse_positive_float(receipt_timeout_s, name="CAR_DEMO_RECEIPT_TIMEOUT_SECONDS")
            if receipt_timeout_s
            else RECEIPT_TIMEOUT_SECONDS
        ),
        interactive=get_bool("CAR_DEMO_INTERACTIVE", False),
        parent_transfer=get_bool("CAR_DEMO_PARENT_TRANSFER", True),
    )
