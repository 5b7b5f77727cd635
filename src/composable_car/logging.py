"""
Structured run log for the demo.

A run writes two files under `<log_dir>/<run_id>/`:
- run_metadata.json: operator, buyer and deployed contract addresses
- events.jsonl: one row per stage boundary, confirmed transaction and outcome

Every row carries `t` (unix seconds) and `event`. Each event name has a fixed
set of required fields in `EVENT_FIELDS`; extra fields are kept as given.
"""

from __future__ import annotations

import json
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

EVENT_FIELDS: dict[str, tuple[str, ...]] = {
    "stage_started": ("stage",),
    "stage_finished": ("stage",),
    "tx_confirmed": ("contract", "method", "sender", "tx_hash", "gas_used"),
    "run_failed": ("error",),
    "run_finished": (),
}

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def _safe_filename(s: str) -> str:
    return _UNSAFE.sub("_", s)[:120]


def default_run_id(*, prefix: str) -> str:
    """`<prefix>_<UTC timestamp>_<random hex>`, unique across back-to-back runs."""
    return f"{prefix}_{time.strftime('%Y%m%d_%H%M%S', time.gmtime())}_{secrets.token_hex(3)}"


def event_row(name: str, fields: dict[str, Any]) -> dict[str, Any]:
    """
    Build a log row, checking it against `EVENT_FIELDS`.

    Raises:
        ValueError: If `name` is not a known event or a required field is missing.
    """
    try:
        required = EVENT_FIELDS[name]
    except KeyError:
        raise ValueError(f"unknown event {name!r} (expected one of {', '.join(EVENT_FIELDS)})") from None
    missing = [f for f in required if f not in fields]
    if missing:
        raise ValueError(f"event {name!r} is missing {', '.join(missing)}")
    return {"t": int(time.time()), "event": name, **fields}


class RunLog:
    """Event sink shared by the file logger and the disabled logger."""

    def write_run_metadata(self, obj: dict) -> None:
        pass

    def event(self, name: str, **fields: Any) -> None:
        self._write(event_row(name, fields))

    def _write(self, row: dict[str, Any]) -> None:
        pass


@dataclass(frozen=True)
class JsonlPaths:
    root: Path
    run_metadata: Path
    events: Path


class JsonlLogger(RunLog):
    def __init__(self, *, base_dir: Path, run_id: str) -> None:
        root = base_dir / _safe_filename(run_id)
        root.mkdir(parents=True, exist_ok=True)
        self.paths = JsonlPaths(root=root, run_metadata=root / "run_metadata.json", events=root / "events.jsonl")

    def write_run_metadata(self, obj: dict) -> None:
        self.paths.run_metadata.write_text(json.dumps(obj, indent=2, sort_keys=True) + "\n")

    def _write(self, row: dict[str, Any]) -> None:
        with self.paths.events.open("a", encoding="utf-8") as f:
            f.write(json.dumps(row, sort_keys=True, default=str) + "\n")


class NullLogger(RunLog):
    """Used with `--no-log`; rows are still checked, then dropped."""
