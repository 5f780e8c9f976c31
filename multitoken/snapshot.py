"""Ledger state snapshots.

A snapshot is a JSON object carrying the owner, admins, non-zero balances and
approvals, sealed with a SHA-256 digest over its canonical JSON form. The
host decides where snapshots live; save_state/load_state cover the plain
file case.
"""
from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import LedgerSettings
from .errors import SnapshotError
from .ledger import MultiTokenLedger

FORMAT = "multitoken-state/1"


def _canonical_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _digest(payload: Dict[str, Any]) -> str:
    body = dict(payload)
    body.pop("digest", None)
    return _sha256_text(_canonical_json(body))


def export_state(ledger: MultiTokenLedger) -> Dict[str, Any]:
    state = ledger.export()
    balances: List[Dict[str, Any]] = [
        {"holder": holder, "token_kind": kind, "amount": amount}
        for (holder, kind), amount in sorted(state["balances"].items())
    ]
    approvals = {
        holder: sorted(delegates)
        for holder, delegates in sorted(state["approvals"].items())
        if delegates
    }

    payload: Dict[str, Any] = {
        "format": FORMAT,
        "owner": state["owner"],
        "admins": sorted(state["admins"]),
        "balances": balances,
        "approvals": approvals,
    }
    payload["digest"] = _digest(payload)
    return payload


def import_state(payload: Any, settings: Optional[LedgerSettings] = None) -> MultiTokenLedger:
    if not isinstance(payload, dict):
        raise SnapshotError("snapshot must be a JSON object")
    if payload.get("format") != FORMAT:
        raise SnapshotError(f"unsupported snapshot format: {payload.get('format')!r}")
    if payload.get("digest") != _digest(payload):
        raise SnapshotError("snapshot digest mismatch")

    admins = payload.get("admins", [])
    balances = payload.get("balances", [])
    approvals = payload.get("approvals", {})
    if not isinstance(admins, list):
        raise SnapshotError("admins must be a list")
    if not isinstance(balances, list) or not all(isinstance(b, dict) for b in balances):
        raise SnapshotError("balances must be a list of objects")
    if not isinstance(approvals, dict) or not all(isinstance(d, list) for d in approvals.values()):
        raise SnapshotError("approvals must map holders to lists of delegates")

    try:
        return MultiTokenLedger.restore(
            owner=payload.get("owner"),
            admins=admins,
            balances=[(b.get("holder"), b.get("token_kind"), b.get("amount")) for b in balances],
            approvals=approvals,
            settings=settings,
        )
    except ValueError as e:
        raise SnapshotError(f"invalid snapshot: {e}") from e


def save_state(ledger: MultiTokenLedger, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(export_state(ledger), f, ensure_ascii=False, indent=2, sort_keys=True)
        f.write("\n")
    tmp.replace(path)
    return path


def load_state(path: str | Path, settings: Optional[LedgerSettings] = None) -> MultiTokenLedger:
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SnapshotError(f"{path}: invalid json ({e})") from e
    return import_state(payload, settings=settings)
