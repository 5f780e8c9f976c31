from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import load_settings
from .errors import LedgerError
from .ledger import MultiTokenLedger
from .snapshot import export_state, load_state, save_state

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="multitoken", description="Multi-token balance ledger")
    p.add_argument("--config", default=None, help="YAML settings file (default: $MULTITOKEN_CONFIG)")
    p.add_argument("--state", default=None, help="snapshot file (default from settings)")
    sub = p.add_subparsers(dest="cmd", required=True)

    ip = sub.add_parser("init")
    ip.add_argument("owner")
    ip.add_argument("--force", action="store_true", help="overwrite an existing snapshot")

    mp = sub.add_parser("mint")
    mp.add_argument("caller")
    mp.add_argument("token_kind", type=int)
    mp.add_argument("amount", type=int)

    tp = sub.add_parser("transfer")
    tp.add_argument("caller")
    tp.add_argument("to")
    tp.add_argument("token_kind", type=int)
    tp.add_argument("amount", type=int)

    fp = sub.add_parser("transfer-from")
    fp.add_argument("caller")
    fp.add_argument("holder")
    fp.add_argument("to")
    fp.add_argument("token_kind", type=int)
    fp.add_argument("amount", type=int)

    ap = sub.add_parser("approve")
    ap.add_argument("caller")
    ap.add_argument("approved")
    ap.add_argument("token_kind", type=int)

    bp = sub.add_parser("balance")
    bp.add_argument("holder")
    bp.add_argument("token_kind", type=int)

    dp = sub.add_parser("add-admin")
    dp.add_argument("caller")
    dp.add_argument("new_admin")

    op = sub.add_parser("transfer-ownership")
    op.add_argument("caller")
    op.add_argument("new_owner")

    sub.add_parser("show")
    return p


def _apply(ledger: MultiTokenLedger, args: argparse.Namespace) -> None:
    if args.cmd == "mint":
        ledger.mint(args.caller, args.token_kind, args.amount)
    elif args.cmd == "transfer":
        ledger.transfer(args.caller, args.to, args.token_kind, args.amount)
    elif args.cmd == "transfer-from":
        ledger.transfer_from(args.caller, args.holder, args.to, args.token_kind, args.amount)
    elif args.cmd == "approve":
        ledger.approve(args.caller, args.approved, args.token_kind)
    elif args.cmd == "add-admin":
        ledger.add_admin(args.caller, args.new_admin)
    elif args.cmd == "transfer-ownership":
        ledger.transfer_ownership(args.caller, args.new_owner)


def _save(ledger: MultiTokenLedger, state_path: Path) -> bool:
    try:
        save_state(ledger, state_path)
    except OSError as e:
        print(f"error: cannot write {state_path}: {e}", file=sys.stderr)
        return False
    logger.debug("State saved to %s", state_path)
    return True


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    state_path = Path(args.state) if args.state else settings.state_path

    if args.cmd == "init":
        if state_path.exists() and not args.force:
            print(f"error: {state_path} already exists (use --force)", file=sys.stderr)
            return 1
        try:
            ledger = MultiTokenLedger(args.owner, settings=settings)
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        if not _save(ledger, state_path):
            return 1
        print(str(state_path))
        return 0

    try:
        ledger = load_state(state_path, settings=settings)
    except FileNotFoundError:
        print(f"error: {state_path} not found (run 'multitoken init OWNER' first)", file=sys.stderr)
        return 1
    except (LedgerError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.cmd == "balance":
        print(ledger.balance_of(args.holder, args.token_kind))
        return 0

    if args.cmd == "show":
        print(json.dumps(export_state(ledger), indent=2, sort_keys=True))
        return 0

    try:
        _apply(ledger, args)
    except (LedgerError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0 if _save(ledger, state_path) else 1


if __name__ == "__main__":
    raise SystemExit(main())
