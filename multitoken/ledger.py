"""Multi-token balance ledger (ERC1155-style).

Balances are tracked per (holder, token kind). Admins mint to themselves,
the owner manages admins and ownership, and holders grant delegates the
right to move their tokens.

Every public operation runs under one instance-wide re-entrant lock, so a
threaded host sees one operation at a time. The mint path additionally holds
the reentrancy guard, which rejects a nested mint on the same instance.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple

from .access_control import AccessControl
from .config import LedgerSettings
from .errors import AuthorizationError, BalanceOverflowError, InsufficientBalanceError
from .reentrancy import ReentrancyGuard

logger = logging.getLogger(__name__)

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1


def _check_identity(value: object, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string identity, got {type(value).__name__}")
    return value


def _check_uint(value: object, name: str, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > maximum:
        raise ValueError(f"{name} must be within [0, {maximum}], got {value}")
    return value


def _check_token_kind(value: object) -> int:
    return _check_uint(value, "token_kind", U32_MAX)


def _check_amount(value: object) -> int:
    return _check_uint(value, "amount", U64_MAX)


class MultiTokenLedger:
    def __init__(self, owner: str, settings: Optional[LedgerSettings] = None) -> None:
        _check_identity(owner, "owner")
        self.settings = settings or LedgerSettings()
        self.access_control = AccessControl(owner)
        self.reentrancy_guard = ReentrancyGuard()

        self._balances: Dict[Tuple[str, int], int] = {}
        self._approvals: Dict[str, Dict[str, bool]] = {}
        self._lock = threading.RLock()

        logger.info("Ledger initialized with owner: %r", owner)

    @classmethod
    def restore(
        cls,
        owner: str,
        admins: Iterable[str] = (),
        balances: Iterable[Tuple[str, int, int]] = (),
        approvals: Optional[Mapping[str, Iterable[str]]] = None,
        settings: Optional[LedgerSettings] = None,
    ) -> "MultiTokenLedger":
        """Rebuild a ledger from previously exported state.

        This is the host's trusted load path: no authorization checks are
        applied, but every value is range-checked.
        """

        ledger = cls(owner, settings=settings)
        ledger.access_control = AccessControl(
            owner, [_check_identity(a, "admin") for a in admins]
        )

        seen = set()
        for holder, token_kind, amount in balances:
            key = (_check_identity(holder, "holder"), _check_token_kind(token_kind))
            if key in seen:
                raise ValueError(f"duplicate balance entry for {key}")
            seen.add(key)
            if _check_amount(amount):
                ledger._balances[key] = amount

        for holder, delegates in (approvals or {}).items():
            record = ledger._approvals.setdefault(_check_identity(holder, "holder"), {})
            for delegate in delegates:
                record[_check_identity(delegate, "delegate")] = True

        return ledger

    # -- guards ---------------------------------------------------------

    @contextmanager
    def _optionally_guarded(self) -> Iterator[None]:
        if self.settings.guard_all_mutations:
            with self.reentrancy_guard.held():
                yield
        else:
            yield

    # -- queries ----------------------------------------------------------

    @property
    def owner(self) -> str:
        with self._lock:
            return self.access_control.owner

    @property
    def admins(self) -> FrozenSet[str]:
        with self._lock:
            return self.access_control.admins

    def is_owner(self, identity: str) -> bool:
        with self._lock:
            return self.access_control.is_owner(identity)

    def is_admin(self, identity: str) -> bool:
        with self._lock:
            return self.access_control.is_admin(identity)

    def export(self) -> Dict[str, Any]:
        """Owner, admins, non-zero balances and approvals read in one locked step."""
        with self._lock:
            return {
                "owner": self.access_control.owner,
                "admins": self.access_control.admins,
                "balances": self.balances(),
                "approvals": self.approvals(),
            }

    def balance_of(self, owner: str, token_kind: int) -> int:
        with self._lock:
            return self._balances.get((owner, token_kind), 0)

    def balances(self) -> Dict[Tuple[str, int], int]:
        """Copy of all non-zero balances keyed by (holder, token kind)."""
        with self._lock:
            return {k: v for k, v in self._balances.items() if v}

    def approvals(self) -> Dict[str, FrozenSet[str]]:
        """Copy of granted approvals: holder -> delegates."""
        with self._lock:
            return {
                holder: frozenset(d for d, ok in record.items() if ok)
                for holder, record in self._approvals.items()
            }

    def is_approved(self, caller: str, token_kind: int) -> bool:
        """Whether `caller`'s own approval record holds the key str(token_kind).

        This is the check `transfer` gates on. `approve` keys records by
        delegate identity, so it only passes once a caller has approved the
        decimal token kind string itself. See is_approved_for for the
        holder/delegate check.
        """

        with self._lock:
            record = self._approvals.get(caller)
            if record is None:
                return False
            return record.get(str(token_kind), False)

    def is_approved_for(self, holder: str, delegate: str) -> bool:
        with self._lock:
            record = self._approvals.get(holder)
            if record is None:
                return False
            return record.get(delegate, False)

    # -- mutations --------------------------------------------------------

    def mint(self, caller: str, token_kind: int, amount: int) -> None:
        """Credit `amount` of `token_kind` to the caller. Admins only."""
        _check_identity(caller, "caller")
        _check_token_kind(token_kind)
        _check_amount(amount)

        with self._lock:
            if not self.access_control.is_admin(caller):
                logger.warning("Mint failed: %r is not an admin", caller)
                raise AuthorizationError("Caller is not authorized to mint tokens.")

            with self.reentrancy_guard.held():
                key = (caller, token_kind)
                current = self._balances.get(key, 0)
                if current + amount > U64_MAX:
                    logger.warning(
                        "Mint failed: %d tokens of ID %d to %r would overflow", amount, token_kind, caller
                    )
                    raise BalanceOverflowError("Mint would overflow the balance.")
                if current + amount:
                    self._balances[key] = current + amount

        logger.info("Minted %d tokens of ID %d to %r", amount, token_kind, caller)

    def transfer(self, caller: str, to: str, token_kind: int, amount: int) -> None:
        """Move the caller's own tokens to `to`.

        Allowed for the ledger owner, or for a caller that passes is_approved.
        """

        _check_identity(caller, "caller")
        _check_identity(to, "to")
        _check_token_kind(token_kind)
        _check_amount(amount)

        with self._lock, self._optionally_guarded():
            if not self.is_approved(caller, token_kind) and not self.access_control.is_owner(caller):
                logger.warning("Transfer failed: %r is not approved or the owner.", caller)
                raise AuthorizationError("Caller is not authorized to transfer.")
            self._move(caller, to, token_kind, amount)

        logger.info("Transferred %d tokens of ID %d from %r to %r", amount, token_kind, caller, to)

    def transfer_from(self, caller: str, holder: str, to: str, token_kind: int, amount: int) -> None:
        """Move `holder`'s tokens to `to` on the holder's behalf.

        Allowed for the holder itself, a delegate the holder approved, or the
        ledger owner.
        """

        _check_identity(caller, "caller")
        _check_identity(holder, "holder")
        _check_identity(to, "to")
        _check_token_kind(token_kind)
        _check_amount(amount)

        with self._lock, self._optionally_guarded():
            allowed = (
                caller == holder
                or self.is_approved_for(holder, caller)
                or self.access_control.is_owner(caller)
            )
            if not allowed:
                logger.warning("Transfer failed: %r is not approved by %r or the owner.", caller, holder)
                raise AuthorizationError("Caller is not authorized to transfer.")
            self._move(holder, to, token_kind, amount)

        logger.info(
            "Transferred %d tokens of ID %d from %r to %r (by %r)", amount, token_kind, holder, to, caller
        )

    def _move(self, sender: str, to: str, token_kind: int, amount: int) -> None:
        # All checks run before the first write.
        src = (sender, token_kind)
        src_balance = self._balances.get(src, 0)
        if src_balance < amount:
            logger.warning("Transfer failed: %r holds %d of ID %d, needs %d", sender, src_balance, token_kind, amount)
            raise InsufficientBalanceError("Insufficient balance.")

        if to == sender:
            return

        dst = (to, token_kind)
        dst_balance = self._balances.get(dst, 0)
        if dst_balance + amount > U64_MAX:
            logger.warning("Transfer failed: crediting %r would overflow ID %d", to, token_kind)
            raise BalanceOverflowError("Transfer would overflow the recipient balance.")

        if src_balance == amount:
            self._balances.pop(src, None)
        else:
            self._balances[src] = src_balance - amount
        if dst_balance + amount:
            self._balances[dst] = dst_balance + amount

    def approve(self, caller: str, approved: str, token_kind: int) -> None:
        """Record `approved` as a delegate of `caller`.

        The grant covers all token kinds; `token_kind` is accepted for the
        caller's bookkeeping only. There is no revocation.
        """

        _check_identity(caller, "caller")
        _check_identity(approved, "approved")
        _check_token_kind(token_kind)

        with self._lock, self._optionally_guarded():
            self._approvals.setdefault(caller, {})[approved] = True

        logger.info("Approval set for %r to transfer token ID %d by %r", approved, token_kind, caller)

    def add_admin(self, caller: str, new_admin: str) -> None:
        _check_identity(caller, "caller")
        _check_identity(new_admin, "new_admin")
        with self._lock, self._optionally_guarded():
            self.access_control.add_admin(caller, new_admin)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand the ledger to `new_owner`. The admin set is cleared."""
        _check_identity(caller, "caller")
        _check_identity(new_owner, "new_owner")

        with self._lock, self._optionally_guarded():
            if not self.access_control.is_owner(caller):
                logger.warning("Ownership transfer failed: %r is not the owner", caller)
                raise AuthorizationError("Caller is not authorized to transfer ownership.")
            self.access_control = AccessControl(new_owner)

        logger.info("Ownership transferred to %r", new_owner)
