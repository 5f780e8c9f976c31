"""multitoken: a minimal ERC1155-style multi-token balance ledger.

Design goals:
- Balances per (holder, token kind), never negative, never above 2**64 - 1
- Owner/admin access control with explicit caller identities per call
- Failed operations leave the ledger exactly as it was
"""
from .access_control import AccessControl
from .config import LedgerSettings, load_settings
from .errors import (
    AuthorizationError,
    BalanceOverflowError,
    InsufficientBalanceError,
    LedgerError,
    ReentrancyError,
    SnapshotError,
)
from .ledger import U32_MAX, U64_MAX, MultiTokenLedger
from .reentrancy import ReentrancyGuard
from .snapshot import export_state, import_state, load_state, save_state

__all__ = [
    "AccessControl",
    "AuthorizationError",
    "BalanceOverflowError",
    "InsufficientBalanceError",
    "LedgerError",
    "LedgerSettings",
    "MultiTokenLedger",
    "ReentrancyError",
    "ReentrancyGuard",
    "SnapshotError",
    "U32_MAX",
    "U64_MAX",
    "export_state",
    "import_state",
    "load_settings",
    "load_state",
    "save_state",
]
