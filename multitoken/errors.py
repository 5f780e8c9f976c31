"""Ledger error kinds.

Every refusal the ledger makes is raised as a subclass of LedgerError.
A raised error never leaves the ledger locked or partially mutated.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all ledger refusals."""
    pass


class AuthorizationError(LedgerError):
    """Raised when the caller lacks the owner, admin or approval role."""
    pass


class ReentrancyError(LedgerError):
    """Raised when a guarded section is entered while already locked."""
    pass


class InsufficientBalanceError(LedgerError):
    """Raised when a debit would take a balance below zero."""
    pass


class BalanceOverflowError(LedgerError, OverflowError):
    """Raised when a credit would exceed the largest representable balance."""
    pass


class SnapshotError(LedgerError, ValueError):
    """Raised when a state snapshot is malformed or fails its digest check."""
    pass
