"""Single-bit reentrancy lock for the ledger's guarded sections."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from .errors import ReentrancyError


class ReentrancyGuard:
    def __init__(self) -> None:
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    def enter(self) -> None:
        if self._locked:
            raise ReentrancyError("Reentrancy detected.")
        self._locked = True

    def exit(self) -> None:
        # Unconditional: unlocking an unlocked guard is not an error.
        self._locked = False

    @contextmanager
    def held(self) -> Iterator[None]:
        """Hold the guard for the duration of the block.

        If the guard is already held, ReentrancyError propagates and the lock
        is left to its current holder.
        """

        self.enter()
        try:
            yield
        finally:
            self.exit()
