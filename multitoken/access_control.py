"""Owner and admin roster.

Owner and admin are two independent predicates over the same identity
space: the owner is not implicitly an admin.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Optional, Set

from .errors import AuthorizationError

logger = logging.getLogger(__name__)


class AccessControl:
    def __init__(self, owner: str, admins: Optional[Iterable[str]] = None) -> None:
        self._owner = owner
        self._admins: Set[str] = set(admins or ())

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def admins(self) -> FrozenSet[str]:
        return frozenset(self._admins)

    def is_owner(self, caller: str) -> bool:
        return self._owner == caller

    def is_admin(self, caller: str) -> bool:
        return caller in self._admins

    def add_admin(self, caller: str, new_admin: str) -> None:
        """Grant admin to `new_admin`. Only the owner may do this; repeats are no-ops."""
        if not self.is_owner(caller):
            logger.warning("add_admin refused: %r is not the owner", caller)
            raise AuthorizationError("Only the owner can add admins.")
        self._admins.add(new_admin)
        logger.info("Admin %r added by owner %r", new_admin, caller)
