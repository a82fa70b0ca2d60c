"""Per-user hierarchical permissions.

A permission is a dot-separated path such as ``admin.ban``. A ``*`` segment
in a granted permission matches anything from that position on, so
``admin.*`` covers ``admin.ban`` and ``admin.ban.temp``. Without a wildcard
the granted and required paths must have the same length: ``admin`` does not
cover ``admin.ban``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping

OPEN_PERMISSIONS = frozenset({"none", ""})


def check_permission(has: str, required: str) -> bool:
    """Return True if the granted permission ``has`` covers ``required``."""
    split_has = has.split(".")
    split_required = required.split(".")
    for granted, wanted in zip(split_has, split_required):
        if granted.lower() != wanted.lower():
            return granted == "*"
    return len(split_has) == len(split_required)


class PermissionStore:
    """Granted permissions keyed by user id.

    Safe to grant from worker threads while the dispatcher checks.
    """

    def __init__(self, grants: Mapping[str, Iterable[str]] | None = None) -> None:
        self._lock = threading.Lock()
        self._permissions: dict[str, list[str]] = {}
        if grants:
            for user_id, permissions in grants.items():
                for permission in permissions:
                    self.grant(user_id, permission)

    def grant(self, user_id: str, permission: str) -> None:
        with self._lock:
            self._permissions.setdefault(str(user_id), []).append(permission)

    def permissions_for(self, user_id: str) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._permissions.get(str(user_id), ()))

    def check(self, user_id: str, required: str) -> bool:
        if required in OPEN_PERMISSIONS:
            return True
        return any(
            check_permission(granted, required)
            for granted in self.permissions_for(user_id)
        )
