"""Owner/group display-name lookup for listing rows.

Names come from the POSIX user and group databases. Lookups are memoized and
any failure (unknown id, unsupported platform) yields ``None`` so rows render
the ``-`` placeholder instead.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol

try:
    import grp
    import pwd
except ImportError:  # Windows has neither database.
    grp = None
    pwd = None

_INVALID_NAMES = frozenset({"undefined", "null"})


class IdentityResolver(Protocol):
    def username(self, uid: int) -> str | None: ...

    def groupname(self, gid: int) -> str | None: ...


def sanitize_identity_name(name: str | None) -> str | None:
    """Drop empty names and the literal placeholder words."""
    if name is None:
        return None
    stripped = name.strip()
    if not stripped or stripped.lower() in _INVALID_NAMES:
        return None
    return stripped


class SystemIdentityResolver:
    """Resolve ids through ``pwd``/``grp`` with per-instance memoization."""

    def __init__(self) -> None:
        self.username = lru_cache(maxsize=256)(self._lookup_username)
        self.groupname = lru_cache(maxsize=256)(self._lookup_groupname)

    @staticmethod
    def _lookup_username(uid: int) -> str | None:
        if pwd is None:
            return None
        try:
            return sanitize_identity_name(pwd.getpwuid(uid).pw_name)
        except (KeyError, OverflowError, TypeError):
            return None

    @staticmethod
    def _lookup_groupname(gid: int) -> str | None:
        if grp is None:
            return None
        try:
            return sanitize_identity_name(grp.getgrgid(gid).gr_name)
        except (KeyError, OverflowError, TypeError):
            return None


class StaticIdentityResolver:
    """Resolve ids from fixed mappings; handy for tests and cached exports."""

    def __init__(
        self,
        users: dict[int, str] | None = None,
        groups: dict[int, str] | None = None,
    ) -> None:
        self._users = {uid: name for uid, name in (users or {}).items() if sanitize_identity_name(name)}
        self._groups = {gid: name for gid, name in (groups or {}).items() if sanitize_identity_name(name)}

    def username(self, uid: int) -> str | None:
        return self._users.get(uid)

    def groupname(self, gid: int) -> str | None:
        return self._groups.get(gid)


__all__ = [
    "IdentityResolver",
    "SystemIdentityResolver",
    "StaticIdentityResolver",
    "sanitize_identity_name",
]
