"""Identity resolution for requests.

Identity comes from a header set by an authenticating reverse proxy in front
of the server; credentials are never checked here. Any non-empty value is
treated as an administrator.
"""

from __future__ import annotations

from typing import Optional, Protocol

from starlette.requests import HTTPConnection

GUEST = "GUEST"


class IdentityResolver(Protocol):
    def current_user(self, conn: HTTPConnection) -> Optional[str]: ...


class HeaderIdentityResolver:
    """Read the user from a trusted header (``X-Webauth-User`` by default)."""

    def __init__(self, header: str = "X-Webauth-User") -> None:
        self.header = header

    def current_user(self, conn: HTTPConnection) -> Optional[str]:
        value = conn.headers.get(self.header, "")
        return value or None


class FixedIdentityResolver:
    """Resolve every request to the same identity; ``None`` means anonymous."""

    def __init__(self, user: Optional[str]) -> None:
        self.user = user

    def current_user(self, conn: HTTPConnection) -> Optional[str]:
        return self.user or None


def display_name(user: Optional[str]) -> str:
    return user or GUEST


__all__ = [
    "GUEST",
    "IdentityResolver",
    "HeaderIdentityResolver",
    "FixedIdentityResolver",
    "display_name",
]
