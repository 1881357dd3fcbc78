"""Request-scoped accessors for the services held on ``app.state``."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from tiddly.logic.errors import AuthMissing
from tiddly.logic.identity import IdentityResolver
from tiddly.logic.repository_tiddlers import TiddlerStore


def get_store(request: Request) -> TiddlerStore:
    return request.app.state.store


def get_identity(request: Request) -> IdentityResolver:
    return request.app.state.identity


def current_user(request: Request) -> Optional[str]:
    return get_identity(request).current_user(request)


def require_admin(request: Request) -> str:
    """Second identity check for mutating routes, independent of the gate."""
    user = current_user(request)
    if not user:
        raise AuthMissing()
    return user


__all__ = ["get_store", "get_identity", "current_user", "require_admin"]
