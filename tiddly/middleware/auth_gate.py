"""Trusted-header authentication gate.

Rejects every HTTP request that carries no identity with 403 before routing,
body parsing or any handler runs. Paths in ``exempt_paths`` (the liveness
probe) bypass the gate.
"""

from __future__ import annotations

import json
import logging
from typing import Iterable

from starlette.requests import HTTPConnection

from tiddly.http.problem import PROBLEM_MEDIA_TYPE, build_problem
from tiddly.logic.errors import AuthMissing
from tiddly.logic.identity import IdentityResolver

logger = logging.getLogger(__name__)

DEFAULT_EXEMPT_PATHS = frozenset({"/health"})


class AuthGateMiddleware:
    """ASGI middleware enforcing the presence of a trusted identity.

    The resolved identity is published as ``scope["state"]["user"]`` for
    handlers that report it.
    """

    def __init__(self, app, resolver: IdentityResolver, exempt_paths: Iterable[str] = DEFAULT_EXEMPT_PATHS) -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.resolver = resolver
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        path = str(scope.get("path") or "")
        if path in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        user = self.resolver.current_user(HTTPConnection(scope))
        if not user:
            err = AuthMissing()
            logger.info("auth_gate.reject method=%s path=%s", scope.get("method"), path)
            body = json.dumps(build_problem(err.status, err.detail, code=err.code, title=err.title)).encode("utf-8")
            await send(
                {
                    "type": "http.response.start",
                    "status": err.status,
                    "headers": [
                        (b"content-type", PROBLEM_MEDIA_TYPE.encode("latin-1")),
                        (b"content-length", str(len(body)).encode("latin-1")),
                    ],
                }
            )
            await send({"type": "http.response.body", "body": body, "more_body": False})
            return

        scope.setdefault("state", {})["user"] = user
        await self.app(scope, receive, send)


__all__ = ["AuthGateMiddleware", "DEFAULT_EXEMPT_PATHS"]
