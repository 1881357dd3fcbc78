"""Request ID and access-log middleware.

Propagates an inbound X-Request-Id (or generates one), echoes it on the
response and logs one line per completed request.
"""

from __future__ import annotations

import logging
import time
import uuid

logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = ""
        for k, v in scope.get("headers") or []:
            if k.lower() == self._header_key:
                request_id = v.decode("latin-1").strip()
                break
        request_id = request_id or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        started = time.monotonic()
        status_holder = {"status": 0}

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                status_holder["status"] = int(message.get("status") or 0)
                headers = [
                    (k, v) for k, v in (message.get("headers") or []) if k.lower() != self._header_key
                ]
                headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "request method=%s path=%s status=%s request_id=%s duration_ms=%.1f",
                scope.get("method"),
                scope.get("path"),
                status_holder["status"],
                request_id,
                (time.monotonic() - started) * 1000.0,
            )


__all__ = ["RequestIdMiddleware"]
