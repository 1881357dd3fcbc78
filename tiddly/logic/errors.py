"""Error taxonomy for the tiddler server.

Each error carries the HTTP status and stable code used when it is turned
into a problem+json response by ``tiddly.http.problem``.
"""

from __future__ import annotations


class TiddlyError(Exception):
    """Base class for domain failures surfaced to HTTP callers."""

    status = 500
    code = "INTERNAL_ERROR"
    title = "Internal Server Error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail


class AuthMissing(TiddlyError):
    """Raised when a gated route is called without a trusted identity."""

    status = 403
    code = "AUTH_MISSING"
    title = "Forbidden"

    def __init__(self, detail: str = "permission denied") -> None:
        super().__init__(detail)


class TiddlerNotFound(TiddlyError):
    status = 404
    code = "TIDDLER_NOT_FOUND"
    title = "Not Found"


class BadInput(TiddlyError):
    """Raised when the request body cannot be read."""

    status = 400
    code = "BAD_INPUT"
    title = "Bad Request"


class MalformedPayload(TiddlyError):
    """Raised when a PUT body is not a JSON object."""

    code = "PAYLOAD_MALFORMED"


class CorruptMeta(TiddlyError):
    """Raised when stored meta is not a JSON object (tombstones included)."""

    code = "META_CORRUPT"


class StoreFailure(TiddlyError):
    code = "STORE_FAILURE"


__all__ = [
    "TiddlyError",
    "AuthMissing",
    "TiddlerNotFound",
    "BadInput",
    "MalformedPayload",
    "CorruptMeta",
    "StoreFailure",
]
