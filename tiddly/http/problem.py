"""Problem+JSON utilities and global exception handlers.

Defines the RFC7807 media type and handler callables that turn domain
errors, routing errors and unexpected failures into
application/problem+json responses.
"""

from __future__ import annotations

from typing import Any, Dict
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tiddly.logic.errors import TiddlyError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)

_TITLES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def build_problem(status: int, detail: str = "", *, code: str | None = None, title: str | None = None) -> Dict[str, Any]:
    problem: Dict[str, Any] = {
        "title": title or _TITLES.get(int(status), "Error"),
        "status": int(status),
    }
    if detail:
        problem["detail"] = detail
    if code:
        problem["code"] = code
    return problem


def problem_response(problem: Dict[str, Any], headers: Dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        problem,
        status_code=int(problem.get("status", 500)),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers or None,
    )


async def handle_tiddly_error(request: Request, exc: TiddlyError) -> JSONResponse:  # noqa: D401
    log = logger.error if exc.status >= 500 else logger.info
    log("error_handler.handle code=%s status=%s path=%s detail=%s", exc.code, exc.status, request.url.path, exc.detail)
    return problem_response(build_problem(exc.status, exc.detail, code=exc.code, title=exc.title))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: D401
    status = int(getattr(exc, "status_code", 500) or 500)
    detail = exc.detail if isinstance(exc.detail, str) else ""
    if status == 404:
        detail = "not found"
    elif status == 405:
        detail = "bad method"
    headers = dict(exc.headers) if isinstance(getattr(exc, "headers", None), dict) else None
    return problem_response(build_problem(status, detail), headers=headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(build_problem(500))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TiddlyError, handle_tiddly_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "build_problem",
    "problem_response",
    "handle_tiddly_error",
    "handle_http_exception",
    "handle_unexpected_error",
    "register_exception_handlers",
]
