from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from tiddly.config import AppConfig, load_config
from tiddly.db.base import build_engine
from tiddly.db.migrations_runner import apply_migrations
from tiddly.http.problem import register_exception_handlers
from tiddly.http.request_id import RequestIdMiddleware
from tiddly.logging_setup import configure_logging
from tiddly.logic.identity import HeaderIdentityResolver, IdentityResolver
from tiddly.logic.repository_tiddlers import SqlTiddlerStore, TiddlerStore
from tiddly.middleware.auth_gate import AuthGateMiddleware
from tiddly.routes import api_router

logger = logging.getLogger(__name__)


def build_store(config: AppConfig) -> SqlTiddlerStore:
    """Create the process-wide store from configuration, migrating if enabled."""
    engine = build_engine(config.store.dsn)
    if config.store.auto_migrate:
        applied = apply_migrations(engine)
        if applied:
            logger.info("store.migrated files=%s", ",".join(applied))
    return SqlTiddlerStore(engine, project=config.store.project)


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[TiddlerStore] = None,
    identity: Optional[IdentityResolver] = None,
) -> FastAPI:
    """Build the application.

    ``store`` and ``identity`` default to the SQL store and the trusted-header
    resolver described by ``config``; tests pass substitutes.
    """
    config = config or load_config()
    configure_logging(config.logging.level)

    app = FastAPI(title="tiddly", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.store = store if store is not None else build_store(config)
    app.state.identity = identity or HeaderIdentityResolver(config.auth.header)

    register_exception_handlers(app)

    @app.get("/health", response_class=PlainTextResponse, include_in_schema=False)
    def health() -> PlainTextResponse:
        return PlainTextResponse("ok\n")

    app.include_router(api_router)

    # Last added runs first: request id wraps the auth gate.
    app.add_middleware(AuthGateMiddleware, resolver=app.state.identity)
    app.add_middleware(RequestIdMiddleware)

    logger.info(
        "app.created project=%s auth_header=%s",
        config.store.project,
        config.auth.header,
    )
    return app


__all__ = ["build_store", "create_app"]
