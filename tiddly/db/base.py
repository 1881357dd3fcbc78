"""SQLAlchemy engine construction.

PostgreSQL and SQLite are both supported. No declarative models are defined;
the store adapter issues SQL text against the ``entity`` table.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """Return a new Engine for ``url``.

    The application builds one Engine at startup and shares it between
    requests through the store. For SQLite in-memory URLs a StaticPool keeps
    a single connection alive so every request sees the same database.
    """
    parsed = make_url(url)
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    elif parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    logger.info("store.engine_created url=%s", parsed.render_as_string(hide_password=True))
    return engine
