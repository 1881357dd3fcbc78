"""Functional test bootstrap for the tiddler server.

Provides the application under test in two flavours: backed by the in-memory
store, and backed by a file SQLite database migrated with the real runner.
Identity is injected as a fixed resolver or read from the trusted header.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from tiddly.config import AppConfig, StoreConfig
from tiddly.db.base import build_engine
from tiddly.db.migrations_runner import apply_migrations
from tiddly.logic.identity import IdentityResolver
from tiddly.logic.repository_tiddlers import InMemoryTiddlerStore, SqlTiddlerStore
from tiddly.main import create_app


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        store=StoreConfig(project="test-project", dsn=f"sqlite:///{tmp_path / 'tiddly.db'}", auto_migrate=True)
    )


@pytest.fixture
def memory_store() -> InMemoryTiddlerStore:
    return InMemoryTiddlerStore()


@pytest.fixture
def sql_store(tmp_path: Path) -> SqlTiddlerStore:
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    apply_migrations(engine)
    yield SqlTiddlerStore(engine, project="test-project")
    engine.dispose()


@pytest.fixture
def make_client(app_config: AppConfig) -> Callable[..., TestClient]:
    def _make(store=None, identity: Optional[IdentityResolver] = None) -> TestClient:
        return TestClient(create_app(app_config, store=store, identity=identity))

    return _make


@pytest.fixture
def client(make_client, memory_store) -> TestClient:
    """Client over the in-memory store using the trusted-header resolver."""
    return make_client(store=memory_store)


@pytest.fixture(params=["memory", "sql"])
def any_client(request, make_client, memory_store, sql_store) -> TestClient:
    """Client parametrised over both store implementations."""
    store = memory_store if request.param == "memory" else sql_store
    return make_client(store=store)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TIDDLY_PROJECT", "GCP_PROJECT", "DATABASE_URL", "PORT", "TRUSTED_USER_HEADER", "INDEX_HTML_PATH", "LOG_LEVEL", "HOST", "AUTO_APPLY_MIGRATIONS"):
        monkeypatch.delenv(name, raising=False)
