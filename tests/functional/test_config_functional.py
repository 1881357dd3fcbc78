"""Configuration loading and precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from tiddly.config import DEFAULT_INDEX_PATH, load_config


@pytest.fixture(autouse=True)
def _workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_missing_project_fails_validation():
    with pytest.raises(ValidationError):
        load_config()


def test_blank_project_fails_validation(monkeypatch):
    monkeypatch.setenv("TIDDLY_PROJECT", "   ")
    with pytest.raises(ValidationError):
        load_config()


def test_defaults(monkeypatch):
    monkeypatch.setenv("TIDDLY_PROJECT", "wiki")
    cfg = load_config()
    assert cfg.store.project == "wiki"
    assert cfg.store.dsn == "sqlite+pysqlite:///:memory:"
    assert cfg.store.auto_migrate is True
    assert cfg.server.port == 8080
    assert cfg.server.host == "0.0.0.0"
    assert cfg.auth.header == "X-Webauth-User"
    assert cfg.frontend.index_path == DEFAULT_INDEX_PATH
    assert cfg.logging.level == "INFO"


def test_gcp_project_is_accepted_as_fallback(monkeypatch):
    monkeypatch.setenv("GCP_PROJECT", "legacy")
    assert load_config().store.project == "legacy"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("TIDDLY_PROJECT", "wiki")
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("TRUSTED_USER_HEADER", "X-Forwarded-User")
    monkeypatch.setenv("INDEX_HTML_PATH", str(tmp_path / "page.html"))
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("AUTO_APPLY_MIGRATIONS", "0")
    cfg = load_config()
    assert cfg.server.port == 9090
    assert cfg.store.dsn == "sqlite:///x.db"
    assert cfg.store.auto_migrate is False
    assert cfg.auth.header == "X-Forwarded-User"
    assert cfg.frontend.index_path == tmp_path / "page.html"
    assert cfg.logging.level == "DEBUG"


def test_json_file_then_override_files_then_env(monkeypatch, tmp_path):
    (tmp_path / "tiddly_config.json").write_text(
        json.dumps({"store": {"project": "from-json", "dsn": "sqlite:///json.db"}, "server": {"port": 7000}}),
        encoding="utf-8",
    )
    cfg = load_config()
    assert (cfg.store.project, cfg.store.dsn, cfg.server.port) == ("from-json", "sqlite:///json.db", 7000)

    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "server.port").write_text("7100\n", encoding="utf-8")
    assert load_config().server.port == 7100

    monkeypatch.setenv("PORT", "7200")
    assert load_config().server.port == 7200


def test_invalid_port_is_rejected(monkeypatch):
    monkeypatch.setenv("TIDDLY_PROJECT", "wiki")
    monkeypatch.setenv("PORT", "70000")
    with pytest.raises(ValidationError):
        load_config()


def test_unknown_log_level_is_rejected(monkeypatch):
    monkeypatch.setenv("TIDDLY_PROJECT", "wiki")
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        load_config()


def test_entry_point_exits_before_serving_without_project(monkeypatch):
    import uvicorn

    from tiddly.__main__ import main

    def _refuse(*args, **kwargs):
        raise AssertionError("server must not start without a project")

    monkeypatch.setattr(uvicorn, "run", _refuse)
    assert main() == 1
