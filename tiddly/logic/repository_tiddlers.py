"""Record store adapter for tiddlers and their history.

Records are addressed by ``(kind, name)`` inside a project partition, in the
manner of a document database: get-by-key, put-by-key (upsert) and an
unordered scan of one kind. Two implementations share the ``TiddlerStore``
protocol: ``SqlTiddlerStore`` over a SQLAlchemy engine and
``InMemoryTiddlerStore`` for tests and local development.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Dict, Iterator, Optional, Protocol, Tuple

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from tiddly.logic.errors import StoreFailure

logger = logging.getLogger(__name__)

TIDDLER_KIND = "Tiddler"
HISTORY_KIND = "TiddlerHistory"


@dataclass(frozen=True)
class TiddlerRecord:
    """A stored record; ``title`` is the key it was read from (``title#rev`` for history)."""

    title: str
    revision: int = 0
    meta: str = ""
    text: str = ""

    @property
    def is_tombstone(self) -> bool:
        return self.meta == ""


def history_key(title: str, revision: int) -> str:
    return f"{title}#{int(revision)}"


class TiddlerStore(Protocol):
    def get(self, kind: str, name: str) -> Optional[TiddlerRecord]: ...

    def put(self, kind: str, name: str, record: TiddlerRecord) -> None: ...

    def scan(self, kind: str) -> Iterator[TiddlerRecord]: ...


class SqlTiddlerStore:
    """Store backed by the ``entity`` table (see db/migrations).

    The Engine's pool makes one instance safe to share between concurrent
    requests. Every SQLAlchemy error is re-raised as StoreFailure.
    """

    def __init__(self, engine: Engine, project: str) -> None:
        self.engine = engine
        self.project = project

    def get(self, kind: str, name: str) -> Optional[TiddlerRecord]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    sql_text(
                        "SELECT name, rev, meta, body FROM entity "
                        "WHERE project = :project AND kind = :kind AND name = :name"
                    ),
                    {"project": self.project, "kind": kind, "name": name},
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.error("store.get_failed kind=%s name=%s", kind, name, exc_info=True)
            raise StoreFailure(f"get {kind}/{name}: {exc}") from exc
        if row is None:
            return None
        return TiddlerRecord(title=str(row[0]), revision=int(row[1]), meta=row[2] or "", text=row[3] or "")

    def put(self, kind: str, name: str, record: TiddlerRecord) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    sql_text(
                        """
                        INSERT INTO entity (project, kind, name, rev, meta, body)
                        VALUES (:project, :kind, :name, :rev, :meta, :body)
                        ON CONFLICT (project, kind, name)
                        DO UPDATE SET rev = excluded.rev, meta = excluded.meta, body = excluded.body
                        """
                    ),
                    {
                        "project": self.project,
                        "kind": kind,
                        "name": name,
                        "rev": int(record.revision),
                        "meta": record.meta,
                        "body": record.text,
                    },
                )
        except SQLAlchemyError as exc:
            logger.error("store.put_failed kind=%s name=%s", kind, name, exc_info=True)
            raise StoreFailure(f"put {kind}/{name}: {exc}") from exc

    def scan(self, kind: str) -> Iterator[TiddlerRecord]:
        """Yield every record of ``kind``; order is whatever the database returns."""
        try:
            with self.engine.connect() as conn:
                result = conn.execute(
                    sql_text("SELECT name, rev, meta, body FROM entity WHERE project = :project AND kind = :kind"),
                    {"project": self.project, "kind": kind},
                )
                for row in result:
                    yield TiddlerRecord(title=str(row[0]), revision=int(row[1]), meta=row[2] or "", text=row[3] or "")
        except SQLAlchemyError as exc:
            logger.error("store.scan_failed kind=%s", kind, exc_info=True)
            raise StoreFailure(f"scan {kind}: {exc}") from exc


class InMemoryTiddlerStore:
    """Dict-backed store for tests and local development."""

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str], TiddlerRecord] = {}
        self._lock = threading.Lock()

    def get(self, kind: str, name: str) -> Optional[TiddlerRecord]:
        with self._lock:
            return self._records.get((kind, name))

    def put(self, kind: str, name: str, record: TiddlerRecord) -> None:
        with self._lock:
            self._records[(kind, name)] = replace(record, title=name)

    def scan(self, kind: str) -> Iterator[TiddlerRecord]:
        with self._lock:
            snapshot = [rec for (k, _name), rec in self._records.items() if k == kind]
        yield from snapshot


__all__ = [
    "TIDDLER_KIND",
    "HISTORY_KIND",
    "TiddlerRecord",
    "TiddlerStore",
    "SqlTiddlerStore",
    "InMemoryTiddlerStore",
    "history_key",
]
