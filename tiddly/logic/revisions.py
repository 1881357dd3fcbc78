"""Revision engine: write, read-join and tombstone for tiddlers.

Every mutation writes the live record first and then an identical snapshot
under ``title#revision`` in the history kind. The read-modify-write of the
revision number is not guarded; concurrent writers to one title may compute
the same revision and the last put wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Union

from tiddly.logic.errors import TiddlerNotFound
from tiddly.logic.etag import compute_tiddler_etag
from tiddly.logic.payload import join_payload, parse_payload, split_payload
from tiddly.logic.repository_tiddlers import (
    HISTORY_KIND,
    TIDDLER_KIND,
    TiddlerRecord,
    TiddlerStore,
    history_key,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    revision: int
    etag: str


def _require_title(title: str) -> str:
    if not title:
        raise TiddlerNotFound("empty title")
    return title


def _persist(store: TiddlerStore, record: TiddlerRecord) -> None:
    store.put(TIDDLER_KIND, record.title, record)
    store.put(HISTORY_KIND, history_key(record.title, record.revision), record)


def next_revision(store: TiddlerStore, title: str) -> int:
    """Return the revision the next write of ``title`` will get (missing -> 1)."""
    current = store.get(TIDDLER_KIND, title)
    return (current.revision if current is not None else 0) + 1


def put_tiddler(store: TiddlerStore, title: str, raw_body: Union[bytes, str]) -> WriteResult:
    """Store a new revision of ``title`` from a raw JSON request body.

    The body is parsed before the store is touched, so malformed input never
    mutates anything.
    """
    _require_title(title)
    payload = parse_payload(raw_body)
    revision = next_revision(store, title)
    meta, text = split_payload(payload, revision)
    _persist(store, TiddlerRecord(title=title, revision=revision, meta=meta, text=text))
    logger.info("tiddler.put title=%s revision=%s", title, revision)
    return WriteResult(revision=revision, etag=compute_tiddler_etag(title, revision, raw_body))


def get_tiddler(store: TiddlerStore, title: str) -> Dict[str, Any]:
    """Return the stored meta fields of ``title`` with ``text`` injected."""
    _require_title(title)
    record = store.get(TIDDLER_KIND, title)
    if record is None:
        raise TiddlerNotFound(f"no tiddler named {title!r}")
    return join_payload(record.meta, record.text)


def delete_tiddler(store: TiddlerStore, title: str) -> int:
    """Tombstone ``title``: bump the revision and blank meta and text."""
    _require_title(title)
    record = store.get(TIDDLER_KIND, title)
    if record is None:
        raise TiddlerNotFound(f"no tiddler named {title!r}")
    tombstone = TiddlerRecord(title=title, revision=record.revision + 1, meta="", text="")
    _persist(store, tombstone)
    logger.info("tiddler.delete title=%s revision=%s", title, tombstone.revision)
    return tombstone.revision


__all__ = [
    "WriteResult",
    "next_revision",
    "put_tiddler",
    "get_tiddler",
    "delete_tiddler",
]
