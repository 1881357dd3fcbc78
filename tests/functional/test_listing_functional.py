"""Skinny listing assembly."""

from __future__ import annotations

import json

import pytest

from tiddly.logic.errors import StoreFailure
from tiddly.logic.listing import build_listing, is_macro, iter_listing_entries
from tiddly.logic.repository_tiddlers import TIDDLER_KIND, InMemoryTiddlerStore, TiddlerRecord
from tiddly.logic.revisions import delete_tiddler, put_tiddler


def test_empty_store_lists_empty_array(memory_store):
    assert build_listing(memory_store) == "[]"


def test_listing_excludes_tombstones_and_keeps_live_records(memory_store):
    put_tiddler(memory_store, "A", b'{"title":"A","text":"a"}')
    put_tiddler(memory_store, "B", b'{"title":"B","text":"b"}')
    put_tiddler(memory_store, "C", b'{"title":"C"}')
    delete_tiddler(memory_store, "B")
    entries = json.loads(build_listing(memory_store))
    assert sorted(e["title"] for e in entries) == ["A", "C"]


def test_non_macro_entries_are_stored_meta_verbatim(memory_store):
    put_tiddler(memory_store, "A", b'{"title":"A","tags":"x","text":"body"}')
    stored = memory_store.get(TIDDLER_KIND, "A").meta
    assert build_listing(memory_store) == "[" + stored + "]"
    assert "text" not in json.loads(stored)


def test_macro_entries_carry_their_body(memory_store):
    put_tiddler(memory_store, "M", b'{"title":"M","tags":"$:/tags/Macro","text":"\\\\define hi() hello"}')
    put_tiddler(memory_store, "P", b'{"title":"P","tags":"plain","text":"hidden"}')
    entries = {e["title"]: e for e in json.loads(build_listing(memory_store))}
    assert entries["M"]["text"] == "\\define hi() hello"
    assert "text" not in entries["P"]


def test_macro_match_requires_the_quoted_literal():
    assert is_macro('{"tags":"$:/tags/Macro"}')
    assert not is_macro('{"tags":"[[$:/tags/Macro]] other"}')
    assert not is_macro('{"tags":"$:/tags/MacroX"}')


def test_unparsable_macro_meta_is_skipped_silently():
    records = [
        TiddlerRecord(title="bad", revision=1, meta='{"tags":"$:/tags/Macro"', text="x"),
        TiddlerRecord(title="good", revision=1, meta='{"title":"good"}', text="y"),
    ]
    assert list(iter_listing_entries(records)) == ['{"title":"good"}']


def test_listing_follows_scan_order():
    records = [TiddlerRecord(title=t, revision=1, meta='{"title":"%s"}' % t) for t in ("z", "a", "m")]
    assert [json.loads(e)["title"] for e in iter_listing_entries(records)] == ["z", "a", "m"]


class _BrokenScanStore(InMemoryTiddlerStore):
    def scan(self, kind):
        yield TiddlerRecord(title="A", revision=1, meta="{}")
        raise StoreFailure("scan interrupted")


def test_scan_failure_fails_the_whole_listing():
    with pytest.raises(StoreFailure):
        build_listing(_BrokenScanStore())
