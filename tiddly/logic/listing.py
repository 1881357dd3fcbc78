"""Skinny tiddler listing for the bulk endpoint.

Clients load the listing as metadata-only tiddlers and fetch bodies lazily.
Macro tiddlers only take effect once their body is loaded, so their body is
inlined here.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from tiddly.logic.errors import CorruptMeta
from tiddly.logic.payload import dump_meta, join_payload
from tiddly.logic.repository_tiddlers import TIDDLER_KIND, TiddlerRecord, TiddlerStore

logger = logging.getLogger(__name__)

# Matched against the raw meta string, quotes included.
MACRO_TAG_LITERAL = '"$:/tags/Macro"'


def is_macro(meta: str) -> bool:
    return MACRO_TAG_LITERAL in meta


def iter_listing_entries(records: Iterable[TiddlerRecord]) -> Iterator[str]:
    """Yield the serialised listing entry of each live record, in input order.

    Tombstones are skipped. Non-macro meta is passed through verbatim; a macro
    tiddler whose meta cannot be parsed is left out of the listing.
    """
    for record in records:
        if not record.meta:
            continue
        if not is_macro(record.meta):
            yield record.meta
            continue
        try:
            yield dump_meta(join_payload(record.meta, record.text))
        except CorruptMeta:
            logger.warning("listing.macro_skipped title=%s", record.title)


def build_listing(store: TiddlerStore) -> str:
    """Return the JSON array text for all live tiddlers in scan order."""
    return "[" + ",".join(iter_listing_entries(store.scan(TIDDLER_KIND))) + "]"


__all__ = ["MACRO_TAG_LITERAL", "is_macro", "iter_listing_entries", "build_listing"]
