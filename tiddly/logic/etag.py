"""ETag computation for tiddler writes."""

from __future__ import annotations

import hashlib
from typing import Union
from urllib.parse import quote_plus

from tiddly.logic.payload import BAG


def compute_tiddler_etag(title: str, revision: int, raw_body: Union[bytes, str]) -> str:
    """Return the strong ETag for a stored revision.

    Shape: ``"bag/<query-escaped title>/<revision>:<md5 hex of raw body>"``
    including the surrounding double quotes. The digest covers the request
    body exactly as received, not the stored meta.
    """
    if isinstance(raw_body, str):
        raw_body = raw_body.encode("utf-8")
    digest = hashlib.md5(raw_body).hexdigest()
    return f'"{BAG}/{quote_plus(title, safe="")}/{int(revision)}:{digest}"'


__all__ = ["compute_tiddler_etag"]
