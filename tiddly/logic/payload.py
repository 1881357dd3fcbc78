"""Meta/text split and join helpers.

A tiddler is stored as two strings: ``meta`` (every field except the body,
serialised as a JSON object) and ``text`` (the body). These helpers are the
only place that converts between the client-facing JSON object and the stored
pair; write, single read and listing all go through them.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Tuple, Union

from tiddly.logic.errors import CorruptMeta, MalformedPayload

BAG = "bag"
RECIPE = "all"
TEXT_FIELD = "text"

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _scrub(value: Any) -> Any:
    """Replace unpaired surrogates with U+FFFD in every string of a parsed value."""
    if isinstance(value, str):
        return _LONE_SURROGATE.sub("\ufffd", value)
    if isinstance(value, dict):
        return {_scrub(k): _scrub(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(v) for v in value]
    return value


def _loads_object(raw: Union[str, bytes]) -> Dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8", errors="replace")
    obj = json.loads(raw, parse_constant=_reject_constant)
    if not isinstance(obj, dict):
        raise ValueError(f"expected a JSON object, got {type(obj).__name__}")
    return obj


def dump_meta(obj: Dict[str, Any]) -> str:
    """Serialise a meta object in the stored form (compact, sorted keys)."""
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def parse_payload(raw: Union[str, bytes]) -> Dict[str, Any]:
    """Parse a PUT body; anything but a JSON object raises MalformedPayload.

    Invalid UTF-8 bytes and unpaired surrogate escapes become U+FFFD so the
    stored meta always encodes cleanly.
    """
    try:
        return _scrub(_loads_object(raw))
    except ValueError as exc:
        raise MalformedPayload(str(exc)) from exc


def split_payload(payload: Dict[str, Any], revision: int) -> Tuple[str, str]:
    """Return ``(meta, text)`` for a client payload at ``revision``.

    The ``text`` field is removed; only a string value becomes the body.
    ``bag`` and ``revision`` are injected into the meta object. The input
    mapping is not modified.
    """
    fields = dict(payload)
    body = fields.pop(TEXT_FIELD, None)
    text = body if isinstance(body, str) else ""
    fields["bag"] = BAG
    fields["revision"] = int(revision)
    return dump_meta(fields), text


def join_payload(meta: str, text: str) -> Dict[str, Any]:
    """Parse stored ``meta`` and inject the body as ``text``.

    Raises CorruptMeta when meta is not a JSON object, which includes the
    empty meta of a tombstone.
    """
    try:
        obj = _loads_object(meta)
    except ValueError as exc:
        raise CorruptMeta(str(exc)) from exc
    obj[TEXT_FIELD] = text or ""
    return obj


__all__ = [
    "BAG",
    "RECIPE",
    "TEXT_FIELD",
    "dump_meta",
    "parse_payload",
    "split_payload",
    "join_payload",
]
