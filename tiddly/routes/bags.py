"""Bag endpoints: tombstoning tiddlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from tiddly.logic.repository_tiddlers import TiddlerStore
from tiddly.logic.revisions import delete_tiddler
from tiddly.routes.deps import get_store, require_admin

router = APIRouter(prefix="/bags/bag")


@router.delete(
    "/tiddlers/{title:path}",
    summary="Tombstone a tiddler",
    dependencies=[Depends(require_admin)],
)
def remove_tiddler(title: str, store: TiddlerStore = Depends(get_store)) -> Response:
    delete_tiddler(store, title)
    return Response(status_code=200)
