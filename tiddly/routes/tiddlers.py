"""Recipe endpoints: bulk listing, single fetch and write of tiddlers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect

from tiddly.logic.errors import BadInput
from tiddly.logic.listing import build_listing
from tiddly.logic.repository_tiddlers import TiddlerStore
from tiddly.logic.revisions import get_tiddler, put_tiddler
from tiddly.routes.deps import get_store, require_admin

router = APIRouter(prefix="/recipes/all")
logger = logging.getLogger(__name__)


@router.get("/tiddlers.json", summary="List skinny tiddlers")
def list_tiddlers(store: TiddlerStore = Depends(get_store)) -> Response:
    return Response(content=build_listing(store), media_type="application/json")


@router.get("/tiddlers/{title:path}", summary="Fetch one tiddler with its text")
def read_tiddler(title: str, store: TiddlerStore = Depends(get_store)) -> JSONResponse:
    return JSONResponse(get_tiddler(store, title))


@router.put(
    "/tiddlers/{title:path}",
    summary="Store a new revision of a tiddler",
    dependencies=[Depends(require_admin)],
)
async def write_tiddler(title: str, request: Request, store: TiddlerStore = Depends(get_store)) -> Response:
    try:
        raw = await request.body()
    except ClientDisconnect as exc:
        raise BadInput("cannot read data") from exc
    result = await run_in_threadpool(put_tiddler, store, title, raw)
    return Response(status_code=200, headers={"ETag": result.etag})
