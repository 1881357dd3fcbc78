"""Front-end page, identity report and space status endpoints."""

from __future__ import annotations

import html
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from tiddly.logic.identity import display_name
from tiddly.logic.payload import RECIPE
from tiddly.routes.deps import current_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", summary="Serve the TiddlyWiki front-end", response_class=FileResponse)
def get_index(request: Request):
    index_path = request.app.state.config.frontend.index_path
    if not index_path.is_file():
        logger.error("frontend.index_missing path=%s", index_path)
        raise HTTPException(status_code=500, detail="front-end page unavailable")
    return FileResponse(index_path, media_type="text/html")


@router.api_route("/auth", methods=["GET", "POST"], summary="Report the current identity", response_class=HTMLResponse)
def get_auth(user: Optional[str] = Depends(current_user)):
    name = html.escape(display_name(user))
    return HTMLResponse(f'<html>\nYou are logged in as {name}.\n\n<a href="/">Main page</a>.\n')


@router.get("/status", summary="Report identity and space descriptor")
def get_status(user: Optional[str] = Depends(current_user)) -> JSONResponse:
    return JSONResponse({"username": display_name(user), "space": {"recipe": RECIPE}})
