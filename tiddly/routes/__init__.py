"""APIRouter registration for the tiddler server."""

from __future__ import annotations

from fastapi import APIRouter

from tiddly.routes.bags import router as bags_router
from tiddly.routes.space import router as space_router
from tiddly.routes.tiddlers import router as tiddlers_router

api_router = APIRouter()
api_router.include_router(space_router, tags=["Space"])
api_router.include_router(tiddlers_router, tags=["Tiddlers"])
api_router.include_router(bags_router, tags=["Bags"])

__all__ = ["api_router"]
