"""tiddly — a revisioning tiddler server for TiddlyWiki.

Exposes the FastAPI application factory. Business logic lives in
`tiddly/logic/` and route handlers in `tiddly/routes/`.
"""

from __future__ import annotations

from tiddly.main import create_app

__all__ = ["create_app"]
