"""Run the tiddler server with uvicorn: ``python -m tiddly``."""

from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from tiddly.config import load_config
from tiddly.logging_setup import configure_logging
from tiddly.main import create_app

logger = logging.getLogger("tiddly")


def main() -> int:
    configure_logging()
    try:
        config = load_config()
    except (ValidationError, ValueError) as exc:
        logger.error("startup_aborted reason=%s", exc)
        return 1
    app = create_app(config)
    logger.info("Listening on port %s", config.server.port)
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
