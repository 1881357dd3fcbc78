"""ASGI middleware for the tiddler server."""
