"""Database bootstrap utilities for the tiddler store.

Exposes engine construction and the migrations runner that applies the SQL
files bundled under ``tiddly/db/migrations``.
"""

from tiddly.db.base import build_engine
from tiddly.db.migrations_runner import apply_migrations

__all__ = [
    "build_engine",
    "apply_migrations",
]
