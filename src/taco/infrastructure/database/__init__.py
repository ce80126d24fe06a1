"""SQLite filter index via SQLAlchemy Core."""

from taco.infrastructure.database.engine import create_db_engine, init_index_database
from taco.infrastructure.database.schema import index_meta, issue_index, metadata

__all__ = [
    "create_db_engine",
    "index_meta",
    "init_index_database",
    "issue_index",
    "metadata",
]
