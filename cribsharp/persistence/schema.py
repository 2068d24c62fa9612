"""
Database schema for saved cribbage games.

Everything the game persists (the game in progress, lifetime stats and user
settings) is kept as JSON documents in a single key/value table.
"""

from typing import Optional
import sqlite3


SCHEMA_SQL = """
-- Saved documents, one row per key
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,  -- JSON document
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


def initialize_database(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Open a connection and create the schema if it does not exist yet.

    Args:
        db_path: Path to the database file. None opens an in-memory database.

    Returns:
        sqlite3.Connection: An open connection to the database.
    """
    conn = sqlite3.connect(db_path if db_path else ":memory:")
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return conn
