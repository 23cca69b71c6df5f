import os
import sqlite3
from contextlib import contextmanager

from tradejournal.core.config import settings

def _db_path() -> str:
    return os.getenv("NOTES_DB_PATH", settings.notes_db_path)

def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(_db_path())
    conn.row_factory = sqlite3.Row
    return conn

def init_db() -> None:
    path = _db_path()
    os.makedirs(os.path.dirname(path), exist_ok=True) if os.path.dirname(path) else None
    with get_conn() as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS journal_notes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                kind TEXT NOT NULL,
                body TEXT NOT NULL,
                done INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.commit()

@contextmanager
def get_conn():
    conn = _connect()
    try:
        yield conn
    finally:
        conn.close()
