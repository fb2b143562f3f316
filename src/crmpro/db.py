from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from crmpro.config import get_settings

# Overrides the configured location when set (tests point this at tmp_path).
DB_PATH: Path | None = None

SCHEMA = """\
CREATE TABLE IF NOT EXISTS documents (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def resolve_path(db_path: Path | None = None) -> Path:
    return db_path or DB_PATH or get_settings().db_path


def _connect(db_path: Path | None = None) -> sqlite3.Connection:
    conn = sqlite3.connect(str(resolve_path(db_path)))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: Path | None = None) -> None:
    target = resolve_path(db_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    conn = _connect(target)
    conn.executescript(SCHEMA)
    conn.close()


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    conn = _connect(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def read_document(db: sqlite3.Connection, key: str) -> Any | None:
    row = db.execute("SELECT value FROM documents WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    return json.loads(row["value"])


def write_document(db: sqlite3.Connection, key: str, value: Any) -> None:
    db.execute(
        """INSERT INTO documents (key, value) VALUES (?, ?)
           ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = datetime('now')""",
        (key, json.dumps(value, ensure_ascii=False)),
    )
