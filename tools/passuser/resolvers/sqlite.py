"""SQLite-backed resolver.

The table carries ``UNIQUE (realm, username)``, so unlike the in-memory
resolver it rejects a second insert of the same identity even when two
registrations race past the existence check. Caller-defined fields are kept
as a JSON object and flattened back into the record on read.

The sqlite3 calls run on the calling thread, so each method blocks the event
loop for the duration of one local query. It is meant for the CLI, tests and
small deployments; back a busy service with an asynchronous driver instead.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..errors import UserExistsError, UserNotFoundError
from ..resolver import Lookup, Resolver

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".passuser/users.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    realm TEXT NOT NULL,
    username TEXT NOT NULL,
    password TEXT,
    extra TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (realm, username)
);
"""


class SQLiteResolver(Resolver):
    """SQLite credential storage.

    Args:
        db_path: Path to SQLite database file, or ``":memory:"``. Parent
                 directories are created automatically.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _row_to_record(self, row: sqlite3.Row) -> Dict[str, Any]:
        record: Dict[str, Any] = json.loads(row["extra"])
        record["realm"] = row["realm"]
        record["username"] = row["username"]
        if row["password"] is not None:
            record["password"] = row["password"]
        return record

    async def find(self, lookup: Lookup) -> Optional[Dict[str, Any]]:
        row = self._conn.execute(
            "SELECT * FROM users WHERE realm = ? AND username = ?",
            (lookup["realm"], lookup["username"]),
        ).fetchone()
        return self._row_to_record(row) if row else None

    async def insert(self, record: Dict[str, Any]) -> None:
        extra = {
            k: v
            for k, v in record.items()
            if k not in ("realm", "username", "password")
        }
        now = self._now()
        try:
            self._conn.execute(
                "INSERT INTO users (realm, username, password, extra, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    record["realm"],
                    record["username"],
                    record.get("password"),
                    json.dumps(extra),
                    now,
                    now,
                ),
            )
            self._conn.commit()
        except sqlite3.IntegrityError as e:
            logger.debug(f"[sqlite] insert rejected: {e}")
            raise UserExistsError() from e

    async def update_hash(self, lookup: Lookup, digest: str) -> None:
        cur = self._conn.execute(
            "UPDATE users SET password = ?, updated_at = ? WHERE realm = ? AND username = ?",
            (digest, self._now(), lookup["realm"], lookup["username"]),
        )
        self._conn.commit()
        if cur.rowcount == 0:
            raise UserNotFoundError()

    def list_users(self, realm: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return all records, optionally restricted to one realm, oldest first."""
        if realm is None:
            rows = self._conn.execute(
                "SELECT * FROM users ORDER BY created_at, rowid"
            ).fetchall()
        else:
            rows = self._conn.execute(
                "SELECT * FROM users WHERE realm = ? ORDER BY created_at, rowid", (realm,)
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def delete_user(self, realm: str, username: str) -> bool:
        """Remove an identity. Returns True if a row was deleted.

        This is how an account left without a digest by a failed
        registration gets cleaned up.
        """
        cur = self._conn.execute(
            "DELETE FROM users WHERE realm = ? AND username = ?", (realm, username)
        )
        self._conn.commit()
        return cur.rowcount > 0

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
