import sqlite3
from datetime import datetime, timezone
from typing import Optional


class SQLiteCredentialRepository:
    """Durable home of the single process-wide credential."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _conn(self):
        return sqlite3.connect(self.db_path)

    def _get_current_version(self, conn) -> int:
        row = conn.execute("SELECT version FROM schema_info").fetchone()
        if row:
            return row[0]
        return 0

    def _migrate_v1(self, conn):
        """Baseline schema (v1). At most one row, id pinned to 1."""
        conn.execute("""
            CREATE TABLE IF NOT EXISTS credential (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                token TEXT NOT NULL,
                saved_at TEXT NOT NULL
            )
        """)

    def init_db(self):
        MIGRATIONS = [self._migrate_v1]

        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_info (
                    version INTEGER NOT NULL
                )
            """)

            current_version = self._get_current_version(conn)
            has_version_row = conn.execute("SELECT COUNT(*) FROM schema_info").fetchone()[0] > 0
            if not has_version_row:
                conn.execute("INSERT INTO schema_info (version) VALUES (?)", (current_version,))

            for i in range(current_version, len(MIGRATIONS)):
                target_version = i + 1
                try:
                    MIGRATIONS[i](conn)
                    conn.execute("UPDATE schema_info SET version = ?", (target_version,))
                except Exception as e:
                    # Leaving the `with` block via an exception rolls back every step.
                    raise RuntimeError(f"Credential store migration to v{target_version} failed: {e}") from e

            conn.commit()

    def load(self) -> Optional[str]:
        with self._conn() as conn:
            row = conn.execute("SELECT token FROM credential WHERE id = 1").fetchone()
            return row[0] if row else None

    def save(self, token: str):
        with self._conn() as conn:
            conn.execute("""
                INSERT OR REPLACE INTO credential (id, token, saved_at)
                VALUES (1, ?, ?)
            """, (token, datetime.now(timezone.utc).isoformat()))
            conn.commit()

    def clear(self):
        with self._conn() as conn:
            conn.execute("DELETE FROM credential")
            conn.commit()
