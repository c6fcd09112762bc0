"""
Session snapshot persistence.

One row per book identity, overwritten on every save. Only the playback
controller writes; listings may read stale rows.
"""

from pathlib import Path
from typing import Optional, Protocol

from book_minion.core.database import get_db_connection

from .snapshot import SessionSnapshot


class SessionStore(Protocol):
    """Durable snapshot storage keyed by book identity."""

    def load(self, book_identity: str) -> Optional[SessionSnapshot]: ...
    def save(self, snapshot: SessionSnapshot) -> None: ...
    def load_all(self) -> dict[str, SessionSnapshot]: ...
    def clear(self, book_identity: str) -> None: ...


class SqliteSessionStore:
    """SessionStore backed by the session_snapshots table."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path

    def load(self, book_identity: str) -> Optional[SessionSnapshot]:
        """Get the saved snapshot for a book, or None if there isn't a usable one."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT payload FROM session_snapshots WHERE book_identity = ?",
                (book_identity,),
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return SessionSnapshot.from_json(row["payload"])

    def save(self, snapshot: SessionSnapshot) -> None:
        with get_db_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO session_snapshots (book_identity, payload, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (snapshot.book_identity, snapshot.to_json()),
            )
            conn.commit()

    def load_all(self) -> dict[str, SessionSnapshot]:
        """Get every readable snapshot, keyed by book identity.

        Unreadable rows are skipped.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT book_identity, payload FROM session_snapshots ORDER BY updated_at DESC"
            )
            rows = cursor.fetchall()

        snapshots = {}
        for row in rows:
            snapshot = SessionSnapshot.from_json(row["payload"])
            if snapshot is not None:
                snapshots[row["book_identity"]] = snapshot
        return snapshots

    def clear(self, book_identity: str) -> None:
        """Forget saved progress for a book."""
        with get_db_connection(self.db_path) as conn:
            conn.execute(
                "DELETE FROM session_snapshots WHERE book_identity = ?",
                (book_identity,),
            )
            conn.commit()
