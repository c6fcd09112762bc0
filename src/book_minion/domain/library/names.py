"""
Custom book display names.

Lets the listener rename a book without touching its folder; the folder
name stays the default.
"""

from pathlib import Path
from typing import Optional

from book_minion.core.database import get_db_connection


class BookNameStore:
    """Stores user-chosen display names keyed by book identity."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = db_path

    def save(self, book_identity: str, display_name: str) -> None:
        """Set the display name for a book."""
        with get_db_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO book_names (book_identity, display_name, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (book_identity, display_name),
            )
            conn.commit()

    def get(self, book_identity: str) -> Optional[str]:
        """Get the custom name for a book, or None if it was never renamed."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute(
                "SELECT display_name FROM book_names WHERE book_identity = ?",
                (book_identity,),
            )
            row = cursor.fetchone()
            return row["display_name"] if row else None

    def clear(self, book_identity: str) -> None:
        """Forget the custom name (back to the folder name)."""
        with get_db_connection(self.db_path) as conn:
            conn.execute(
                "DELETE FROM book_names WHERE book_identity = ?", (book_identity,)
            )
            conn.commit()

    def display_name(self, book_identity: str, default_name: str) -> str:
        return self.get(book_identity) or default_name
