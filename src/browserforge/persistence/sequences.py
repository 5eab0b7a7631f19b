"""Sequence management for entity ID generation.

Provides sequential ID generation with format: {ABBREV}-{SEQUENCE}
Example: BOO-00001, PUB-00042
"""

import sqlite3


class SequenceService:
    """Manages per-entity sequences stored in the ``_sequences`` table."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Create the sequences table if it doesn't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _sequences (
                entity TEXT PRIMARY KEY,
                next_value INTEGER NOT NULL DEFAULT 1
            )
        """)
        self.conn.commit()

    def next_id(self, entity_name: str, abbreviation: str) -> str:
        """Generate the next ID for an entity, e.g. "BOO-00001"."""
        row = self.conn.execute(
            "SELECT next_value FROM _sequences WHERE entity = ?",
            [entity_name],
        ).fetchone()

        if row:
            current_value = row[0]
            self.conn.execute(
                "UPDATE _sequences SET next_value = next_value + 1 WHERE entity = ?",
                [entity_name],
            )
        else:
            current_value = 1
            self.conn.execute(
                "INSERT INTO _sequences (entity, next_value) VALUES (?, 2)",
                [entity_name],
            )

        # Committed together with the record that uses the ID
        return f"{abbreviation}-{current_value:05d}"
