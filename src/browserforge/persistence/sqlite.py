"""SQLite persistence adapter."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from browserforge.core.naming import snake
from browserforge.core.types import get_storage_type
from browserforge.metadata.loader import EntityModel, RelationConfig
from browserforge.persistence.relations import (
    BelongsTo,
    BelongsToMany,
    RelatedRecord,
    UnknownRelationError,
)
from browserforge.persistence.sequences import SequenceService

RELATED_ITEMS_TABLE = "related_items"


def _col(name: str) -> str:
    """Return a double-quoted column identifier (pivot columns may be reserved words)."""
    return f'"{name}"'


class SQLiteAdapter:
    """Simple SQLite persistence adapter."""

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._sequence_service: SequenceService | None = None
        # Entities seen by initialize_entity, for resolving relation targets
        self._entities: dict[str, EntityModel] = {}

    def connect(self) -> None:
        """Establish database connection."""
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._sequence_service = SequenceService(self.conn)
        self.conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {RELATED_ITEMS_TABLE} (
                subject_id TEXT NOT NULL,
                subject_type TEXT NOT NULL,
                related_id TEXT NOT NULL,
                related_type TEXT NOT NULL,
                browser_name TEXT NOT NULL,
                position INTEGER NOT NULL
            )
        """)
        self.conn.commit()

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def commit(self) -> None:
        if self.conn:
            self.conn.commit()

    def rollback(self) -> None:
        if self.conn:
            self.conn.rollback()

    def initialize_entity(self, entity: EntityModel) -> None:
        """Create the entity table and its pivot tables if they don't exist."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        self._entities[entity.name] = entity

        columns = []
        for field in entity.fields:
            storage_type = get_storage_type(field.type)
            col_def = f"{_col(field.name)} {storage_type}"
            if field.primary_key:
                col_def += " PRIMARY KEY"
            columns.append(col_def)

        table_name = self._table_name(entity.name)
        sql = f"CREATE TABLE IF NOT EXISTS {table_name} ({', '.join(columns)})"
        self.conn.execute(sql)

        for relation in entity.relations.values():
            if not relation.is_belongs_to:
                self._initialize_pivot(relation)

        self.conn.commit()

    def _initialize_pivot(self, relation: RelationConfig) -> None:
        columns = [
            f"{_col(relation.foreign_pivot_key)} TEXT NOT NULL",
            f"{_col(relation.related_pivot_key)} TEXT NOT NULL",
        ]
        if relation.position:
            columns.append(f"{_col(relation.position)} INTEGER")
        for pivot_field in relation.pivot_fields:
            if pivot_field != relation.position:
                columns.append(f"{_col(pivot_field)} TEXT")
        columns.append(
            f"PRIMARY KEY ({_col(relation.foreign_pivot_key)}, {_col(relation.related_pivot_key)})"
        )
        self.conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_col(relation.pivot_table)} ({', '.join(columns)})"
        )

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record and commit.

        Args:
            entity: Entity metadata
            data: Record data

        Returns:
            The created record with generated ID
        """
        saved = self.create_no_commit(entity, data)
        self.conn.commit()
        return saved

    def create_no_commit(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new record, leaving the transaction open for afterSave hooks."""
        if not self.conn or not self._sequence_service:
            raise RuntimeError("Database not connected")

        data = dict(data)

        # Generate sequence-based ID if not provided
        pk = entity.primary_key
        if pk not in data or data[pk] is None:
            data[pk] = self._sequence_service.next_id(entity.name, entity.abbreviation)

        # Add audit timestamps
        now = datetime.now(timezone.utc).isoformat()
        field_names = entity.field_names()
        if "createdAt" in field_names:
            data.setdefault("createdAt", now)
        if "updatedAt" in field_names:
            data.setdefault("updatedAt", now)

        columns = [f for f in field_names if f in data]
        placeholders = ["?" for _ in columns]
        values = [data[f] for f in columns]

        table_name = self._table_name(entity.name)
        sql = (
            f"INSERT INTO {table_name} ({', '.join(_col(c) for c in columns)}) "
            f"VALUES ({', '.join(placeholders)})"
        )

        self.conn.execute(sql, values)

        return self.get(entity, data[pk])

    def get(self, entity: EntityModel, id: Any) -> dict[str, Any] | None:
        """Fetch a single record by ID."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        table_name = self._table_name(entity.name)
        sql = f"SELECT * FROM {table_name} WHERE {_col(entity.primary_key)} = ?"

        row = self.conn.execute(sql, [id]).fetchone()
        if row:
            return dict(row)
        return None

    def update(self, entity: EntityModel, id: Any, data: dict[str, Any]) -> dict[str, Any] | None:
        """Update an existing record and commit."""
        saved = self.update_no_commit(entity, id, data)
        self.conn.commit()
        return saved

    def update_no_commit(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Update an existing record without committing."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        data = dict(data)
        if "updatedAt" in entity.field_names():
            data["updatedAt"] = datetime.now(timezone.utc).isoformat()

        # Don't update primary key
        updatable = [
            f.name for f in entity.fields
            if f.name in data and not f.primary_key
        ]

        if not updatable:
            return self.get(entity, id)

        set_clause = ", ".join([f"{_col(f)} = ?" for f in updatable])
        values = [data[f] for f in updatable]
        values.append(id)

        table_name = self._table_name(entity.name)
        sql = f"UPDATE {table_name} SET {set_clause} WHERE {_col(entity.primary_key)} = ?"

        self.conn.execute(sql, values)

        return self.get(entity, id)

    def delete(self, entity: EntityModel, id: Any) -> bool:
        """Delete a record along with its pivot rows and related items."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        for relation in entity.relations.values():
            if not relation.is_belongs_to:
                self.conn.execute(
                    f"DELETE FROM {_col(relation.pivot_table)} WHERE {_col(relation.foreign_pivot_key)} = ?",
                    [id],
                )
        self.conn.execute(
            f"DELETE FROM {RELATED_ITEMS_TABLE} WHERE subject_type = ? AND subject_id = ?",
            [entity.name, id],
        )

        table_name = self._table_name(entity.name)
        sql = f"DELETE FROM {table_name} WHERE {_col(entity.primary_key)} = ?"

        cursor = self.conn.execute(sql, [id])
        self.conn.commit()

        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def relation(
        self, entity: EntityModel, record: dict[str, Any], name: str
    ) -> BelongsTo | BelongsToMany:
        """Return a handle for relation ``name`` of ``record``.

        Raises:
            UnknownRelationError: If the entity declares no such relation
        """
        config = entity.relations.get(name)
        if config is None:
            raise UnknownRelationError(f"Entity '{entity.name}' has no relation '{name}'")

        related_entity = self._entities.get(config.entity)
        if related_entity is None:
            raise UnknownRelationError(
                f"Relation '{entity.name}.{name}' targets '{config.entity}', "
                "which has not been initialized"
            )

        handle_cls = BelongsTo if config.is_belongs_to else BelongsToMany
        return handle_cls(self, entity, record, config, related_entity)

    def pivot_rows(self, relation: RelationConfig, parent_id: Any) -> list[dict[str, Any]]:
        """Fetch raw pivot rows of one parent."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        sql = f"SELECT * FROM {_col(relation.pivot_table)} WHERE {_col(relation.foreign_pivot_key)} = ?"
        return [dict(row) for row in self.conn.execute(sql, [parent_id]).fetchall()]

    def pivot_related(
        self, relation: RelationConfig, related_entity: EntityModel, parent_id: Any
    ) -> list[dict[str, Any]]:
        """Fetch related records of one parent through the pivot table, in pivot order."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        related_table = self._table_name(related_entity.name)
        pivot = _col(relation.pivot_table)
        order_clause = f" ORDER BY {pivot}.{_col(relation.position)} ASC" if relation.position else ""
        sql = (
            f"SELECT {related_table}.* FROM {related_table} "
            f"JOIN {pivot} ON {pivot}.{_col(relation.related_pivot_key)} = "
            f"{related_table}.{_col(related_entity.primary_key)} "
            f"WHERE {pivot}.{_col(relation.foreign_pivot_key)} = ?"
            f"{order_clause}"
        )
        return [dict(row) for row in self.conn.execute(sql, [parent_id]).fetchall()]

    def attach(
        self, relation: RelationConfig, parent_id: Any, related_id: Any, attributes: dict[str, Any]
    ) -> None:
        """Insert one pivot row (not committed)."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        columns = [relation.foreign_pivot_key, relation.related_pivot_key, *attributes.keys()]
        values = [parent_id, related_id, *attributes.values()]
        sql = (
            f"INSERT INTO {_col(relation.pivot_table)} ({', '.join(_col(c) for c in columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        self.conn.execute(sql, values)

    def detach(self, relation: RelationConfig, parent_id: Any, related_ids: list[Any]) -> int:
        """Delete pivot rows of one parent for the given related ids (not committed)."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        if not related_ids:
            return 0

        placeholders = ", ".join(["?" for _ in related_ids])
        sql = (
            f"DELETE FROM {_col(relation.pivot_table)} "
            f"WHERE {_col(relation.foreign_pivot_key)} = ? "
            f"AND {_col(relation.related_pivot_key)} IN ({placeholders})"
        )
        cursor = self.conn.execute(sql, [parent_id, *related_ids])
        return cursor.rowcount

    def update_pivot(
        self, relation: RelationConfig, parent_id: Any, related_id: Any, attributes: dict[str, Any]
    ) -> None:
        """Update the attributes of one pivot row (not committed)."""
        if not self.conn:
            raise RuntimeError("Database not connected")

        set_clause = ", ".join(f"{_col(k)} = ?" for k in attributes)
        sql = (
            f"UPDATE {_col(relation.pivot_table)} SET {set_clause} "
            f"WHERE {_col(relation.foreign_pivot_key)} = ? AND {_col(relation.related_pivot_key)} = ?"
        )
        self.conn.execute(sql, [*attributes.values(), parent_id, related_id])

    # ------------------------------------------------------------------
    # Polymorphic related items
    # ------------------------------------------------------------------

    def save_related(
        self,
        entity: EntityModel,
        id: Any,
        browser_name: str,
        items: list[dict[str, Any]],
    ) -> None:
        """Replace the related items of one record's browser, keeping submitted order.

        Not committed; the save that triggered it owns the transaction.

        Args:
            entity: Entity of the subject record
            id: Subject record ID
            browser_name: Browser the items belong to
            items: List of {"id", "endpointType"} dicts
        """
        if not self.conn:
            raise RuntimeError("Database not connected")

        self.conn.execute(
            f"DELETE FROM {RELATED_ITEMS_TABLE} "
            "WHERE subject_type = ? AND subject_id = ? AND browser_name = ?",
            [entity.name, id, browser_name],
        )
        for position, item in enumerate(items, start=1):
            self.conn.execute(
                f"INSERT INTO {RELATED_ITEMS_TABLE} "
                "(subject_id, subject_type, related_id, related_type, browser_name, position) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                [id, entity.name, item["id"], item["endpointType"], browser_name, position],
            )

    def get_related(
        self, entity: EntityModel, id: Any, browser_name: str
    ) -> list[RelatedRecord | None]:
        """Return the related items of one record's browser, in order.

        Items whose type is unknown or whose record no longer exists come
        back as None so callers can decide how to handle them.
        """
        if not self.conn:
            raise RuntimeError("Database not connected")

        rows = self.conn.execute(
            f"SELECT related_id, related_type FROM {RELATED_ITEMS_TABLE} "
            "WHERE subject_type = ? AND subject_id = ? AND browser_name = ? "
            "ORDER BY position ASC",
            [entity.name, id, browser_name],
        ).fetchall()

        results: list[RelatedRecord | None] = []
        for row in rows:
            related_entity = self._entities.get(row["related_type"])
            data = self.get(related_entity, row["related_id"]) if related_entity else None
            results.append(RelatedRecord(related_entity, data) if data else None)
        return results

    def _table_name(self, entity_name: str) -> str:
        """Convert entity name to table name."""
        return snake(entity_name)
