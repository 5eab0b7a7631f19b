"""Relation handles returned by persistence adapters.

A handle binds one relation of one parent record. It reads the related
records and, for belongsToMany, replaces the pivot rows with ``sync``.
"""

import logging
from dataclasses import dataclass
from typing import Any

from browserforge.metadata.loader import EntityModel, RelationConfig

logger = logging.getLogger(__name__)


class UnknownRelationError(KeyError):
    """Raised when an entity has no relation with the requested name."""


@dataclass
class RelatedRecord:
    """A record together with the entity it belongs to."""

    entity: EntityModel
    data: dict[str, Any]

    @property
    def id(self) -> Any:
        return self.data.get(self.entity.primary_key)

    @property
    def morph_class(self) -> str:
        """Type name stored in polymorphic references."""
        return self.entity.name

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


class BelongsTo:
    """The parent record holds the related id in a foreign key column."""

    is_belongs_to = True

    def __init__(
        self,
        adapter: Any,
        parent_entity: EntityModel,
        parent: dict[str, Any],
        config: RelationConfig,
        related_entity: EntityModel,
    ):
        self.adapter = adapter
        self.parent_entity = parent_entity
        self.parent = parent
        self.config = config
        self.related_entity = related_entity

    @property
    def foreign_key_name(self) -> str:
        return self.config.foreign_key

    def get_results(self) -> RelatedRecord | None:
        """Return the related record, or None when the key is unset or dangling."""
        related_id = self.parent.get(self.foreign_key_name)
        if related_id is None:
            return None
        row = self.adapter.get(self.related_entity, related_id)
        return RelatedRecord(self.related_entity, row) if row else None


class BelongsToMany:
    """Related ids live in a pivot table, optionally ordered by a position column."""

    is_belongs_to = False

    def __init__(
        self,
        adapter: Any,
        parent_entity: EntityModel,
        parent: dict[str, Any],
        config: RelationConfig,
        related_entity: EntityModel,
    ):
        self.adapter = adapter
        self.parent_entity = parent_entity
        self.parent = parent
        self.config = config
        self.related_entity = related_entity

    @property
    def parent_id(self) -> Any:
        return self.parent[self.parent_entity.primary_key]

    def get_results(self) -> list[RelatedRecord]:
        """Return related records in pivot order."""
        rows = self.adapter.pivot_related(self.config, self.related_entity, self.parent_id)
        return [RelatedRecord(self.related_entity, row) for row in rows]

    def get_pivot(self) -> dict[str, dict[str, Any]]:
        """Return current pivot attributes keyed by related id."""
        rows = self.adapter.pivot_rows(self.config, self.parent_id)
        key = self.config.related_pivot_key
        return {
            str(row[key]): {k: v for k, v in row.items() if k not in (key, self.config.foreign_pivot_key)}
            for row in rows
        }

    def sync(self, pivot_map: dict[Any, dict[str, Any]]) -> dict[str, list[str]]:
        """Make the pivot rows match ``pivot_map`` exactly (not committed).

        Ids missing from the map are detached, new ids are attached and
        ids present on both sides get their pivot attributes updated when
        they differ.

        Args:
            pivot_map: Ordered mapping of related id -> pivot attributes

        Returns:
            {"attached": [...], "detached": [...], "updated": [...]}
        """
        current = self.get_pivot()
        wanted = {str(related_id): dict(attributes or {}) for related_id, attributes in pivot_map.items()}

        detached = [related_id for related_id in current if related_id not in wanted]
        attached: list[str] = []
        updated: list[str] = []

        if detached:
            self.adapter.detach(self.config, self.parent_id, detached)

        for related_id, attributes in wanted.items():
            if related_id not in current:
                self.adapter.attach(self.config, self.parent_id, related_id, attributes)
                attached.append(related_id)
                continue

            changed = {k: v for k, v in attributes.items() if current[related_id].get(k) != v}
            if changed:
                self.adapter.update_pivot(self.config, self.parent_id, related_id, changed)
                updated.append(related_id)

        logger.debug(
            "Synced %s.%s for %s: %d attached, %d detached, %d updated",
            self.parent_entity.name,
            self.config.name,
            self.parent_id,
            len(attached),
            len(detached),
            len(updated),
        )

        return {"attached": attached, "detached": detached, "updated": updated}
