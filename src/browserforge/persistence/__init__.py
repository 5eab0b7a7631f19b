"""Persistence layer - database adapters and relation handles."""

from browserforge.persistence.adapter import PersistenceAdapter
from browserforge.persistence.config import DatabaseConfig, create_adapter
from browserforge.persistence.relations import (
    BelongsTo,
    BelongsToMany,
    RelatedRecord,
    UnknownRelationError,
)

__all__ = [
    "BelongsTo",
    "BelongsToMany",
    "DatabaseConfig",
    "PersistenceAdapter",
    "RelatedRecord",
    "UnknownRelationError",
    "create_adapter",
]
