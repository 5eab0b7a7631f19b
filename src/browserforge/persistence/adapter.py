"""PersistenceAdapter Protocol: shared interface for database adapters."""

from typing import Any, Protocol, runtime_checkable

from browserforge.metadata.loader import EntityModel
from browserforge.persistence.relations import BelongsTo, BelongsToMany, RelatedRecord


@runtime_checkable
class PersistenceAdapter(Protocol):
    """Interface all persistence adapters must implement.

    Matches the public API of SQLiteAdapter. Besides plain CRUD, adapters
    hand out relation handles and store polymorphic related items, which
    is all the browser layer needs from the ORM.
    """

    conn: Any

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def initialize_entity(self, entity: EntityModel) -> None: ...

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]: ...

    def create_no_commit(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]: ...

    def get(self, entity: EntityModel, id: Any) -> dict[str, Any] | None: ...

    def update(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def update_no_commit(
        self, entity: EntityModel, id: Any, data: dict[str, Any]
    ) -> dict[str, Any] | None: ...

    def delete(self, entity: EntityModel, id: Any) -> bool: ...

    def relation(
        self, entity: EntityModel, record: dict[str, Any], name: str
    ) -> BelongsTo | BelongsToMany: ...

    def save_related(
        self,
        entity: EntityModel,
        id: Any,
        browser_name: str,
        items: list[dict[str, Any]],
    ) -> None: ...

    def get_related(
        self, entity: EntityModel, id: Any, browser_name: str
    ) -> list[RelatedRecord | None]: ...
