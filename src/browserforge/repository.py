"""Entity save/load orchestration.

Persists records and runs their lifecycle hooks, so browser fields are
synced after every save and projected back when a form is loaded.
"""

import logging
from typing import Any

from browserforge.browsers.service import BrowserService
from browserforge.hooks import (
    HookContext,
    HookService,
    HookServices,
    Operation,
    get_hook_definitions,
)
from browserforge.metadata.loader import EntityModel, MetadataLoader
from browserforge.persistence.adapter import PersistenceAdapter

logger = logging.getLogger(__name__)


class EntityNotFoundError(LookupError):
    """Raised when an entity or record does not exist."""


class HookAbortError(RuntimeError):
    """Raised when a beforeSave or afterSave hook aborts the save."""


class EntityRepository:
    """Creates, updates and loads records with their browser fields."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        metadata_loader: MetadataLoader,
        browser_service: BrowserService,
        hook_service: HookService | None = None,
    ):
        self.adapter = adapter
        self.metadata_loader = metadata_loader
        self.browser_service = browser_service
        self.hook_service = hook_service or HookService()

    def get_entity(self, entity_name: str) -> EntityModel:
        entity = self.metadata_loader.get_entity(entity_name)
        if entity is None:
            raise EntityNotFoundError(f"Entity '{entity_name}' not found")
        return entity

    def get(self, entity_name: str, id: Any) -> dict[str, Any]:
        entity = self.get_entity(entity_name)
        record = self.adapter.get(entity, id)
        if record is None:
            raise EntityNotFoundError(f"{entity_name} '{id}' not found")
        return record

    async def create(
        self,
        entity_name: str,
        data: dict[str, Any],
        browsers: dict[str, list[dict[str, Any]]] | None = None,
    ) -> dict[str, Any]:
        """Create a record, then sync its browsers."""
        entity = self.get_entity(entity_name)
        return await self._save(entity, Operation.CREATE, data, browsers, original=None)

    async def update(
        self,
        entity_name: str,
        id: Any,
        data: dict[str, Any] | None = None,
        browsers: dict[str, list[dict[str, Any]]] | None = None,
    ) -> dict[str, Any]:
        """Update a record, then sync its browsers."""
        entity = self.get_entity(entity_name)
        original = self.get(entity_name, id)
        record = {**original, **(data or {}), entity.primary_key: id}
        return await self._save(entity, Operation.UPDATE, record, browsers, original=original)

    async def _save(
        self,
        entity: EntityModel,
        operation: Operation,
        record: dict[str, Any],
        browsers: dict[str, list[dict[str, Any]]] | None,
        original: dict[str, Any] | None,
    ) -> dict[str, Any]:
        context = HookContext(
            entity=entity,
            operation=operation,
            record=dict(record),
            fields={"browsers": browsers} if browsers is not None else {},
            original=original,
            services=HookServices(adapter=self.adapter, browsers=self.browser_service),
        )

        # Phase 1: beforeSave hooks
        result = await self.hook_service.run_hooks(
            "beforeSave", get_hook_definitions(entity, "beforeSave"), context
        )
        if result and result.abort:
            raise HookAbortError(result.abort)

        # Phase 2: persist (no commit yet if post-save hooks will run)
        after_save_defs = get_hook_definitions(entity, "afterSave")
        after_commit_defs = get_hook_definitions(entity, "afterCommit")
        has_post_hooks = bool(after_save_defs or after_commit_defs)

        if not has_post_hooks:
            if operation == Operation.CREATE:
                saved = self.adapter.create(entity, context.record)
            else:
                saved = self.adapter.update(entity, original[entity.primary_key], context.record)
            logger.info("%s %s %s", operation.value.capitalize(), entity.name, saved[entity.primary_key])
            return saved

        try:
            if operation == Operation.CREATE:
                saved = self.adapter.create_no_commit(entity, context.record)
            else:
                saved = self.adapter.update_no_commit(
                    entity, original[entity.primary_key], context.record
                )

            # Phase 3: afterSave hooks (same transaction; handleBrowsers runs here)
            context.record = saved
            result = await self.hook_service.run_hooks("afterSave", after_save_defs, context)
        except Exception:
            self.adapter.rollback()
            raise

        if result and result.abort:
            self.adapter.rollback()
            raise HookAbortError(result.abort)
        if result and result.update:
            saved = self.adapter.update_no_commit(entity, saved[entity.primary_key], result.update)
        else:
            saved = context.record

        self.adapter.commit()

        # Phase 4: afterCommit hooks (fire-and-forget)
        context.record = saved
        await self.hook_service.run_hooks("afterCommit", after_commit_defs, context)

        logger.info("%s %s %s", operation.value.capitalize(), entity.name, saved[entity.primary_key])
        return saved

    def get_form_fields(self, entity_name: str, id: Any) -> dict[str, Any]:
        """Return the record and its browser items as the edit form expects them."""
        entity = self.get_entity(entity_name)
        record = self.get(entity_name, id)
        fields = self.browser_service.get_form_fields(entity, record, {"browsers": {}})
        return {"data": record, "browsers": fields["browsers"]}
