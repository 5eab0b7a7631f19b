"""Browser field synchronization.

On save, the ordered list of ids submitted for each browser is written to
the browser's relation: a pivot table with a position column for
belongsToMany, the foreign key for belongsTo. On load, the related records
are projected back into the list the browser widget renders.

Form fields use this shape::

    {
        "browsers": {
            "books": [{"id": "BOO-00002"}, {"id": "BOO-00001"}],
        }
    }
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from browserforge.browsers.routes import RouteBuilder, module_route
from browserforge.browsers.thumbnails import ThumbnailResolver
from browserforge.browsers.types import DEFAULT_POSITION_ATTRIBUTE, DEFAULT_TITLE_KEY

if TYPE_CHECKING:
    from browserforge.metadata.loader import EntityModel
    from browserforge.persistence.adapter import PersistenceAdapter
    from browserforge.persistence.relations import RelatedRecord

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 100


class BrowserService:
    """Saves and loads the browser fields of entity records."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        route_builder: RouteBuilder = module_route,
        thumbnail_resolver: ThumbnailResolver | None = None,
    ):
        self.adapter = adapter
        self.route_builder = route_builder
        self.thumbnail_resolver = thumbnail_resolver or ThumbnailResolver()

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def after_save(self, entity: EntityModel, record: dict[str, Any], fields: dict[str, Any]) -> None:
        """Sync every browser declared on the entity from submitted form fields.

        Writes are left uncommitted so they share the save's transaction.
        """
        for browser in entity.browsers:
            self.update_browser(
                entity,
                record,
                fields,
                browser.relation,
                browser.position_attribute,
                browser.browser_name,
            )

        for browser_name in entity.related_browsers:
            self.update_related_browser(entity, record, fields, browser_name)

    def update_browser(
        self,
        entity: EntityModel,
        record: dict[str, Any],
        fields: dict[str, Any],
        relation: str,
        position_attribute: str = DEFAULT_POSITION_ATTRIBUTE,
        browser_name: str | None = None,
        pivot_attributes: dict[str, Any] | None = None,
    ) -> None:
        """Sync one relation to the ordered items submitted for a browser.

        Args:
            entity: Entity of the record being saved
            record: The saved record
            fields: Submitted form fields
            relation: Relation to sync
            position_attribute: Pivot column receiving positions 1..N
            browser_name: Key of the items in fields["browsers"] (defaults to relation)
            pivot_attributes: Extra attributes written on every pivot row
        """
        browser_name = browser_name or relation
        related_items = (fields.get("browsers") or {}).get(browser_name) or []

        handle = self.adapter.relation(entity, record, relation)

        if handle.is_belongs_to:
            foreign_key = handle.foreign_key_name
            related_id = related_items[0].get("id") if related_items else None
            self.adapter.update_no_commit(entity, record[entity.primary_key], {foreign_key: related_id})
            record[foreign_key] = related_id
            logger.debug("Set %s.%s to %s", entity.name, foreign_key, related_id)
            return

        handle.sync(self._with_positions(related_items, position_attribute, pivot_attributes))

    def update_ordered_belongs_to_many(
        self,
        entity: EntityModel,
        record: dict[str, Any],
        fields: dict[str, Any],
        relation: str,
        position_attribute: str = DEFAULT_POSITION_ATTRIBUTE,
    ) -> None:
        """Sync a belongsToMany relation whose browser is named after it."""
        self.update_browser(entity, record, fields, relation, position_attribute)

    def update_related_browser(
        self,
        entity: EntityModel,
        record: dict[str, Any],
        fields: dict[str, Any],
        browser_name: str,
    ) -> None:
        """Store the submitted items of a browser in the polymorphic related items."""
        items = (fields.get("browsers") or {}).get(browser_name) or []
        self.adapter.save_related(entity, record[entity.primary_key], browser_name, items)

    @staticmethod
    def _with_positions(
        related_items: list[dict[str, Any]],
        position_attribute: str,
        pivot_attributes: dict[str, Any] | None,
    ) -> dict[Any, dict[str, Any]]:
        """Map each submitted id to its pivot attributes, positions counting from 1.

        A repeated id keeps its first slot in the map and the later position.
        """
        pivot_map: dict[Any, dict[str, Any]] = {}
        for position, item in enumerate(related_items, start=1):
            pivot_map[item["id"]] = {position_attribute: position, **(pivot_attributes or {})}
        return pivot_map

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def get_form_fields(
        self, entity: EntityModel, record: dict[str, Any], fields: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Add the current items of every non-empty browser to ``fields``."""
        fields = fields if fields is not None else {}

        for browser in entity.browsers:
            items = self.get_form_fields_for_browser(
                entity,
                record,
                browser.relation,
                browser.route_prefix,
                browser.title_key,
                browser.module_name,
            )
            if items:
                fields.setdefault("browsers", {})[browser.browser_name] = items

        for browser_name in entity.related_browsers:
            items = self.get_form_fields_for_related_browser(entity, record, browser_name)
            if items:
                fields.setdefault("browsers", {})[browser_name] = items

        return fields

    def get_form_fields_for_browser(
        self,
        entity: EntityModel,
        record: dict[str, Any],
        relation: str,
        route_prefix: str | None = None,
        title_key: str = DEFAULT_TITLE_KEY,
        module_name: str | None = None,
    ) -> list[dict[str, Any]]:
        """Project the records of one relation into browser items."""
        handle = self.adapter.relation(entity, record, relation)
        results = handle.get_results()

        if handle.is_belongs_to:
            related = [results] if results is not None else []
        else:
            related = results

        return [
            self._browser_item(
                item,
                title_key,
                self.route_builder(module_name or relation, route_prefix or "", "edit", item.id),
            )
            for item in related
        ]

    def get_form_fields_for_related_browser(
        self, entity: EntityModel, record: dict[str, Any], browser_name: str
    ) -> list[dict[str, Any]]:
        """Project the polymorphic related items of one browser.

        Items pointing at records that no longer exist are dropped.
        """
        related = self.adapter.get_related(entity, record[entity.primary_key], browser_name)

        items = []
        for item in related:
            if item is None:
                continue
            edit = self.route_builder(
                item.entity.module_name,
                item.entity.route_prefix or "",
                "edit",
                item.id,
            )
            items.append(self._browser_item(item, DEFAULT_TITLE_KEY, edit))
        return items

    def _browser_item(self, item: RelatedRecord, title_key: str, edit: str) -> dict[str, Any]:
        result = {
            "id": item.id,
            "name": self._browser_title(item, title_key),
            "edit": edit,
            "endpointType": item.morph_class,
        }
        if item.entity.has_media:
            result["thumbnail"] = self.thumbnail_resolver(
                item.data, item.entity, w=THUMBNAIL_SIZE, h=THUMBNAIL_SIZE
            )
        return result

    @staticmethod
    def _browser_title(item: RelatedRecord, title_key: str) -> Any:
        """The entity's titleInBrowser field wins over the browser's title key when set."""
        if item.entity.title_in_browser:
            title = item.get(item.entity.title_in_browser)
            if title is not None:
                return title
        return item.get(title_key)
