"""Load and resolve entity metadata from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from browserforge.browsers.resolver import resolve_browsers
from browserforge.browsers.types import BrowserDefinition
from browserforge.core.naming import camel, plural, singular, snake

logger = logging.getLogger(__name__)

BELONGS_TO = "belongsTo"
BELONGS_TO_MANY = "belongsToMany"
RELATION_TYPES = (BELONGS_TO, BELONGS_TO_MANY)


@dataclass
class FieldDefinition:
    name: str
    type: str
    display_name: str
    primary_key: bool = False
    read_only: bool = False
    default: Any = None


@dataclass
class RelationConfig:
    """Configuration for a relation between two entities.

    belongsTo relations store the related id in ``foreign_key`` on the
    owning record. belongsToMany relations go through ``pivot_table``,
    optionally ordered by ``position`` and carrying ``pivot_fields``.
    """

    name: str
    type: str  # "belongsTo" | "belongsToMany"
    entity: str  # The related entity name
    foreign_key: str | None = None
    pivot_table: str | None = None
    foreign_pivot_key: str | None = None
    related_pivot_key: str | None = None
    position: str | None = None  # Pivot column used for ordering
    pivot_fields: list[str] = field(default_factory=list)

    @property
    def is_belongs_to(self) -> bool:
        return self.type == BELONGS_TO


@dataclass
class MediaConfig:
    """Which field of an entity holds its browser thumbnail image."""

    thumbnail_field: str


@dataclass
class HookConfig:
    """Hook definition from YAML metadata."""

    name: str
    on: list[str] = field(default_factory=lambda: ["create", "update"])
    description: str = ""


@dataclass
class EntityModel:
    name: str
    display_name: str
    plural_name: str
    module_name: str
    primary_key: str
    fields: list[FieldDefinition]
    abbreviation: str = ""
    relations: dict[str, RelationConfig] = field(default_factory=dict)
    browsers: list[BrowserDefinition] = field(default_factory=list)
    related_browsers: list[str] = field(default_factory=list)  # Stored polymorphically, no relation
    hooks: dict[str, list[HookConfig]] = field(default_factory=dict)
    media: MediaConfig | None = None
    title_in_browser: str | None = None  # Field preferred over titleKey in browsers
    route_prefix: str | None = None

    @property
    def has_media(self) -> bool:
        return self.media is not None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]


class MetadataLoader:
    """Loads entity definitions from YAML files."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.entities: dict[str, EntityModel] = {}

    def load_all(self) -> None:
        """Load all entities, then check cross-entity references."""
        self._load_entities()
        self._validate_abbreviations()
        self._validate_relations()

    def _validate_abbreviations(self) -> None:
        """Validate entity abbreviations are unique and properly formatted."""
        seen: dict[str, str] = {}  # abbreviation -> entity name

        for entity_name, entity in self.entities.items():
            abbrev = entity.abbreviation

            if len(abbrev) < 2 or len(abbrev) > 5:
                raise ValueError(
                    f"Entity '{entity_name}' abbreviation '{abbrev}' must be 2-5 characters"
                )
            if not abbrev.isalnum():
                raise ValueError(
                    f"Entity '{entity_name}' abbreviation '{abbrev}' must be alphanumeric"
                )

            if abbrev in seen:
                raise ValueError(
                    f"Duplicate abbreviation '{abbrev}' used by "
                    f"'{seen[abbrev]}' and '{entity_name}'"
                )
            seen[abbrev] = entity_name

    def _validate_relations(self) -> None:
        """Relations must target loaded entities; browsers must target relations."""
        for entity in self.entities.values():
            for relation in entity.relations.values():
                if relation.entity not in self.entities:
                    raise ValueError(
                        f"Relation '{entity.name}.{relation.name}' targets "
                        f"unknown entity '{relation.entity}'"
                    )
            for browser in entity.browsers:
                if browser.relation not in entity.relations:
                    raise ValueError(
                        f"Browser '{entity.name}.{browser.browser_name}' uses unknown "
                        f"relation '{browser.relation}'"
                    )

    def _load_entities(self) -> None:
        """Load entity definitions."""
        entities_path = self.metadata_path / "entities"
        if not entities_path.exists():
            logger.warning("No entities directory at %s", entities_path)
            return

        for yaml_file in sorted(entities_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "entity" in data:
                    entity = self._resolve_entity(data)
                    self.entities[entity.name] = entity

    def _resolve_entity(self, data: dict) -> EntityModel:
        """Resolve an entity definition."""
        name = data["entity"]

        fields = [self._resolve_field(f) for f in data.get("fields", [])]

        # Find primary key
        primary_key = "id"
        for f in fields:
            if f.primary_key:
                primary_key = f.name
                break

        relations = {
            rel_name: self._resolve_relation(name, rel_name, rel_data or {})
            for rel_name, rel_data in (data.get("relations") or {}).items()
        }

        # belongsTo relations need their foreign key column on this entity
        field_names = {f.name for f in fields}
        for relation in relations.values():
            if relation.is_belongs_to and relation.foreign_key not in field_names:
                fields.append(FieldDefinition(
                    name=relation.foreign_key,
                    type="relation",
                    display_name=self._to_display_name(relation.foreign_key),
                ))

        browsers = resolve_browsers(data.get("browsers"))
        self._apply_browser_positions(name, relations, browsers)

        media = None
        media_data = data.get("media")
        if media_data:
            media = MediaConfig(thumbnail_field=media_data.get("thumbnailField", "image"))

        abbreviation = (data.get("abbreviation") or name[:3]).upper()

        return EntityModel(
            name=name,
            display_name=data.get("displayName", self._to_display_name(name)),
            plural_name=data.get("pluralName", plural(name)),
            module_name=data.get("moduleName") or camel(plural(name)),
            primary_key=primary_key,
            fields=fields,
            abbreviation=abbreviation,
            relations=relations,
            browsers=browsers,
            related_browsers=list(data.get("relatedBrowsers") or []),
            hooks=self._resolve_hooks(data.get("hooks", {})),
            media=media,
            title_in_browser=data.get("titleInBrowser"),
            route_prefix=data.get("routePrefix"),
        )

    def _apply_browser_positions(
        self,
        entity_name: str,
        relations: dict[str, RelationConfig],
        browsers: list[BrowserDefinition],
    ) -> None:
        """Order each browsed belongsToMany pivot by the browser's position column.

        A relation without ``position`` takes the browser's positionAttribute;
        a relation that names a different column is rejected.
        """
        for browser in browsers:
            relation = relations.get(browser.relation)
            if relation is None or relation.is_belongs_to:
                continue
            if relation.position is None:
                relation.position = browser.position_attribute
            elif relation.position != browser.position_attribute:
                raise ValueError(
                    f"Browser '{entity_name}.{browser.browser_name}' writes positions to "
                    f"'{browser.position_attribute}' but relation '{relation.name}' is "
                    f"ordered by '{relation.position}'"
                )

    def _resolve_field(self, data: dict) -> FieldDefinition:
        """Convert field dict to FieldDefinition."""
        name = data["name"]
        return FieldDefinition(
            name=name,
            type=data.get("type", "string"),
            display_name=data.get("displayName", self._to_display_name(name)),
            primary_key=data.get("primaryKey", False),
            read_only=data.get("readOnly", False),
            default=data.get("default"),
        )

    def _resolve_relation(self, entity_name: str, name: str, data: dict) -> RelationConfig:
        """Convert relation dict to RelationConfig, applying key conventions."""
        rel_type = data.get("type", BELONGS_TO_MANY)
        if rel_type not in RELATION_TYPES:
            raise ValueError(
                f"Relation '{entity_name}.{name}' has unsupported type '{rel_type}'. "
                f"Allowed: {', '.join(RELATION_TYPES)}"
            )
        if "entity" not in data:
            raise ValueError(f"Relation '{entity_name}.{name}' must name its entity")

        related = data["entity"]

        if rel_type == BELONGS_TO:
            return RelationConfig(
                name=name,
                type=rel_type,
                entity=related,
                foreign_key=data.get("foreignKey") or f"{camel(name)}Id",
            )

        # Pivot table defaults to the two singular snake names in alphabetical order
        owner_key = snake(singular(entity_name))
        related_key = snake(singular(related))
        return RelationConfig(
            name=name,
            type=rel_type,
            entity=related,
            pivot_table=data.get("pivotTable") or "_".join(sorted([owner_key, related_key])),
            foreign_pivot_key=data.get("foreignPivotKey") or f"{owner_key}_id",
            related_pivot_key=data.get("relatedPivotKey") or f"{related_key}_id",
            position=data.get("position"),
            pivot_fields=list(data.get("pivotFields", [])),
        )

    def _get_on(self, data: dict, default: list[str] | None = None) -> list[str]:
        """Extract the 'on' field from a YAML dict.

        PyYAML parses the bare key `on:` as boolean True, so we check
        both the string key "on" and the boolean key True.
        """
        if default is None:
            default = ["create", "update"]
        on = data.get("on") or data.get(True, default)
        if isinstance(on, str):
            on = [on]
        return on

    def _resolve_hooks(self, data: dict) -> dict[str, list[HookConfig]]:
        """Convert hooks dict from YAML to HookConfig lists by hook point."""
        valid_points = ("beforeSave", "afterSave", "afterCommit")
        hooks: dict[str, list[HookConfig]] = {}
        for point, hook_list in data.items():
            if point not in valid_points:
                continue
            if isinstance(hook_list, list):
                hooks[point] = [
                    HookConfig(
                        name=h["name"],
                        on=self._get_on(h),
                        description=h.get("description", ""),
                    )
                    for h in hook_list
                ]
        return hooks

    def _to_display_name(self, name: str) -> str:
        """Convert camelCase to Title Case."""
        result = []
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                result.append(" ")
            result.append(char)
        return "".join(result).title()

    def get_entity(self, name: str) -> EntityModel | None:
        """Get a resolved entity by name."""
        return self.entities.get(name)

    def list_entities(self) -> list[str]:
        """List all entity names."""
        return list(self.entities.keys())
