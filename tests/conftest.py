"""Shared fixtures: a small publishing schema on an in-memory database."""

from pathlib import Path

import pytest
import yaml

from browserforge.browsers import (
    BrowserService,
    MediaSettings,
    RouteConfig,
    ThumbnailResolver,
    make_route_builder,
)
from browserforge.metadata.loader import MetadataLoader
from browserforge.persistence.sqlite import SQLiteAdapter

ENTITIES = {
    "publication": {
        "entity": "Publication",
        "abbreviation": "PUB",
        "fields": [
            {"name": "id", "type": "id", "primaryKey": True},
            {"name": "title", "type": "string"},
        ],
        "relations": {
            "books": {"type": "belongsToMany", "entity": "Book", "position": "position"},
            "tags": {
                "type": "belongsToMany",
                "entity": "Tag",
                "pivotTable": "publication_tags",
                "position": "sortOrder",
                "pivotFields": ["role"],
            },
            "editor": {"type": "belongsTo", "entity": "Author"},
        },
        "browsers": [
            "books",
            {"tags": {"positionAttribute": "sortOrder", "titleKey": "label"}},
            {"editor": {"moduleName": "authors", "titleKey": "name", "routePrefix": "people"}},
        ],
        "relatedBrowsers": ["featured"],
    },
    "book": {
        "entity": "Book",
        "abbreviation": "BOO",
        "routePrefix": "collections",
        "media": {"thumbnailField": "cover"},
        "fields": [
            {"name": "id", "type": "id", "primaryKey": True},
            {"name": "title", "type": "string"},
            {"name": "cover", "type": "image"},
        ],
    },
    "author": {
        "entity": "Author",
        "abbreviation": "AUT",
        "titleInBrowser": "penName",
        "fields": [
            {"name": "id", "type": "id", "primaryKey": True},
            {"name": "name", "type": "string"},
            {"name": "penName", "type": "string"},
        ],
    },
    "tag": {
        "entity": "Tag",
        "abbreviation": "TAG",
        "fields": [
            {"name": "id", "type": "id", "primaryKey": True},
            {"name": "label", "type": "string"},
        ],
    },
}


def write_metadata(base: Path, entities: dict[str, dict]) -> Path:
    """Write entity YAML files under base/metadata/entities and return base/metadata."""
    entities_dir = base / "metadata" / "entities"
    entities_dir.mkdir(parents=True, exist_ok=True)
    for file_name, data in entities.items():
        (entities_dir / f"{file_name}.yaml").write_text(yaml.dump(data, sort_keys=False))
    return base / "metadata"


@pytest.fixture
def metadata_path(tmp_path: Path) -> Path:
    return write_metadata(tmp_path, ENTITIES)


@pytest.fixture
def loader(metadata_path: Path) -> MetadataLoader:
    loader = MetadataLoader(metadata_path)
    loader.load_all()
    return loader


@pytest.fixture
def adapter(loader: MetadataLoader):
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    for name in loader.list_entities():
        adapter.initialize_entity(loader.get_entity(name))
    yield adapter
    adapter.close()


@pytest.fixture
def browser_service(adapter: SQLiteAdapter) -> BrowserService:
    return BrowserService(
        adapter,
        route_builder=make_route_builder(RouteConfig(admin_path="/admin")),
        thumbnail_resolver=ThumbnailResolver(MediaSettings(media_url="https://img.test")),
    )


@pytest.fixture
def entities(loader: MetadataLoader):
    """Entity models keyed by name."""
    return {name: loader.get_entity(name) for name in loader.list_entities()}


@pytest.fixture
def books(adapter: SQLiteAdapter, entities) -> list[dict]:
    """Three books: BOO-00001..BOO-00003."""
    return [
        adapter.create(entities["Book"], {"title": f"Book {n}", "cover": f"covers/{n}.jpg"})
        for n in (1, 2, 3)
    ]


@pytest.fixture
def publication(adapter: SQLiteAdapter, entities) -> dict:
    return adapter.create(entities["Publication"], {"title": "Spring Catalogue"})
