"""Tests for entity metadata loading."""

import copy

import pytest

from browserforge.browsers import BrowserConfigError, BrowserService
from browserforge.metadata.loader import MetadataLoader
from browserforge.persistence.sqlite import SQLiteAdapter

from conftest import ENTITIES, write_metadata


def _load(tmp_path, entities):
    loader = MetadataLoader(write_metadata(tmp_path, entities))
    loader.load_all()
    return loader


class TestEntityLoading:
    def test_loads_all_entities(self, loader):
        assert sorted(loader.list_entities()) == ["Author", "Book", "Publication", "Tag"]

    def test_missing_directory_loads_nothing(self, tmp_path):
        loader = MetadataLoader(tmp_path / "nowhere")
        loader.load_all()
        assert loader.list_entities() == []

    def test_module_name_defaults_to_plural_camel_case(self, loader):
        assert loader.get_entity("Publication").module_name == "publications"
        assert loader.get_entity("Book").module_name == "books"

    def test_media_and_title_in_browser(self, loader):
        book = loader.get_entity("Book")
        assert book.has_media
        assert book.media.thumbnail_field == "cover"
        assert book.route_prefix == "collections"
        assert loader.get_entity("Author").title_in_browser == "penName"
        assert not loader.get_entity("Tag").has_media

    def test_get_unknown_entity(self, loader):
        assert loader.get_entity("Nope") is None


class TestRelations:
    def test_belongs_to_many_conventions(self, loader):
        books = loader.get_entity("Publication").relations["books"]
        assert books.type == "belongsToMany"
        assert books.pivot_table == "book_publication"
        assert books.foreign_pivot_key == "publication_id"
        assert books.related_pivot_key == "book_id"
        assert books.position == "position"

    def test_belongs_to_many_overrides(self, loader):
        tags = loader.get_entity("Publication").relations["tags"]
        assert tags.pivot_table == "publication_tags"
        assert tags.position == "sortOrder"
        assert tags.pivot_fields == ["role"]

    def test_belongs_to_adds_foreign_key_field(self, loader):
        publication = loader.get_entity("Publication")
        editor = publication.relations["editor"]
        assert editor.is_belongs_to
        assert editor.foreign_key == "editorId"
        assert "editorId" in publication.field_names()

    def test_unsupported_relation_type(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        entities["publication"]["relations"]["books"]["type"] = "hasMany"
        with pytest.raises(ValueError, match="unsupported type"):
            _load(tmp_path, entities)

    def test_relation_to_unknown_entity(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        del entities["tag"]
        with pytest.raises(ValueError, match="unknown entity 'Tag'"):
            _load(tmp_path, entities)


class TestBrowsers:
    def test_browsers_are_resolved_in_order(self, loader):
        browsers = loader.get_entity("Publication").browsers
        assert [b.browser_name for b in browsers] == ["books", "tags", "editor"]

        books, tags, editor = browsers
        assert books.model == "Book"
        assert tags.position_attribute == "sortOrder"
        assert tags.title_key == "label"
        assert editor.module_name == "authors"
        assert editor.model == "Author"
        assert editor.route_prefix == "people"

    def test_related_browsers(self, loader):
        assert loader.get_entity("Publication").related_browsers == ["featured"]

    def test_browser_without_relation_fails(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        entities["publication"]["browsers"].append("chapters")
        with pytest.raises(ValueError, match="unknown relation 'chapters'"):
            _load(tmp_path, entities)

    def test_bad_browser_option_fails_at_load(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        entities["publication"]["browsers"] = [{"books": {"sortBy": "title"}}]
        with pytest.raises(BrowserConfigError):
            _load(tmp_path, entities)

    def test_browsed_relation_takes_browser_position_column(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        del entities["publication"]["relations"]["books"]["position"]
        loader = _load(tmp_path, entities)

        assert loader.get_entity("Publication").relations["books"].position == "position"

    def test_unordered_relation_can_be_synced(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        del entities["publication"]["relations"]["books"]["position"]
        loader = _load(tmp_path, entities)
        adapter = SQLiteAdapter(":memory:")
        adapter.connect()
        for name in loader.list_entities():
            adapter.initialize_entity(loader.get_entity(name))
        publication = loader.get_entity("Publication")
        book = loader.get_entity("Book")
        b1 = adapter.create(book, {"title": "One"})
        b2 = adapter.create(book, {"title": "Two"})
        record = adapter.create(publication, {"title": "P"})

        BrowserService(adapter).update_browser(
            publication, record, {"browsers": {"books": [{"id": b2["id"]}, {"id": b1["id"]}]}}, "books"
        )

        results = adapter.relation(publication, record, "books").get_results()
        assert [r.id for r in results] == [b2["id"], b1["id"]]
        adapter.close()

    def test_conflicting_position_column_fails(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        entities["publication"]["browsers"][1] = {"tags": {"positionAttribute": "position"}}
        with pytest.raises(ValueError, match="ordered by 'sortOrder'"):
            _load(tmp_path, entities)


class TestAbbreviations:
    def test_duplicate_abbreviation(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        entities["tag"]["abbreviation"] = "BOO"
        with pytest.raises(ValueError, match="Duplicate abbreviation"):
            _load(tmp_path, entities)

    def test_abbreviation_defaults_to_name_prefix(self, tmp_path):
        entities = copy.deepcopy(ENTITIES)
        del entities["tag"]["abbreviation"]
        assert _load(tmp_path, entities).get_entity("Tag").abbreviation == "TAG"
