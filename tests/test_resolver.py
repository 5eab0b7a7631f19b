"""Tests for browser declaration inference."""

import pytest

from browserforge.browsers import (
    BrowserConfigError,
    BrowserDefinition,
    infer_model,
    infer_module_name,
    infer_relation,
    resolve_browser,
    resolve_browsers,
)


class TestInference:
    def test_relation_is_camel_case(self):
        assert infer_relation("user_group") == "userGroup"
        assert infer_relation("books") == "books"

    def test_module_name_is_plural_camel_case(self):
        assert infer_module_name("publication") == "publications"
        assert infer_module_name("books") == "books"
        assert infer_module_name("contact_office") == "contactOffices"

    def test_model_is_singular_studly_case(self):
        assert infer_model("books") == "Book"
        assert infer_model("articleTypes") == "ArticleType"
        assert infer_model("categories") == "Category"

    def test_compound_names_inflect_only_the_last_word(self):
        assert resolve_browser("relatedNews").model == "RelatedNews"
        assert resolve_browser("socialMedia").module_name == "socialMedia"
        assert resolve_browser("salesPeople").model == "SalesPerson"


class TestResolveBrowser:
    def test_bare_name_uses_defaults(self):
        browser = resolve_browser("books")
        assert browser == BrowserDefinition(
            browser_name="books",
            relation="books",
            route_prefix=None,
            title_key="title",
            module_name="books",
            model="Book",
            position_attribute="position",
        )

    def test_overrides_win(self):
        browser = resolve_browser(
            "publication",
            {
                "relation": "mainPublication",
                "routePrefix": "collections",
                "titleKey": "name",
                "moduleName": "issues",
                "model": "Issue",
                "positionAttribute": "sortOrder",
            },
        )
        assert browser.relation == "mainPublication"
        assert browser.route_prefix == "collections"
        assert browser.title_key == "name"
        assert browser.module_name == "issues"
        assert browser.model == "Issue"
        assert browser.position_attribute == "sortOrder"

    def test_model_inferred_from_overridden_module_name(self):
        browser = resolve_browser("editor", {"moduleName": "authors"})
        assert browser.module_name == "authors"
        assert browser.model == "Author"

    def test_empty_overrides_fall_back_to_inference(self):
        browser = resolve_browser("books", {"relation": "", "titleKey": None})
        assert browser.relation == "books"
        assert browser.title_key == "title"

    def test_empty_route_prefix_is_kept(self):
        assert resolve_browser("books", {"routePrefix": ""}).route_prefix == ""

    def test_unknown_option_raises(self):
        with pytest.raises(BrowserConfigError, match="unknown option"):
            resolve_browser("books", {"titelKey": "name"})

    def test_non_mapping_overrides_raise(self):
        with pytest.raises(BrowserConfigError, match="must be a mapping"):
            resolve_browser("books", ["title"])

    def test_invalid_name_raises(self):
        with pytest.raises(BrowserConfigError):
            resolve_browser("")

    def test_is_deterministic(self):
        assert resolve_browser("user_groups") == resolve_browser("user_groups")

    def test_to_dict_uses_camel_case_keys(self):
        data = resolve_browser("books").to_dict()
        assert data["browserName"] == "books"
        assert data["moduleName"] == "books"
        assert data["positionAttribute"] == "position"
        assert data["routePrefix"] is None


class TestResolveBrowsers:
    def test_list_of_names_and_mappings_keeps_order(self):
        browsers = resolve_browsers([
            "books",
            {"publication": {"routePrefix": "collections", "titleKey": "name"}},
            "authors",
        ])
        assert [b.browser_name for b in browsers] == ["books", "publication", "authors"]
        assert browsers[1].route_prefix == "collections"
        assert browsers[1].title_key == "name"
        assert browsers[1].module_name == "publications"
        assert browsers[1].model == "Publication"

    def test_mapping_declarations(self):
        browsers = resolve_browsers({"books": None, "authors": {"titleKey": "name"}})
        assert [b.browser_name for b in browsers] == ["books", "authors"]
        assert browsers[0].title_key == "title"
        assert browsers[1].title_key == "name"

    def test_single_string(self):
        assert [b.browser_name for b in resolve_browsers("books")] == ["books"]

    @pytest.mark.parametrize("declarations", [None, [], {}])
    def test_empty(self, declarations):
        assert resolve_browsers(declarations) == []

    def test_invalid_item_raises(self):
        with pytest.raises(BrowserConfigError, match="Invalid browser declaration"):
            resolve_browsers(["books", 42])
