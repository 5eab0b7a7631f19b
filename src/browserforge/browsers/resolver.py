"""Resolve browser declarations into BrowserDefinitions.

Declarations come from entity metadata and may be written as a list::

    browsers:
      - books
      - publication:
          routePrefix: collections
          titleKey: name

or as a mapping of browser name to overrides (``None`` meaning no
overrides). Anything not overridden is inferred from the browser name.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from browserforge.browsers.types import (
    DEFAULT_POSITION_ATTRIBUTE,
    DEFAULT_TITLE_KEY,
    OVERRIDE_KEYS,
    BrowserConfigError,
    BrowserDefinition,
)
from browserforge.core.naming import camel, plural, singular, studly


def infer_relation(browser_name: str) -> str:
    """Relation names are lower camel case, e.g. userGroup, contactOffice."""
    return camel(browser_name)


def infer_module_name(browser_name: str) -> str:
    """Module names are plural lower camel case, e.g. userGroups."""
    return camel(plural(browser_name))


def infer_model(module_name: str) -> str:
    """Model names are singular upper camel case, e.g. User, ArticleType."""
    return studly(singular(module_name))


def resolve_browser(browser_name: str, overrides: Mapping[str, Any] | None = None) -> BrowserDefinition:
    """Resolve a single browser, filling in whatever is not overridden."""
    if not isinstance(browser_name, str) or not browser_name:
        raise BrowserConfigError(f"Invalid browser name: {browser_name!r}")

    overrides = overrides or {}
    if not isinstance(overrides, Mapping):
        raise BrowserConfigError(
            f"Browser '{browser_name}' overrides must be a mapping, got {type(overrides).__name__}"
        )

    unknown = sorted(set(overrides) - set(OVERRIDE_KEYS))
    if unknown:
        raise BrowserConfigError(
            f"Browser '{browser_name}' has unknown option(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(OVERRIDE_KEYS)}"
        )

    module_name = overrides.get("moduleName") or infer_module_name(browser_name)

    return BrowserDefinition(
        browser_name=browser_name,
        relation=overrides.get("relation") or infer_relation(browser_name),
        # An explicit routePrefix is kept even when empty
        route_prefix=overrides.get("routePrefix"),
        title_key=overrides.get("titleKey") or DEFAULT_TITLE_KEY,
        module_name=module_name,
        model=overrides.get("model") or infer_model(module_name),
        position_attribute=overrides.get("positionAttribute") or DEFAULT_POSITION_ATTRIBUTE,
    )


def resolve_browsers(declarations: Iterable[Any] | Mapping[str, Any] | None) -> list[BrowserDefinition]:
    """Resolve all browser declarations of an entity, in declared order.

    Args:
        declarations: A list of names / single-key mappings, or a mapping
            of browser name to overrides.

    Returns:
        One BrowserDefinition per declared browser.

    Raises:
        BrowserConfigError: For malformed declarations or unknown options.
    """
    if not declarations:
        return []

    if isinstance(declarations, Mapping):
        return [resolve_browser(name, overrides) for name, overrides in declarations.items()]

    if isinstance(declarations, str):
        return [resolve_browser(declarations)]

    definitions: list[BrowserDefinition] = []
    for item in declarations:
        if isinstance(item, str):
            definitions.append(resolve_browser(item))
        elif isinstance(item, Mapping):
            for name, overrides in item.items():
                definitions.append(resolve_browser(name, overrides))
        else:
            raise BrowserConfigError(f"Invalid browser declaration: {item!r}")

    return definitions
