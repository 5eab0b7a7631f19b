"""Core types for browser fields.

A browser is an admin widget that lets an editor pick related records and
put them in order. Browsers are declared per entity by name; everything
else about them is either overridden explicitly or inferred.
"""

from dataclasses import dataclass
from typing import Any


class BrowserConfigError(ValueError):
    """Raised when a browser declaration cannot be resolved."""


DEFAULT_TITLE_KEY = "title"
DEFAULT_POSITION_ATTRIBUTE = "position"

# Override keys accepted in a browser declaration, as written in YAML
OVERRIDE_KEYS = (
    "relation",
    "routePrefix",
    "titleKey",
    "moduleName",
    "model",
    "positionAttribute",
)


@dataclass(frozen=True)
class BrowserDefinition:
    """A fully resolved browser.

    Attributes:
        browser_name: Key under which the form submits and receives items
        relation: Relation on the owning entity that the browser syncs
        route_prefix: Admin route prefix of the related module, if any
        title_key: Field of the related record shown as its name
        module_name: Admin module of the related records (for edit URLs)
        model: Entity name of the related records
        position_attribute: Pivot column holding the explicit order
    """

    browser_name: str
    relation: str
    route_prefix: str | None
    title_key: str
    module_name: str
    model: str
    position_attribute: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "browserName": self.browser_name,
            "relation": self.relation,
            "routePrefix": self.route_prefix,
            "titleKey": self.title_key,
            "moduleName": self.module_name,
            "model": self.model,
            "positionAttribute": self.position_attribute,
        }
