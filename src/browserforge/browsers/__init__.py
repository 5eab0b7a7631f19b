"""Browser fields: ordered related-record pickers on entity forms.

Usage:
    from browserforge.browsers import BrowserService, resolve_browsers

    definitions = resolve_browsers(["books", {"author": {"titleKey": "name"}}])
    service = BrowserService(adapter)
    service.update_browser(entity, record, {"browsers": {"books": [{"id": "BOO-00001"}]}}, "books")
"""

from browserforge.browsers.resolver import (
    infer_model,
    infer_module_name,
    infer_relation,
    resolve_browser,
    resolve_browsers,
)
from browserforge.browsers.routes import RouteConfig, make_route_builder, module_route, route_name
from browserforge.browsers.service import BrowserService
from browserforge.browsers.thumbnails import MediaSettings, ThumbnailResolver
from browserforge.browsers.types import BrowserConfigError, BrowserDefinition

__all__ = [
    "BrowserConfigError",
    "BrowserDefinition",
    "BrowserService",
    "MediaSettings",
    "RouteConfig",
    "ThumbnailResolver",
    "infer_model",
    "infer_module_name",
    "infer_relation",
    "make_route_builder",
    "module_route",
    "resolve_browser",
    "resolve_browsers",
    "route_name",
]
