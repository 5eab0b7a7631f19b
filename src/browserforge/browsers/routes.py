"""Admin URL building for browser items."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

# (module_name, route_prefix, action, id) -> URL
RouteBuilder = Callable[[str, str, str, Any], str]


@dataclass
class RouteConfig:
    """Where the admin lives.

    Attributes:
        admin_path: Path prefix of every admin URL
    """

    admin_path: str = "/admin"

    @classmethod
    def from_env(cls) -> RouteConfig:
        """Create config from BROWSERFORGE_ADMIN_PATH (default /admin)."""
        return cls(admin_path=os.environ.get("BROWSERFORGE_ADMIN_PATH", "/admin"))


def route_name(module_name: str, route_prefix: str | None, action: str) -> str:
    """Dotted route name, e.g. "admin.collections.books.edit"."""
    parts = ["admin", route_prefix, module_name, action]
    return ".".join(p for p in parts if p)


def module_route(
    module_name: str,
    route_prefix: str | None,
    action: str,
    id: Any = None,
    config: RouteConfig | None = None,
) -> str:
    """Build the admin URL of a module action.

    Example:
        module_route("books", "collections", "edit", "BOO-00001")
        -> "/admin/collections/books/BOO-00001/edit"

    Empty segments (no route prefix, no id) are left out.
    """
    config = config or RouteConfig.from_env()
    segments = [
        config.admin_path.strip("/"),
        (route_prefix or "").strip("/"),
        module_name,
        str(id) if id is not None else "",
        action,
    ]
    return "/" + "/".join(s for s in segments if s)


def make_route_builder(config: RouteConfig) -> RouteBuilder:
    """Bind module_route to a fixed RouteConfig."""

    def build(module_name: str, route_prefix: str, action: str, id: Any = None) -> str:
        return module_route(module_name, route_prefix, action, id, config=config)

    return build
