"""Entity lifecycle hook system.

Provides extension points for logic that runs around an entity save:
- beforeSave: Before persist (can modify record, can abort)
- afterSave: After persist (can abort)
- afterCommit: After commit (fire-and-forget side effects)

The built-in ``handleBrowsers`` hook syncs browser fields after save and is
added to every entity that declares browsers.

Usage:
    from browserforge.hooks import hook, HookContext, HookResult

    @hook("stampReviewer")
    async def stamp_reviewer(ctx: HookContext) -> HookResult:
        return HookResult(update={"reviewedBy": "editor"})
"""

from browserforge.hooks.registry import HookNotRegisteredError, HookRegistry, hook
from browserforge.hooks.service import HookService
from browserforge.hooks.types import (
    HookContext,
    HookDefinition,
    HookResult,
    HookServices,
    Operation,
)

VALID_HOOK_POINTS = ("beforeSave", "afterSave", "afterCommit")

HANDLE_BROWSERS = "handleBrowsers"


async def handle_browsers(ctx: HookContext) -> None:
    """Sync the entity's browsers from the submitted form fields.

    Saves that submit no browsers at all leave the relations untouched.
    """
    if "browsers" not in ctx.fields:
        return None
    ctx.services.browsers.after_save(ctx.entity, ctx.record, ctx.fields)
    return None


def register_builtin_hooks() -> None:
    """Register framework-provided hooks. Called at application startup."""
    HookRegistry.register(HANDLE_BROWSERS, handle_browsers)


def get_hook_definitions(entity, hook_point: str) -> list[HookDefinition]:
    """Hook definitions of an entity for one hook point.

    Entities with browsers get handleBrowsers appended to afterSave unless
    their metadata already lists it.
    """
    definitions = [
        HookDefinition(
            name=h.name,
            on=[Operation(op) for op in h.on],
            description=h.description,
        )
        for h in entity.hooks.get(hook_point, [])
    ]

    has_browsers = bool(entity.browsers or entity.related_browsers)
    if hook_point == "afterSave" and has_browsers:
        if not any(d.name == HANDLE_BROWSERS for d in definitions):
            definitions.append(HookDefinition(name=HANDLE_BROWSERS))

    return definitions


__all__ = [
    "HANDLE_BROWSERS",
    "HookContext",
    "HookDefinition",
    "HookNotRegisteredError",
    "HookRegistry",
    "HookResult",
    "HookServices",
    "HookService",
    "Operation",
    "VALID_HOOK_POINTS",
    "get_hook_definitions",
    "handle_browsers",
    "hook",
    "register_builtin_hooks",
]
