"""Named hook implementations.

Entity metadata refers to hooks by name; the registry maps those names to
async callables. ``handleBrowsers`` is the only built-in.
"""

from collections.abc import Awaitable, Callable

from browserforge.hooks.types import HookContext, HookResult

# async (HookContext) -> HookResult | None
HookFn = Callable[[HookContext], Awaitable[HookResult | None]]


class HookNotRegisteredError(LookupError):
    """Metadata names a hook nobody registered."""

    def __init__(self, name: str):
        super().__init__(f"Hook '{name}' is not registered")
        self.name = name


class HookRegistry:
    """Process-wide table of hook functions.

    Example:
        @hook("stampPublishedAt")
        async def stamp_published_at(ctx: HookContext) -> HookResult:
            return HookResult(update={"publishedAt": now()})
    """

    _hooks: dict[str, HookFn] = {}

    @classmethod
    def register(cls, name: str, hook_fn: HookFn) -> None:
        """Register ``hook_fn`` as ``name``. The first registration wins."""
        cls._hooks.setdefault(name, hook_fn)

    @classmethod
    def get(cls, name: str) -> HookFn:
        try:
            return cls._hooks[name]
        except KeyError:
            raise HookNotRegisteredError(name) from None

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._hooks)

    @classmethod
    def clear(cls) -> None:
        """Forget every registration (tests)."""
        cls._hooks.clear()


def hook(name: str) -> Callable[[HookFn], HookFn]:
    """Register the decorated coroutine function under ``name``."""

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn)
        return fn

    return decorator
