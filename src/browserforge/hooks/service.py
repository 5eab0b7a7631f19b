"""Hook execution service.

Runs the hooks of one lifecycle point in declared order, merging record
updates and turning failures into aborts (or log lines for afterCommit).

afterSave hooks run inside the save's open transaction: browser syncs and
other writes they make are rolled back with the record when any of them
aborts, and committed together otherwise. afterCommit hooks see committed
data only.
"""

import logging
from typing import Any

from browserforge.hooks.registry import HookNotRegisteredError, HookRegistry
from browserforge.hooks.types import HookContext, HookDefinition, HookResult

logger = logging.getLogger(__name__)


class HookService:
    """Orchestrates hook execution for entity lifecycle events.

    Hooks within a hook point execute sequentially in declared order.
    Each hook's update output is merged before the next hook runs.
    """

    async def run_hooks(
        self,
        hook_point: str,
        definitions: list[HookDefinition],
        context: HookContext,
    ) -> HookResult | None:
        """Execute hooks for a given hook point.

        Args:
            hook_point: The lifecycle point (beforeSave, afterSave, afterCommit)
            definitions: Hook definitions in declared order
            context: The hook context with current record state

        Returns:
            Merged HookResult with all updates applied, or None if nothing
            changed. If any hook aborts, returns immediately with the abort.
        """
        if not definitions:
            return None

        is_after_commit = hook_point == "afterCommit"
        merged_updates: dict[str, Any] = {}

        for definition in definitions:
            if context.operation not in definition.on:
                continue

            try:
                hook_fn = HookRegistry.get(definition.name)
            except HookNotRegisteredError:
                logger.warning(
                    "Hook '%s' is not registered, skipping", definition.name
                )
                continue

            try:
                result = await hook_fn(context)
            except Exception as e:
                if is_after_commit:
                    # afterCommit hooks are fire-and-forget
                    logger.error(
                        "afterCommit hook '%s' failed: %s",
                        definition.name,
                        e,
                    )
                    continue
                logger.exception("%s hook '%s' failed", hook_point, definition.name)
                return HookResult(abort=f"Hook '{definition.name}' failed: {e}")

            if result is None:
                continue

            if result.abort:
                return result

            # Merge updates into context record (compounding)
            if result.update:
                context.record.update(result.update)
                merged_updates.update(result.update)

        if merged_updates:
            return HookResult(update=merged_updates)

        return None
