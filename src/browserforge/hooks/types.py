"""Hook system types.

Defines the core data structures for the entity lifecycle hook system:
- Operation: the kind of save being performed
- HookDefinition: metadata describing when a hook should run
- HookContext: runtime state passed to hook functions
- HookResult: return value from hook functions
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Operation(Enum):
    """The type of operation being saved."""

    CREATE = "create"
    UPDATE = "update"


@dataclass
class HookDefinition:
    """Definition of a hook from entity metadata.

    Attributes:
        name: Registered hook name (e.g., "handleBrowsers")
        on: Operations this hook applies to
        description: Human-readable description
    """

    name: str
    on: list[Operation] = field(
        default_factory=lambda: [Operation.CREATE, Operation.UPDATE]
    )
    description: str = ""


@dataclass
class HookServices:
    """Services reachable from hook functions."""

    adapter: Any = None
    browsers: Any = None  # BrowserService (avoids circular import)


@dataclass
class HookContext:
    """Runtime context passed to every hook function.

    Attributes:
        entity: Metadata of the entity being saved
        operation: The current operation (create, update)
        record: Current record state (as persisted for afterSave)
        fields: Submitted form fields, including "browsers"
        original: Previous record state (update only, None for create)
        services: Service accessor for hooks needing DB access
    """

    entity: Any  # EntityModel
    operation: Operation
    record: dict[str, Any]
    fields: dict[str, Any] = field(default_factory=dict)
    original: dict[str, Any] | None = None
    services: HookServices | None = None

    @property
    def entity_name(self) -> str:
        return self.entity.name


@dataclass
class HookResult:
    """Return value from beforeSave and afterSave hooks.

    Attributes:
        update: Fields to merge into the record
        abort: Error message to abort the save
    """

    update: dict[str, Any] | None = None
    abort: str | None = None
