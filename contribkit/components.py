"""Component registry - maps component type names to factories.

A host looks components up by the type name used in component definitions
(``bindings.azure.digitaltwins``) and calls ``create()`` to get a fresh,
uninitialized instance.  The registry is in-memory; entries are registered
at import time by ``default_registry()`` or by the host.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from contribkit.bindings.azure.digitaltwins import COMPONENT_TYPE as ADT_COMPONENT_TYPE
from contribkit.bindings.azure.digitaltwins import AzureDigitalTwinsBinding

logger = logging.getLogger(__name__)


class ComponentKind(str, Enum):
    """The category of a component.

    * ``output_binding`` - pushes requests to an external resource.
    * ``pubsub`` - publishes and subscribes to a message broker.
    """

    OUTPUT_BINDING = "output_binding"
    PUBSUB = "pubsub"


class ComponentEntry(BaseModel):
    """Immutable record of a registered component type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    kind: ComponentKind
    factory: Callable[[], Any]
    description: str = ""


class ComponentRegistry:
    """Lookup table of component types.

    Examples
    --------
    >>> registry = ComponentRegistry()
    >>> registry.register(ComponentEntry(
    ...     name="bindings.example",
    ...     kind=ComponentKind.OUTPUT_BINDING,
    ...     factory=dict,
    ... ))
    >>> registry.get("bindings.example") is not None
    True
    """

    def __init__(self) -> None:
        self._components: dict[str, ComponentEntry] = {}

    # -- Registration -------------------------------------------------------

    def register(self, entry: ComponentEntry) -> None:
        """Add a component type.

        Re-registering the same entry is a no-op.

        Raises
        ------
        ValueError
            If a different entry is already registered under the same name.
        """
        existing = self._components.get(entry.name)
        if existing is not None and existing != entry:
            raise ValueError(
                f"Component '{entry.name}' is already registered.  "
                f"Unregister it before registering a replacement."
            )
        self._components[entry.name] = entry
        logger.debug("Registered component %s (%s)", entry.name, entry.kind.value)

    def unregister(self, name: str) -> bool:
        """Remove a component type.  Returns ``True`` if it was registered."""
        if name in self._components:
            del self._components[name]
            logger.debug("Unregistered component '%s'.", name)
            return True
        logger.warning("Cannot unregister '%s' - not found in registry.", name)
        return False

    # -- Lookup -------------------------------------------------------------

    def get(self, name: str) -> ComponentEntry | None:
        """Return the ``ComponentEntry`` for *name*, or ``None`` if not found."""
        return self._components.get(name)

    def create(self, name: str) -> Any:
        """Return a new, uninitialized instance of component *name*.

        Raises
        ------
        KeyError
            If *name* is not registered.
        """
        entry = self._components.get(name)
        if entry is None:
            raise KeyError(f"Component '{name}' is not registered.")
        return entry.factory()

    def list_components(self, kind: ComponentKind | None = None) -> list[ComponentEntry]:
        """Return registered components sorted by name, optionally by kind."""
        result = [
            entry
            for entry in self._components.values()
            if kind is None or entry.kind == kind
        ]
        return sorted(result, key=lambda e: e.name)


def default_registry() -> ComponentRegistry:
    """Return a registry holding every component shipped with contribkit."""
    registry = ComponentRegistry()
    registry.register(
        ComponentEntry(
            name=ADT_COMPONENT_TYPE,
            kind=ComponentKind.OUTPUT_BINDING,
            factory=AzureDigitalTwinsBinding,
            description="Patches Azure Digital Twins with JSON Patch documents",
        )
    )
    return registry
