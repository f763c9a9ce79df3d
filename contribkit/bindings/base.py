"""Output binding protocol.

A host constructs a binding, calls ``init()`` once with the component's
metadata, then calls ``invoke()`` for every request.  Bindings are plain
classes; nothing needs to inherit from this protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from contribkit.models.bindings import (
    BindingMetadata,
    InvokeRequest,
    InvokeResponse,
    OperationKind,
)


@runtime_checkable
class OutputBinding(Protocol):
    """Protocol that every contribkit output binding implements."""

    def init(self, metadata: BindingMetadata) -> None:
        """Parse component metadata and prepare clients.

        Raises ``MetadataError`` when required properties are missing.
        """
        ...

    def operations(self) -> list[OperationKind]:
        """Return the operations this binding supports."""
        ...

    def invoke(self, request: InvokeRequest) -> InvokeResponse:
        """Execute one request against the bound resource."""
        ...
