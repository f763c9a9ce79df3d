"""contribkit data models - all Pydantic v2, all frozen (immutable)."""

from contribkit.models.bindings import (
    BindingMetadata,
    InvokeRequest,
    InvokeResponse,
    OperationKind,
)
from contribkit.models.cloudevents import (
    CLOUD_EVENTS_SPEC_VERSION,
    DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE,
    DEFAULT_CLOUD_EVENT_SOURCE,
    DEFAULT_CLOUD_EVENT_TYPE,
    CloudEventEnvelope,
    EnvelopeDefaults,
)
from contribkit.models.patch import PatchOp, PatchOperation, TwinPatch

__all__ = [
    # bindings
    "OperationKind",
    "BindingMetadata",
    "InvokeRequest",
    "InvokeResponse",
    # patch
    "PatchOp",
    "PatchOperation",
    "TwinPatch",
    # cloud events
    "CloudEventEnvelope",
    "EnvelopeDefaults",
    "CLOUD_EVENTS_SPEC_VERSION",
    "DEFAULT_CLOUD_EVENT_TYPE",
    "DEFAULT_CLOUD_EVENT_SOURCE",
    "DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE",
]
