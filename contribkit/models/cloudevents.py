"""CloudEvents envelope model used by the pub/sub helpers.

The envelope is a frozen record with the attributes the runtime relies on as
named fields.  Any other attribute (CloudEvents extensions, vendor fields) is
kept in the model's extras and re-emitted on serialization, so envelopes
produced by newer publishers pass through untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from contribkit.codec import canonical_json_bytes

CLOUD_EVENTS_SPEC_VERSION = "1.0"
DEFAULT_CLOUD_EVENT_TYPE = "com.dapr.event.sent"
DEFAULT_CLOUD_EVENT_SOURCE = "Dapr"
DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE = "text/plain"
JSON_CONTENT_TYPE = "application/json"

TRACE_ID_FIELD = "traceid"
EXPIRATION_FIELD = "expiration"


class EnvelopeDefaults(BaseModel):
    """Values used when a publisher leaves an envelope attribute empty."""

    model_config = ConfigDict(frozen=True)

    source: str = DEFAULT_CLOUD_EVENT_SOURCE
    event_type: str = DEFAULT_CLOUD_EVENT_TYPE
    data_content_type: str = DEFAULT_CLOUD_EVENT_DATA_CONTENT_TYPE
    spec_version: str = CLOUD_EVENTS_SPEC_VERSION


class CloudEventEnvelope(BaseModel):
    """A CloudEvents envelope in structured JSON form.

    Field names are Pythonic; the wire names are their aliases
    (``specversion``, ``datacontenttype``, ``pubsubname``, ``traceid``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str | None = None
    spec_version: str | None = Field(default=None, alias="specversion")
    data_content_type: str | None = Field(default=None, alias="datacontenttype")
    source: str | None = None
    type: str | None = None
    subject: str | None = None
    topic: str | None = None
    pubsub_name: str | None = Field(default=None, alias="pubsubname")
    data: Any = None
    data_base64: str | None = None
    trace_id: str | None = Field(default=None, alias=TRACE_ID_FIELD)
    expiration: str | None = Field(default=None, alias=EXPIRATION_FIELD)

    @property
    def extensions(self) -> dict[str, Any]:
        """Attributes that are not named fields of this model."""
        return dict(self.model_extra or {})

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready mapping with wire names.

        Named attributes that were never set are omitted.  Explicit ``null``
        values and every extension attribute are kept.
        """
        wire = self.model_dump(mode="json", by_alias=True)
        for name, field in type(self).model_fields.items():
            key = field.alias or name
            if wire.get(key) is None and name not in self.model_fields_set:
                wire.pop(key, None)
        return wire

    def serialize(self) -> bytes:
        """Serialize to canonical JSON bytes."""
        return canonical_json_bytes(self.to_wire())
