"""Pub/sub helpers - CloudEvents envelopes, TTL emulation, feature tags."""

from contribkit.pubsub.envelope import (
    DecodeError,
    EnvelopeBuilder,
    apply_metadata,
    format_rfc3339,
    from_cloud_event,
    has_expired,
    new_cloud_events_envelope,
    parse_rfc3339,
)
from contribkit.pubsub.features import Feature

__all__ = [
    "DecodeError",
    "EnvelopeBuilder",
    "Feature",
    "apply_metadata",
    "format_rfc3339",
    "from_cloud_event",
    "has_expired",
    "new_cloud_events_envelope",
    "parse_rfc3339",
]
