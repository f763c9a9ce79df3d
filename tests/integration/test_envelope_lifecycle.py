"""Integration test - publish, emulate TTL, transmit, and expire an envelope.

Walks an envelope through the path a message takes between a publisher
and a subscriber on a broker without native TTL support.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from contribkit.pubsub.envelope import EnvelopeBuilder
from contribkit.pubsub.features import Feature

PUBLISHED_AT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class TestEnvelopeLifecycle:
    def test_emulated_ttl_expires_after_transit(self):
        clock = _Clock(PUBLISHED_AT)
        publisher = EnvelopeBuilder(clock=clock)
        subscriber = EnvelopeBuilder(clock=clock)

        envelope = publisher.build(
            topic="orders", pubsub_name="redis", data=b'{"order": 42}', trace_id="pub-trace"
        )
        envelope = publisher.apply_metadata(envelope, [], {"ttlInSeconds": "30"})
        wire = envelope.serialize()

        received = subscriber.from_cloud_event(wire, "sub-trace")
        assert received.id == envelope.id
        assert received.trace_id == "sub-trace"
        assert received.data == '{"order": 42}'
        assert received.data_content_type == "application/json"
        assert subscriber.has_expired(received) is False

        clock.now = PUBLISHED_AT + timedelta(seconds=31)
        assert subscriber.has_expired(received) is True
        assert subscriber.has_expired(json.loads(wire)) is True

    def test_native_ttl_broker_never_sees_expiration(self):
        clock = _Clock(PUBLISHED_AT)
        builder = EnvelopeBuilder(clock=clock)
        envelope = builder.apply_metadata(
            builder.build(data=b"x"), [Feature.MESSAGE_TTL], {"ttlInSeconds": "1"}
        )
        clock.now = PUBLISHED_AT + timedelta(days=365)
        assert "expiration" not in json.loads(envelope.serialize())
        assert builder.has_expired(envelope) is False

    def test_forwarded_envelope_keeps_upstream_expiration(self):
        clock = _Clock(PUBLISHED_AT)
        builder = EnvelopeBuilder(clock=clock)
        upstream = builder.apply_metadata(builder.build(data=b"x"), [], {"ttl": "10s"})

        forwarded = builder.from_cloud_event(upstream.serialize(), "hop-2")
        reapplied = builder.apply_metadata(forwarded, [Feature.MESSAGE_TTL], {"ttl": "1h"})
        assert reapplied.expiration == upstream.expiration == "2024-05-01T12:00:10Z"
