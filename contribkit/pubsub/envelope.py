"""CloudEvents envelope construction, normalization and expiry.

Publishers hand the runtime a raw payload plus a few attributes; the
``EnvelopeBuilder`` wraps them in a ``CloudEventEnvelope`` with defaults
filled in.  Envelopes that arrive already formed are parsed with
``from_cloud_event`` and stamped with the current trace id.

TTL emulation
-------------
When a publish request carries a TTL (``ttlInSeconds`` or ``ttl``) and the
target component cannot expire messages itself (no ``Feature.MESSAGE_TTL``),
``apply_metadata`` writes an absolute ``expiration`` into the envelope.
Subscribers drop envelopes for which ``has_expired`` is true.  A malformed
``expiration`` never counts as expired.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import uuid
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from contribkit.codec import is_json
from contribkit.metadata import InvalidTTLError, try_get_ttl
from contribkit.models.cloudevents import (
    EXPIRATION_FIELD,
    JSON_CONTENT_TYPE,
    TRACE_ID_FIELD,
    CloudEventEnvelope,
    EnvelopeDefaults,
)
from contribkit.pubsub.features import Feature

logger = logging.getLogger(__name__)

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


class DecodeError(ValueError):
    """Raised when bytes cannot be decoded into a CloudEvents envelope."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(ts: datetime) -> str:
    """Format *ts* as an RFC3339 UTC timestamp with second precision.

    Naive datetimes are taken to be UTC.
    """
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware ``datetime``.

    Returns ``None`` for anything that is not a complete RFC3339 timestamp
    with a ``Z`` or numeric offset.
    """
    match = _RFC3339.fullmatch(value)
    if match is None:
        return None
    day, clock, fraction, offset = match.groups()
    micros = (fraction[1:] + "000000")[:6] if fraction else "000000"
    if offset in ("Z", "z"):
        offset = "+00:00"
    try:
        return datetime.fromisoformat(f"{day}T{clock}.{micros}{offset}")
    except ValueError:
        return None


class EnvelopeBuilder:
    """Builds and inspects CloudEvents envelopes.

    Parameters
    ----------
    defaults:
        Values used for empty ``source``, ``type`` and ``datacontenttype``.
    clock:
        Returns the current time as an aware UTC ``datetime``.
    """

    def __init__(
        self,
        defaults: EnvelopeDefaults | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._defaults = defaults or EnvelopeDefaults()
        self._clock = clock

    @property
    def defaults(self) -> EnvelopeDefaults:
        return self._defaults

    def build(
        self,
        id: str = "",
        source: str = "",
        event_type: str = "",
        subject: str = "",
        topic: str = "",
        pubsub_name: str = "",
        data_content_type: str = "",
        data: bytes | str = b"",
        trace_id: str = "",
    ) -> CloudEventEnvelope:
        """Wrap *data* in a new envelope.

        Defaults apply independently: an empty ``id`` becomes a fresh UUID4,
        an empty ``source``/``event_type`` takes the configured default, and
        the content type is ``application/json`` whenever *data* parses as
        JSON, otherwise the caller's value or the configured default.
        """
        if not id:
            id = _new_event_id()
        if not source:
            source = self._defaults.source
        if not event_type:
            event_type = self._defaults.event_type
        if not data_content_type:
            data_content_type = self._defaults.data_content_type
        if is_json(data):
            data_content_type = JSON_CONTENT_TYPE

        payload: dict[str, str]
        if isinstance(data, str):
            payload = {"data": data}
        else:
            try:
                payload = {"data": data.decode("utf-8")}
            except UnicodeDecodeError:
                payload = {"data_base64": base64.b64encode(data).decode("ascii")}

        return CloudEventEnvelope(
            id=id,
            spec_version=self._defaults.spec_version,
            data_content_type=data_content_type,
            source=source,
            type=event_type,
            subject=subject,
            topic=topic,
            pubsub_name=pubsub_name,
            trace_id=trace_id,
            **payload,
        )

    def from_cloud_event(self, raw: bytes | str, trace_id: str) -> CloudEventEnvelope:
        """Parse an existing envelope and overwrite its ``traceid``.

        Every other attribute, including unknown extensions, is kept.

        Raises
        ------
        DecodeError
            If *raw* is not a JSON object or a known attribute has the wrong
            type.
        """
        try:
            fields = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            raise DecodeError(f"Invalid cloud event JSON: {exc}") from exc

        if not isinstance(fields, dict):
            raise DecodeError(
                f"Cloud event must be a JSON object, got {type(fields).__name__}"
            )

        fields[TRACE_ID_FIELD] = trace_id
        try:
            return CloudEventEnvelope.model_validate(fields)
        except ValidationError as exc:
            raise DecodeError(f"Cloud event validation failed: {exc}") from exc

    def has_expired(self, envelope: CloudEventEnvelope | Mapping[str, Any]) -> bool:
        """Return ``True`` iff the envelope's ``expiration`` is in the past.

        Missing, empty or unparseable expirations are not expired.
        """
        if isinstance(envelope, CloudEventEnvelope):
            value: Any = envelope.expiration
        else:
            value = envelope.get(EXPIRATION_FIELD)
        if not value or not isinstance(value, str):
            return False

        expiration = parse_rfc3339(value)
        if expiration is None:
            logger.debug("Ignoring unparseable expiration %r", value)
            return False
        return expiration < self._clock()

    def apply_metadata(
        self,
        envelope: CloudEventEnvelope,
        features: Iterable[Feature] | None,
        metadata: Mapping[str, str] | None,
    ) -> CloudEventEnvelope:
        """Stamp an ``expiration`` derived from the request TTL.

        Only applies when *metadata* carries a TTL and *features* lacks
        ``Feature.MESSAGE_TTL``.  Otherwise *envelope* is returned as is.
        """
        try:
            ttl = try_get_ttl(metadata)
        except InvalidTTLError as exc:
            logger.warning("Ignoring invalid TTL metadata: %s", exc)
            return envelope

        if ttl is None or Feature.MESSAGE_TTL.is_present(features):
            return envelope

        now = self._clock()
        try:
            expiration = now + ttl
        except OverflowError:
            expiration = datetime.max.replace(tzinfo=timezone.utc)
        return envelope.model_copy(update={"expiration": format_rfc3339(expiration)})


def _new_event_id() -> str:
    return str(uuid.uuid4())


_default_builder = EnvelopeBuilder()


def new_cloud_events_envelope(
    id: str = "",
    source: str = "",
    event_type: str = "",
    subject: str = "",
    topic: str = "",
    pubsub_name: str = "",
    data_content_type: str = "",
    data: bytes | str = b"",
    trace_id: str = "",
) -> CloudEventEnvelope:
    """``EnvelopeBuilder.build`` with the default envelope values."""
    return _default_builder.build(
        id, source, event_type, subject, topic, pubsub_name, data_content_type, data, trace_id
    )


def from_cloud_event(raw: bytes | str, trace_id: str) -> CloudEventEnvelope:
    """``EnvelopeBuilder.from_cloud_event`` with the default builder."""
    return _default_builder.from_cloud_event(raw, trace_id)


def has_expired(envelope: CloudEventEnvelope | Mapping[str, Any]) -> bool:
    """``EnvelopeBuilder.has_expired`` against the wall clock."""
    return _default_builder.has_expired(envelope)


def apply_metadata(
    envelope: CloudEventEnvelope,
    features: Iterable[Feature] | None,
    metadata: Mapping[str, str] | None,
) -> CloudEventEnvelope:
    """``EnvelopeBuilder.apply_metadata`` against the wall clock."""
    return _default_builder.apply_metadata(envelope, features, metadata)
