"""Capability tags a pub/sub component can advertise."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class Feature(str, Enum):
    """Optional capabilities of a pub/sub component.

    * ``MESSAGE_TTL`` - the broker expires messages itself, so the runtime
      must not emulate TTL on the envelope.
    * ``SUBSCRIBE_WILDCARDS`` - topic subscriptions may use wildcards.
    * ``BULK_PUBLISH`` - the broker accepts several messages per call.
    """

    MESSAGE_TTL = "MESSAGE_TTL"
    SUBSCRIBE_WILDCARDS = "SUBSCRIBE_WILDCARDS"
    BULK_PUBLISH = "BULK_PUBLISH"

    def is_present(self, features: Iterable[Feature] | None) -> bool:
        """Return ``True`` if this feature is in *features*."""
        if not features:
            return False
        return self in set(features)
