"""Helpers for reading well-known keys out of component and request metadata.

Metadata arrives as a flat ``dict[str, str]``; these helpers turn the keys
that carry typed values (TTLs, booleans) into Python values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import timedelta

TTL_IN_SECONDS_KEY = "ttlInSeconds"
TTL_KEY = "ttl"

_TRUTHY = frozenset({"true", "1", "yes", "y", "on"})
_FALSY = frozenset({"false", "0", "no", "n", "off"})

# Go-style duration units, e.g. "1h30m", "250ms", "1.5s".
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


class InvalidTTLError(ValueError):
    """Raised when a TTL metadata value cannot be used."""


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration string into a ``timedelta``.

    Accepts a sequence of decimal numbers with unit suffixes, optionally
    signed: ``"10s"``, ``"1m30s"``, ``"-2h"``.  ``"0"`` is zero.

    Raises
    ------
    ValueError
        If *text* is not a valid duration.
    """
    raw = text.strip()
    if not raw:
        raise ValueError("empty duration")

    sign = 1.0
    if raw[0] in "+-":
        sign = -1.0 if raw[0] == "-" else 1.0
        raw = raw[1:]
    if raw == "0":
        return timedelta(0)

    seconds = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(raw):
        if match.start() != pos:
            break
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos == 0 or pos != len(raw):
        raise ValueError(f"invalid duration {text!r}")
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError as exc:
        raise ValueError(f"duration {text!r} is out of range") from exc


def try_get_ttl(metadata: Mapping[str, str] | None) -> timedelta | None:
    """Return the message TTL carried by *metadata*, or ``None``.

    ``ttlInSeconds`` (integer seconds) wins over ``ttl`` (duration string)
    when both are present.  Empty values count as absent.

    Raises
    ------
    InvalidTTLError
        If a TTL is present but unparseable, zero or negative.
    """
    if not metadata:
        return None

    seconds_value = metadata.get(TTL_IN_SECONDS_KEY, "")
    if seconds_value:
        try:
            seconds = int(seconds_value)
        except ValueError as exc:
            raise InvalidTTLError(
                f"{TTL_IN_SECONDS_KEY} value must be a valid integer: "
                f"actual is {seconds_value!r}"
            ) from exc
        if seconds <= 0:
            raise InvalidTTLError(
                f"{TTL_IN_SECONDS_KEY} value must be higher than zero: "
                f"actual is {seconds}"
            )
        try:
            return timedelta(seconds=seconds)
        except OverflowError:
            return timedelta.max

    duration_value = metadata.get(TTL_KEY, "")
    if duration_value:
        try:
            ttl = parse_duration(duration_value)
        except ValueError as exc:
            raise InvalidTTLError(
                f"{TTL_KEY} value must be a duration such as '10s': "
                f"actual is {duration_value!r}"
            ) from exc
        if ttl <= timedelta(0):
            raise InvalidTTLError(
                f"{TTL_KEY} value must be higher than zero: actual is {duration_value!r}"
            )
        return ttl

    return None


def get_bool(properties: Mapping[str, str], key: str, default: bool = False) -> bool:
    """Read a boolean property.  Unknown spellings fall back to *default*."""
    value = properties.get(key, "").strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default
