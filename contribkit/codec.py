"""JSON helpers shared by the bindings and the pub/sub envelope.

Everything that goes on the wire is produced by ``canonical_json_bytes`` so
two components serializing the same document emit identical bytes.
"""

from __future__ import annotations

import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes - deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - non-ASCII kept as UTF-8
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def is_json(data: bytes | str | None) -> bool:
    """Return ``True`` if *data* parses as any strict JSON value.

    Scalars count (``"42"`` and ``'"text"'`` are JSON).  Empty input is not
    JSON.  Bytes must be UTF-8, and ``NaN``/``Infinity`` are rejected.
    """
    if not data:
        return False
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        json.loads(text, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError):
        return False
    return True

