"""Patch demultiplexer - splits a batch JSON Patch document per twin.

A batch addresses many twins at once by prefixing every path with the twin
id: ``{"op": "replace", "path": "/room-1/temperature", "value": 21}``.
Splitting happens in two passes so that a single malformed path rejects the
whole batch before anything is submitted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from contribkit.bindings.errors import InvalidRequestError, PathFormatError
from contribkit.models.patch import PatchOperation, TwinPatch

logger = logging.getLogger(__name__)

# Twin id is the shortest leading segment; the rest may contain slashes.
TWIN_PATH_PATTERN = re.compile(r"/(.+?)/(.+)")

_BATCH_ADAPTER = TypeAdapter(list[PatchOperation])


def parse_patch_batch(raw: bytes | str) -> list[PatchOperation]:
    """Deserialize a JSON Patch document.

    Raises
    ------
    InvalidRequestError
        If *raw* is not a JSON array of valid patch operations, or is empty.
    """
    try:
        operations = _BATCH_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        logger.error("Request data json error: %s", exc)
        raise InvalidRequestError(f"Request data is not a JSON Patch document: {exc}") from exc

    if not operations:
        raise InvalidRequestError("Request data is an empty JSON Patch document")
    return operations


def split_twin_path(path: str) -> tuple[str, str] | None:
    """Split ``/<twinId>/<rest>`` into ``(twinId, "/<rest>")``.

    Returns ``None`` when *path* does not carry both segments.
    """
    match = TWIN_PATH_PATTERN.fullmatch(path)
    if match is None:
        return None
    return match.group(1), "/" + match.group(2)


def split_patch_batch(operations: Iterable[PatchOperation]) -> list[TwinPatch]:
    """Return one ``TwinPatch`` per operation, in input order.

    Each operation's path has its twin id prefix stripped.  ``from`` paths of
    ``move``/``copy`` operations are stripped the same way when they address
    the same twin.

    Raises
    ------
    PathFormatError
        On the first path that does not match ``/<twinId>/<rest>``.  No
        partial result is returned.
    """
    patches: list[TwinPatch] = []
    for index, operation in enumerate(operations):
        parts = split_twin_path(operation.path)
        if parts is None:
            logger.error("Invalid path in patch: %s", operation.path)
            raise PathFormatError(operation.path, index)

        twin_id, property_path = parts
        update: dict[str, str] = {"path": property_path}
        if operation.from_path is not None:
            from_parts = split_twin_path(operation.from_path)
            if from_parts is not None and from_parts[0] == twin_id:
                update["from_path"] = from_parts[1]

        patches.append(
            TwinPatch(twin_id=twin_id, operations=(operation.model_copy(update=update),))
        )
    return patches


def group_by_twin(patches: Iterable[TwinPatch]) -> list[TwinPatch]:
    """Merge patches per twin.

    Twins appear in order of first appearance; operations keep their
    original relative order inside each twin.
    """
    grouped: dict[str, list[PatchOperation]] = {}
    for patch in patches:
        grouped.setdefault(patch.twin_id, []).extend(patch.operations)
    return [
        TwinPatch(twin_id=twin_id, operations=tuple(operations))
        for twin_id, operations in grouped.items()
    ]
