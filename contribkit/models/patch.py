"""JSON Patch models used by the Azure Digital Twins output binding."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PatchOp(str, Enum):
    """RFC 6902 operation names."""

    ADD = "add"
    REMOVE = "remove"
    REPLACE = "replace"
    MOVE = "move"
    COPY = "copy"
    TEST = "test"


class PatchOperation(BaseModel):
    """A single JSON Patch operation.

    ``value`` is only serialized when the caller supplied it, so an explicit
    ``null`` survives while an absent value stays absent.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: PatchOp
    path: str
    value: Any = None
    from_path: str | None = Field(default=None, alias="from")

    def to_document(self) -> dict[str, Any]:
        """Return the wire form of this operation."""
        doc: dict[str, Any] = {"op": self.op.value, "path": self.path}
        if self.from_path is not None:
            doc["from"] = self.from_path
        if "value" in self.model_fields_set:
            doc["value"] = self.value
        return doc


class TwinPatch(BaseModel):
    """Operations addressed to one twin, submitted as one update call."""

    model_config = ConfigDict(frozen=True)

    twin_id: str
    operations: tuple[PatchOperation, ...]

    def to_document(self) -> list[dict[str, Any]]:
        """Return the JSON Patch document for this twin."""
        return [operation.to_document() for operation in self.operations]
