"""Request, response and configuration models for output bindings."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    """Operations a host can ask an output binding to perform."""

    CREATE = "create"
    GET = "get"
    DELETE = "delete"
    LIST = "list"


class BindingMetadata(BaseModel):
    """Component configuration handed to ``init()``.

    ``properties`` is the flat string map the host reads from the component
    definition (e.g. ``clientId``, ``adtInstanceUrl``).
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    properties: dict[str, str] = Field(default_factory=dict)


class InvokeRequest(BaseModel):
    """A single invocation of an output binding."""

    model_config = ConfigDict(frozen=True)

    data: bytes = b""
    metadata: dict[str, str] = Field(default_factory=dict)
    operation: OperationKind = OperationKind.CREATE


class InvokeResponse(BaseModel):
    """What an output binding returns to the host."""

    model_config = ConfigDict(frozen=True)

    data: bytes = b""
    metadata: dict[str, str] = Field(default_factory=dict)
